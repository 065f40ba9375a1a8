"""
Clarity Academy - Lesson Viewer

Streamlit application for taking enrolled courses: a sidebar with the
course tree, the current lesson, and completion tracking with sequential
and time-gated access rules.

Usage:
    streamlit run app.py
    (open http://localhost:8501/?user=<learner id> to pick the learner)
"""

from dataclasses import replace

import streamlit as st

from clarity.config import configure_logging, load_settings
from clarity.classroom import (
    ClarityError,
    CourseDataError,
    CourseLoader,
    DocumentStore,
    EmptyStructureError,
    EnrollmentService,
    LessonNavigator,
    NavigatorState,
    ProgressStore,
    ProgressWriteError,
    StaleReferenceError,
    StoreError,
    StructureMissingError,
)
from clarity.viewer import (
    format_duration,
    get_lesson_css,
    get_status_indicator,
    render_lesson,
)


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

st.set_page_config(
    page_title="Clarity Academy",
    page_icon="🎓",
    layout="wide",
    initial_sidebar_state="expanded",
)


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Initialize session state variables."""
    if "settings" not in st.session_state:
        st.session_state.settings = load_settings()
        configure_logging(st.session_state.settings.log_level)

    if "store" not in st.session_state:
        store = DocumentStore(st.session_state.settings.db_path)
        st.session_state.store = store
        st.session_state.loader = CourseLoader(store)
        st.session_state.progress_store = ProgressStore(store)
        st.session_state.enrollments = EnrollmentService(
            store,
            st.session_state.loader,
            st.session_state.progress_store,
        )

    if "navigator" not in st.session_state:
        st.session_state.navigator = None

    if "opened" not in st.session_state:
        st.session_state.opened = None      # LessonView as first shown at this position

    if "pending_advance" not in st.session_state:
        st.session_state.pending_advance = None

    if "notice" not in st.session_state:
        st.session_state.notice = None


def resolve_user_id() -> str:
    """Learner from ?user=, then CLARITY_USER_ID, then the sidebar field."""
    user_id = st.query_params.get("user") or st.session_state.settings.user_id
    if not user_id:
        user_id = st.sidebar.text_input("Learner ID", key="user_id_input").strip()
    if not user_id:
        st.title("🎓 Clarity Academy")
        st.info("Enter your learner ID in the sidebar to open your courses.")
        st.stop()
    return user_id


# -----------------------------------------------------------------------------
# Sidebar: Course Selection
# -----------------------------------------------------------------------------

def render_course_picker(user_id: str) -> str | None:
    """Enrolled courses plus an enroll-by-id field. Returns the selected course id."""
    enrollments = st.session_state.enrollments

    with st.sidebar.expander("Enroll in a course"):
        course_id = st.text_input("Course ID", key="enroll_course_id").strip()
        if st.button("Enroll", disabled=not course_id, use_container_width=True):
            try:
                enrollments.enroll(user_id, course_id)
            except StructureMissingError:
                st.error(f"No course with ID {course_id}")
            except ClarityError as e:
                st.error(f"Could not enroll: {e}")
            else:
                st.session_state.selected_course = course_id
                st.rerun()

    courses = {c.course_id: c for c in enrollments.enrolled_courses(user_id)}
    if not courses:
        st.sidebar.info("You are not enrolled in any courses yet.")
        return None

    course_ids = list(courses)
    selected = st.session_state.get("selected_course")
    index = course_ids.index(selected) if selected in course_ids else 0
    course_id = st.sidebar.selectbox(
        "Course",
        course_ids,
        index=index,
        format_func=lambda cid: f"{courses[cid].title} ({courses[cid].completion_percent}%)",
    )
    st.session_state.selected_course = course_id
    return course_id


def open_course(user_id: str, course_id: str) -> LessonNavigator:
    """Reuse the session's navigator, or load a new one for this user and course."""
    nav = st.session_state.navigator
    if nav and nav.user_id == user_id and nav.course_id == course_id and nav.state == NavigatorState.RESOLVED:
        return nav

    nav = LessonNavigator(
        st.session_state.loader,
        st.session_state.progress_store,
        user_id,
        course_id,
        write_policy=st.session_state.settings.write_policy,
    )
    st.session_state.navigator = nav
    st.session_state.opened = None
    st.session_state.pending_advance = None
    nav.load()
    return nav


# -----------------------------------------------------------------------------
# Sidebar: Course Tree
# -----------------------------------------------------------------------------

def render_sidebar(nav: LessonNavigator):
    """Render the progress summary and the module/lesson tree."""
    stats = nav.progress_summary()
    st.sidebar.markdown(f"""
    **Progress:** {stats['completed']}/{stats['total_lessons']} lessons ({stats['completion_percent']}%)
    """)
    st.sidebar.progress(stats['completion_percent'] / 100)
    if stats["course_completed"]:
        st.sidebar.success("Course completed!")

    st.sidebar.divider()
    st.sidebar.subheader(nav.course.title)

    for entry in nav.sidebar():
        module = entry.module
        module_progress = f"({entry.completed_count}/{entry.total_count})"
        check = " ✓" if entry.completed else ""
        expanded = module.id == nav.current_module.id
        with st.sidebar.expander(f"**{module.title}** {module_progress}{check}", expanded=expanded):
            for item in entry.lessons:
                lesson = item.lesson
                indicator = get_status_indicator(item)

                if item.locked:
                    style = "color: #999;"
                elif item.completed:
                    style = "color: #388E3C;"
                elif item.is_current:
                    style = "color: #1976D2; font-weight: bold;"
                else:
                    style = ""

                col1, col2 = st.columns([1, 9])
                with col1:
                    st.markdown(f"<span style='{style}'>{indicator}</span>", unsafe_allow_html=True)
                with col2:
                    if st.button(
                        lesson.title[:30] + "..." if len(lesson.title) > 30 else lesson.title,
                        key=f"lesson_{module.id}_{lesson.id}",
                        disabled=item.locked,
                        use_container_width=True,
                    ):
                        select_lesson(nav, module.id, lesson.id)


def select_lesson(nav: LessonNavigator, module_id: str, lesson_id: str):
    """Jump to a lesson picked in the sidebar."""
    if nav.jump_to(module_id, lesson_id):
        st.session_state.opened = None
        st.session_state.pending_advance = None
    st.rerun()


# -----------------------------------------------------------------------------
# Main Content: Lesson View
# -----------------------------------------------------------------------------

def current_view(nav: LessonNavigator):
    """
    Lesson view for this rerun.

    The visit is recorded once, when the learner arrives at a lesson. Later
    reruns at the same position keep the lesson open as it was first shown,
    so a time-gated lesson does not lock while it is being read.
    """
    opened = st.session_state.opened
    if opened and (opened.module.id, opened.lesson.id) == nav.position.ids:
        return replace(nav.view(), accessible=opened.accessible)

    view = nav.render()
    st.session_state.opened = view
    return view


def render_lesson_view(nav: LessonNavigator):
    """Render the main lesson content."""
    view = current_view(nav)

    render_navigation_bar(nav, view)

    st.markdown(get_lesson_css(), unsafe_allow_html=True)
    st.markdown(render_lesson(view), unsafe_allow_html=True)

    if view.accessible:
        render_completion_section(nav, view)


def render_navigation_bar(nav: LessonNavigator, view):
    """Render lesson position and the next button."""
    stats = nav.progress_summary()
    col1, col2 = st.columns([3, 1])

    with col1:
        duration = format_duration(nav.course.total_duration)
        st.markdown(
            f"**{nav.course.title}** · {stats['total_modules']} modules · "
            f"{stats['total_lessons']} lessons" + (f" · {duration}" if duration else "")
        )

    with col2:
        if view.can_go_next and st.button("Next →", use_container_width=True):
            nav.go_next()
            st.session_state.opened = None
            st.session_state.pending_advance = None
            st.rerun()

    st.divider()


def render_completion_section(nav: LessonNavigator, view):
    """Render lesson completion and the advance prompt."""
    st.divider()

    notice = st.session_state.notice
    if notice:
        kind, message = notice
        getattr(st, kind)(message)
        st.session_state.notice = None

    pending = st.session_state.pending_advance
    if pending and pending[0] == view.lesson.id:
        st.info(f"Move to next lesson: {pending[1]}?")
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Yes, continue", type="primary", use_container_width=True):
                nav.go_next()
                st.session_state.opened = None
                st.session_state.pending_advance = None
                st.rerun()
        with col2:
            if st.button("Stay here", use_container_width=True):
                st.session_state.pending_advance = None
                st.rerun()
        return

    if view.completed:
        st.success("Lesson completed!")
        return

    if st.button("Mark lesson as complete", type="primary", use_container_width=True):
        try:
            outcome = nav.mark_complete()
        except ProgressWriteError:
            st.error("Could not save your progress. Please try again.")
            return
        except StaleReferenceError:
            st.error("This lesson is no longer part of the course.")
            return

        if outcome.course_just_completed:
            st.session_state.notice = ("success", f"Congratulations! You completed {nav.course.title}.")
        elif outcome.module_just_completed:
            st.session_state.notice = ("success", f"Module completed: {outcome.module.title}")

        if outcome.next_position and not outcome.course_completed:
            st.session_state.pending_advance = (outcome.lesson.id, outcome.next_position.lesson.title)
        st.rerun()


def render_error_page(error: ClarityError):
    """Fatal load errors replace the lesson view."""
    st.title("🎓 Clarity Academy")
    if isinstance(error, StructureMissingError):
        st.error("Course not found. It may have been removed.")
    elif isinstance(error, EmptyStructureError):
        st.warning("This course has no content yet. Please check back later.")
    elif isinstance(error, CourseDataError):
        st.error("This course could not be loaded.")
    elif isinstance(error, StoreError):
        st.error("Course data is unavailable right now. Please try again later.")
    else:
        st.error(f"Something went wrong: {error}")


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()
    st.sidebar.title("🎓 Clarity Academy")

    user_id = resolve_user_id()
    try:
        course_id = render_course_picker(user_id)
    except ClarityError as e:
        render_error_page(e)
        return
    if not course_id:
        st.title("🎓 Clarity Academy")
        st.info("Enroll in a course from the sidebar to begin.")
        return

    try:
        nav = open_course(user_id, course_id)
    except ClarityError as e:
        render_error_page(e)
        return

    render_sidebar(nav)
    render_lesson_view(nav)


if __name__ == "__main__":
    main()
