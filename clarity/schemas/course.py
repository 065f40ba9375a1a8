"""
Course structure schemas for Clarity Academy.

Defines Pydantic models for the course tree:
- Access rules and course-level access configuration
- Lessons (video, text, or mixed content)
- Modules as ordered groups of lessons
- Courses as ordered groups of modules

Stored documents use camelCase keys; Python attributes are snake_case.
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class DocumentModel(BaseModel):
    """Base for models stored as camelCase documents."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------------------------------------------------------------
# Access rules
# -----------------------------------------------------------------------------

class AccessRule(str, Enum):
    SEQUENTIAL = "sequential"
    ANYTIME = "anytime"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    UNRECOGNIZED = "unrecognized"   # normalized from unknown stored values

    @classmethod
    def normalize(cls, value) -> Optional["AccessRule"]:
        """
        Map a stored access-rule value onto the enum.

        Empty values mean "no rule given". Unknown strings are kept as
        UNRECOGNIZED so the evaluator can handle them explicitly.
        """
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning(f"Unrecognized access rule {value!r}; treating as '{cls.UNRECOGNIZED.value}'")
            return cls.UNRECOGNIZED


TIME_GATED_RULES = {AccessRule.DAILY, AccessRule.WEEKLY, AccessRule.MONTHLY}


def _raw_rule(data, *keys) -> Optional[str]:
    """The access rule as written in the input mapping, before normalizing."""
    if not isinstance(data, dict):
        return None
    for key in keys:
        value = data.get(key)
        if isinstance(value, AccessRule):
            return None
        if value not in (None, ""):
            return str(value)
    return None


class AccessConfig(DocumentModel):
    type: Optional[AccessRule] = None
    allow_skip: bool = False    # course-wide override, unlocks everything
    _raw_type: Optional[str] = PrivateAttr(default=None)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        return AccessRule.normalize(v)

    @model_validator(mode="wrap")
    @classmethod
    def keep_raw_type(cls, data, handler):
        config = handler(data)
        if config.type == AccessRule.UNRECOGNIZED:
            config._raw_type = _raw_rule(data, "type") or config._raw_type
        return config

    @field_serializer("type")
    def dump_type(self, rule):
        # Unknown rules are written back as they were read
        if rule == AccessRule.UNRECOGNIZED and self._raw_type:
            return self._raw_type
        return rule


# -----------------------------------------------------------------------------
# Course tree
# -----------------------------------------------------------------------------

class LessonType(str, Enum):
    VIDEO = "video"
    TEXT = "text"
    MIXED = "mixed"


class Lesson(DocumentModel):
    id: str
    title: str
    order: int
    type: LessonType
    video_url: Optional[str] = None     # required for video/mixed
    content: Optional[str] = None       # required for text/mixed
    duration: Optional[int] = Field(default=None, ge=0)  # minutes
    access_rule: Optional[AccessRule] = None  # falls back to the course rule
    _raw_access_rule: Optional[str] = PrivateAttr(default=None)

    @field_validator("access_rule", mode="before")
    @classmethod
    def normalize_access_rule(cls, v):
        return AccessRule.normalize(v)

    @model_validator(mode="wrap")
    @classmethod
    def keep_raw_access_rule(cls, data, handler):
        lesson = handler(data)
        if lesson.access_rule == AccessRule.UNRECOGNIZED:
            lesson._raw_access_rule = _raw_rule(data, "accessRule", "access_rule") or lesson._raw_access_rule
        return lesson

    @field_serializer("access_rule")
    def dump_access_rule(self, rule):
        if rule == AccessRule.UNRECOGNIZED and self._raw_access_rule:
            return self._raw_access_rule
        return rule

    @model_validator(mode="after")
    def content_matches_type(self):
        if self.type in (LessonType.VIDEO, LessonType.MIXED) and not self.video_url:
            raise ValueError(f"Lesson {self.id}: videoUrl is required for {self.type.value} lessons")
        if self.type in (LessonType.TEXT, LessonType.MIXED) and not self.content:
            raise ValueError(f"Lesson {self.id}: content is required for {self.type.value} lessons")
        return self

    @property
    def has_video(self) -> bool:
        return self.type in (LessonType.VIDEO, LessonType.MIXED)

    @property
    def has_text(self) -> bool:
        return self.type in (LessonType.TEXT, LessonType.MIXED)


class Module(DocumentModel):
    id: str
    title: str
    description: Optional[str] = None
    order: int
    lessons: list[Lesson] = []

    def sorted_lessons(self) -> list[Lesson]:
        """Lessons ordered by their `order` key."""
        return sorted(self.lessons, key=lambda lesson: lesson.order)

    def get_lesson(self, lesson_id: str) -> Optional[Lesson]:
        return next((lesson for lesson in self.lessons if lesson.id == lesson_id), None)

    def lesson_at(self, order: int) -> Optional[Lesson]:
        """First lesson whose order equals `order`."""
        return next((lesson for lesson in self.lessons if lesson.order == order), None)

    def first_lesson(self) -> Optional[Lesson]:
        lessons = self.sorted_lessons()
        return lessons[0] if lessons else None

    @property
    def duration(self) -> int:
        return sum(lesson.duration or 0 for lesson in self.lessons)


class Course(DocumentModel):
    """
    A course and its full module/lesson tree.

    The tree is read-only to the learning core; it is loaded once per
    viewer session.
    """
    id: str
    title: str
    description: Optional[str] = None
    instructor: Optional[str] = None
    category: Optional[str] = None
    access_config: AccessConfig = Field(default_factory=AccessConfig)
    modules: list[Module] = []

    def sorted_modules(self) -> list[Module]:
        """Modules ordered by their `order` key."""
        return sorted(self.modules, key=lambda module: module.order)

    def get_module(self, module_id: str) -> Optional[Module]:
        return next((module for module in self.modules if module.id == module_id), None)

    def module_at(self, order: int) -> Optional[Module]:
        """First module whose order equals `order`."""
        return next((module for module in self.modules if module.order == order), None)

    def locate(self, module_id: str, lesson_id: str) -> Optional[tuple[Module, Lesson]]:
        """Resolve a (module, lesson) id pair, or None if either is missing."""
        module = self.get_module(module_id)
        if not module:
            return None
        lesson = module.get_lesson(lesson_id)
        if not lesson:
            return None
        return module, lesson

    @property
    def lesson_count(self) -> int:
        return sum(len(module.lessons) for module in self.modules)

    @property
    def total_duration(self) -> int:
        """Total minutes across all lessons; lessons without a duration count as 0."""
        return sum(module.duration for module in self.modules)
