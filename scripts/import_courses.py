#!/usr/bin/env python3
"""
import_courses.py - Load course definition files into the document store.

Reads every .yaml/.yml/.json course file in a directory, validates it and
writes it to the `courses` collection (replacing any existing course with
the same id).

Usage:
  python scripts/import_courses.py
  python scripts/import_courses.py --input-dir data/courses --db data/clarity.db
  python scripts/import_courses.py --enroll learner-1
"""

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import yaml
from pydantic import ValidationError

from clarity.config import configure_logging, load_settings
from clarity.classroom import (
    ClarityError,
    CourseLoader,
    DocumentStore,
    EnrollmentService,
    ProgressStore,
)
from clarity.utils import get_available_course_files, load_course_file

logger = logging.getLogger(__name__)


def import_courses(input_dir: Path, loader: CourseLoader, dry_run: bool = False) -> tuple[list[str], list[str]]:
    """
    Import all course files in a directory.

    Returns:
        (imported course ids, failed file names)
    """
    imported, failed = [], []
    for file_path in get_available_course_files(input_dir):
        try:
            course = load_course_file(file_path)
        except (ValueError, yaml.YAMLError, ValidationError) as e:
            logger.error(f"Skipping {file_path.name}: {e}")
            failed.append(file_path.name)
            continue

        if not course.modules:
            logger.warning(f"  {course.id} has no modules; learners will see an empty course")

        if dry_run:
            logger.info(f"  [dry run] {course.id}: {len(course.modules)} modules, {course.lesson_count} lessons")
        else:
            loader.save_course(course)
            logger.info(f"  Imported {course.id}: {len(course.modules)} modules, {course.lesson_count} lessons")
        imported.append(course.id)
    return imported, failed


def main():
    settings = load_settings()

    parser = argparse.ArgumentParser(
        description="Import course definition files into the Clarity Academy database",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--input-dir",
        type=Path,
        default=settings.courses_dir,
        help="Directory of course definition files"
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=settings.db_path,
        help="Database path"
    )
    parser.add_argument(
        "--enroll",
        metavar="USER_ID",
        default=None,
        help="Also enroll this learner in every imported course"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate files without writing to the database"
    )

    args = parser.parse_args()
    configure_logging(settings.log_level)

    if not args.input_dir.exists():
        logger.error(f"Input directory not found: {args.input_dir}")
        sys.exit(1)

    store = DocumentStore(args.db)
    loader = CourseLoader(store)

    logger.info(f"Importing courses from {args.input_dir}...")
    imported, failed = import_courses(args.input_dir, loader, dry_run=args.dry_run)

    if args.enroll and not args.dry_run:
        enrollments = EnrollmentService(store, loader, ProgressStore(store))
        for course_id in imported:
            try:
                enrollments.enroll(args.enroll, course_id)
            except ClarityError as e:
                logger.error(f"Could not enroll {args.enroll} in {course_id}: {e}")

    # Summary
    logger.info("=" * 50)
    logger.info("IMPORT COMPLETE")
    logger.info("=" * 50)
    logger.info(f"Database: {args.db}")
    logger.info(f"Courses: {len(imported)}")
    if failed:
        logger.warning(f"Failed files: {', '.join(failed)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
