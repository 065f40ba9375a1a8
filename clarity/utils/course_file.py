"""
Course file loader utility for Clarity Academy.

Loads course definitions (YAML or JSON) from the courses/ directory.
"""

import json
from pathlib import Path

import yaml

from clarity.schemas import Course


COURSE_FILE_SUFFIXES = (".yaml", ".yml", ".json")


def load_course_file(file_path: Path) -> Course:
    """
    Load a course definition file.

    The file holds one course document (camelCase or snake_case keys) with
    its modules and lessons. A missing `id` defaults to the file stem.

    Args:
        file_path: Path to a .yaml, .yml or .json file

    Returns:
        Validated Course

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the suffix is unsupported or the file isn't a mapping
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If the course doesn't validate
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Course file not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix not in COURSE_FILE_SUFFIXES:
        raise ValueError(f"Unsupported course file type: {file_path.name}")

    with open(file_path, "r", encoding="utf-8") as f:
        if suffix == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Course file must contain a mapping: {file_path}")

    data.setdefault("id", file_path.stem)
    return Course.model_validate(data)


def get_available_course_files(courses_dir: Path) -> list[Path]:
    """
    List all course definition files in a directory.

    Returns:
        Sorted list of file paths
    """
    courses_dir = Path(courses_dir)
    if not courses_dir.exists():
        return []
    return sorted(
        p for p in courses_dir.iterdir()
        if p.is_file() and p.suffix.lower() in COURSE_FILE_SUFFIXES
    )
