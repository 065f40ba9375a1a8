"""Utility functions for Clarity Academy."""

from .course_file import load_course_file, get_available_course_files

__all__ = ["load_course_file", "get_available_course_files"]
