"""Clarity Academy - course lessons with access rules and progress tracking."""
