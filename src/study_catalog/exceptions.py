"""Exceptions raised by the study catalog service layer."""

from __future__ import annotations


class StudyCatalogError(Exception):
    """Base class for study catalog failures."""


class StudyNotFoundError(StudyCatalogError):
    def __init__(self, study_id: str):
        super().__init__(f"Study not found: {study_id}")
        self.study_id = study_id


class AccessDeniedError(StudyCatalogError):
    def __init__(self, study_id: str, access_level):
        level = getattr(access_level, 'value', access_level)
        super().__init__(f"Access denied to study {study_id} at level {level}")
        self.study_id = study_id
        self.access_level = access_level


class InvalidQueryError(StudyCatalogError, ValueError):
    """Unknown projection, sort field or direction."""
