"""Visibility filtering of study lists.

Both operations take a list and return a new one. Inputs may be shared with
the repository cache, so neither function mutates them or their elements.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable, Iterable, List, Optional, Protocol

from ..exceptions import AccessDeniedError, StudyNotFoundError
from ..models import AccessLevel, CancerStudy, Principal

logger = logging.getLogger('study_catalog.permissions')


class PermissionEvaluator(Protocol):
    def has_permission(self, principal: Optional[Principal], study: CancerStudy,
                       access_level: AccessLevel) -> bool:
        ...


class AllowAllEvaluator:
    """Used when the portal runs without authentication."""

    def has_permission(self, principal, study, access_level) -> bool:
        return True


class GroupPermissionEvaluator:
    """Grants access to public studies and to studies sharing a group with the principal."""

    def __init__(self, public_group: str = 'PUBLIC'):
        self.public_group = public_group.upper()

    def has_permission(self, principal, study, access_level) -> bool:
        study_groups = {g.upper() for g in study.group_names()}
        if self.public_group in study_groups:
            return True
        if principal is None:
            return False
        return bool(study_groups & {g.upper() for g in principal.groups})


def filter_visible(studies: Iterable[CancerStudy], principal: Optional[Principal],
                   access_level: AccessLevel, evaluator: PermissionEvaluator) -> List[CancerStudy]:
    return [s for s in studies if evaluator.has_permission(principal, s, access_level)]


def mark_read_permission(studies: Iterable[CancerStudy], principal: Optional[Principal],
                         evaluator: PermissionEvaluator) -> List[CancerStudy]:
    """Copy each study with ``read_permission`` set for ``principal``."""
    marked = []
    for study in studies:
        allowed = evaluator.has_permission(principal, study, AccessLevel.READ)
        marked.append(study if study.read_permission == allowed
                      else dataclasses.replace(study, read_permission=allowed))
    return marked


def check_permission(principal: Optional[Principal], study_id: str, access_level: AccessLevel,
                     evaluator: PermissionEvaluator,
                     lookup: Callable[[str], Optional[CancerStudy]]) -> CancerStudy:
    study = lookup(study_id)
    if study is None:
        raise StudyNotFoundError(study_id)
    if not evaluator.has_permission(principal, study, access_level):
        logger.info(f"Denied {access_level.value} on {study_id} for {principal.name if principal else 'anonymous'}")
        raise AccessDeniedError(study_id, access_level)
    return study
