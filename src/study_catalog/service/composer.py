"""Search result composition.

A study can match a keyword through its own attributes (the storage-side
query) or only through the primary site of its cancer type. Storage hits are
kept in storage order; cancer-type hits are appended after them in full-scan
order, never replacing a storage hit, until the page is full.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..models import CancerStudy, Direction, Projection

logger = logging.getLogger('study_catalog.composer')


def has_keyword(keyword: Optional[str]) -> bool:
    return bool(keyword and keyword.strip())


def needs_fallback(keyword: Optional[str], page_size: Optional[int], primary_count: int) -> bool:
    """True when a keyword is given and the page still has room.

    ``page_size == 0`` leaves no room, so it never triggers the fallback.
    """
    return has_keyword(keyword) and (page_size is None or primary_count < page_size)


def compose(
    repository,
    catalog,
    keyword: Optional[str] = None,
    projection: Projection | str | None = Projection.SUMMARY,
    page_size: Optional[int] = None,
    page_number: Optional[int] = None,
    sort_by: Optional[str] = None,
    direction: Direction | str | None = Direction.ASC,
) -> List[CancerStudy]:
    """Merge storage keyword hits with cancer-type fallback hits.

    Returns a newly built list; nothing returned aliases a repository result,
    so callers may filter it freely.
    """
    primary = repository.get_all_studies(keyword, projection, page_size, page_number, sort_by, direction)

    by_identifier: Dict[str, CancerStudy] = {}
    for study in primary:
        by_identifier.setdefault(study.cancer_study_identifier, study)

    if needs_fallback(keyword, page_size, len(by_identifier)):
        _append_cancer_type_matches(repository, catalog, keyword.strip(), page_size, by_identifier)

    return list(by_identifier.values())


def _append_cancer_type_matches(repository, catalog, keyword: str, page_size: Optional[int],
                                by_identifier: Dict[str, CancerStudy]) -> None:
    matching_types = catalog.matching_categories(keyword)
    if not matching_types:
        return

    before = len(by_identifier)
    for study in repository.get_all_studies(None, Projection.SUMMARY, None, None, None, None):
        if study.type_of_cancer_id in matching_types:
            by_identifier.setdefault(study.cancer_study_identifier, study)
            if page_size is not None and len(by_identifier) >= page_size:
                break
    logger.info(f"Cancer type fallback added {len(by_identifier) - before} studies "
                f"({len(matching_types)} matching cancer types)")
