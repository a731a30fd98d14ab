"""Study lookup facade used by the HTTP layer and the CLI."""

from __future__ import annotations

import logging
from typing import BinaryIO, List, Optional, Sequence

from ..config import CONFIG
from ..data.cache import QueryCache
from ..data.cancer_types import CancerTypeCatalog
from ..data.repository import StudyRepository
from ..exceptions import StudyNotFoundError
from ..models import (
    AccessLevel,
    BaseMeta,
    CancerStudy,
    CancerStudyTags,
    Direction,
    Principal,
    Projection,
)
from ..security.permissions import (
    AllowAllEvaluator,
    GroupPermissionEvaluator,
    PermissionEvaluator,
    check_permission,
    filter_visible,
    mark_read_permission,
)
from ..upload import UploadRelay
from .composer import compose, has_keyword

logger = logging.getLogger('study_catalog.service')


def default_evaluator() -> PermissionEvaluator:
    if CONFIG.security.authenticate:
        return GroupPermissionEvaluator(CONFIG.security.public_group)
    return AllowAllEvaluator()


class StudyService:
    def __init__(
        self,
        repository: StudyRepository,
        catalog: CancerTypeCatalog,
        evaluator: Optional[PermissionEvaluator] = None,
        relay: Optional[UploadRelay] = None,
        show_unauthorized_studies: Optional[bool] = None,
    ):
        self.repository = repository
        self.catalog = catalog
        self.evaluator = evaluator or default_evaluator()
        self.relay = relay or UploadRelay()
        self.show_unauthorized_studies = (CONFIG.security.show_unauthorized_studies
                                          if show_unauthorized_studies is None
                                          else show_unauthorized_studies)

    @classmethod
    def from_graph(cls, graph, cache: Optional[QueryCache] = None, **kwargs) -> "StudyService":
        cache = cache or QueryCache()
        return cls(StudyRepository(graph, cache), CancerTypeCatalog(graph, cache), **kwargs)

    def get_all_studies(
        self,
        keyword: Optional[str] = None,
        projection: Projection | str | None = Projection.SUMMARY,
        page_size: Optional[int] = None,
        page_number: Optional[int] = None,
        sort_by: Optional[str] = None,
        direction: Direction | str | None = Direction.ASC,
        principal: Optional[Principal] = None,
        access_level: AccessLevel = AccessLevel.READ,
    ) -> List[CancerStudy]:
        studies = compose(self.repository, self.catalog, keyword, projection,
                          page_size, page_number, sort_by, direction)
        studies = mark_read_permission(studies, principal, self.evaluator)
        if self.show_unauthorized_studies:
            return studies
        return filter_visible(studies, principal, access_level, self.evaluator)

    def get_meta_studies(self, keyword: Optional[str] = None) -> BaseMeta:
        if not has_keyword(keyword):
            return self.repository.get_meta_studies(None)
        # Storage-side counts cannot see cancer type matches
        total = len(compose(self.repository, self.catalog, keyword, Projection.SUMMARY))
        return BaseMeta(total_count=total)

    def get_study(self, study_id: str) -> CancerStudy:
        study = self.repository.get_study(study_id, Projection.DETAILED)
        if study is None:
            raise StudyNotFoundError(study_id)
        return study

    def fetch_studies(self, study_ids: Sequence[str],
                      projection: Projection | str | None = Projection.SUMMARY) -> List[CancerStudy]:
        return list(self.repository.fetch_studies(study_ids, projection))

    def fetch_meta_studies(self, study_ids: Sequence[str]) -> BaseMeta:
        return self.repository.fetch_meta_studies(study_ids)

    def get_tags(self, study_id: str, principal: Optional[Principal] = None,
                 access_level: AccessLevel = AccessLevel.READ) -> Optional[CancerStudyTags]:
        check_permission(principal, study_id, access_level, self.evaluator,
                         lambda sid: self.repository.get_study(sid, Projection.SUMMARY))
        return self.repository.get_tags(study_id)

    def get_tags_for_multiple_studies(self, study_ids: Sequence[str]) -> List[CancerStudyTags]:
        return self.repository.get_tags_for_multiple_studies(study_ids)

    def process_file(self, stream: Optional[BinaryIO], filename: Optional[str]) -> str:
        return self.relay.relay(stream, filename)
