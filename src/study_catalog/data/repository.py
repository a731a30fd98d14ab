"""Study queries against the Neo4j catalog graph.

These functions encapsulate Cypher queries and row normalization so that the
service layer only deals with ``CancerStudy`` values. Every read goes through
the shared ``QueryCache``; cached lists are handed back as-is, so callers must
copy before filtering.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..exceptions import InvalidQueryError
from ..models import (
    BaseMeta,
    CancerStudy,
    CancerStudyTags,
    Direction,
    Projection,
    TypeOfCancer,
    coerce_enum,
)
from .cache import QueryCache

logger = logging.getLogger('study_catalog.repository')

SORT_FIELDS: Dict[str, str] = {
    'cancerStudyIdentifier': 's.cancer_study_identifier',
    'cancerTypeId': 't.type_of_cancer_id',
    'name': 's.name',
    'description': 's.description',
    'publicStudy': 's.public_study',
    'pmid': 's.pmid',
    'citation': 's.citation',
    'groups': 's.groups',
    'status': 's.status',
    'importDate': 's.import_date',
    'referenceGenome': 's.reference_genome',
}

_MATCH = """
    MATCH (s:CancerStudy)
    OPTIONAL MATCH (s)-[:OF_TYPE]->(t:TypeOfCancer)
"""

_KEYWORD_FILTER = """
    WHERE all(term IN $terms WHERE
          toLower(s.cancer_study_identifier) CONTAINS term
       OR toLower(coalesce(s.name, '')) CONTAINS term
       OR toLower(coalesce(s.description, '')) CONTAINS term
       OR toLower(coalesce(t.name, '')) CONTAINS term)
"""

_RETURN_ID = """
    RETURN s.cancer_study_identifier AS cancer_study_identifier,
           s.groups AS groups
"""

_RETURN_SUMMARY = """
    RETURN s.cancer_study_identifier AS cancer_study_identifier,
           t.type_of_cancer_id AS type_of_cancer_id,
           s.name AS name,
           s.description AS description,
           s.public_study AS public_study,
           s.pmid AS pmid,
           s.citation AS citation,
           s.groups AS groups,
           s.status AS status,
           s.import_date AS import_date,
           s.reference_genome AS reference_genome
"""

_RETURN_DETAILED = _RETURN_SUMMARY.rstrip() + """,
           t {.type_of_cancer_id, .name, .dedicated_color, .short_name, .parent} AS type_of_cancer
"""


def keyword_terms(keyword: Optional[str]) -> List[str]:
    """Lowercase whitespace-separated search terms; empty for a blank keyword."""
    return [t for t in (keyword or '').lower().split() if t]


def _return_clause(projection: Projection) -> str:
    if projection is Projection.DETAILED:
        return _RETURN_DETAILED
    if projection is Projection.SUMMARY:
        return _RETURN_SUMMARY
    return _RETURN_ID


def _order_clause(sort_by: Optional[str], direction: Direction) -> str:
    if sort_by:
        expr = SORT_FIELDS.get(sort_by)
        if expr is None:
            raise InvalidQueryError(f"Invalid sort field '{sort_by}'")
        # Identifier as tie-breaker keeps paging stable
        return f"ORDER BY {expr} {direction.value}, s.cancer_study_identifier ASC"
    return f"ORDER BY s.cancer_study_identifier {direction.value}"


def study_from_row(row: Dict[str, Any]) -> CancerStudy:
    toc = row.get('type_of_cancer')
    type_of_cancer = None
    if toc and toc.get('type_of_cancer_id'):
        type_of_cancer = TypeOfCancer(
            type_of_cancer_id=toc['type_of_cancer_id'],
            name=toc.get('name') or '',
            dedicated_color=toc.get('dedicated_color'),
            short_name=toc.get('short_name'),
            parent=toc.get('parent'),
        )
    import_date = row.get('import_date')
    if hasattr(import_date, 'isoformat'):
        import_date = import_date.isoformat()
    return CancerStudy(
        cancer_study_identifier=row['cancer_study_identifier'],
        type_of_cancer_id=row.get('type_of_cancer_id'),
        name=row.get('name'),
        description=row.get('description'),
        public_study=row.get('public_study'),
        pmid=row.get('pmid'),
        citation=row.get('citation'),
        groups=row.get('groups'),
        status=row.get('status'),
        import_date=import_date,
        reference_genome=row.get('reference_genome'),
        type_of_cancer=type_of_cancer,
    )


class StudyRepository:
    """Paginated, sorted, keyword-filtered reads of ``CancerStudy`` nodes."""

    def __init__(self, graph, cache: QueryCache | None = None):
        self.graph = graph
        self.cache = cache or QueryCache()

    def _rows(self, query: str, **params) -> List[Dict[str, Any]]:
        return self.graph.run(query, **params).data()

    def get_all_studies(
        self,
        keyword: Optional[str] = None,
        projection: Projection | str | None = Projection.SUMMARY,
        page_size: Optional[int] = None,
        page_number: Optional[int] = None,
        sort_by: Optional[str] = None,
        direction: Direction | str | None = Direction.ASC,
    ) -> List[CancerStudy]:
        projection = coerce_enum(Projection, projection, Projection.SUMMARY)
        direction = coerce_enum(Direction, direction, Direction.ASC)
        order = _order_clause(sort_by, direction)
        terms = keyword_terms(keyword)
        key = ('get_all_studies', tuple(terms), projection.value, page_size, page_number, sort_by, direction.value)

        def load() -> List[CancerStudy]:
            query = _MATCH + (_KEYWORD_FILTER if terms else '') + _return_clause(projection) + order
            params: Dict[str, Any] = {'terms': terms}
            if page_size is not None:
                query += "\n    SKIP $skip LIMIT $limit"
                params['skip'] = max(page_number or 0, 0) * page_size
                params['limit'] = page_size
            studies = [study_from_row(r) for r in self._rows(query, **params)]
            logger.info(f"Loaded {len(studies)} studies (terms={len(terms)}, projection={projection.value}, page_size={page_size})")
            return studies

        return self.cache.get_or_load(key, load)

    def get_meta_studies(self, keyword: Optional[str] = None) -> BaseMeta:
        terms = keyword_terms(keyword)

        def load() -> BaseMeta:
            query = _MATCH + (_KEYWORD_FILTER if terms else '') + "\n    RETURN count(DISTINCT s) AS total_count"
            rows = self._rows(query, terms=terms)
            return BaseMeta(total_count=int(rows[0]['total_count']) if rows else 0)

        meta = self.cache.get_or_load(('get_meta_studies', tuple(terms)), load)
        return BaseMeta(total_count=meta.total_count)

    def get_study(self, study_id: str, projection: Projection | str | None = Projection.DETAILED) -> Optional[CancerStudy]:
        projection = coerce_enum(Projection, projection, Projection.DETAILED)

        def load() -> Optional[CancerStudy]:
            query = (_MATCH + "\n    WHERE s.cancer_study_identifier = $study_id\n"
                     + _return_clause(projection) + "\n    LIMIT 1")
            rows = self._rows(query, study_id=study_id)
            return study_from_row(rows[0]) if rows else None

        return self.cache.get_or_load(('get_study', study_id, projection.value), load)

    def fetch_studies(self, study_ids: Sequence[str], projection: Projection | str | None = Projection.SUMMARY) -> List[CancerStudy]:
        projection = coerce_enum(Projection, projection, Projection.SUMMARY)
        ids = list(dict.fromkeys(study_ids or []))
        if not ids:
            return []

        def load() -> List[CancerStudy]:
            query = (_MATCH + "\n    WHERE s.cancer_study_identifier IN $study_ids\n"
                     + _return_clause(projection) + "\n    ORDER BY s.cancer_study_identifier")
            return [study_from_row(r) for r in self._rows(query, study_ids=ids)]

        return self.cache.get_or_load(('fetch_studies', tuple(ids), projection.value), load)

    def fetch_meta_studies(self, study_ids: Sequence[str]) -> BaseMeta:
        ids = list(dict.fromkeys(study_ids or []))
        if not ids:
            return BaseMeta(total_count=0)
        rows = self._rows(
            """
            MATCH (s:CancerStudy)
            WHERE s.cancer_study_identifier IN $study_ids
            RETURN count(DISTINCT s) AS total_count
            """,
            study_ids=ids,
        )
        return BaseMeta(total_count=int(rows[0]['total_count']) if rows else 0)

    def get_tags(self, study_id: str) -> Optional[CancerStudyTags]:
        rows = self._rows(
            """
            MATCH (s:CancerStudy {cancer_study_identifier: $study_id})
            WHERE s.tags IS NOT NULL
            RETURN s.cancer_study_identifier AS cancer_study_id, s.tags AS tags
            """,
            study_id=study_id,
        )
        return _tags_from_rows(rows)[0] if rows else None

    def get_tags_for_multiple_studies(self, study_ids: Sequence[str]) -> List[CancerStudyTags]:
        ids = list(dict.fromkeys(study_ids or []))
        if not ids:
            return []
        rows = self._rows(
            """
            MATCH (s:CancerStudy)
            WHERE s.cancer_study_identifier IN $study_ids AND s.tags IS NOT NULL
            RETURN s.cancer_study_identifier AS cancer_study_id, s.tags AS tags
            ORDER BY s.cancer_study_identifier
            """,
            study_ids=ids,
        )
        return _tags_from_rows(rows)


def _tags_from_rows(rows: Iterable[Dict[str, Any]]) -> List[CancerStudyTags]:
    return [CancerStudyTags(cancer_study_id=r['cancer_study_id'], tags=r.get('tags')) for r in rows]
