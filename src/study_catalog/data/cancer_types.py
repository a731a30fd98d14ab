"""Cancer type catalog and primary-site resolution."""

from __future__ import annotations

import logging
from typing import Dict, List, Set

from ..models import TypeOfCancer
from .cache import QueryCache

logger = logging.getLogger('study_catalog.cancer_types')

# Parent value carried by top-level (primary site) cancer types
ROOT_PARENT = 'tissue'


def resolve_primary_sites(cancer_types: List[TypeOfCancer]) -> Dict[str, TypeOfCancer]:
    """Map every cancer type id to the ancestor that sits directly under the root.

    Walks ``parent`` links until the parent is the root tissue, is unknown, or
    a cycle is detected; the last type reached is the primary site.
    """
    by_id = {c.type_of_cancer_id: c for c in cancer_types}
    primary: Dict[str, TypeOfCancer] = {}
    for cancer_type in cancer_types:
        current = cancer_type
        seen = {current.type_of_cancer_id}
        while True:
            parent_id = (current.parent or '').strip()
            if not parent_id or parent_id.lower() == ROOT_PARENT:
                break
            parent = by_id.get(parent_id)
            if parent is None or parent.type_of_cancer_id in seen:
                break
            seen.add(parent.type_of_cancer_id)
            current = parent
        primary[cancer_type.type_of_cancer_id] = current
    return primary


class CancerTypeCatalog:
    def __init__(self, graph, cache: QueryCache | None = None):
        self.graph = graph
        self.cache = cache or QueryCache()

    def get_all_cancer_types(self) -> List[TypeOfCancer]:
        def load() -> List[TypeOfCancer]:
            rows = self.graph.run(
                """
                MATCH (t:TypeOfCancer)
                RETURN t.type_of_cancer_id AS type_of_cancer_id,
                       t.name AS name,
                       t.dedicated_color AS dedicated_color,
                       t.short_name AS short_name,
                       t.parent AS parent
                ORDER BY t.type_of_cancer_id
                """
            ).data()
            return [
                TypeOfCancer(
                    type_of_cancer_id=r['type_of_cancer_id'],
                    name=r.get('name') or '',
                    dedicated_color=r.get('dedicated_color'),
                    short_name=r.get('short_name'),
                    parent=r.get('parent'),
                )
                for r in rows
                if r.get('type_of_cancer_id')
            ]

        return self.cache.get_or_load(('get_all_cancer_types',), load)

    def get_primary_site_map(self) -> Dict[str, TypeOfCancer]:
        return resolve_primary_sites(self.get_all_cancer_types())

    def matching_categories(self, keyword: str) -> Set[str]:
        """Cancer type ids whose primary site id or name contains ``keyword``."""
        needle = (keyword or '').lower()
        if not needle:
            return set()
        matches = {
            type_id
            for type_id, site in self.get_primary_site_map().items()
            if needle in site.type_of_cancer_id.lower() or needle in (site.name or '').lower()
        }
        logger.debug(f"Keyword matched {len(matches)} cancer types")
        return matches
