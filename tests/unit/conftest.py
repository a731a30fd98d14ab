import re

import pytest

from study_catalog.data.cache import QueryCache


CANCER_TYPES = [
    {'type_of_cancer_id': 'adrenal_gland', 'name': 'Adrenal Gland', 'parent': 'tissue'},
    {'type_of_cancer_id': 'acc', 'name': 'Adrenocortical Carcinoma', 'parent': 'adrenal_gland'},
    {'type_of_cancer_id': 'breast', 'name': 'Breast', 'parent': 'tissue'},
    {'type_of_cancer_id': 'idc', 'name': 'Invasive Ductal Carcinoma', 'parent': 'breast'},
    {'type_of_cancer_id': 'lung', 'name': 'Lung', 'parent': 'tissue'},
    {'type_of_cancer_id': 'luad', 'name': 'Lung Adenocarcinoma', 'parent': 'lung'},
    {'type_of_cancer_id': 'skin', 'name': 'Skin', 'parent': 'tissue'},
    {'type_of_cancer_id': 'mel', 'name': 'Melanoma', 'parent': 'skin'},
]

STUDIES = [
    {'cancer_study_identifier': 'acc_tcga', 'type_of_cancer_id': 'acc',
     'name': 'Adrenocortical Carcinoma (TCGA)', 'groups': 'PUBLIC', 'tags': '{"source": "TCGA"}'},
    {'cancer_study_identifier': 'breast_msk', 'type_of_cancer_id': 'idc',
     'name': 'Breast Cancer (MSK 2020)', 'groups': 'PUBLIC', 'tags': None},
    {'cancer_study_identifier': 'idc_mskcc', 'type_of_cancer_id': 'idc',
     'name': 'Invasive Ductal Study', 'groups': 'PUBLIC', 'tags': None},
    {'cancer_study_identifier': 'idc_tcga', 'type_of_cancer_id': 'idc',
     'name': 'Ductal Carcinoma (TCGA)', 'groups': 'TCGA', 'tags': '{"consortium": "TCGA"}'},
    {'cancer_study_identifier': 'luad_broad', 'type_of_cancer_id': 'luad',
     'name': 'Lung Adenocarcinoma (Broad)', 'groups': 'PUBLIC', 'tags': None},
    {'cancer_study_identifier': 'mel_dfci', 'type_of_cancer_id': 'mel',
     'name': 'Melanoma (DFCI)', 'groups': 'PUBLIC', 'tags': None},
]


class FakeRunResult:
    def __init__(self, rows):
        self._rows = rows

    def data(self):
        return self._rows


class FakeCatalogGraph:
    """Answers the repository's Cypher by inspecting the query text."""

    def __init__(self, studies=None, cancer_types=None):
        self.studies = list(STUDIES if studies is None else studies)
        self.cancer_types = list(CANCER_TYPES if cancer_types is None else cancer_types)
        self.queries = []

    def _type_name(self, type_id):
        for t in self.cancer_types:
            if t['type_of_cancer_id'] == type_id:
                return t['name']
        return ''

    def _matches(self, study, terms):
        haystacks = [study['cancer_study_identifier'], study.get('name') or '',
                     study.get('description') or '', self._type_name(study.get('type_of_cancer_id'))]
        return all(any(term in h.lower() for h in haystacks) for term in terms)

    def _row(self, study, query):
        # Only the columns the RETURN clause names, as the driver would return them
        columns = set(re.findall(r'AS (\w+)', query))
        row = {c: study.get(c) for c in columns if c != 'type_of_cancer'}
        if 'type_of_cancer' in columns:
            row['type_of_cancer'] = next(
                (dict(t) for t in self.cancer_types if t['type_of_cancer_id'] == study.get('type_of_cancer_id')), None)
        return row

    def run(self, query, **params):
        self.queries.append((query, params))
        if 'MATCH (t:TypeOfCancer)' in query and 'CancerStudy' not in query:
            return FakeRunResult([dict(t) for t in self.cancer_types])
        ordered = sorted(self.studies, key=lambda s: s['cancer_study_identifier'])
        if 's.tags AS tags' in query:
            ids = params.get('study_ids') or [params.get('study_id')]
            return FakeRunResult([
                {'cancer_study_id': s['cancer_study_identifier'], 'tags': s['tags']}
                for s in ordered if s['cancer_study_identifier'] in ids and s.get('tags') is not None
            ])
        if 'study_ids' in params:
            selected = [s for s in ordered if s['cancer_study_identifier'] in params['study_ids']]
        elif 'study_id' in params:
            selected = [s for s in ordered if s['cancer_study_identifier'] == params['study_id']][:1]
        else:
            terms = params.get('terms') or []
            selected = [s for s in ordered if self._matches(s, terms)] if 'all(term IN $terms' in query else ordered
        if 'count(DISTINCT s)' in query:
            return FakeRunResult([{'total_count': len(selected)}])
        if 'ORDER BY s.name DESC' in query:
            selected = sorted(selected, key=lambda s: s.get('name') or '', reverse=True)
        if 'limit' in params:
            selected = selected[params['skip']:params['skip'] + params['limit']]
        return FakeRunResult([self._row(s, query) for s in selected])

    def study_list_queries(self, with_terms=None):
        out = []
        for query, params in self.queries:
            if 'RETURN s.cancer_study_identifier AS cancer_study_identifier' not in query:
                continue
            if 'study_id' in params or 'study_ids' in params:
                continue
            has_terms = 'all(term IN $terms' in query
            if with_terms is None or with_terms == has_terms:
                out.append((query, params))
        return out


@pytest.fixture
def fake_graph():
    return FakeCatalogGraph()


@pytest.fixture
def cache():
    return QueryCache(max_entries=64, ttl_seconds=0, enabled=True)
