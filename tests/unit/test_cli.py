import json
import logging

from study_catalog import cli
from study_catalog.data.cache import QueryCache
from study_catalog.logging_setup import setup_logging
from study_catalog.security.permissions import AllowAllEvaluator
from study_catalog.service.study_service import StudyService


def test_search_command_prints_composed_studies(monkeypatch, capsys, fake_graph):
    service = StudyService.from_graph(fake_graph, QueryCache(enabled=False),
                                      evaluator=AllowAllEvaluator(), show_unauthorized_studies=False)
    monkeypatch.setattr(cli, '_service', lambda: service)

    args = cli.build_parser().parse_args(['search', 'breast', '--page-size', '5'])
    assert args.func(args) == 0
    out = json.loads(capsys.readouterr().out)
    assert [s['cancer_study_identifier'] for s in out] == ['breast_msk', 'idc_mskcc', 'idc_tcga']

    args = cli.build_parser().parse_args(['count', 'breast'])
    assert args.func(args) == 0
    assert capsys.readouterr().out.strip() == '3'


def test_setup_logging_writes_rotating_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging(str(tmp_path / 'logs'), 'debug')
        logging.getLogger('study_catalog.test').info('hello')
        for h in root.handlers:
            h.flush()
        assert 'hello' in (tmp_path / 'logs' / 'study_catalog.log').read_text(encoding='utf-8')
    finally:
        for h in root.handlers[:]:
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
