import argparse
import json

from .config import CONFIG
from .db.neo4j import get_graph
from .exceptions import StudyCatalogError
from .logging_setup import setup_logging
from .models import Principal, to_dict
from .service.study_service import StudyService


def _service() -> StudyService:
    graph = get_graph()
    graph.run("RETURN 1")
    return StudyService.from_graph(graph)


def _print_json(obj) -> None:
    print(json.dumps(to_dict(obj), ensure_ascii=False, indent=2))


def cmd_search(args: argparse.Namespace) -> int:
    principal = None
    if args.user:
        principal = Principal(name=args.user, groups=frozenset(args.group or []))
    studies = _service().get_all_studies(
        keyword=args.keyword,
        projection=args.projection,
        page_size=args.page_size,
        page_number=args.page_number,
        sort_by=args.sort_by,
        direction=args.direction,
        principal=principal,
    )
    _print_json(studies)
    return 0


def cmd_count(args: argparse.Namespace) -> int:
    print(_service().get_meta_studies(args.keyword).total_count)
    return 0


def cmd_study(args: argparse.Namespace) -> int:
    _print_json(_service().get_study(args.study_id))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    from server.app import create_app

    app = create_app()
    app.run(host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog='study-catalog')
    sub = p.add_subparsers(dest='command', required=True)

    s = sub.add_parser('search', help='Search studies by keyword')
    s.add_argument('keyword', nargs='?', help='Keyword matched against studies and cancer types')
    s.add_argument('--projection', default='SUMMARY', choices=['ID', 'SUMMARY', 'DETAILED'])
    s.add_argument('--page-size', type=int)
    s.add_argument('--page-number', type=int, default=0)
    s.add_argument('--sort-by')
    s.add_argument('--direction', default='ASC', choices=['ASC', 'DESC'])
    s.add_argument('--user', help='Principal name used for visibility filtering')
    s.add_argument('--group', action='append', help='Principal group (repeatable)')
    s.set_defaults(func=cmd_search)

    c = sub.add_parser('count', help='Count studies matching a keyword')
    c.add_argument('keyword', nargs='?')
    c.set_defaults(func=cmd_count)

    d = sub.add_parser('study', help='Show one study in detail')
    d.add_argument('study_id')
    d.set_defaults(func=cmd_study)

    v = sub.add_parser('serve', help='Run the HTTP API')
    v.add_argument('--host', default='127.0.0.1')
    v.add_argument('--port', type=int, default=5000)
    v.set_defaults(func=cmd_serve)
    return p


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(CONFIG.log_dir, CONFIG.log_level)
    try:
        return args.func(args)
    except StudyCatalogError as e:
        print(f"error: {e}")
        return 1


if __name__ == '__main__':
    raise SystemExit(main())
