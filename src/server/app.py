from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from study_catalog.config import CONFIG
from study_catalog.db.neo4j import get_graph as get_graph_client
from study_catalog.exceptions import AccessDeniedError, InvalidQueryError, StudyNotFoundError
from study_catalog.models import AccessLevel, Principal, Projection, to_dict
from study_catalog.service.study_service import StudyService

logger = logging.getLogger('study_catalog.server')

USER_HEADER = 'X-Portal-User'
GROUPS_HEADER = 'X-Portal-Groups'


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(p[:1].upper() + p[1:] for p in rest)


def _camelize(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {_camel(k): _camelize(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_camelize(x) for x in obj]
    return obj


def _payload(obj: Any) -> Any:
    return _camelize(to_dict(obj))


def create_app(service: Optional[StudyService] = None) -> Flask:
    app = Flask(__name__)
    CORS(app)

    if service is None:
        service = StudyService.from_graph(get_graph_client())

    def _error(message: str, status: int):
        return jsonify({"error": message}), status

    def _principal() -> Optional[Principal]:
        user = (request.headers.get(USER_HEADER) or '').strip()
        if not user:
            return None
        groups = request.headers.get(GROUPS_HEADER) or ''
        return Principal(name=user, groups=frozenset(g.strip() for g in groups.split(',') if g.strip()))

    def _optional_int(name: str) -> Optional[int]:
        raw = request.args.get(name)
        if raw is None or raw == '':
            return None
        try:
            value = int(raw)
        except ValueError:
            raise InvalidQueryError(f"{name} must be an integer") from None
        if value < 0:
            raise InvalidQueryError(f"{name} must not be negative")
        return value

    def _get_pagination_args() -> Tuple[int, int]:
        page_size = _optional_int('pageSize')
        page_number = _optional_int('pageNumber')
        return (CONFIG.default_page_size if page_size is None else page_size,
                0 if page_number is None else page_number)

    def _id_list() -> List[str]:
        body = request.get_json(force=True, silent=True)
        if not isinstance(body, list) or not all(isinstance(x, str) for x in body):
            raise InvalidQueryError("request body must be a JSON list of study ids")
        return body

    @app.errorhandler(StudyNotFoundError)
    def _not_found(e: StudyNotFoundError):
        return _error(str(e), 404)

    @app.errorhandler(AccessDeniedError)
    def _denied(e: AccessDeniedError):
        return _error(str(e), 403)

    @app.errorhandler(InvalidQueryError)
    def _invalid(e: InvalidQueryError):
        return _error(str(e), 400)

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.exception(f"Unhandled error on {request.path}")
        return _error(str(e), 500)

    @app.get('/api/health')
    def health():
        return jsonify({"status": "ok"})

    @app.get('/api/studies')
    def api_studies():
        page_size, page_number = _get_pagination_args()
        studies = service.get_all_studies(
            keyword=request.args.get('keyword'),
            projection=request.args.get('projection') or Projection.SUMMARY,
            page_size=page_size,
            page_number=page_number,
            sort_by=request.args.get('sortBy'),
            direction=request.args.get('direction') or 'ASC',
            principal=_principal(),
            access_level=AccessLevel.READ,
        )
        return jsonify(_payload(studies))

    @app.get('/api/studies/meta')
    def api_studies_meta():
        meta = service.get_meta_studies(request.args.get('keyword'))
        return jsonify(_payload(meta))

    @app.get('/api/studies/<study_id>')
    def api_study(study_id: str):
        return jsonify(_payload(service.get_study(study_id)))

    @app.post('/api/studies/fetch')
    def api_fetch_studies():
        studies = service.fetch_studies(_id_list(), request.args.get('projection') or Projection.SUMMARY)
        return jsonify(_payload(studies))

    @app.post('/api/studies/meta/fetch')
    def api_fetch_meta_studies():
        return jsonify(_payload(service.fetch_meta_studies(_id_list())))

    @app.get('/api/studies/<study_id>/tags')
    def api_study_tags(study_id: str):
        tags = service.get_tags(study_id, _principal(), AccessLevel.READ)
        return jsonify(_payload(tags) if tags is not None else {})

    @app.post('/api/studies/tags/fetch')
    def api_fetch_tags():
        return jsonify(_payload(service.get_tags_for_multiple_studies(_id_list())))

    @app.post('/api/studies/upload')
    def api_upload():
        upload = request.files.get('file')
        if upload is None:
            return _error("file is required", 400)
        message = service.process_file(upload.stream, upload.filename)
        return jsonify({"message": message})

    @app.post('/api/cache/clear')
    def api_clear_cache():
        cleared = service.repository.cache.clear()
        return jsonify({"cleared": cleared})

    return app
