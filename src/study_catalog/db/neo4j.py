from __future__ import annotations

from typing import TYPE_CHECKING

from ..config import CONFIG

if TYPE_CHECKING:
    from py2neo import Graph


def get_graph(override: dict | None = None) -> "Graph":
    """Create a Neo4j Graph client using CONFIG or overrides.

    Parameters
    ----------
    override: dict | None
        Optional keys: uri, user, password.
    """
    from py2neo import Graph

    cfg = CONFIG.neo4j
    uri = (override or {}).get('uri', cfg.uri)
    user = (override or {}).get('user', cfg.user)
    password = (override or {}).get('password', cfg.password)
    return Graph(uri, auth=(user, password))
