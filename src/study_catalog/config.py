"""Central configuration for the study catalog.

Avoids global constants scattered across modules. Import from this module.
"""

from dataclasses import dataclass
import os


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class Neo4jConfig:
    uri: str = os.getenv('NEO4J_URI', 'bolt://localhost:7687')
    user: str = os.getenv('NEO4J_USER', 'neo4j')
    password: str = os.getenv('NEO4J_PASSWORD', '123456')


@dataclass(frozen=True)
class CacheConfig:
    enabled: bool = _flag('QUERY_CACHE_ENABLED', 'true')
    max_entries: int = int(os.getenv('QUERY_CACHE_MAX_ENTRIES', '256'))
    ttl_seconds: float = float(os.getenv('QUERY_CACHE_TTL_SECONDS', '300'))


@dataclass(frozen=True)
class SecurityConfig:
    authenticate: bool = _flag('AUTHENTICATE', 'false')
    # When set, unauthorized studies are listed with read_permission=False
    show_unauthorized_studies: bool = _flag('SHOW_UNAUTHORIZED_STUDIES', 'false')
    public_group: str = os.getenv('PUBLIC_GROUP', 'PUBLIC')


@dataclass(frozen=True)
class UploadConfig:
    url: str = os.getenv('EXTN_SERVER_SERVICE_URL', '')
    timeout: float = float(os.getenv('EXTN_SERVER_TIMEOUT', '60'))


@dataclass(frozen=True)
class AppConfig:
    log_dir: str = os.getenv('LOG_DIR', 'logs')
    log_level: str = os.getenv('LOG_LEVEL', 'INFO')
    default_page_size: int = int(os.getenv('DEFAULT_PAGE_SIZE', '10000000'))
    neo4j: Neo4jConfig = Neo4jConfig()
    cache: CacheConfig = CacheConfig()
    security: SecurityConfig = SecurityConfig()
    upload: UploadConfig = UploadConfig()


CONFIG = AppConfig()
