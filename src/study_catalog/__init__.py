"""Study catalog package.

This package hosts configuration, the Neo4j client, the study repository,
the search composition service, and visibility filtering for the cancer
study catalog.
"""

__all__ = [
    'config',
]
