"""Lightweight typed data models for clarity in function signatures."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, FrozenSet, Optional, Tuple

from .exceptions import InvalidQueryError


class AccessLevel(Enum):
    READ = 'READ'


class Projection(Enum):
    ID = 'ID'
    SUMMARY = 'SUMMARY'
    DETAILED = 'DETAILED'


class Direction(Enum):
    ASC = 'ASC'
    DESC = 'DESC'


@dataclass(frozen=True)
class TypeOfCancer:
    type_of_cancer_id: str
    name: str
    dedicated_color: Optional[str] = None
    short_name: Optional[str] = None
    parent: Optional[str] = None


@dataclass(frozen=True)
class CancerStudy:
    cancer_study_identifier: str
    type_of_cancer_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    public_study: Optional[bool] = None
    pmid: Optional[str] = None
    citation: Optional[str] = None
    groups: Optional[str] = None
    status: Optional[int] = None
    import_date: Optional[str] = None
    reference_genome: Optional[str] = None
    type_of_cancer: Optional[TypeOfCancer] = None
    read_permission: bool = True

    def group_names(self) -> Tuple[str, ...]:
        """Split the ``;`` separated groups column into names."""
        return tuple(g.strip() for g in (self.groups or '').split(';') if g.strip())


@dataclass(frozen=True)
class CancerStudyTags:
    cancer_study_id: str
    tags: Optional[str] = None


@dataclass
class BaseMeta:
    total_count: int = 0


@dataclass(frozen=True)
class Principal:
    name: str
    groups: FrozenSet[str] = field(default_factory=frozenset)


def to_dict(obj: Any) -> Any:
    """Convert models (and containers of them) into JSON-ready structures."""
    if isinstance(obj, Enum):
        return obj.value
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_dict(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, dict):
        return {k: to_dict(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_dict(x) for x in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted(to_dict(x) for x in obj)
    return obj


def coerce_enum(enum_cls, value, default=None):
    """Accept an enum member, its value (any case) or None."""
    if value is None or value == '':
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        allowed = ', '.join(m.value for m in enum_cls)
        raise InvalidQueryError(f"Invalid {enum_cls.__name__.lower()} '{value}' (expected one of: {allowed})") from None
