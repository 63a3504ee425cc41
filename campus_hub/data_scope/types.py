"""
Value types of the data-scope engine.

Kept free of database imports so the merge algorithm can be exercised
without a session.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import re
from typing import Iterable

from campus_hub.errors import ValidationError


class ScopeType(str, Enum):
    """Shape of the rows a grant lets an actor touch, most permissive first."""

    ALL = "ALL"
    CUSTOM = "CUSTOM"
    DEPT_AND_CHILD = "DEPT_AND_CHILD"
    DEPT = "DEPT"
    SELF = "SELF"
    NONE = "NONE"


# Scope types whose resolution carries a concrete department set.
DEPARTMENT_SCOPE_TYPES = frozenset({ScopeType.DEPT, ScopeType.DEPT_AND_CHILD, ScopeType.CUSTOM})

DEFAULT_PRIVILEGED_ROLE_CODES = frozenset({"admin", "super_admin"})


class DataModule(str, Enum):
    """
    Known business datasets.

    Business code should pass these constants rather than string literals. The
    engine still accepts any well-formed module name so that administrators
    can configure a module before the code using it ships.
    """

    NOTICE = "notice"
    LIBRARY = "library"
    MATERIAL = "material"
    SURVEY = "survey"
    VOTE = "vote"
    FACILITY = "facility"
    LOSTFOUND = "lostfound"
    COURSE_RESOURCE = "course_resource"
    USER = "user"


_MODULE_NAME_RE = re.compile(r"^[a-z][a-z0-9_]*$")


def validate_module(module: str | DataModule) -> str:
    """Return the module name as a plain string, rejecting malformed names as given."""

    name = module.value if isinstance(module, DataModule) else str(module)
    if not _MODULE_NAME_RE.fullmatch(name):
        raise ValidationError(
            "module must start with a lowercase letter and contain only lowercase letters, digits or underscores",
            {"module": name},
        )
    return name


def normalize_module(module: str | DataModule) -> str:
    """Trim surrounding whitespace, then validate. Used for administrator input."""

    if isinstance(module, DataModule):
        return module.value
    return validate_module(str(module).strip())


@dataclass(frozen=True)
class ResolvedScope:
    """
    Outcome of resolving an actor's grants for one module.

    `department_ids` is only meaningful for DEPT, DEPT_AND_CHILD and CUSTOM and
    is already expanded through the department closure where applicable.
    """

    scope_type: ScopeType
    department_ids: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        if self.department_ids and self.scope_type not in DEPARTMENT_SCOPE_TYPES:
            raise ValueError(f"{self.scope_type.value} scope cannot carry department ids")

    @classmethod
    def all(cls) -> ResolvedScope:
        return cls(ScopeType.ALL)

    @classmethod
    def none(cls) -> ResolvedScope:
        return cls(ScopeType.NONE)

    @classmethod
    def self_only(cls) -> ResolvedScope:
        return cls(ScopeType.SELF)

    @classmethod
    def departments(cls, scope_type: ScopeType, department_ids: Iterable[int]) -> ResolvedScope:
        if scope_type not in DEPARTMENT_SCOPE_TYPES:
            raise ValueError(f"{scope_type.value} is not a department scope")
        return cls(scope_type, frozenset(department_ids))

    @property
    def is_all(self) -> bool:
        return self.scope_type is ScopeType.ALL

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"scope_type": self.scope_type.value}
        if self.scope_type in DEPARTMENT_SCOPE_TYPES:
            payload["department_ids"] = sorted(self.department_ids)
        return payload
