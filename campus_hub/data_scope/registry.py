"""
Business tables wired to the data-scope engine.

Each entry names the module a table belongs to and the column holding the
user a row is attributed to. The session hook in `campus_hub.db.filters`
uses this to scope plain `select(Model)` queries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import InstrumentedAttribute

from campus_hub.data_scope.types import DataModule, validate_module


@dataclass(frozen=True)
class ScopedModel:
    module: str
    model: type[Any]
    owner_attr: str

    @property
    def owner_column(self) -> InstrumentedAttribute:
        return getattr(self.model, self.owner_attr)


_SCOPED_MODELS: dict[str, list[ScopedModel]] = {}


def register_scoped_model(module: str | DataModule, model: type[Any], owner_attr: str) -> ScopedModel:
    name = validate_module(module)
    if not hasattr(model, owner_attr):
        raise ValueError(f"{model.__name__} has no owner column {owner_attr!r}")
    entry = ScopedModel(module=name, model=model, owner_attr=owner_attr)
    entries = _SCOPED_MODELS.setdefault(name, [])
    if entry not in entries:
        entries.append(entry)
    return entry


def scoped_models_for(module: str | DataModule) -> list[ScopedModel]:
    return list(_SCOPED_MODELS.get(validate_module(module), ()))


def register_default_scoped_models() -> None:
    # Local imports: models import the engine's types.
    from campus_hub.models.notices import Notice  # noqa: WPS433 (local import)
    from campus_hub.models.security import User  # noqa: WPS433 (local import)

    register_scoped_model(DataModule.NOTICE, Notice, "created_by")
    register_scoped_model(DataModule.USER, User, "id")
