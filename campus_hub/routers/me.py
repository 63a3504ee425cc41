from __future__ import annotations

from fastapi import APIRouter, Depends

from campus_hub.data_scope.resolver import ScopeResolver
from campus_hub.data_scope.types import validate_module
from campus_hub.models.security import User
from campus_hub.schemas.data_scope import ResolvedScopeOut
from campus_hub.schemas.security import UserOut
from campus_hub.security.dependencies import get_current_user, get_scope_resolver

router = APIRouter(prefix="/me", tags=["me"])


@router.get("", response_model=UserOut)
def me(user: User = Depends(get_current_user)) -> UserOut:
    # Relationships load lazily and need the request session still open.
    return UserOut.model_validate(user)


@router.get("/data-scopes/{module}", response_model=ResolvedScopeOut)
def my_data_scope(
    module: str,
    user: User = Depends(get_current_user),
    resolver: ScopeResolver = Depends(get_scope_resolver),
) -> ResolvedScopeOut:
    module_name = validate_module(module)
    return ResolvedScopeOut.from_scope(module_name, resolver.resolve(user.id, module_name))
