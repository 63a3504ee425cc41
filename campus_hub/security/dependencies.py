from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from campus_hub.data_scope.conditions import scope_to_condition
from campus_hub.data_scope.registry import scoped_models_for
from campus_hub.data_scope.resolver import ScopeResolver
from campus_hub.db.session import get_db
from campus_hub.models.security import User
from campus_hub.security.auth import bearer_user_id, load_actor
from campus_hub.security.config import SecurityConfig
from campus_hub.security.context import DataScopeContext
from campus_hub.settings import get_settings


def get_security_config(request: Request) -> SecurityConfig:
    config = getattr(request.app.state, "security_config", None)
    if config is None:
        raise RuntimeError("Security config not loaded. Did app startup run?")
    return config


def get_current_user(request: Request) -> User:
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user


def get_scope_resolver(request: Request, db: Session = Depends(get_db)) -> ScopeResolver:
    """Request-lifetime resolver, so repeated resolutions are memoized."""

    resolver = getattr(request.state, "scope_resolver", None)
    if resolver is None:
        resolver = ScopeResolver(db, get_settings().privileged_role_codes)
        request.state.scope_resolver = resolver
    return resolver


def enforce_security(
    request: Request,
    config: SecurityConfig = Depends(get_security_config),
    db: Session = Depends(get_db),
    resolver: ScopeResolver = Depends(get_scope_resolver),
) -> None:
    """
    Global security dependency (configuration-driven).

    Runs after routing, so it can also read decorator metadata, and requires
    no changes to route handlers. FastAPI hands the handler the same cached
    `get_db` session, so the data-scope context stored in `db.info` here
    scopes every query the handler issues.
    """

    rule = config.match(request.url.path, request.method)

    endpoint = request.scope.get("endpoint")
    decorator_module = getattr(endpoint, "__security_data_scope_module__", None) if endpoint else None

    data_scope_module = decorator_module or rule.data_scope_module
    if not (rule.auth_required or data_scope_module is not None):
        return

    user_id = bearer_user_id(request, config.auth)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user id")

    user = load_actor(db, user_id)
    request.state.user = user

    if rule.required_roles and not ({r.code for r in user.roles} & rule.required_roles):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Insufficient role. Required one of: {sorted(rule.required_roles)}",
        )

    if data_scope_module is None:
        return

    scope = resolver.resolve(user.id, data_scope_module)
    db.info["data_scope"] = DataScopeContext(
        actor_id=user.id,
        module=data_scope_module,
        scope=scope,
        conditions=tuple(
            (scoped, scope_to_condition(scope, user.id, scoped.owner_column))
            for scoped in scoped_models_for(data_scope_module)
        ),
    )
