"""Tests for the YAML security config and route matching."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from campus_hub.errors import ValidationError as DataScopeValidationError
from campus_hub.security.config import load_security_config
from campus_hub.security.decorators import data_scope

CONFIG = """
security:
  default:
    auth_required: true
  routes:
    - path: /health
      methods: [GET]
      auth_required: false
    - path: /roles/{role_id}/data-scopes
      methods: [GET, PUT]
      required_roles: [admin, super_admin]
    - path: /admin/users
      data_scope_module: user
    - path: /admin/users/export
      auth_required: false
      data_scope_module: user
"""


@pytest.fixture
def config(tmp_path):
    path = tmp_path / "security.yaml"
    path.write_text(CONFIG, encoding="utf-8")
    return load_security_config(path)


def test_public_route(config):
    rule = config.match("/health", "get")
    assert rule.auth_required is False
    assert rule.data_scope_module is None


def test_template_route_with_roles(config):
    rule = config.match("/roles/12/data-scopes", "PUT")
    assert rule.auth_required is True
    assert rule.required_roles == {"admin", "super_admin"}


def test_method_not_listed_falls_back_to_default(config):
    rule = config.match("/roles/12/data-scopes", "DELETE")
    assert rule.auth_required is True
    assert rule.required_roles == frozenset()


def test_data_scope_module_implies_auth(config):
    rule = config.match("/admin/users", "GET")
    assert rule.auth_required is True
    assert rule.data_scope_module == "user"


def test_explicit_auth_flag_wins(config):
    assert config.match("/admin/users/export", "GET").auth_required is False


def test_unknown_route_uses_defaults(config):
    rule = config.match("/nowhere", "GET")
    assert rule.auth_required is True
    assert rule.data_scope_module is None


def test_malformed_data_scope_module_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text(
        "security:\n  routes:\n    - path: /x\n      data_scope_module: Not-A-Module\n",
        encoding="utf-8",
    )
    with pytest.raises(PydanticValidationError):
        load_security_config(path)


def test_missing_top_level_key(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("other: {}\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Missing top-level 'security' key"):
        load_security_config(path)


def test_data_scope_decorator_attaches_module():
    @data_scope("notice")
    def endpoint():
        return None

    assert endpoint.__security_data_scope_module__ == "notice"


def test_data_scope_decorator_rejects_padded_module():
    with pytest.raises(DataScopeValidationError):
        data_scope(" notice")
