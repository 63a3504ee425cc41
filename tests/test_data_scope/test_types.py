"""Tests for scope value types and module-name validation."""

import pytest

from campus_hub.data_scope.types import DataModule, ResolvedScope, ScopeType, normalize_module, validate_module
from campus_hub.errors import ValidationError


@pytest.mark.parametrize("name", ["notice", "course_resource", "a1", "x"])
def test_valid_module_names(name):
    assert normalize_module(name) == name


def test_normalize_trims_and_accepts_enum():
    assert normalize_module("  library ") == "library"
    assert normalize_module(DataModule.LOSTFOUND) == "lostfound"


@pytest.mark.parametrize("name", [" library", "library ", "library\n"])
def test_validate_rejects_surrounding_whitespace(name):
    with pytest.raises(ValidationError):
        validate_module(name)


def test_validate_accepts_enum_and_plain_names():
    assert validate_module(DataModule.LOSTFOUND) == "lostfound"
    assert validate_module("course_resource") == "course_resource"


@pytest.mark.parametrize("name", ["", "Notice", "_notice", "1x", "no tice", "no-tice"])
def test_invalid_module_names(name):
    with pytest.raises(ValidationError) as exc_info:
        normalize_module(name)
    assert exc_info.value.code == "BAD_REQUEST"


def test_registered_modules_are_well_formed():
    for module in DataModule:
        assert normalize_module(module) == module.value


def test_non_department_scope_rejects_departments():
    with pytest.raises(ValueError):
        ResolvedScope(ScopeType.SELF, frozenset({1}))
    with pytest.raises(ValueError):
        ResolvedScope.departments(ScopeType.ALL, [1])


def test_to_dict():
    assert ResolvedScope.all().to_dict() == {"scope_type": "ALL"}
    assert ResolvedScope.departments(ScopeType.DEPT, [3, 1]).to_dict() == {
        "scope_type": "DEPT",
        "department_ids": [1, 3],
    }
    assert ResolvedScope.departments(ScopeType.CUSTOM, []).to_dict() == {"scope_type": "CUSTOM", "department_ids": []}
