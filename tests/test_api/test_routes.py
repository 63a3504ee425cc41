"""
HTTP tests: the global security dependency and the scoped routes.

Each test gets a fresh in-memory database seeded with the demo data:

    users   1 alice_admin (admin, Campus)
            2 lee_lead    (department_lead + member, Academic Affairs)
            3 cory_cs     (member, Computer Science)
            4 sam_student (librarian, Student Affairs)
    notice  admin ALL, department_lead DEPT_AND_CHILD, member SELF, librarian DEPT
    user    admin ALL, department_lead DEPT_AND_CHILD

Notice n is created by user n.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from campus_hub.db.base import Base
from campus_hub.db.init_db import seed_demo_data
from campus_hub.db.session import get_db
from campus_hub.main import create_app
from campus_hub.models import audit, data_scope, notices, organization, security  # noqa: F401
from campus_hub.routers.roles import get_audit_sink
from campus_hub.security.config import load_security_config
from campus_hub.settings import get_settings
from factories import RecordingAuditSink

ADMIN, LEAD, MEMBER, LIBRARIAN = 1, 2, 3, 4
MEMBER_ROLE_ID = 5
CAMPUS, ACADEMIC, STUDENT, CS = 1, 2, 3, 4


@pytest.fixture
def api_audit_sink():
    return RecordingAuditSink()


@pytest.fixture
def client(api_audit_sink):
    # One shared connection so the threadpool running sync endpoints sees the seed.
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestSession = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)
    with TestSession() as db:
        seed_demo_data(db)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app = create_app()
    app.state.security_config = load_security_config(get_settings().resolved_security_config_path())
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_audit_sink] = lambda: api_audit_sink

    # Not used as a context manager: the lifespan would initialize the real database.
    yield TestClient(app)
    engine.dispose()


def _auth(user_id: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {user_id}"}


def _notice_owners(client: TestClient, user_id: int) -> list[int]:
    response = client.get("/notices", headers=_auth(user_id))
    assert response.status_code == 200
    return [n["created_by"] for n in response.json()]


def test_health_is_public(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_missing_token_is_unauthorized(client):
    assert client.get("/notices").status_code == 401


def test_malformed_token_is_bad_request(client):
    assert client.get("/me", headers={"Authorization": "Token 1"}).status_code == 400


def test_unknown_user_is_unauthorized(client):
    assert client.get("/me", headers=_auth(999)).status_code == 401


def test_me_returns_roles_and_departments(client):
    body = client.get("/me", headers=_auth(LEAD)).json()
    assert body["username"] == "lee_lead"
    assert sorted(r["code"] for r in body["roles"]) == ["department_lead", "member"]
    assert [d["name"] for d in body["departments"]] == ["Academic Affairs"]


@pytest.mark.parametrize(
    "user_id, owners",
    [
        (ADMIN, [1, 2, 3, 4]),
        (LEAD, [2, 3]),
        (MEMBER, [3]),
        (LIBRARIAN, [4]),
    ],
)
def test_notices_are_scoped_per_actor(client, user_id, owners):
    assert _notice_owners(client, user_id) == owners


def test_out_of_scope_notice_looks_missing(client):
    assert client.get("/notices/1", headers=_auth(MEMBER)).status_code == 404
    assert client.get("/notices/3", headers=_auth(MEMBER)).json()["created_by"] == MEMBER


def test_admin_users_scoped_by_user_module(client):
    lead_view = client.get("/admin/users", headers=_auth(LEAD))
    assert [u["id"] for u in lead_view.json()] == [LEAD, MEMBER]

    admin_view = client.get("/admin/users", headers=_auth(ADMIN))
    assert [u["id"] for u in admin_view.json()] == [1, 2, 3, 4]


def test_admin_users_requires_configured_role(client):
    assert client.get("/admin/users", headers=_auth(MEMBER)).status_code == 403


def test_my_data_scope(client):
    response = client.get("/me/data-scopes/notice", headers=_auth(LEAD))
    assert response.json() == {
        "module": "notice",
        "scope_type": "DEPT_AND_CHILD",
        "department_ids": [ACADEMIC, CS],
    }

    unconfigured = client.get("/me/data-scopes/vote", headers=_auth(MEMBER)).json()
    assert unconfigured == {"module": "vote", "scope_type": "SELF", "department_ids": None}


@pytest.mark.parametrize("module", ["Notice", "%20notice", "notice%20"])
def test_my_data_scope_rejects_malformed_module(client, module):
    response = client.get(f"/me/data-scopes/{module}", headers=_auth(ADMIN))
    assert response.status_code == 400
    assert response.json()["code"] == "BAD_REQUEST"


def test_role_data_scopes_require_admin(client):
    assert client.get(f"/roles/{MEMBER_ROLE_ID}/data-scopes", headers=_auth(LEAD)).status_code == 403


def test_put_role_data_scopes_rejects_duplicates(client, api_audit_sink):
    response = client.put(
        f"/roles/{MEMBER_ROLE_ID}/data-scopes",
        headers=_auth(ADMIN),
        json={"items": [{"module": "notice", "scope_type": "ALL"}, {"module": "notice", "scope_type": "SELF"}]},
    )

    assert response.status_code == 400
    assert response.json()["details"] == {"duplicates": ["notice"]}
    assert api_audit_sink.entries == []
    # The previous configuration is untouched.
    assert _notice_owners(client, MEMBER) == [3]


def test_put_unknown_role_is_not_found(client):
    response = client.put("/roles/999/data-scopes", headers=_auth(ADMIN), json={"items": []})
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_put_then_get_role_data_scopes_round_trip(client, api_audit_sink):
    response = client.put(
        f"/roles/{MEMBER_ROLE_ID}/data-scopes",
        headers=_auth(ADMIN),
        json={
            "items": [
                {"module": "notice", "scope_type": "CUSTOM", "department_ids": [STUDENT]},
                {"module": "library", "scope_type": "DEPT", "department_ids": [CS]},
            ],
            "reason": "members follow student affairs",
        },
    )
    assert response.status_code == 200
    expected = {
        "role_id": MEMBER_ROLE_ID,
        "items": [
            {"module": "library", "scope_type": "DEPT", "department_ids": []},
            {"module": "notice", "scope_type": "CUSTOM", "department_ids": [STUDENT]},
        ],
    }
    assert response.json() == expected
    assert client.get(f"/roles/{MEMBER_ROLE_ID}/data-scopes", headers=_auth(ADMIN)).json() == expected

    [entry] = api_audit_sink.entries
    assert entry.success is True
    assert entry.actor.user_id == ADMIN
    assert entry.reason == "members follow student affairs"

    # The new CUSTOM grant takes effect on the next request.
    assert _notice_owners(client, MEMBER) == [4]
