from __future__ import annotations

from datetime import date

from werkzeug.security import check_password_hash

from src.hr_portal.hr_portal.core.enums import Role
from src.hr_portal.hr_portal.database.bootstrap import ensure_admin_user, iter_sql_statements


def test_iter_sql_statements_ignores_semicolons_in_strings():
    sql = "INSERT INTO t VALUES ('a;b');\nINSERT INTO t VALUES (\"c;d\");  \n;SELECT 'it\\'s; fine'"

    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        'INSERT INTO t VALUES ("c;d")',
        "SELECT 'it\\'s; fine'",
    ]


def test_ensure_admin_user_creates_first_admin(users_repo):
    created = ensure_admin_user(users_repo, email=" Admin@Example.com ", password="changeit", today=date(2026, 3, 2))

    assert created
    user = users_repo.get_by_email("admin@example.com")
    assert user.role == Role.ADMIN
    assert check_password_hash(user.password_hash, "changeit")
    assert users_repo.get_profile_for_user(user.user_id).full_name == "System Admin"


def test_ensure_admin_user_is_idempotent(users_repo):
    assert ensure_admin_user(users_repo, email="admin@example.com", password="changeit")
    assert not ensure_admin_user(users_repo, email="other@example.com", password="changeit")
    assert len(users_repo.users) == 1


def test_ensure_admin_user_needs_usable_credentials(users_repo):
    assert not ensure_admin_user(users_repo, email=None, password="changeit")
    assert not ensure_admin_user(users_repo, email="admin@example.com", password="123")
    assert users_repo.users == {}
