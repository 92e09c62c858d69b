"""Tests for the demo account seed script."""

from gatehouse.core.security import verify_password
from gatehouse.models.user import Role
from gatehouse.scripts.seed import DEMO_ACCOUNTS, seed_users
from gatehouse.services import user_service


def test_seed_creates_each_role_once(db_session):
    users = seed_users(db_session)
    assert {user.role for user in users} == {Role.ADMIN, Role.MODERATOR, Role.USER}

    again = seed_users(db_session)
    assert [user.id for user in again] == [user.id for user in users]
    assert user_service.count_users(db_session) == len(DEMO_ACCOUNTS)


def test_seeded_passwords_are_hashed(db_session):
    seed_users(db_session)
    admin = user_service.get_user_by_email(db_session, "admin@example.com")
    assert admin is not None
    assert admin.password != "admin123"
    assert verify_password("admin123", admin.password)
