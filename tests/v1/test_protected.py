"""Tests for the legacy-token protected profile endpoints."""

from fastapi import status

from gatehouse.models.user import Role
from gatehouse.services import user_service

PROFILE_URL = "/api/v1/protected/profile"


def test_profile_requires_login(client) -> None:
    r = client.get(PROFILE_URL)
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.json()["detail"] == "Not logged in"


def test_profile_reflects_token_claims(client, test_user, legacy_login) -> None:
    legacy_login(test_user)
    r = client.get(PROFILE_URL)
    assert r.status_code == status.HTTP_200_OK
    body = r.json()
    assert body["id"] == test_user.id
    assert body["role"] == "USER"
    assert body["preferences"]["theme"] == "light"


def test_update_ignores_role_for_non_admin(client, db_session, test_user, legacy_login) -> None:
    legacy_login(test_user)
    r = client.put(PROFILE_URL, json={"name": "New Name", "preferences": {"theme": "dark"}, "role": "ADMIN"})
    assert r.status_code == status.HTTP_200_OK
    body = r.json()
    assert body["name"] == "New Name"
    assert body["role"] == "USER"
    assert body["preferences"] == {"theme": "dark"}
    assert user_service.get_user(db_session, test_user.id).role is Role.USER


def test_admin_may_change_own_role(client, admin_user, legacy_login) -> None:
    legacy_login(admin_user)
    r = client.put(PROFILE_URL, json={"role": "MODERATOR"})
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["role"] == "MODERATOR"


def test_user_cannot_delete_someone_else(client, test_user, other_user, legacy_login) -> None:
    legacy_login(test_user)
    r = client.delete(PROFILE_URL, params={"userId": other_user.id})
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_user_deletes_own_account(client, db_session, test_user, legacy_login) -> None:
    legacy_login(test_user)
    r = client.delete(PROFILE_URL)
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["deleted_user_id"] == test_user.id
    assert user_service.get_user(db_session, test_user.id) is None


def test_admin_deletes_other_account(client, db_session, admin_user, other_user, legacy_login) -> None:
    legacy_login(admin_user)
    r = client.delete(PROFILE_URL, params={"userId": other_user.id})
    assert r.status_code == status.HTTP_200_OK
    assert user_service.get_user(db_session, other_user.id) is None

    r = client.delete(PROFILE_URL, params={"userId": other_user.id})
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_rename_keeps_stored_role_after_demotion(client, db_session, admin_user, legacy_login) -> None:
    legacy_login(admin_user)
    admin_user.role = Role.USER
    db_session.commit()

    r = client.put(PROFILE_URL, json={"name": "Just A Rename"})
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["role"] == "USER"
    db_session.expire_all()
    assert user_service.get_user(db_session, admin_user.id).role is Role.USER


def test_demoted_admin_token_cannot_restore_role(client, db_session, admin_user, legacy_login) -> None:
    legacy_login(admin_user)
    admin_user.role = Role.USER
    db_session.commit()

    r = client.put(PROFILE_URL, json={"role": "ADMIN"})
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["role"] == "USER"
    db_session.expire_all()
    assert user_service.get_user(db_session, admin_user.id).role is Role.USER
