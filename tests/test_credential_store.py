from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from jobportal.core.exceptions import ConflictError


def _user(store, email="alice@x.com", role="job_seeker", **kwargs):
    return store.insert_user(email=email, password_hash="hash", full_name="Alice Doe", role=role, **kwargs)


def test_insert_assigns_id_and_defaults(store):
    user = _user(store)
    assert user.id
    assert user.is_active is True
    assert user.is_verified is False
    assert user.created_at is not None


def test_unique_email_enforced_by_database(store):
    _user(store)
    with pytest.raises(ConflictError):
        _user(store)
    # session is usable after the rollback
    assert store.find_user_by_email("alice@x.com") is not None


def test_update_rejects_unknown_fields(store):
    user = _user(store)
    with pytest.raises(ValueError):
        store.update_user(user.id, email="other@x.com")


def test_update_missing_user_returns_none(store):
    assert store.update_user("missing", full_name="Nobody") is None


def test_delete_user_removes_refresh_tokens(store):
    user = _user(store)
    expires = datetime.now(timezone.utc) + timedelta(days=1)
    store.insert_refresh_token(user_id=user.id, token="t1", expires_at=expires)
    store.insert_refresh_token(user_id=user.id, token="t2", expires_at=expires)

    assert store.delete_user(user.id) is True
    assert store.find_refresh_token("t1", user.id) is None
    assert store.delete_refresh_tokens_for_user(user.id) == 0
    assert store.delete_user(user.id) is False


def test_refresh_token_lookup_is_scoped_to_user(store):
    alice = _user(store)
    bob = _user(store, email="bob@x.com")
    store.insert_refresh_token(
        user_id=alice.id, token="alice-token", expires_at=datetime.now(timezone.utc) + timedelta(days=1)
    )

    assert store.find_refresh_token("alice-token", alice.id) is not None
    assert store.find_refresh_token("alice-token", bob.id) is None
    assert store.delete_refresh_token("alice-token", bob.id) is False
    assert store.delete_refresh_token("alice-token", alice.id) is True
    assert store.delete_refresh_token("alice-token", alice.id) is False


def test_list_users_filters(store):
    _user(store)
    _user(store, email="boss@corp.io", role="employer", is_active=False)

    assert len(store.list_users()) == 2
    assert [u.email for u in store.list_users(role="employer")] == ["boss@corp.io"]
    assert [u.email for u in store.list_users(is_active=True)] == ["alice@x.com"]


def test_failed_write_leaves_session_usable(store):
    user = _user(store)
    expires = datetime.now(timezone.utc) + timedelta(days=1)
    store.insert_refresh_token(user_id=user.id, token="dup", expires_at=expires)

    with pytest.raises(IntegrityError):
        store.insert_refresh_token(user_id=user.id, token="dup", expires_at=expires)

    assert store.delete_user(user.id) is True
    assert store.find_user_by_id(user.id) is None
