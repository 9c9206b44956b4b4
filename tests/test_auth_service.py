from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from jobportal.core.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from jobportal.models.security import RefreshToken
from jobportal.services.auth_service import AuthService


def _register(auth_service, email="alice@x.com", password="Passw0rd!", **kwargs):
    return auth_service.register(email=email, password=password, full_name="Alice Doe", **kwargs)


def test_register_then_login_resolves_same_user(auth_service, token_service):
    registered = _register(auth_service)
    logged_in = auth_service.login("alice@x.com", "Passw0rd!")

    assert registered.user.id == logged_in.user.id
    assert token_service.verify_access(logged_in.tokens.access_token).user_id == registered.user.id
    assert registered.user.role == "job_seeker"
    assert registered.user.is_active is True
    assert registered.user.is_verified is False


def test_register_normalizes_email_and_hashes_password(auth_service, store):
    result = _register(auth_service, email="  Alice@X.com ")
    stored = store.find_user_by_email("alice@x.com")
    assert stored.id == result.user.id
    assert stored.password_hash != "Passw0rd!"


def test_register_persists_refresh_token(auth_service, store):
    result = _register(auth_service)
    record = store.find_refresh_token(result.tokens.refresh_token, result.user.id)
    assert record is not None


def test_duplicate_email_in_any_casing_conflicts(auth_service):
    _register(auth_service)
    with pytest.raises(ConflictError):
        _register(auth_service, email="ALICE@x.COM")


def test_register_requires_fields(auth_service):
    with pytest.raises(ValidationError) as exc_info:
        auth_service.register(email="", password="Passw0rd!", full_name=" ")
    assert exc_info.value.details == {"missing": ["email", "full_name"]}


def test_register_refuses_admin_role(auth_service, store):
    with pytest.raises(ValidationError):
        _register(auth_service, role="admin")
    assert store.find_user_by_email("alice@x.com") is None


def test_register_removes_user_when_session_setup_fails(auth_service, store, monkeypatch):
    def broken_issue_pair(payload):
        raise RuntimeError("signing backend unavailable")

    monkeypatch.setattr(auth_service.tokens, "issue_pair", broken_issue_pair)

    with pytest.raises(RuntimeError):
        _register(auth_service)
    assert store.find_user_by_email("alice@x.com") is None


def test_unknown_email_and_wrong_password_look_the_same(auth_service):
    _register(auth_service)

    with pytest.raises(UnauthorizedError) as wrong_password:
        auth_service.login("alice@x.com", "Wrong0ne!")
    with pytest.raises(UnauthorizedError) as unknown_email:
        auth_service.login("nobody@x.com", "Passw0rd!")

    assert wrong_password.value.message == unknown_email.value.message == "Invalid email or password"
    assert wrong_password.value.status_code == unknown_email.value.status_code == 401


def test_login_rejects_deactivated_account(auth_service, store):
    user = _register(auth_service).user
    store.update_user(user.id, is_active=False)

    with pytest.raises(UnauthorizedError) as exc_info:
        auth_service.login("alice@x.com", "Passw0rd!")
    assert exc_info.value.message == "Account is deactivated"

    # Without the right password the account state is not revealed
    with pytest.raises(UnauthorizedError) as exc_info:
        auth_service.login("alice@x.com", "Wrong0ne!")
    assert exc_info.value.message == "Invalid email or password"


def test_unverified_login_allowed_by_default(auth_service, store, hasher, token_service):
    _register(auth_service)
    auth_service.login("alice@x.com", "Passw0rd!")

    strict = AuthService(store, hasher, token_service, require_verified=True)
    with pytest.raises(UnauthorizedError) as exc_info:
        strict.login("alice@x.com", "Passw0rd!")
    assert exc_info.value.message == "Account is not verified"


def test_refresh_issues_new_access_token(auth_service, token_service, store):
    result = _register(auth_service)
    access = auth_service.refresh_access_token(result.tokens.refresh_token)

    assert token_service.verify_access(access).user_id == result.user.id
    # refresh token is not rotated
    assert store.find_refresh_token(result.tokens.refresh_token, result.user.id) is not None


def test_refresh_after_logout_fails(auth_service):
    result = _register(auth_service)
    assert auth_service.logout(result.user.id, result.tokens.refresh_token) is True

    with pytest.raises(UnauthorizedError) as exc_info:
        auth_service.refresh_access_token(result.tokens.refresh_token)
    assert exc_info.value.message == "Invalid refresh token"


def test_logout_is_idempotent(auth_service):
    result = _register(auth_service)
    auth_service.logout(result.user.id, result.tokens.refresh_token)
    assert auth_service.logout(result.user.id, result.tokens.refresh_token) is False


def test_logout_only_removes_own_token(auth_service, store):
    alice = _register(auth_service)
    bob = _register(auth_service, email="bob@x.com")

    assert auth_service.logout(bob.user.id, alice.tokens.refresh_token) is False
    assert store.find_refresh_token(alice.tokens.refresh_token, alice.user.id) is not None


def test_refresh_with_expired_record_removes_it(auth_service, store, db_session):
    result = _register(auth_service)
    db_session.query(RefreshToken).update(
        {RefreshToken.expires_at: datetime.now(timezone.utc) - timedelta(minutes=1)},
        synchronize_session=False,
    )
    db_session.commit()

    with pytest.raises(UnauthorizedError) as exc_info:
        auth_service.refresh_access_token(result.tokens.refresh_token)
    assert exc_info.value.message == "Refresh token expired"
    assert store.find_refresh_token(result.tokens.refresh_token, result.user.id) is None


def test_refresh_rejects_access_token(auth_service):
    result = _register(auth_service)
    with pytest.raises(UnauthorizedError):
        auth_service.refresh_access_token(result.tokens.access_token)


def test_refresh_for_deactivated_user_fails(auth_service, store):
    result = _register(auth_service)
    store.update_user(result.user.id, is_active=False)

    with pytest.raises(UnauthorizedError) as exc_info:
        auth_service.refresh_access_token(result.tokens.refresh_token)
    assert exc_info.value.message == "User not found or inactive"


def test_change_password_with_wrong_old_password_keeps_hash(auth_service, store):
    user = _register(auth_service).user
    before = store.find_user_by_id(user.id).password_hash

    with pytest.raises(UnauthorizedError) as exc_info:
        auth_service.change_password(user.id, "Wrong0ne!", "N3wPassw0rd!")
    assert exc_info.value.message == "Current password is incorrect"
    assert store.find_user_by_id(user.id).password_hash == before


def test_change_password_revokes_sessions(auth_service):
    first = _register(auth_service)
    auth_service.login("alice@x.com", "Passw0rd!")

    revoked = auth_service.change_password(first.user.id, "Passw0rd!", "N3wPassw0rd!")
    assert revoked == 2

    with pytest.raises(UnauthorizedError):
        auth_service.refresh_access_token(first.tokens.refresh_token)
    with pytest.raises(UnauthorizedError):
        auth_service.login("alice@x.com", "Passw0rd!")
    assert auth_service.login("alice@x.com", "N3wPassw0rd!").user.id == first.user.id


def test_change_password_for_missing_user(auth_service):
    with pytest.raises(NotFoundError):
        auth_service.change_password("missing", "Passw0rd!", "N3wPassw0rd!")


def test_register_removes_user_when_refresh_record_is_rejected(auth_service, store, monkeypatch):
    bob = _register(auth_service, email="bob@x.com")

    # Hand carol bob's refresh token so the unique constraint refuses the insert
    monkeypatch.setattr(auth_service.tokens, "issue_pair", lambda payload: bob.tokens)

    with pytest.raises(IntegrityError):
        _register(auth_service, email="carol@x.com")
    assert store.find_user_by_email("carol@x.com") is None
    assert store.find_user_by_email("bob@x.com") is not None
