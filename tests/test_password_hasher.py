import pytest

from jobportal.core.exceptions import InvalidInputError
from jobportal.core.security import PasswordHasher


def test_hash_and_compare(hasher):
    digest = hasher.hash("Passw0rd!")
    assert digest != "Passw0rd!"
    assert digest.startswith("$2b$04$")
    assert hasher.compare("Passw0rd!", digest)
    assert not hasher.compare("passw0rd!", digest)


def test_same_password_gets_different_salts(hasher):
    assert hasher.hash("Passw0rd!") != hasher.hash("Passw0rd!")


@pytest.mark.parametrize("bad", ["", None, "x" * 73])
def test_hash_rejects_unusable_input(hasher, bad):
    with pytest.raises(InvalidInputError):
        hasher.hash(bad)


@pytest.mark.parametrize("digest", ["", "not-a-bcrypt-hash", None])
def test_compare_never_raises(hasher, digest):
    assert hasher.compare("Passw0rd!", digest) is False


def test_burn_is_harmless(hasher):
    hasher.burn("whatever")
    hasher.burn("")


def test_rounds_are_bounded():
    with pytest.raises(ValueError):
        PasswordHasher(rounds=3)


def test_policy_lists_every_violation():
    check = PasswordHasher.validate("abc", require_special=True)
    assert not check.valid
    assert len(check.errors) == 4  # length, uppercase, digit, special


def test_policy_accepts_strong_password():
    assert PasswordHasher.validate("Passw0rd!", require_special=True).valid
    assert PasswordHasher.validate("Passw0rd").valid
    assert not PasswordHasher.validate("Passw0rd", require_special=True).valid
