"""Unit tests for password hashing utilities."""

from src.vst_gateway.auth.password import hash_password, verify_password


def test_hash_is_not_plain():
    hashed = hash_password("MySecret1")
    assert hashed != "MySecret1"
    assert hashed.startswith("$2")


def test_verify_correct_password():
    hashed = hash_password("MySecret1")
    assert verify_password("MySecret1", hashed) is True


def test_verify_wrong_password():
    hashed = hash_password("MySecret1")
    assert verify_password("WrongPass9", hashed) is False


def test_same_plain_produces_different_hashes():
    assert hash_password("MySecret1") != hash_password("MySecret1")


def test_malformed_stored_hash_is_a_mismatch():
    assert verify_password("MySecret1", "not-a-bcrypt-hash") is False
