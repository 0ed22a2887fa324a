import pytest

from webapp.auth.passwords import hash_password, verify_password
from webapp.ids import ID_ALPHABET, PASSWORD_ALPHABET, generate_id, generate_password


def test_hash_is_salted_and_verifies():
    h1 = hash_password("correct horse")
    h2 = hash_password("correct horse")
    assert h1 != h2
    assert "correct horse" not in h1
    assert verify_password(h1, "correct horse")
    assert verify_password(h2, "correct horse")


def test_verify_rejects_wrong_or_blank_input():
    h = hash_password("password1")
    assert not verify_password(h, "password2")
    assert not verify_password(h, "")
    assert not verify_password("", "password1")
    assert not verify_password("not-a-hash", "password1")


def test_hash_refuses_empty_password():
    with pytest.raises(ValueError):
        hash_password("")


def test_generate_id_shape():
    ident = generate_id("usr", 16)
    prefix, _, body = ident.partition("_")
    assert prefix == "usr"
    assert len(body) == 16
    assert all(c in ID_ALPHABET for c in body)
    assert generate_id("usr", 16) != ident


def test_generate_password_uses_alphabet():
    pw = generate_password(16)
    assert len(pw) == 16
    assert all(c in PASSWORD_ALPHABET for c in pw)
