"""Tests for password hashing and token digests."""

from __future__ import annotations

import hashlib

import pytest

from authsvc.core.security import digest_token, hash_password, random_token, verify_password

PLAIN = "secret123"


@pytest.fixture(scope="module")
def hashed() -> str:
    return hash_password(PLAIN)


def test_hash_and_verify(hashed):
    assert hashed.startswith("scrypt:32768:8:1$")
    assert verify_password(PLAIN, hashed) is True


@pytest.mark.parametrize(
    "candidate",
    [
        # substitute
        "Secret123",
        "secrdt123",
        "secret124",
        # insert
        "xsecret123",
        "secr3et123",
        "secret123 ",
        # delete
        "ecret123",
        "secet123",
        "secret12",
    ],
)
def test_single_character_mutation_fails(hashed, candidate):
    assert verify_password(candidate, hashed) is False


def test_hash_is_salted():
    assert hash_password("secret123") != hash_password("secret123")


@pytest.mark.parametrize("stored", ["", None, "not-a-hash", "md5$x$y"])
def test_verify_against_malformed_hash_is_false(stored):
    assert verify_password("secret123", stored) is False


def test_digest_token_is_sha256_hex():
    assert digest_token("abc") == hashlib.sha256(b"abc").hexdigest()
    assert len(digest_token("abc")) == 64


def test_random_token_length_and_alphabet():
    token = random_token(32)

    assert len(token) == 32
    int(token, 16)
    assert random_token(32) != token


@pytest.mark.parametrize("length", [0, -2, 31])
def test_random_token_rejects_bad_length(length):
    with pytest.raises(ValueError):
        random_token(length)
