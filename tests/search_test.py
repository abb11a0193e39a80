"""Tests for search planning and result parsing."""

from __future__ import annotations

import pytest

from ldapkeys.config import parse_config
from ldapkeys.exceptions import (
    InvalidAccountNameError,
    InvalidSearchScopeError,
)
from ldapkeys.models.ldap import SearchRequest
from ldapkeys.search import (
    build_filter,
    extract_public_keys,
    plan_searches,
    validate_username,
)

KEY_ATTRIBUTES = ["sshPublicKey", "sshPublickey"]


def test_validate_username() -> None:
    for valid in ("bob", "Bob.Smith", "user_1", "svc-backup", "a", "1.2-3_"):
        validate_username(valid)

    for invalid in (
        "",
        "bob;drop",
        "bob smith",
        "bob)(uid=*",
        "*",
        "bob\n",
        "bob@example.org",
        "böb",
    ):
        with pytest.raises(InvalidAccountNameError):
            validate_username(invalid)


def test_build_filter() -> None:
    settings = parse_config("pam_filter objectClass=posixAccount\n")
    assert build_filter(settings, "bob") == (
        "&(objectClass=posixAccount)(uid=bob)"
    )
    assert build_filter({}, "bob") == "cn=*"


def test_plan_default_base() -> None:
    settings = parse_config("base dc=example,dc=org\n")
    assert plan_searches(settings, "bob") == [
        SearchRequest(
            base="ou=People,dc=example,dc=org",
            scope=None,
            filter="cn=*",
            attributes=KEY_ATTRIBUTES,
        )
    ]


def test_plan_search_bases() -> None:
    settings = parse_config(
        "base dc=example,dc=org\n"
        "pam_filter objectClass=posixAccount\n"
        "nss_base_passwd ou=People,dc=example,dc=org?one\n"
        "nss_base_passwd ou=Robots,dc=example,dc=org?\n"
        "nss_base_passwd ?SUB\n"
    )
    search_filter = "&(objectClass=posixAccount)(uid=bob)"
    assert plan_searches(settings, "bob") == [
        SearchRequest(
            base="ou=People,dc=example,dc=org",
            scope="one",
            filter=search_filter,
            attributes=KEY_ATTRIBUTES,
        ),
        SearchRequest(
            base="ou=Robots,dc=example,dc=org",
            scope=None,
            filter=search_filter,
            attributes=KEY_ATTRIBUTES,
        ),
        SearchRequest(
            base="",
            scope="SUB",
            filter=search_filter,
            attributes=KEY_ATTRIBUTES,
        ),
    ]


def test_plan_invalid_username() -> None:
    settings = parse_config("base dc=example,dc=org\n")
    with pytest.raises(InvalidAccountNameError):
        plan_searches(settings, "bob;drop")


def test_plan_invalid_scope() -> None:
    settings = parse_config(
        "base dc=example,dc=org\nnss_base_passwd ou=People,dc=x?deep\n"
    )
    with pytest.raises(InvalidSearchScopeError) as excinfo:
        plan_searches(settings, "bob")
    assert excinfo.value.scope == "deep"


def test_extract_public_keys() -> None:
    entries = [
        {"sshPublicKey": ["k1", "k2"]},
        {"cn": ["no keys"]},
        {"sshPublickey": ["k3"]},
        {},
        {"SSHPUBLICKEY": "k4"},
        {"sshPublicKey": [b"k5"]},
        {"sshPublicKey": []},
    ]
    assert extract_public_keys(entries) == ["k1", "k2", "k3", "k4", "k5"]
    assert extract_public_keys([]) == []
