"""Test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
from structlog.stdlib import BoundLogger

from ldapkeys.config import Config

from .support.config import load_config
from .support.ldap import MockLDAP, patch_ldap


@pytest.fixture(autouse=True)
def environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the command-line interface away from system files.

    The secret file defaults to a path in the temporary directory that
    doesn't exist.
    """
    monkeypatch.delenv("LDAPKEYS_CONFIG_PATH", raising=False)
    monkeypatch.setenv("LDAPKEYS_SECRET_PATH", str(tmp_path / "ldap.secret"))


@pytest.fixture
def config() -> Config:
    """Return the basic test configuration."""
    return load_config("basic")


@pytest.fixture
def logger() -> BoundLogger:
    return structlog.get_logger("ldapkeys")


@pytest.fixture
def mock_ldap() -> Iterator[MockLDAP]:
    """Replace the bonsai client with a mock."""
    yield from patch_ldap()
