"""Configuration for ldapkeys.

ldapkeys reads the same line-oriented configuration file as the NSS and PAM
LDAP modules, normally :file:`/etc/ldap.conf`.  Each line holds a setting
name, whitespace, and a value.  Blank lines and lines starting with ``#`` are
ignored.  Setting names are case-insensitive.

Most settings are simple strings, and later occurrences override earlier
ones.  ``uri`` holds a whitespace-separated list of server URLs, and
``nss_base_passwd`` may be given multiple times to search several bases.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)
from safir.logging import LogLevel

from .constants import (
    LDAP_TIMEOUT,
    MANDATORY_SETTINGS,
    START_TLS,
    TLS_CERT_POLICIES,
)
from .exceptions import (
    InvalidConfigValueError,
    MalformedConfigLineError,
    MissingConfigFileError,
    MissingMandatoryConfigError,
    UnreadableConfigError,
)
from .models.ldap import SearchBase

ConfigValue = str | list[str] | list[SearchBase]
"""Value of a single setting in the parsed configuration."""

ConfigMap = dict[str, ConfigValue]
"""Parsed configuration, keyed by lowercase setting name."""

_SEARCH_BASE_REGEX = re.compile(r"^([^?]*)\?(.*)$")

__all__ = [
    "Config",
    "ConfigMap",
    "ConfigValue",
    "get_search_bases",
    "get_setting",
    "parse_config",
    "parse_search_base",
]


def parse_search_base(value: str) -> SearchBase:
    """Parse the value of an ``nss_base_passwd`` setting.

    Parameters
    ----------
    value
        Value of the form ``base?scope``.  Either side may be empty.

    Returns
    -------
    SearchBase
        The parsed search base.  If the value contains no ``?``, neither the
        base nor the scope is set.
    """
    match = _SEARCH_BASE_REGEX.match(value)
    if not match:
        return SearchBase()
    base, scope = match.groups()
    return SearchBase(base=base or None, scope=scope or None)


def _set_scalar(settings: ConfigMap, key: str, value: str) -> None:
    settings[key] = value


def _set_uri(settings: ConfigMap, key: str, value: str) -> None:
    settings[key] = value.split()


def _add_search_base(settings: ConfigMap, key: str, value: str) -> None:
    bases = settings.get(key)
    if not isinstance(bases, list):
        bases = []
        settings[key] = bases
    bases.append(parse_search_base(value))


_SETTING_HANDLERS = {
    "uri": _set_uri,
    "nss_base_passwd": _add_search_base,
}
"""Per-setting storage policy.  All other settings use `_set_scalar`."""


def parse_config(text: str) -> ConfigMap:
    """Parse the contents of a configuration file.

    Parameters
    ----------
    text
        Contents of the configuration file.

    Returns
    -------
    ConfigMap
        Parsed settings.  ``uri`` is a list of strings, ``nss_base_passwd``
        is a list of `~ldapkeys.models.ldap.SearchBase`, and everything else
        is a string.

    Raises
    ------
    MalformedConfigLineError
        Raised if any line could not be split into a key and a value.  No
        partial configuration is returned.
    """
    settings: ConfigMap = {}
    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split(None, 1)
        if len(parts) != 2:
            raise MalformedConfigLineError(line_number, line)
        key = parts[0].lower()
        handler = _SETTING_HANDLERS.get(key, _set_scalar)
        handler(settings, key, parts[1])
    return settings


def get_setting(settings: ConfigMap, key: str) -> str | None:
    """Return a scalar setting, or `None` if it is not set."""
    value = settings.get(key)
    return value if isinstance(value, str) else None


def get_search_bases(settings: ConfigMap) -> list[SearchBase]:
    """Return the configured ``nss_base_passwd`` search bases, if any."""
    value = settings.get("nss_base_passwd")
    if not isinstance(value, list):
        return []
    return [b for b in value if isinstance(b, SearchBase)]


class Config(BaseModel):
    """Validated ldapkeys configuration.

    The raw settings are kept in ``settings`` for credential resolution and
    search planning.  The remaining fields are the settings needed to
    connect to LDAP and set up logging, converted to their proper types.
    """

    model_config = ConfigDict(frozen=True)

    settings: ConfigMap = Field(
        ...,
        title="Parsed settings",
        description="All settings from the configuration file",
        repr=False,
    )

    uri: list[str] = Field(
        ...,
        title="LDAP server URLs",
        description="Servers to try, in order, until one accepts a connection",
        min_length=1,
    )

    base: str = Field(
        ...,
        title="Base DN",
        description=(
            "Base DN of the directory, used to build the default search base"
            " if ``nss_base_passwd`` is not set"
        ),
    )

    timeout: float = Field(
        LDAP_TIMEOUT,
        title="Connection timeout",
        description="Timeout in seconds for connecting to the LDAP server",
        gt=0,
    )

    start_tls: bool = Field(
        False,
        title="Whether to use StartTLS",
        description="Set if the ``ssl`` setting is ``start_tls``",
    )

    tls_reqcert: str | None = Field(
        None,
        title="Server certificate policy",
        description=(
            "One of ``never``, ``allow``, ``try``, ``demand``, or ``hard``"
        ),
    )

    log_level: LogLevel = Field(
        LogLevel.INFO,
        title="Log level",
        description="Minimum severity of messages written to the log file",
    )

    log_file: Path | None = Field(
        None,
        title="Log file",
        description="Path of the log file, or the fallback path if not set",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, v: LogLevel | str) -> LogLevel | str:
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("tls_reqcert")
    @classmethod
    def _validate_tls_reqcert(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.lower()
        if v not in TLS_CERT_POLICIES:
            raise ValueError(f"unknown certificate policy {v}")
        return v

    @classmethod
    def from_config_map(cls, settings: ConfigMap) -> Self:
        """Build the configuration from parsed settings.

        Parameters
        ----------
        settings
            Settings as returned by `parse_config`.

        Returns
        -------
        Config
            Validated configuration.

        Raises
        ------
        MissingMandatoryConfigError
            Raised if ``base`` or ``uri`` is absent or empty.
        InvalidConfigValueError
            Raised if another setting has an invalid value.
        """
        missing = [k for k in MANDATORY_SETTINGS if not settings.get(k)]
        if missing:
            raise MissingMandatoryConfigError(missing)
        try:
            return cls(
                settings=settings,
                uri=settings["uri"],
                base=settings["base"],
                timeout=settings.get("timeout", LDAP_TIMEOUT),
                start_tls=get_setting(settings, "ssl") == START_TLS,
                tls_reqcert=get_setting(settings, "tls_reqcert"),
                log_level=settings.get("ldapkeys_loglevel", LogLevel.INFO),
                log_file=get_setting(settings, "ldapkeys_logfile"),
            )
        except ValidationError as e:
            raise InvalidConfigValueError(str(e)) from e

    @classmethod
    def from_text(cls, text: str) -> Self:
        """Parse and validate the contents of a configuration file."""
        return cls.from_config_map(parse_config(text))

    @classmethod
    def from_path(cls, path: Path) -> Self:
        """Load the configuration from a file.

        Parameters
        ----------
        path
            Path to the configuration file.

        Returns
        -------
        Config
            Validated configuration.

        Raises
        ------
        MissingConfigFileError
            Raised if the configuration file does not exist.
        UnreadableConfigError
            Raised if the configuration file exists but could not be read.
        MalformedConfigLineError
            Raised if a line of the file could not be parsed.
        MissingMandatoryConfigError
            Raised if ``base`` or ``uri`` is absent or empty.
        InvalidConfigValueError
            Raised if another setting has an invalid value.
        """
        try:
            with path.open("r") as f:
                text = f.read()
        except FileNotFoundError as e:
            raise MissingConfigFileError(path) from e
        except OSError as e:
            raise UnreadableConfigError(path, str(e.strerror)) from e
        return cls.from_text(text)
