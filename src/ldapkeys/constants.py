"""Constants for ldapkeys."""

__all__ = [
    "CONFIG_PATH",
    "DEFAULT_FILTER",
    "FALLBACK_LOG_PATH",
    "LDAP_TIMEOUT",
    "MANDATORY_SETTINGS",
    "PEOPLE_RDN",
    "PUBLIC_KEY_ATTRIBUTES",
    "SEARCH_SCOPES",
    "SECRET_PATH",
    "START_TLS",
    "TLS_CERT_POLICIES",
    "TLS_OPTIONS",
    "USERNAME_REGEX",
]

CONFIG_PATH = "/etc/ldap.conf"
"""Default configuration path."""

SECRET_PATH = "/etc/ldap.secret"
"""Default path to the file holding the bind password."""

FALLBACK_LOG_PATH = "/tmp/ldapkeys.log"
"""Log file used if the configured log file cannot be opened."""

LDAP_TIMEOUT = 10.0
"""Default timeout (in seconds) for connecting to the LDAP server.

Only the initial connection (including StartTLS and bind) is subject to this
timeout.  Searches are not.
"""

MANDATORY_SETTINGS = ("base", "uri")
"""Configuration settings that must be present and non-empty."""

START_TLS = "start_tls"
"""Value of the ``ssl`` setting that enables StartTLS."""

PEOPLE_RDN = "ou=People"
"""RDN prepended to ``base`` when no ``nss_base_passwd`` is configured."""

DEFAULT_FILTER = "cn=*"
"""Search filter used when ``pam_filter`` is not set."""

PUBLIC_KEY_ATTRIBUTES = ("sshPublicKey", "sshPublickey")
"""Spellings of the public key attribute requested from and accepted in LDAP.

Both are requested in searches.  Result attributes are matched against these
case-insensitively.
"""

SEARCH_SCOPES = {
    "base": "BASE",
    "one": "ONELEVEL",
    "onelevel": "ONELEVEL",
    "sub": "SUBTREE",
    "subtree": "SUBTREE",
}
"""Recognized scope names in ``nss_base_passwd`` (case-insensitive).

Each maps to the name of the corresponding ``bonsai.LDAPSearchScope``.
"""

TLS_OPTIONS = {
    "tls_cacertdir": "capath",
    "tls_cert": "clientcert",
    "tls_key": "clientkey",
    "tls_cacertfile": "cafile",
}
"""Mapping of TLS configuration settings to TLS option names."""

TLS_CERT_POLICIES = ("never", "allow", "try", "demand", "hard")
"""Recognized values of ``tls_reqcert``."""

# The following constants are used for field validation.

USERNAME_REGEX = "^[A-Za-z0-9._-]+$"
"""Regex matching all valid account names."""
