"""Command-line interface for SSH public key lookup."""

from __future__ import annotations

from pathlib import Path

import click
import structlog

from .config import Config
from .constants import CONFIG_PATH, SECRET_PATH
from .credentials import read_secret
from .exceptions import LdapKeysError
from .factory import Factory
from .logging import setup_file_logging

__all__ = ["main"]


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(
    None, "-v", "--version", package_name="ldapkeys", message="%(version)s"
)
@click.argument("username")
@click.option(
    "--config-path",
    envvar="LDAPKEYS_CONFIG_PATH",
    type=click.Path(path_type=Path),
    default=CONFIG_PATH,
    show_default=True,
    help="LDAP client configuration file.",
)
@click.option(
    "--secret-path",
    envvar="LDAPKEYS_SECRET_PATH",
    type=click.Path(path_type=Path),
    default=SECRET_PATH,
    show_default=True,
    help="File containing the bind password.",
)
def main(username: str, *, config_path: Path, secret_path: Path) -> None:
    """Print the SSH public keys of USERNAME stored in LDAP.

    Intended for use as the AuthorizedKeysCommand of an SSH server.  Keys
    are printed one per line.
    """
    try:
        config = Config.from_path(config_path)
    except LdapKeysError as e:
        raise click.ClickException(str(e)) from e
    setup_file_logging(config.log_file, config.log_level)
    logger = structlog.get_logger("ldapkeys")
    logger.debug("Looking up public keys", user=username)

    try:
        secret = read_secret(secret_path)
        factory = Factory(config, secret=secret, logger=logger)
        key_service = factory.create_key_service()
        for key in key_service.get_keys(username):
            click.echo(key)
    except LdapKeysError as e:
        logger.error("Public key lookup failed", user=username, error=str(e))
        raise click.ClickException(str(e)) from e
