"""
    Groups the configuration used by the other python modules
    defined in this package.

    A run is described by a RunConfig instance, which is built once
    from the command line (see cli.py) and never mutated afterwards.

    Default connection settings can be loaded from files stored in a
    directory with the following structure:
        {credentials}/
            {staging}/
                .postgres.host
                .postgres.port
                .postgres.user

    Where the fragment {credentials} is a path that can be set by the
    environment variable $PG_IMPORTDOC_CONFIG_PATH. It's default value
    is 'credentials/'. The {staging} folder can be set by the environment
    variable $PG_IMPORTDOC_STAGING or by a file contained in $PWD/.staging.
    When {staging} is not set, the value 'dev' is assumed.

    Missing files leave the setting unset, so libpq applies its own
    defaults (PGHOST, PGPORT, unix sockets...). Passwords are never
    read from this directory.
"""

import os
import enum
import logging

from dataclasses import dataclass
from typing import Optional

LOG_FORMAT = '[%(process)d] %(levelname)s %(filename)s: %(message)s'

PROGNAME = 'pg_importdoc'
VERSION  = '0.1.0'


class DocumentFormat(enum.Enum):
    """
        Format of the imported document. Determines the type
        and the wire format of the bound parameter.
    """
    XML   = 'XML'
    TEXT  = 'TEXT'
    BYTEA = 'BYTEA'


class PasswordPolicy(enum.Enum):
    DEFAULT = 'default'     # prompt only when the server asks for it
    NEVER   = 'never'       # -w
    ALWAYS  = 'always'      # -W


@dataclass(frozen = True)
class Settings:
    """
        Connection defaults loaded from the credentials directory.
    """
    host: Optional[str] = None
    port: Optional[str] = None
    user: Optional[str] = None


@dataclass(frozen = True)
class RunConfig:
    """
        Immutable configuration of a single invocation.

        filename: when None, the document is read from stdin.
        encoding: only meaningful for DocumentFormat.TEXT.
    """
    database: str
    command: str
    format: DocumentFormat = DocumentFormat.TEXT
    host: Optional[str] = None
    port: Optional[str] = None
    user: Optional[str] = None
    password_policy: PasswordPolicy = PasswordPolicy.DEFAULT
    encoding: Optional[str] = None
    filename: Optional[str] = None
    verbose: bool = False
    progname: str = PROGNAME

    @property
    def use_stdin(self):
        return self.filename is None


def extract_secret(path, default = None):
    """
        Extract the contents of a file or return a default value when the path doesn't exist.
    """
    try:
        with open(path) as file:
            return file.read().strip() or default
    except FileNotFoundError:
        return default


def resolve_staging(environ = None, cwd = None):
    """
        Staging Resolution:
            1. Prioritize the staging from the environment variable $PG_IMPORTDOC_STAGING.
            2. If no env. variable is set, try to load the staging from the file $PWD/.staging.
            3. Fallback to 'dev'.
    """
    environ = os.environ if environ is None else environ
    staging = environ.get('PG_IMPORTDOC_STAGING')
    if not staging:
        staging_path = os.path.join(cwd or os.getcwd(), '.staging')
        staging = extract_secret(staging_path, 'dev')
    return staging


def load_settings(environ = None, cwd = None):
    """
        Loads the connection defaults of the current staging.
    """
    environ     = os.environ if environ is None else environ
    config_path = environ.get('PG_IMPORTDOC_CONFIG_PATH', 'credentials')
    staging     = resolve_staging(environ, cwd)

    base = os.path.join(cwd or os.getcwd(), config_path, staging)

    return Settings(
        host = extract_secret(os.path.join(base, '.postgres.host')),
        port = extract_secret(os.path.join(base, '.postgres.port')),
        user = extract_secret(os.path.join(base, '.postgres.user')),
    )


def configure_logging(verbose = False):
    """
        Diagnostics always go to stderr, so stdout only carries
        the result value (and the verbose progress lines).
    """
    logging.basicConfig(
        format = LOG_FORMAT,
        level  = logging.INFO if verbose else logging.WARNING)
