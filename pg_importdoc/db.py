"""
    Gives an unified connection interface to the database.

    The connection is opened through a SQLAlchemy engine, but the
    pipeline works with the raw psycopg connection: the document is
    sent with a single libpq PQexecParams call, so the user command
    keeps its own $1 placeholder and the parameter keeps the exact
    type/format chosen by the binder.
"""
import getpass
import logging
from contextlib import contextmanager

import psycopg
import sqlalchemy
from psycopg import sql
from psycopg.pq import ExecStatus
from sqlalchemy.pool import NullPool

from .config import PasswordPolicy
from .errors import ConnectionFailed, ExecutionFailed

_logger = logging.getLogger(__name__)


class CredentialCache:
    """
        Holds the password of the current process.

        The password is requested at most once. Later connections
        made with the same cache reuse it, even if the server
        rejects it.
    """
    def __init__(self, prompt = getpass.getpass):
        self._prompt  = prompt
        self.password = None

    @property
    def has_password(self):
        return self.password is not None

    def ask(self):
        if self.password is None:
            self.password = self._prompt('Password: ')
        return self.password


def connection_url(config, password = None):
    """
        Builds the url of the connection described by config (a RunConfig).
    """
    return sqlalchemy.URL.create(
        drivername = 'postgresql+psycopg',
        username   = config.user,
        password   = password,
        host       = config.host,
        port       = int(config.port) if config.port else None,
        database   = config.database,
        query      = {'fallback_application_name': config.progname},
    )


def needs_password(err):
    """
        Whether a failed connection attempt was rejected because the
        server requested a password and none was supplied.
    """
    orig   = getattr(err, 'orig', err)
    pgconn = getattr(orig, 'pgconn', None)
    if pgconn is not None:
        return bool(pgconn.needs_password)
    return 'no password supplied' in str(orig)


def status_name(status):
    """
        libpq name of a result status: ExecStatus.TUPLES_OK -> PGRES_TUPLES_OK
    """
    return f'PGRES_{ExecStatus(status).name}'


def result_error(connection, result):
    """
        Server message of result, decoded with the client encoding.
        Encodings without a python codec (e.g. EUC_TW) fall back to utf-8.
    """
    try:
        encoding = connection.info.encoding
    except psycopg.NotSupportedError:
        encoding = 'utf-8'
    return result.error_message.decode(encoding, 'replace').strip()


def open_engine(config, credentials):
    """
        Opens a connection, asking for a password and retrying once
        when the server requires it and the policy allows prompting.

        returns (engine, connection)
    """
    if config.password_policy is PasswordPolicy.ALWAYS:
        credentials.ask()

    while True:
        engine = sqlalchemy.create_engine(
            connection_url(config, credentials.password),
            poolclass       = NullPool,
            isolation_level = 'AUTOCOMMIT',
        )
        try:
            return engine, engine.connect()
        except sqlalchemy.exc.DBAPIError as err:
            engine.dispose()

            retry = (
                needs_password(err)
                and not credentials.has_password
                and config.password_policy is not PasswordPolicy.NEVER)

            if not retry:
                reason = str(getattr(err, 'orig', err)).strip()
                raise ConnectionFailed(
                    f'Connection to database "{config.database}" failed:\n{reason}') from err

            _logger.info(f'Server requested a password for database "{config.database}"')
            credentials.ask()


@contextmanager
def connect(config, credentials):
    """
        Provides the raw psycopg connection used by the import pipeline.
        The connection is closed on exit, even when the pipeline fails.

        credentials: CredentialCache shared by the connections of this process.
    """
    engine, connection = open_engine(config, credentials)
    try:
        with connection:
            if config.verbose:
                print(f'Connected to database "{config.database}"')
                print(f'Import {config.format.value} document')

            yield connection.connection.driver_connection
    finally:
        engine.dispose()


def set_client_encoding(connection, encoding, verbose = False):
    """
        Sets the encoding of the text sent by the client for
        the current session.

        Raises ExecutionFailed when the server rejects the encoding
        or the command can't be sent.
    """
    try:
        command = sql.SQL('SET client_encoding TO {}').format(sql.Literal(encoding)).as_bytes(None)
    except (psycopg.Error, UnicodeError) as err:
        raise ExecutionFailed(status_name(ExecStatus.FATAL_ERROR), str(err)) from err

    if verbose:
        print(f'execute command: {command.decode(errors = "replace")}')

    try:
        result = connection.pgconn.exec_(command)
    except psycopg.Error as err:
        raise ExecutionFailed(status_name(ExecStatus.FATAL_ERROR), str(err)) from err

    try:
        status = status_name(result.status)
        if verbose:
            print(f'Set encoding result status: {status}')

        if result.status != ExecStatus.COMMAND_OK:
            raise ExecutionFailed(status, result_error(connection, result))
    finally:
        result.clear()

    _logger.info(f'Client encoding set to {encoding}')
