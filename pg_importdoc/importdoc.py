import os
import sys
import logging

from dataclasses import dataclass
from typing import Optional

import psycopg
from psycopg.pq import ExecStatus

from .binder import bind
from .cli import parse_config
from .config import PROGNAME, DocumentFormat, configure_logging
from .db import CredentialCache, connect, result_error, set_client_encoding, status_name
from .errors import ConfigError, ExecutionFailed, ImportDocError
from .io import load_document

_logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """
        Outcome of the user command.

        value: first column of the first row, None when the command
            returned no rows or the value is NULL.
        error: message sent by the server, if any.
    """
    status: str
    value: Optional[bytes] = None
    ntuples: int = 0
    nfields: int = 0
    error: Optional[str] = None

    @property
    def returns_rows(self):
        return self.status == status_name(ExecStatus.TUPLES_OK)

    @property
    def succeeded(self):
        return self.status in (status_name(ExecStatus.COMMAND_OK), status_name(ExecStatus.TUPLES_OK))


def execute(connection, command, parameter, verbose = False):
    """
        Runs command (bytes, as given in the command line) with
        parameter (a BoundParameter) as $1.

        Raises ExecutionFailed when the server doesn't complete the command.
    """
    try:
        result = connection.pgconn.exec_params(
            command,
            [parameter.value],
            [parameter.oid],
            [parameter.wire_format],
        )
    except psycopg.Error as err:
        raise ExecutionFailed(status_name(ExecStatus.FATAL_ERROR), str(err)) from err

    try:
        status = status_name(result.status)
        if verbose:
            print(f'Result status: {status}')

        value = None
        if result.status == ExecStatus.TUPLES_OK and result.ntuples > 0 and result.nfields > 0:
            value = result.get_value(0, 0)

        outcome = ExecutionResult(
            status,
            value,
            result.ntuples,
            result.nfields,
            result_error(connection, result) or None,
        )
    finally:
        result.clear()

    if not outcome.succeeded:
        raise ExecutionFailed(status, outcome.error, outcome)

    return outcome


def report(result, out = None):
    """
        Prints the first column of the first row returned by the command.
    """
    if not result.returns_rows:
        return

    if result.ntuples > 1 or result.nfields > 1:
        _logger.warning('only first column of first row is displayed')

    if result.value is not None:
        if out is None:
            sys.stdout.flush()
            out = sys.stdout.buffer
        out.write(result.value + b'\n')
        out.flush()


def import_document(config, credentials = None, stdin = None, out = None):
    """
        Imports the document described by config (a RunConfig).

        credentials: CredentialCache reused between calls of the same process.
        stdin: binary stream read when config has no filename.
        out: binary stream where the result value is written (stdout by default).
    """
    credentials = credentials if credentials is not None else CredentialCache()

    encoding = config.encoding
    if encoding and config.format is not DocumentFormat.TEXT:
        _logger.warning('encoding is used only for type TEXT')
        encoding = None

    # the command is sent with the bytes it had in the command line,
    # whatever client encoding is set below
    command = os.fsencode(config.command)

    with connect(config, credentials) as connection:
        if encoding:
            set_client_encoding(connection, encoding, config.verbose)

        document = load_document(config.filename, stdin)
        if config.verbose:
            print(f'Buffered data of size: {len(document)}')

        parameter = bind(config.format, document)
        result    = execute(connection, command, parameter, config.verbose)

        report(result, out)
        return result


def main(argv = None):
    """
        main routine. Coordinates all the stages into a single function.

        returns the exit status of the process.
    """
    try:
        config = parse_config(argv)
    except ConfigError as err:
        sys.stderr.write(f'{PROGNAME}: {err}\n')
        sys.stderr.write(f'Try "{PROGNAME} --help" for more information.\n')
        return 1

    configure_logging(config.verbose)

    try:
        import_document(config)
    except ImportDocError as err:
        _logger.error(str(err))
        return 1

    return 0
