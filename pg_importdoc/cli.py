import argparse

from .config import (
    PROGNAME,
    VERSION,
    DocumentFormat,
    PasswordPolicy,
    RunConfig,
    load_settings,
)
from .errors import ConfigError


class ImportDocParser(argparse.ArgumentParser):
    """
        Reports invalid usage with a ConfigError instead of exiting,
        so the caller decides the exit status.
    """
    def error(self, message):
        raise ConfigError(message)


def check_port(value):
    try:
        port = int(value)
    except (TypeError, ValueError):
        port = 0
    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError(f'invalid port number: {value}')
    return str(port)


def document_format(value):
    try:
        return DocumentFormat(value)
    except ValueError:
        raise argparse.ArgumentTypeError('only XML, TEXT or BYTEA types are supported')


def cli_parser():
    # NOTE: -h is the database host, so the default help flags can't be used.
    parser = ImportDocParser(
        prog        = PROGNAME,
        usage       = '%(prog)s [OPTION]... DBNAME',
        description = 'Imports XML, TEXT or BYTEA documents to PostgreSQL.',
        add_help    = False,
    )
    parser.add_argument(
        'database',
        metavar = 'DBNAME',
        nargs   = '?',
        help    = 'name of the target database',
    )
    parser.add_argument(
        '-V',
        '--version',
        action  = 'version',
        version = f'%(prog)s {VERSION}',
        help    = 'output version information, then exit',
    )
    parser.add_argument(
        '-?',
        '--help',
        action = 'help',
        help   = 'show this help, then exit',
    )
    parser.add_argument(
        '-E',
        metavar = 'ENCODING',
        dest    = 'encoding',
        help    = 'import text data in encoding ENCODING',
    )
    parser.add_argument(
        '-v',
        action = 'store_true',
        dest   = 'verbose',
        help   = 'write a lot of progress messages',
    )
    parser.add_argument(
        '-c',
        metavar = 'COMMAND',
        dest    = 'command',
        help    = 'INSERT, UPDATE command with parameter',
    )
    parser.add_argument(
        '-f',
        metavar = 'NAME',
        dest    = 'filename',
        help    = 'file NAME of imported document, default is stdin',
    )
    parser.add_argument(
        '-t',
        metavar = 'TYPE',
        dest    = 'format',
        type    = document_format,
        default = DocumentFormat.TEXT,
        help    = 'type specification [ XML | TEXT | BYTEA ], default is TEXT',
    )

    connection = parser.add_argument_group('Connection options')
    connection.add_argument(
        '-h',
        metavar = 'HOSTNAME',
        dest    = 'host',
        help    = 'database server host or socket directory',
    )
    connection.add_argument(
        '-p',
        metavar = 'PORT',
        dest    = 'port',
        type    = check_port,
        help    = 'database server port',
    )
    connection.add_argument(
        '-U',
        metavar = 'USERNAME',
        dest    = 'user',
        help    = 'user name to connect as',
    )
    connection.add_argument(
        '-w',
        action  = 'store_const',
        const   = PasswordPolicy.NEVER,
        dest    = 'password_policy',
        default = PasswordPolicy.DEFAULT,
        help    = 'never prompt for password',
    )
    connection.add_argument(
        '-W',
        action = 'store_const',
        const  = PasswordPolicy.ALWAYS,
        dest   = 'password_policy',
        help   = 'force password prompt',
    )
    return parser


def parse_config(argv = None, settings = None):
    """
        Builds the RunConfig of this invocation. Flags given in
        the command line win over the values of settings.

        Raises ConfigError on invalid usage. Nothing is connected
        or opened here.
    """
    args = cli_parser().parse_args(argv)

    if args.command is None:
        raise ConfigError('missing required argument: -c COMMAND')

    if args.database is None:
        raise ConfigError('missing required argument: database name')

    settings = settings or load_settings()

    port = args.port
    if port is None and settings.port:
        try:
            port = check_port(settings.port)
        except argparse.ArgumentTypeError as err:
            raise ConfigError(str(err)) from err

    return RunConfig(
        database        = args.database,
        command         = args.command,
        format          = args.format,
        host            = args.host or settings.host,
        port            = port,
        user            = args.user or settings.user,
        password_policy = args.password_policy,
        encoding        = args.encoding,
        filename        = None if args.filename in (None, '-') else args.filename,
        verbose         = args.verbose,
    )
