"""
    Errors raised by the import pipeline. Every one of them is terminal:
    main() reports the message and exits with a non-zero status.
"""


class ImportDocError(Exception):
    """Base class of the terminal errors of this package."""


class ConfigError(ImportDocError):
    """Raised when the command line or the configuration is invalid."""


class ConnectionFailed(ImportDocError):
    """Raised when the connection can't be established."""


class InputError(ImportDocError):
    """Raised when the document can't be opened or read."""


class DocumentTooLarge(InputError):
    """Raised when the document reaches the maximum allowed size."""


class OutOfMemory(InputError):
    """Raised when the document buffer can't be grown."""


class ExecutionFailed(ImportDocError):
    """
        Raised when the server doesn't complete a command.

        status: name of the libpq result status (e.g. PGRES_FATAL_ERROR).
        result: ExecutionResult of the failed command, when there is one.
    """
    def __init__(self, status, message, result = None):
        super().__init__(f'Unexpected result status: {status}\nError: {message}')
        self.status = status
        self.error  = message
        self.result = result
