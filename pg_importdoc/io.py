"""
    Creates an unified interface to access to input streams easily
    and buffers the imported document in memory.

    The whole document is kept in memory before it's sent to the
    server, so the size of the input is capped by MAX_DOCUMENT_SIZE.
"""
import sys
import os
import stat
import logging

from contextlib import contextmanager

from .errors import InputError, DocumentTooLarge, OutOfMemory

_logger = logging.getLogger(__name__)

CHUNK_SIZE        = 1024
MAX_DOCUMENT_SIZE = 1024 * 1024 * 1024   # 1 GiB


class DocumentBuffer:
    """
        Fully read content of the input source.
    """
    __slots__ = ('data',)

    def __init__(self, data = b''):
        self.data = data

    def __len__(self):
        return len(self.data)

    def __repr__(self):
        return f'DocumentBuffer(<{len(self)} bytes>)'


def canonicalize_path(path):
    return os.path.realpath(os.path.expanduser(path))


@contextmanager
def manage_input(path = None, stdin = None):
    """
        Unified interface to access to binary stream contents.

        if path is not set (or is '-'), returns the stdin byte stream.
        Regular files reaching MAX_DOCUMENT_SIZE are rejected before
        reading anything.
    """
    if not path or path == '-':
        yield stdin if stdin is not None else sys.stdin.buffer
        return

    path = canonicalize_path(path)
    try:
        file = open(path, 'rb')
    except OSError as err:
        raise InputError(f"Unable to open '{path}': {err.strerror}") from err

    with file:
        try:
            fst = os.fstat(file.fileno())
        except OSError as err:
            raise InputError(err.strerror) from err

        if stat.S_ISREG(fst.st_mode) and fst.st_size >= MAX_DOCUMENT_SIZE:
            raise DocumentTooLarge(f"'{path}' is too big (1GB or more)")

        yield file


def read_chunks(stream, name, chunk_size = CHUNK_SIZE):
    """
        Reads the stream until EOF in chunks of chunk_size bytes.
    """
    while True:
        try:
            chunk = stream.read(chunk_size)
        except OSError as err:
            raise InputError(f"Cannot read data '{name}': {err.strerror or err}") from err
        if not chunk:
            return
        yield chunk


def load_document(path = None, stdin = None, limit = None):
    """
        Reads the whole input source into a DocumentBuffer.

        path: file to read. stdin is used when it's None or '-'.
        limit: maximum size of the document. Also applies to stdin and
            non regular files, which can't be checked before reading.
    """
    limit = MAX_DOCUMENT_SIZE if limit is None else limit
    name = path if path and path != '-' else '<stdin>'
    data = bytearray()

    with manage_input(path, stdin) as stream:
        for chunk in read_chunks(stream, name):
            if len(data) + len(chunk) >= limit:
                raise DocumentTooLarge(f"'{name}' is too big (1GB or more)")
            try:
                data += chunk
            except MemoryError as err:
                raise OutOfMemory('Out of memory') from err

    document = DocumentBuffer(data)
    _logger.info(f'Loaded {len(document)} bytes from {name}')
    return document
