"""
    Maps the document format to the type and the wire format
    of the parameter sent along the user command.

    The document is never validated here (e.g. XML well-formedness),
    the server is responsible of rejecting invalid documents.
"""
from typing import NamedTuple, Union

from psycopg.pq import Format

from .config import DocumentFormat

# pg_type oids. 0 lets the server infer the type from the command.
UNSPECIFIED_OID = 0
BYTEA_OID       = 17
XML_OID         = 142


class Binding(NamedTuple):
    oid: int
    wire_format: Format


class BoundParameter(NamedTuple):
    """
        The single parameter ($1) of the user command.
    """
    oid: int
    wire_format: Format
    value: Union[bytes, bytearray]

    @property
    def is_binary(self):
        return self.wire_format == Format.BINARY


FORMAT_BINDINGS = {
    DocumentFormat.XML:   Binding(XML_OID,         Format.BINARY),
    DocumentFormat.BYTEA: Binding(BYTEA_OID,       Format.BINARY),
    DocumentFormat.TEXT:  Binding(UNSPECIFIED_OID, Format.TEXT),
}


def bind(fmt, document):
    """
        Builds the parameter for document (a DocumentBuffer).
    """
    binding = FORMAT_BINDINGS[fmt]
    return BoundParameter(binding.oid, binding.wire_format, document.data)
