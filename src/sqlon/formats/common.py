"""Helpers shared by the text codecs."""

import math
import re

from ..models import Database, ForeignKey
from ..types import ConversionError, ErrorType

FK_SUFFIX = "_id"

_INT_TOKEN = re.compile(r"[+-]?\d+")
_DECIMAL_TOKEN = re.compile(r"[+-]?(\d+\.\d*|\.\d+)([eE][+-]?\d+)?")


def infer_foreign_keys(database: Database) -> None:
    """
    Attach foreign keys guessed from column names.

    A column ``<X>_id`` is taken to reference ``<X>.id`` whenever a table
    named ``<X>`` exists. Nothing checks that the referenced rows exist.
    """
    names = set(database.table_names())

    for table in database.tables:
        for column in table.columns:
            if not column.name.endswith(FK_SUFFIX):
                continue
            referenced = column.name[:-len(FK_SUFFIX)]
            if referenced in names:
                table.add_foreign_key(ForeignKey(column.name, referenced, "id"))


def format_decimal(number: float) -> str:
    """
    Format a float in shortest round-trip form that always reads back as a decimal.

    Finite values always contain a ``.``; non-finite values are written as
    ``inf``, ``-inf`` or ``nan``.
    """
    if math.isnan(number):
        return "nan"
    if math.isinf(number):
        return "inf" if number > 0 else "-inf"

    text = repr(float(number))
    if "." in text:
        return text
    mantissa, _, exponent = text.partition("e")
    return f"{mantissa}.0e{exponent}" if exponent else f"{mantissa}.0"


def is_int_token(token: str) -> bool:
    return _INT_TOKEN.fullmatch(token) is not None


def is_decimal_token(token: str) -> bool:
    return _DECIMAL_TOKEN.fullmatch(token) is not None or token.lower() in ("inf", "-inf", "+inf", "nan")


def decode_text(data: bytes, format_name: str) -> str:
    """Decode codec input as UTF-8, rejecting invalid byte sequences."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ConversionError(f"{format_name} input is not valid UTF-8: {e}",
                              ErrorType.MALFORMED_INPUT) from e
