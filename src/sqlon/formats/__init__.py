"""Format codecs for JSON, SQLON and SQL."""

from .common import infer_foreign_keys
from .json_codec import JSONCodec
from .sql_codec import SQLCodec
from .sqlon_codec import SQLONCodec

__all__ = [
    "JSONCodec",
    "SQLCodec",
    "SQLONCodec",
    "infer_foreign_keys",
]
