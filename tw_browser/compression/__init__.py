"""Compression module - variable length integers."""

from .varint import MAX_BYTES_IN_VARINT, VarInt, pack_int, unpack_int

__all__ = [
    "MAX_BYTES_IN_VARINT",
    "VarInt",
    "pack_int",
    "unpack_int",
]
