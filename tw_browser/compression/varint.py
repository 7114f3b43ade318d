"""Variable length integer codec used by the connless packets.

Format: ESDDDDDD EDDDDDDD EDDDDDDD ...

- E: the next byte belongs to the same integer
- S: sign of the integer (first byte only)
- D: data bits, least significant group first

Negative values are stored as their bitwise complement, so small
magnitudes of either sign take a single byte.
"""

from typing import Tuple

from ..errors import NoDataToUnpackError

# Enough to hold any 32 bit integer: 6 + 4 * 7 bits
MAX_BYTES_IN_VARINT = 5

MIN_INT32 = -(2 ** 31)
MAX_INT32 = 2 ** 31 - 1

_EXTEND_BIT = 0b1000_0000
_SIGN_BIT = 0b0100_0000
_FIRST_DATA_BITS = 0b0011_1111
_DATA_BITS = 0b0111_1111

# Consumed bytes are dropped from the buffer once this many have piled up
_COMPACT_THRESHOLD = 1024


class VarInt:
    """Buffer of packed integers with a one-directional read cursor.

    Packing always appends to the end of the buffer, unpacking consumes
    from the front. Consumed bytes are never revisited.
    """

    def __init__(self, data: bytes = b""):
        self._data = bytearray(data)
        self._offset = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "VarInt":
        """Create a buffer based on a preexisting byte sequence."""
        return cls(data)

    def __len__(self) -> int:
        return self.size()

    def size(self) -> int:
        """Number of bytes that have not been unpacked yet."""
        return len(self._data) - self._offset

    def bytes(self) -> bytes:
        """The unread part of the buffer."""
        return bytes(self._data[self._offset:])

    def clear(self) -> None:
        """Drop all content, read or unread."""
        self._data = bytearray()
        self._offset = 0

    def pack(self, value: int) -> None:
        """Append a 32 bit signed integer to the buffer.

        Raises:
            TypeError: If value is not an integer.
            ValueError: If value does not fit into 32 bits.
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"value to pack must be an int, got {type(value).__name__}")

        if value < MIN_INT32 or MAX_INT32 < value:
            raise ValueError(
                f"value to pack is out of bounds: {value}, "
                f"should be within range [{MIN_INT32}:{MAX_INT32}] (32bit)"
            )

        first = 0
        if value < 0:
            first = _SIGN_BIT
            value = ~value

        first |= value & _FIRST_DATA_BITS
        value >>= 6

        encoded = [first]
        while value != 0:
            encoded[-1] |= _EXTEND_BIT
            encoded.append(value & _DATA_BITS)
            value >>= 7

        self._data.extend(encoded)

    def unpack(self) -> int:
        """Consume and return the next integer of the buffer.

        Raises:
            NoDataToUnpackError: If the buffer is empty or ends in the
                middle of an integer. The buffer is left untouched.
        """
        data = self._data
        index = self._offset

        if index >= len(data):
            raise NoDataToUnpackError()

        sign = data[index] & _SIGN_BIT
        value = data[index] & _FIRST_DATA_BITS

        for i in range(MAX_BYTES_IN_VARINT - 1):
            if data[index] < _EXTEND_BIT:
                break
            index += 1
            if index >= len(data):
                raise NoDataToUnpackError("no data to unpack: truncated integer")
            value |= (data[index] & _DATA_BITS) << (6 + 7 * i)

        if sign:
            value = ~value

        self._offset = index + 1
        if self._offset >= _COMPACT_THRESHOLD:
            del self._data[:self._offset]
            self._offset = 0
        return value


def pack_int(value: int) -> bytes:
    """Encode a single integer."""
    v = VarInt()
    v.pack(value)
    return v.bytes()


def unpack_int(data: bytes) -> Tuple[int, bytes]:
    """Decode the first integer of data, returning it and the remainder."""
    v = VarInt.from_bytes(data)
    value = v.unpack()
    return value, v.bytes()
