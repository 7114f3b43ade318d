import random

import pytest

from tw_browser.compression.varint import MAX_BYTES_IN_VARINT, VarInt, pack_int, unpack_int
from tw_browser.errors import NoDataToUnpackError


class TestPack:
    @pytest.mark.parametrize(
        "value,encoded",
        [
            (0, b"\x00"),
            (1, b"\x01"),
            (63, b"\x3f"),
            (64, b"\x80\x01"),
            (-1, b"\x40"),
            (-64, b"\x7f"),
            (-65, b"\xc0\x01"),
        ],
    )
    def test_known_encodings(self, value, encoded):
        assert pack_int(value) == encoded

    def test_pack_appends(self):
        v = VarInt(b"\xff")
        v.pack(1)
        assert v.bytes() == b"\xff\x01"

    @pytest.mark.parametrize("value", [2 ** 31 - 1, -(2 ** 31)])
    def test_extremes_use_max_length(self, value):
        assert len(pack_int(value)) == MAX_BYTES_IN_VARINT

    @pytest.mark.parametrize("value", [2 ** 31, -(2 ** 31) - 1, 2 ** 40])
    def test_out_of_range_is_rejected(self, value):
        v = VarInt()
        with pytest.raises(ValueError, match="out of bounds"):
            v.pack(value)
        assert v.size() == 0

    @pytest.mark.parametrize("value", [1.0, "1", True])
    def test_non_int_is_rejected(self, value):
        with pytest.raises(TypeError):
            VarInt().pack(value)


class TestUnpack:
    @pytest.mark.parametrize("value", [0, -1, 2 ** 31 - 1, -(2 ** 31)])
    def test_boundaries_round_trip(self, value):
        v = VarInt()
        v.pack(value)
        assert v.unpack() == value
        assert v.size() == 0

    def test_random_values_round_trip(self):
        rng = random.Random(7)
        for _ in range(500):
            value = rng.randint(-(2 ** 31), 2 ** 31 - 1)
            encoded = pack_int(value)
            v = VarInt.from_bytes(encoded + b"rest")
            assert v.unpack() == value
            assert v.bytes() == b"rest"

    def test_multiple_values_in_order(self):
        v = VarInt()
        v.pack(1234567)
        v.pack(-42)
        assert v.unpack() == 1234567
        assert v.unpack() == -42
        assert v.size() == 0
        assert len(v) == 0

    def test_empty_buffer(self):
        v = VarInt()
        with pytest.raises(NoDataToUnpackError, match="no data to unpack"):
            v.unpack()
        assert v.bytes() == b""

    def test_exhausted_buffer(self):
        v = VarInt(b"\x05")
        assert v.unpack() == 5
        with pytest.raises(NoDataToUnpackError):
            v.unpack()

    def test_truncated_value_leaves_buffer_untouched(self):
        v = VarInt(b"\x80\x81")
        with pytest.raises(NoDataToUnpackError):
            v.unpack()
        assert v.bytes() == b"\x80\x81"

    def test_reads_at_most_five_bytes(self):
        # continuation flag on the fifth byte is ignored
        v = VarInt(b"\x80\x80\x80\x80\x81\x07")
        assert v.unpack() == 1 << 27
        assert v.bytes() == b"\x07"

    def test_unpack_int_returns_rest(self):
        assert unpack_int(b"\x80\x01\x02") == (64, b"\x02")

    def test_clear(self):
        v = VarInt(b"\x01\x02")
        v.unpack()
        v.clear()
        assert v.size() == 0
        v.pack(3)
        assert v.unpack() == 3

    def test_consumed_bytes_are_dropped(self):
        v = VarInt()
        for i in range(5000):
            v.pack(i)
            v.pack(-i)
            assert v.unpack() == i
            assert v.unpack() == -i
            assert len(v._data) < 1024 + 2 * MAX_BYTES_IN_VARINT

        v.pack(7)
        assert v.bytes() == b"\x07"
        assert v.unpack() == 7
