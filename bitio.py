from typing import BinaryIO, Union

END_OF_STREAM = -1 # returned by read_bit() once every byte has been consumed


class BitReader:
    """
    Reads single bits from bytes or a binary file object, most significant bit first.
    """
    def __init__(self, source: Union[bytes, bytearray, BinaryIO]):
        if isinstance(source, (bytes, bytearray, memoryview)):
            self._data = bytes(source)
            self._stream = None
        else:
            self._data = b""
            self._stream = source
        self._pos = 0
        self._byte = 0
        self._bits_left = 0

    def _next_byte(self) -> bool:
        if self._stream is not None:
            chunk = self._stream.read(1)
            if not chunk:
                return False
            self._byte = chunk[0]
        else:
            if self._pos >= len(self._data):
                return False
            self._byte = self._data[self._pos]
            self._pos += 1
        self._bits_left = 8
        return True

    def read_bit(self) -> int:
        if self._bits_left == 0 and not self._next_byte():
            return END_OF_STREAM
        self._bits_left -= 1
        return (self._byte >> self._bits_left) & 1


class BitWriter:
    """
    Packs '0'/'1' characters into bytes, most significant bit first.
    The last byte is padded with 0 bits.
    """
    def __init__(self):
        self._out = bytearray()
        self._acc = 0
        self._acc_bits = 0

    def write_bit(self, bit: int) -> None:
        self._acc = (self._acc << 1) | (1 if bit else 0)
        self._acc_bits += 1
        if self._acc_bits == 8:
            self._out.append(self._acc & 0xFF)
            self._acc = 0
            self._acc_bits = 0

    def write_bits(self, bitstring: str) -> None:
        for ch in bitstring:
            if ch not in "01":
                raise ValueError(f"not a bit: {ch!r}")
            self.write_bit(ch == "1")

    @property
    def pad_bits(self) -> int:
        return (8 - self._acc_bits) % 8

    def getvalue(self) -> bytes:
        if self._acc_bits == 0:
            return bytes(self._out)
        return bytes(self._out) + bytes([(self._acc << (8 - self._acc_bits)) & 0xFF])
