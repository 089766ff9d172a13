"""
bittape Bit Codec

Converts between byte strings and ordered bit sequences. Every byte becomes
8 bits, least-significant bit first, in the order the bytes appear.

Two views of a bit sequence coexist in the machine:
- Stream: read once, left to right (the program's input), see BitReader
- Sequence: appended to in program order (the program's output), see BitStream

Usage:
    bits = encode(b"A")          # [True, False, False, False, False, False, True, False]
    decode(bits)                 # b"A"
    decode(bits[:3])             # b"\\x01"  (short trailing group is zero-padded)
"""

from __future__ import annotations

from typing import Iterable, Union

BITS_PER_BYTE = 8

BytesLike = Union[bytes, bytearray, memoryview]


class BitStream(list):
    """An ordered, growable sequence of bits (``bool``).

    Insertion order is encoding order: bit ``i`` of byte ``n`` lives at
    index ``n * 8 + i``.
    """

    def __init__(self, bits: Iterable[bool] = ()) -> None:
        super().__init__(bool(b) for b in bits)

    def push_byte(self, value: int) -> None:
        """Append the 8 bits of ``value``, least-significant first."""
        for _ in range(BITS_PER_BYTE):
            self.append(bool(value & 1))
            value >>= 1

    def byte_at(self, index: int) -> int:
        """Reassemble the byte whose first bit sits at ``index``.

        Bits past the end of the sequence count as zero.
        """
        value = 0
        size = len(self)
        for i in range(index + BITS_PER_BYTE - 1, index - 1, -1):
            bit = self[i] if i < size else False
            value = (value << 1) | int(bit)
        return value

    def to_bytes(self) -> bytes:
        return bytes(self.byte_at(i) for i in range(0, len(self), BITS_PER_BYTE))

    def __repr__(self) -> str:
        return f"<BitStream {''.join('1' if b else '0' for b in self)!r} ({len(self)} bits)>"


class BitReader:
    """Reads a BitStream once, left to right.

    Once every bit has been consumed further reads return ``False``
    instead of failing.
    """

    def __init__(self, bits: BitStream) -> None:
        self._bits = bits
        self.position = 0

    def __len__(self) -> int:
        return len(self._bits)

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self._bits)

    def read(self) -> bool:
        if self.exhausted:
            return False
        bit = self._bits[self.position]
        self.position += 1
        return bit

    def __repr__(self) -> str:
        return f"<BitReader {self.position}/{len(self._bits)}>"


def encode(data: BytesLike) -> BitStream:
    """Encode a byte string as a bit sequence, LSB first per byte."""
    if isinstance(data, str):
        raise TypeError("encode() needs bytes, not str; encode the text first")
    bits = BitStream()
    for value in bytes(data):
        bits.push_byte(value)
    return bits


def decode(bits: Iterable[bool]) -> bytes:
    """Decode a bit sequence into bytes, zero-padding a short final group."""
    if not isinstance(bits, BitStream):
        bits = BitStream(bits)
    return bits.to_bytes()
