"""Helpers for row and column masks stored as lists of 32-bit words."""

from __future__ import annotations

from collections.abc import Sequence

WORD_BITS = 32
_WORD_MASK = 0xFFFFFFFF


def _word_count(size_in_bits: int) -> int:
    return (size_in_bits + WORD_BITS - 1) // WORD_BITS


def is_bit_set(bitmask: Sequence[int], index: int) -> bool:
    """Return whether bit ``index`` is set; bit 0 is the low bit of word 0."""
    word, bit = divmod(index, WORD_BITS)
    return bool(bitmask[word] & (1 << bit))


def count_set_bits(bitmask: Sequence[int], size_in_bits: int) -> int:
    """Count the set bits in every word that ``size_in_bits`` reaches into."""
    words = bitmask[: _word_count(size_in_bits)]
    return sum(bin(word & _WORD_MASK).count("1") for word in words)


def full_mask(size_in_bits: int) -> list[int]:
    """Return a mask with every bit of every word needed for ``size_in_bits`` set."""
    return [_WORD_MASK] * _word_count(size_in_bits)