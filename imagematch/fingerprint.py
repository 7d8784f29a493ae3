"""
Copyright (c) 2025 Piotr Gawron (dev@gawron.biz)
This file is licensed under the MIT License.
For details, see the LICENSE file in the project root.

Fingerprint value type.
"""

import string
from dataclasses import dataclass
from typing import Iterable, Tuple

from .errors import FingerprintMismatchError


@dataclass(frozen=True)
class Fingerprint:
    """
    Immutable fixed-length bit sequence produced by perceptual hashing.

    Bits are stored in ``value`` with the first bit of the raster order as the
    most significant one. Two fingerprints are compared by Hamming distance;
    no ordering is defined.

    :param value: Integer holding the bits
    :type value: int
    :param size: Number of bits
    :type size: int
    """
    value: int
    size: int

    def __post_init__(self):
        if self.size < 1:
            raise ValueError(f'Fingerprint size must be positive, got {self.size}')
        if self.value < 0 or self.value >> self.size:
            raise ValueError(f'Value {self.value} does not fit in {self.size} bits')

    @classmethod
    def from_bits(cls, bits: Iterable) -> 'Fingerprint':
        """Build a fingerprint from truthy/falsy values in raster order."""
        value = 0
        size = 0
        for bit in bits:
            value = (value << 1) | (1 if bit else 0)
            size += 1
        return cls(value, size)

    @classmethod
    def from_hex(cls, text: str, size: int = None) -> 'Fingerprint':
        """
        Parse hexadecimal text as produced by :meth:`hex`.

        :param text: Hex digits, case-insensitive
        :param size: Bit length; defaults to four bits per digit
        :return: Parsed fingerprint
        """
        text = text.strip()
        if not text or any(c not in string.hexdigits for c in text):
            raise ValueError(f'Invalid hexadecimal fingerprint {text!r}')
        return cls(int(text, 16), size if size is not None else 4 * len(text))

    @classmethod
    def from_binary(cls, text: str) -> 'Fingerprint':
        """Parse a string of '0' and '1' characters."""
        if not text or any(c not in '01' for c in text):
            raise ValueError(f'Invalid binary fingerprint {text!r}')
        return cls(int(text, 2), len(text))

    def hex(self) -> str:
        width = (self.size + 3) // 4
        return format(self.value, f'0{width}x')

    def to_binary(self) -> str:
        return format(self.value, f'0{self.size}b')

    def bits(self) -> Tuple[bool, ...]:
        return tuple(c == '1' for c in self.to_binary())

    def hamming_distance(self, other: 'Fingerprint') -> int:
        """Count differing bit positions; both fingerprints must have the same size."""
        if self.size != other.size:
            raise FingerprintMismatchError(
                f'Cannot compare fingerprints of {self.size} and {other.size} bits'
            )
        return bin(self.value ^ other.value).count('1')

    def similarity(self, other: 'Fingerprint') -> float:
        """
        Similarity between two fingerprints (0.0 to 1.0).
        1.0 means identical, 0.0 means every bit differs.
        """
        return 1.0 - self.hamming_distance(other) / self.size

    def __sub__(self, other: 'Fingerprint') -> int:
        if not isinstance(other, Fingerprint):
            return NotImplemented
        return self.hamming_distance(other)

    def __str__(self) -> str:
        return self.hex()

    def __len__(self) -> int:
        return self.size
