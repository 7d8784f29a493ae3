"""
Copyright (c) 2025 Piotr Gawron (dev@gawron.biz)
This file is licensed under the MIT License.
For details, see the LICENSE file in the project root.

PerceptualHasher class.
"""

import logging
from typing import Dict, Optional, Tuple, Union

import cv2
import numpy as np

from .config import HasherConfig
from .fingerprint import Fingerprint
from .raster import BBox, crop, to_luminance, validate_image, value_range

HASH_VERSION = 1
HASH_FORMAT = 'hex'

# Grids whose spread is below this fraction of their own magnitude count as flat
FLAT_TOLERANCE = 1e-3

logger = logging.getLogger(__name__)

HashLike = Union[Fingerprint, str]


class PerceptualHasher:
    """
    Perceptual hashing of raster images.
    Uses DCT-based hashing similar to pHash algorithm by default;
    average hash and difference hash are available through the config.

    The hasher keeps no state besides its immutable config, so one instance
    can be shared between threads or sent to worker processes.

    :param config: Hash parameters, defaults to a 64-bit DCT hash
    :type config: HasherConfig
    """

    def __init__(self, config: Optional[HasherConfig] = None):
        self.config = config if config is not None else HasherConfig()

    def hash(self, image: np.ndarray, bbox: Optional[BBox] = None) -> Fingerprint:
        """
        Calculate the fingerprint of an image.

        :param image: Image as numpy array, grayscale or 3/4 channels
        :param bbox: Optional region (x0, y0, x1, y1), inclusive, to hash instead of the full image
        :return: Fingerprint of ``hash_size ** 2`` bits
        :raises InvalidImageError: If the image is empty or malformed
        """
        array = validate_image(image)
        if bbox is not None:
            array = crop(array, bbox)

        gray = to_luminance(array, self.config.channel_order)
        resized = cv2.resize(gray, self._grid_size(), interpolation=cv2.INTER_AREA)

        if np.ptp(resized) <= FLAT_TOLERANCE * max(1.0, float(np.abs(resized).max())):
            bits = self._flat_bits(resized, value_range(array.dtype))
        elif self.config.method == 'phash':
            bits = self._phash_bits(resized)
        elif self.config.method == 'ahash':
            bits = self._ahash_bits(resized)
        else:
            bits = self._dhash_bits(resized)

        fingerprint = Fingerprint.from_bits(bits.flatten())
        logger.debug(f'{self.config.method} of {array.shape[1]}x{array.shape[0]} image: {fingerprint}')
        return fingerprint

    def hash_hex(self, image: np.ndarray, bbox: Optional[BBox] = None) -> str:
        """Calculate the fingerprint of an image as fixed-width hexadecimal text."""
        return self.hash(image, bbox=bbox).hex()

    def get_metadata(self) -> Dict[str, object]:
        """
        Describe the hash so stored fingerprints can be checked for compatibility.

        :return: Dictionary with algorithm type, version and parameters
        """
        return {
            'type': self.config.method,
            'version': HASH_VERSION,
            'hash_size': self.config.hash_size,
            'highfreq_factor': self.config.highfreq_factor,
            'channel_order': self.config.channel_order,
            'hash_format': HASH_FORMAT,
        }

    def _grid_size(self):
        # cv2 sizes are (width, height)
        hash_size = self.config.hash_size
        if self.config.method == 'phash':
            side = hash_size * self.config.highfreq_factor
            return side, side
        if self.config.method == 'dhash':
            return hash_size + 1, hash_size
        return hash_size, hash_size

    def _flat_bits(self, grid: np.ndarray, span: float) -> np.ndarray:
        # No structure to threshold against, encode absolute brightness instead
        hash_size = self.config.hash_size
        bright = float(np.mean(grid)) >= span / 2
        return np.full((hash_size, hash_size), bright, dtype=bool)

    def _phash_bits(self, grid: np.ndarray) -> np.ndarray:
        hash_size = self.config.hash_size
        dct = cv2.dct(grid)
        dct_low = dct[0:hash_size, 0:hash_size]
        median = np.median(dct_low)
        return dct_low > median

    @staticmethod
    def _ahash_bits(grid: np.ndarray) -> np.ndarray:
        return grid > grid.mean()

    @staticmethod
    def _dhash_bits(grid: np.ndarray) -> np.ndarray:
        return grid[:, 1:] > grid[:, :-1]

    @staticmethod
    def hamming_distance(hash1: HashLike, hash2: HashLike, size: Optional[int] = None) -> int:
        """
        Calculate Hamming distance between two fingerprints or their hex strings.

        :param size: Bit length of hex strings; defaults to the size of the
            Fingerprint argument, or four bits per hex digit
        """
        fp1, fp2 = _as_fingerprints(hash1, hash2, size)
        return fp1.hamming_distance(fp2)

    @staticmethod
    def similarity_score(hash1: HashLike, hash2: HashLike, size: Optional[int] = None) -> float:
        """
        Calculate similarity score between two hashes (0.0 to 1.0).
        1.0 means identical, 0.0 means completely different.
        """
        fp1, fp2 = _as_fingerprints(hash1, hash2, size)
        return fp1.similarity(fp2)


def _as_fingerprints(hash1: HashLike, hash2: HashLike, size: Optional[int]) -> Tuple[Fingerprint, Fingerprint]:
    if size is None:
        for value in (hash1, hash2):
            if isinstance(value, Fingerprint):
                size = value.size
                break
    return _as_fingerprint(hash1, size), _as_fingerprint(hash2, size)


def _as_fingerprint(value: HashLike, size: Optional[int] = None) -> Fingerprint:
    if isinstance(value, Fingerprint):
        return value
    if isinstance(value, str):
        return Fingerprint.from_hex(value, size=size)
    raise TypeError(f'Expected Fingerprint or hex string, got {type(value).__name__}')
