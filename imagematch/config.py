"""
Copyright (c) 2025 Piotr Gawron (dev@gawron.biz)
This file is licensed under the MIT License.
For details, see the LICENSE file in the project root.

Hashing configuration.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

METHODS = ('phash', 'ahash', 'dhash')
CHANNEL_ORDERS = ('bgr', 'rgb')

DEFAULT_METHOD = 'phash'
DEFAULT_HASH_SIZE = 8  # 8x8 = 64-bit fingerprint
DEFAULT_HIGHFREQ_FACTOR = 4  # pHash works on a (hash_size * 4) square grid
DEFAULT_CHANNEL_ORDER = 'bgr'  # OpenCV convention

ENV_PREFIX = 'IMAGEMATCH_'


@dataclass(frozen=True)
class HasherConfig:
    """
    Parameters of the perceptual hash.

    :param method: Hash variant, one of ``phash``, ``ahash`` or ``dhash``
    :type method: str
    :param hash_size: Side of the bit grid; the fingerprint has ``hash_size ** 2`` bits
    :type hash_size: int
    :param highfreq_factor: pHash downscales to ``hash_size * highfreq_factor`` before the DCT
    :type highfreq_factor: int
    :param channel_order: Order of colour channels in 3/4-channel input, ``bgr`` or ``rgb``
    :type channel_order: str
    """
    method: str = DEFAULT_METHOD
    hash_size: int = DEFAULT_HASH_SIZE
    highfreq_factor: int = DEFAULT_HIGHFREQ_FACTOR
    channel_order: str = DEFAULT_CHANNEL_ORDER

    def __post_init__(self):
        if self.method not in METHODS:
            raise ValueError(f'Unknown hash method {self.method!r}, expected one of {METHODS}')
        if self.hash_size < 2:
            raise ValueError(f'hash_size must be at least 2, got {self.hash_size}')
        if self.highfreq_factor < 1:
            raise ValueError(f'highfreq_factor must be at least 1, got {self.highfreq_factor}')
        if self.method == 'phash' and (self.hash_size * self.highfreq_factor) % 2:
            # cv2.dct only handles even-sized arrays
            raise ValueError('hash_size * highfreq_factor must be even for phash')
        if self.channel_order not in CHANNEL_ORDERS:
            raise ValueError(f'Unknown channel order {self.channel_order!r}, expected one of {CHANNEL_ORDERS}')

    @property
    def bit_length(self) -> int:
        return self.hash_size * self.hash_size


def _int_setting(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f'{ENV_PREFIX + name} must be an integer, got {raw!r}') from e


def load_config(environ: Optional[Mapping[str, str]] = None) -> HasherConfig:
    """Load configuration from IMAGEMATCH_* environment variables.

    Args:
        environ: Optional mapping used instead of os.environ.

    Returns:
        HasherConfig with unset values left at their defaults.

    Raises:
        ValueError: If a variable holds an invalid value.
    """
    if environ is None:
        environ = os.environ

    method = (environ.get(ENV_PREFIX + 'METHOD') or DEFAULT_METHOD).strip().lower()
    channel_order = (environ.get(ENV_PREFIX + 'CHANNEL_ORDER') or DEFAULT_CHANNEL_ORDER).strip().lower()

    return HasherConfig(
        method=method,
        hash_size=_int_setting(environ, 'HASH_SIZE', DEFAULT_HASH_SIZE),
        highfreq_factor=_int_setting(environ, 'HIGHFREQ_FACTOR', DEFAULT_HIGHFREQ_FACTOR),
        channel_order=channel_order,
    )
