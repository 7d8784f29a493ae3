"""
Copyright (c) 2025 Piotr Gawron (dev@gawron.biz)
This file is licensed under the MIT License.
For details, see the LICENSE file in the project root.

Raster image helpers: validation, luminance and cropping.
"""

import logging
from typing import Tuple

import cv2
import numpy as np

from .errors import InvalidImageError

BBox = Tuple[int, int, int, int]

logger = logging.getLogger(__name__)

_GRAY_CODES = {
    ('bgr', 3): cv2.COLOR_BGR2GRAY,
    ('rgb', 3): cv2.COLOR_RGB2GRAY,
    ('bgr', 4): cv2.COLOR_BGRA2GRAY,
    ('rgb', 4): cv2.COLOR_RGBA2GRAY,
}


def validate_image(image) -> np.ndarray:
    """
    Check that an image is a usable raster and return it as a numpy array.

    :param image: Array-like of shape (H, W), (H, W, 1), (H, W, 3) or (H, W, 4)
    :return: The image as numpy array (not copied when already an array)
    :raises InvalidImageError: If the image is absent, empty or malformed
    """
    if image is None:
        raise InvalidImageError('Image is None')

    try:
        array = np.asarray(image)
    except (TypeError, ValueError) as e:
        raise InvalidImageError(f'Image is not array-like: {e}') from e

    if not (np.issubdtype(array.dtype, np.integer) or np.issubdtype(array.dtype, np.floating)):
        raise InvalidImageError(f'Unsupported pixel type {array.dtype}')

    if array.ndim not in (2, 3):
        raise InvalidImageError(f'Expected a 2D or 3D array, got shape {array.shape}')
    if array.ndim == 3 and array.shape[2] not in (1, 3, 4):
        raise InvalidImageError(f'Unsupported number of channels: {array.shape[2]}')
    if array.shape[0] == 0 or array.shape[1] == 0:
        raise InvalidImageError(f'Image has zero area: {array.shape[1]}x{array.shape[0]}')

    if np.issubdtype(array.dtype, np.floating) and not np.all(np.isfinite(array)):
        raise InvalidImageError('Image contains NaN or infinite values')

    return array


def value_range(dtype) -> float:
    """
    Nominal maximum pixel value.

    8 and 16-bit integers use the dtype max. Wider integers are assumed to
    carry 8-bit pixels (numpy's default int from plain lists). Floats use 1.0.
    """
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.integer):
        if dtype.itemsize > 2:
            return 255.0
        return float(np.iinfo(dtype).max)
    return 1.0


def to_luminance(image: np.ndarray, channel_order: str = 'bgr') -> np.ndarray:
    """
    Convert a validated image to a single float32 intensity channel.

    Colour input uses OpenCV's BT.601 luma weights; alpha is ignored.

    :param image: Validated image
    :param channel_order: 'bgr' or 'rgb'
    :return: 2D float32 array
    """
    data = np.ascontiguousarray(image, dtype=np.float32)
    if data.ndim == 2:
        return data
    channels = data.shape[2]
    if channels == 1:
        return np.ascontiguousarray(data[:, :, 0])
    return cv2.cvtColor(data, _GRAY_CODES[(channel_order, channels)])


def _sanitize_bbox(bbox: BBox, width: int, height: int) -> BBox:
    try:
        x0, y0, x1, y1 = (int(v) for v in bbox)
    except (TypeError, ValueError) as e:
        raise InvalidImageError(f'Invalid bbox {bbox!r}') from e
    if x1 < 0 or y1 < 0 or x0 >= width or y0 >= height:
        raise InvalidImageError(f'Bbox {(x0, y0, x1, y1)} lies outside the {width}x{height} image')
    x0 = max(0, min(x0, width - 1))
    y0 = max(0, min(y0, height - 1))
    x1 = max(0, min(x1, width - 1))
    y1 = max(0, min(y1, height - 1))
    if x1 < x0 or y1 < y0:
        raise InvalidImageError(f'Invalid bbox after clamp: {(x0, y0, x1, y1)}')
    return x0, y0, x1, y1


def crop(image, bbox: BBox) -> np.ndarray:
    """
    Cut an explicit rectangle out of an image.

    The bbox is (x0, y0, x1, y1) with inclusive x1/y1 and is clamped to the
    image bounds. The returned array is a copy.

    :raises InvalidImageError: If the image is invalid, the box is inverted
        or it does not overlap the image
    """
    array = validate_image(image)
    height, width = array.shape[:2]
    x0, y0, x1, y1 = _sanitize_bbox(bbox, width, height)
    logger.debug(f'Cropping {width}x{height} image to {(x0, y0, x1, y1)}')
    return array[y0:y1 + 1, x0:x1 + 1].copy()
