"""
Copyright (c) 2025 Piotr Gawron (dev@gawron.biz)
This file is licensed under the MIT License.
For details, see the LICENSE file in the project root.

ImageMatch exceptions.
"""


class ImageMatchError(Exception):
    """Base class for all ImageMatch errors."""


class InvalidImageError(ImageMatchError, ValueError):
    """Raised when an image is empty, malformed or cannot be cropped as requested."""


class FingerprintMismatchError(ImageMatchError, ValueError):
    """Raised when fingerprints of different bit lengths are compared."""
