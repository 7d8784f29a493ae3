"""
Copyright (c) 2025 Piotr Gawron (dev@gawron.biz)
This file is licensed under the MIT License.
For details, see the LICENSE file in the project root.
"""

from imagematch.config import HasherConfig, load_config  # noqa: F401
from imagematch.errors import FingerprintMismatchError, ImageMatchError, InvalidImageError  # noqa: F401
from imagematch.fingerprint import Fingerprint  # noqa: F401
from imagematch.imagematch import ImageMatch, SimilarityResult  # noqa: F401
from imagematch.perceptual_hasher import PerceptualHasher  # noqa: F401
from imagematch.raster import crop  # noqa: F401
