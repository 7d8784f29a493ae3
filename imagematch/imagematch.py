"""
Copyright (c) 2025 Piotr Gawron (dev@gawron.biz)
This file is licensed under the MIT License.
For details, see the LICENSE file in the project root.

ImageMatch main class.
"""

import logging
from dataclasses import dataclass
from itertools import combinations
from multiprocessing import Pool, cpu_count
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np

from .errors import InvalidImageError
from .fingerprint import Fingerprint
from .perceptual_hasher import PerceptualHasher

logger = logging.getLogger(__name__)


@dataclass
class SimilarityResult:
    """Data class to store similarity comparison results."""
    label1: str
    label2: str
    distance: int
    similarity_score: float
    is_similar: bool


class ImageMatch:
    """
    A class for finding near-duplicate images using perceptual hashing.

    Images are supplied already decoded, keyed by a caller-chosen label
    (a file name, a database id, ...). Each image is reduced to a fingerprint
    and all fingerprint pairs are compared by Hamming distance.

    :param hasher: Hasher used for every image, defaults to a 64-bit DCT hasher
    :type hasher: PerceptualHasher
    :param n_processes: Number of processes to use for parallel hashing (0 = auto)
    :type n_processes: int
    :param similarity_threshold: Minimum similarity score to consider images as similar (0.0-1.0)
    :type similarity_threshold: float
    """

    def __init__(
            self,
            hasher: Optional[PerceptualHasher] = None,
            n_processes: int = 0,
            similarity_threshold: float = 0.9,
    ):
        if not 0.0 <= similarity_threshold <= 1.0:
            raise ValueError(f'similarity_threshold must be within 0.0-1.0, got {similarity_threshold}')

        self.hasher = hasher if hasher is not None else PerceptualHasher()
        self.n_processes = n_processes
        if n_processes <= 0 or n_processes > cpu_count():
            self.n_processes = cpu_count() - 1 if cpu_count() > 1 else 1
        self.similarity_threshold = similarity_threshold

        self.fingerprints: Dict[str, Fingerprint] = {}

    def run(self, images: Mapping[str, np.ndarray]) -> List[SimilarityResult]:
        """
        Hash all images and return the pairs that look alike.

        :param images: Decoded images keyed by label
        :returns: Similar pairs, most similar first
        :rtype: List[SimilarityResult]
        """
        if not images:
            logger.info('No images to match.')
            return []

        logger.info(f'Hashing {len(images)} images')
        self.hash_many(images)
        logger.info(f'Hashed {len(self.fingerprints)} images successfully')

        similar = self.find_similar(self.fingerprints)
        logger.info(f'Found {len(similar)} similar image pairs')
        return similar

    def hash_many(self, images: Mapping[str, np.ndarray]) -> Dict[str, Fingerprint]:
        """
        Fingerprint every image, skipping the ones that cannot be hashed.

        Results are stored in ``self.fingerprints`` and returned, in the order
        of the input labels.

        :param images: Decoded images keyed by label
        :return: Fingerprints keyed by label
        """
        items = list(images.items())
        if self.n_processes > 1 and len(items) > 1:
            results = self._hash_parallel(items)
        else:
            results = self._hash_sequential(items)

        self.fingerprints = {
            label: results[label]
            for label, _ in items
            if results.get(label) is not None
        }
        return self.fingerprints

    def _hash_sequential(self, items: List[Tuple[str, np.ndarray]]) -> Dict[str, Optional[Fingerprint]]:
        results = {}
        for i, item in enumerate(items, 1):
            label, fingerprint = self._hash_worker(item)
            results[label] = fingerprint
            logger.debug(f'Processed {i}/{len(items)}: {label}')
        return results

    def _hash_parallel(self, items: List[Tuple[str, np.ndarray]]) -> Dict[str, Optional[Fingerprint]]:
        logger.info(f'Using {self.n_processes} processes for parallel hashing')

        results = {}
        total = len(items)
        with Pool(processes=self.n_processes) as pool:
            for i, (label, fingerprint) in enumerate(pool.imap_unordered(self._hash_worker, items), 1):
                results[label] = fingerprint
                logger.debug(f'Processed {i} / {total} images.')
        return results

    def _hash_worker(self, item: Tuple[str, np.ndarray]) -> Tuple[str, Optional[Fingerprint]]:
        """
        Worker function to hash a single image.

        :param item: (label, image) pair
        :return: (label, fingerprint) or (label, None) if the image is invalid
        """
        label, image = item
        try:
            return label, self.hasher.hash(image)
        except InvalidImageError as e:
            logger.warning(f'Skipping image {label}: {e}')
            return label, None

    def compare(self, fingerprint1: Fingerprint, fingerprint2: Fingerprint,
                label1: str = '', label2: str = '') -> SimilarityResult:
        """
        Compare two fingerprints.

        :raises FingerprintMismatchError: If the fingerprints differ in size
        """
        distance = fingerprint1.hamming_distance(fingerprint2)
        score = fingerprint1.similarity(fingerprint2)
        return SimilarityResult(
            label1=label1,
            label2=label2,
            distance=distance,
            similarity_score=score,
            is_similar=score >= self.similarity_threshold,
        )

    def find_similar(self, fingerprints: Mapping[str, Fingerprint]) -> List[SimilarityResult]:
        """
        Compare all fingerprint pairs and keep the similar ones.

        :param fingerprints: Fingerprints keyed by label
        :return: Similar pairs sorted by descending similarity score
        """
        similar = []
        for (label1, fp1), (label2, fp2) in combinations(fingerprints.items(), 2):
            result = self.compare(fp1, fp2, label1, label2)
            if result.is_similar:
                similar.append(result)

        similar.sort(key=lambda x: x.similarity_score, reverse=True)
        return similar
