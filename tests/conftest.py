"""
Copyright (c) 2025 Piotr Gawron (dev@gawron.biz)
This file is licensed under the MIT License.
For details, see the LICENSE file in the project root.
"""

import cv2
import numpy as np
import pytest


def make_scene(seed: int, size: int = 256) -> np.ndarray:
    """Draw a smooth synthetic BGR picture: gradient background plus filled shapes."""
    rng = np.random.default_rng(seed)
    ramp = np.linspace(0.0, 1.0, size, dtype=np.float32)
    xx, yy = np.meshgrid(ramp, ramp)
    image = np.zeros((size, size, 3), dtype=np.uint8)
    for c in range(3):
        a, b, offset = rng.uniform(-120, 120, 3)
        image[:, :, c] = np.clip(128 + offset * 0.5 + a * xx + b * yy, 0, 255).astype(np.uint8)

    for _ in range(8):
        color = tuple(int(v) for v in rng.integers(0, 256, 3))
        x, y = (int(v) for v in rng.integers(0, size, 2))
        extent = int(rng.integers(size // 12, size // 4))
        if rng.random() < 0.5:
            cv2.circle(image, (x, y), extent, color, -1)
        else:
            cv2.rectangle(image, (x, y), (x + extent, y + extent), color, -1)

    return cv2.GaussianBlur(image, (5, 5), 0)


@pytest.fixture
def scene():
    """One synthetic test picture."""
    return make_scene(1)


@pytest.fixture
def images():
    """Labelled pictures: two exact duplicates, one resized copy and two unrelated noise pictures."""
    rng = np.random.default_rng(7)
    base = make_scene(1)
    half = cv2.resize(base, (128, 128), interpolation=cv2.INTER_AREA)
    return {
        'base.png': base,
        'base_copy.png': base.copy(),
        'base_small.png': half,
        'other1.png': rng.integers(0, 256, (128, 128, 3), dtype=np.uint8),
        'other2.png': rng.integers(0, 256, (96, 160, 3), dtype=np.uint8),
    }
