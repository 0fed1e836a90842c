"""
random_art/generators.py - Pixel generators and image rendering
"""
import logging
import os
import random
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image

from .ast_nodes import ASTNode, create_random_node, evaluate, random_trees

logger = logging.getLogger(__name__)


def to_channel_array(values: np.ndarray) -> np.ndarray:
    """Rescale evaluations from [-1, 1] to uint8 channel values.

    Out-of-range values are clamped; +inf maps to 255, -inf and NaN to 0.
    Rounding is half-to-even, so 0.0 lands on 128.
    """
    values = np.nan_to_num(np.asarray(values, dtype=np.float64),
                           nan=-1.0, posinf=1.0, neginf=-1.0)
    scaled = np.clip((values + 1.0) / 2.0, 0.0, 1.0) * 255.0
    return np.rint(scaled).astype(np.uint8)


def to_channel(value: float) -> int:
    """Rescale one evaluation to a channel byte"""
    return int(to_channel_array(value))


def create_coordinate_grids(width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
    """Normalized coordinate grids centered on the image midpoint"""
    x = (np.arange(width) - width // 2) / width
    y = (np.arange(height) - height // 2) / height
    X, Y = np.meshgrid(x, y)
    return X, Y


class PixelGenerator(ABC):
    """Maps expression tree outputs at (x, y) to a pixel color"""

    mode: str

    @property
    @abstractmethod
    def trees(self) -> Sequence[ASTNode]:
        """Trees in channel order"""

    @abstractmethod
    def generate_color(self, x: float, y: float):
        """Color of the pixel at normalized coordinates (x, y)"""

    def evaluate_grid(self, X: np.ndarray, Y: np.ndarray) -> np.ndarray:
        """Evaluate every channel over coordinate grids, uint8 output"""
        channels = [to_channel_array(np.broadcast_to(evaluate(tree, X, Y), X.shape))
                    for tree in self.trees]
        if len(channels) == 1:
            return channels[0]
        return np.stack(channels, axis=-1)

    def formulas(self) -> Sequence[str]:
        return [str(tree) for tree in self.trees]


class GrayscaleGenerator(PixelGenerator):
    """One tree drives the intensity"""

    mode = 'L'
    channel_names = ('intensity',)

    def __init__(self, depth: int, rng: Optional[random.Random] = None,
                 intensity: Optional[ASTNode] = None):
        self.intensity = intensity if intensity is not None else create_random_node(depth, rng)

    @property
    def trees(self) -> Sequence[ASTNode]:
        return (self.intensity,)

    def generate_color(self, x: float, y: float) -> int:
        return to_channel(evaluate(self.intensity, x, y))


class RgbGenerator(PixelGenerator):
    """Three independent trees, one per color channel"""

    mode = 'RGB'
    channel_names = ('r', 'g', 'b')

    def __init__(self, depth: int, rng: Optional[random.Random] = None,
                 trees: Optional[Sequence[ASTNode]] = None):
        if trees is None:
            trees = random_trees(3, depth, rng)
        if len(trees) != 3:
            raise ValueError(f"RgbGenerator needs 3 trees, got {len(trees)}")
        self.r, self.g, self.b = trees

    @property
    def trees(self) -> Sequence[ASTNode]:
        return (self.r, self.g, self.b)

    def generate_color(self, x: float, y: float) -> Tuple[int, int, int]:
        return (to_channel(evaluate(self.r, x, y)),
                to_channel(evaluate(self.g, x, y)),
                to_channel(evaluate(self.b, x, y)))


def make_generator(colored: bool, depth: int,
                   rng: Optional[random.Random] = None) -> PixelGenerator:
    if colored:
        return RgbGenerator(depth, rng)
    return GrayscaleGenerator(depth, rng)


def _row_bands(height: int, workers: int):
    chunk = (height + workers - 1) // workers
    return [(lo, min(lo + chunk, height)) for lo in range(0, height, chunk)]


def generate_image(image: Image.Image, generator: PixelGenerator, workers: int = 1) -> Image.Image:
    """Fill every pixel of ``image`` one coordinate at a time.

    With workers > 1 the rows are split into bands evaluated on a thread
    pool; the trees are shared between threads as-is.
    """
    if image.mode != generator.mode:
        raise ValueError(f"Image mode {image.mode} does not match generator mode {generator.mode}")
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    w, h = image.size
    pixels = image.load()

    def _fill(lo: int, hi: int) -> None:
        for j in range(lo, hi):
            y = (j - h // 2) / h
            for i in range(w):
                x = (i - w // 2) / w
                pixels[i, j] = generator.generate_color(x, y)

    start = time.time()
    if workers == 1 or h < 2:
        _fill(0, h)
    else:
        # each band writes disjoint rows
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(_fill, lo, hi) for lo, hi in _row_bands(h, workers)]
            for fut in futures:
                fut.result()
    logger.debug("Filled %dx%d %s image in %.3fs (%d workers)",
                 w, h, image.mode, time.time() - start, workers)
    return image


def render_image(generator: PixelGenerator, size: Tuple[int, int] = (256, 256),
                 workers: int = 1) -> Image.Image:
    """Render a new image with vectorized evaluation over the pixel grid.

    ``size`` is (width, height), as in Pillow.
    """
    width, height = size
    if width < 1 or height < 1:
        raise ValueError(f"Image size must be positive, got {width}x{height}")
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    start = time.time()
    X, Y = create_coordinate_grids(width, height)
    if workers == 1 or height < 2:
        data = generator.evaluate_grid(X, Y)
    else:
        bands = _row_bands(height, workers)
        with ThreadPoolExecutor(max_workers=len(bands)) as pool:
            futures = [pool.submit(generator.evaluate_grid, X[lo:hi], Y[lo:hi])
                       for lo, hi in bands]
            data = np.concatenate([fut.result() for fut in futures], axis=0)
    logger.debug("Rendered %dx%d %s image in %.3fs (%d workers)",
                 width, height, generator.mode, time.time() - start, workers)
    return Image.fromarray(data)


def save_image(image: Image.Image, filename: Union[str, os.PathLike]) -> None:
    """Encode and write the image; errors propagate to the caller"""
    image.save(filename)
    logger.info("Saved %s image %dx%d to %s", image.mode, image.width, image.height, filename)
