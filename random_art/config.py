"""
random_art/config.py - Generation settings
"""
import random
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass
class ArtConfig:
    """Settings for one generated image.

    Attributes:
        depth: Maximal depth of the expression tree(s)
        width: Output image width in pixels
        height: Output image height in pixels
        output: Output file name; the extension picks the format
        colored: Three trees (RGB) instead of one (grayscale)
        seed: Seed for the random source, None for a fresh one
        workers: Threads used to evaluate the pixel grid
    """

    depth: int = 10
    width: int = 256
    height: int = 256
    output: str = "output.png"
    colored: bool = False
    seed: Optional[int] = None
    workers: int = 1

    def validate(self) -> None:
        """Raise ValueError for settings no image can be built from."""
        if self.depth < 0:
            raise ValueError(f"depth must be non-negative, got {self.depth}")
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if not self.output:
            raise ValueError("output file name must not be empty")

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def make_rng(self) -> random.Random:
        return random.Random(self.seed)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
