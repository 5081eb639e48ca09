"""
Named inference outputs.

Inference adapters populate a RawOutputSet by name, so the decoder never
depends on the positional output order of a particular model.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class RawOutputSet:
    """
    Raw tensors returned by one inference call.

    Attributes:
        scores: Confidence per proposal, shape (1, N).
        boxes: Normalized [y1, x1, y2, x2] per proposal, shape (1, N, 4).
        classes: 1-based class index per proposal, shape (1, N).
    """
    scores: np.ndarray
    boxes: np.ndarray
    classes: np.ndarray

    def __post_init__(self) -> None:
        if self.scores.ndim != 2 or self.scores.shape[0] != 1:
            raise ValueError(f"scores must have shape (1, N), got {self.scores.shape}")
        n = self.scores.shape[1]
        if self.boxes.shape != (1, n, 4):
            raise ValueError(f"boxes must have shape (1, {n}, 4), got {self.boxes.shape}")
        classes = self.classes.reshape(1, -1) if self.classes.ndim == 1 else self.classes
        if classes.shape != (1, n):
            raise ValueError(f"classes must have shape (1, {n}), got {self.classes.shape}")
        object.__setattr__(self, "classes", classes)

    @property
    def proposal_count(self) -> int:
        """N, the model's maximum proposal count."""
        return int(self.scores.shape[1])

    def arrays(self) -> tuple:
        """Every tensor held by this set (for resource scoping)."""
        return (self.scores, self.boxes, self.classes)
