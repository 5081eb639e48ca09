"""
Per-cycle tensor scope.

Every tensor created between encoding and the end of rendering is tracked
by the cycle's TensorScope and released when the scope exits, on the
normal path and on every error path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np


@dataclass
class ScopeStats:
    """Counters shared by all scopes of one loop."""
    opened: int = 0
    closed: int = 0
    released_tensors: int = 0

    @property
    def open_scopes(self) -> int:
        return self.opened - self.closed


class TensorScope:
    """
    Context manager that owns the tensors of one loop cycle.

    Example:
        with TensorScope(stats) as scope:
            tensor = scope.track(codec.encode(frame))
            raw = await backend.infer(tensor)
            scope.track(*raw.arrays())
    """

    def __init__(self, stats: Optional[ScopeStats] = None):
        self._stats = stats if stats is not None else ScopeStats()
        self._tensors: List[np.ndarray] = []
        self._open = False
        self._closed = False

    @property
    def live(self) -> int:
        """Number of tensors currently held by the scope."""
        return len(self._tensors)

    @property
    def closed(self) -> bool:
        return self._closed

    def open(self) -> "TensorScope":
        if self._open or self._closed:
            raise RuntimeError("TensorScope can only be opened once")
        self._open = True
        self._stats.opened += 1
        return self

    def track(self, *tensors: np.ndarray):
        """Register tensors with the scope; returns the single tensor or the tuple."""
        if not self._open or self._closed:
            raise RuntimeError("TensorScope is not open")
        self._tensors.extend(tensors)
        return tensors[0] if len(tensors) == 1 else tensors

    def close(self) -> None:
        """Release every tracked tensor. Closing twice is a no-op."""
        if self._closed or not self._open:
            return
        released = len(self._tensors)
        self._tensors.clear()
        self._closed = True
        self._stats.closed += 1
        self._stats.released_tensors += released
        logging.debug(f"Tensor scope closed: released={released}")

    def __enter__(self) -> "TensorScope":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
