"""
Pipeline module: the display-paced detection loop.

- states: loop scheduler state machine
- scope: per-cycle tensor resource scope
- clock: display refresh clocks that pace the loop
- engine: the loop itself
"""

from .engine import DetectionLoop, LoopStats
from .states import LoopState
from .scope import TensorScope, ScopeStats
from .clock import DisplayClock, RefreshClock, ManualClock

__all__ = [
    "DetectionLoop",
    "LoopStats",
    "LoopState",
    "TensorScope",
    "ScopeStats",
    "DisplayClock",
    "RefreshClock",
    "ManualClock",
]
