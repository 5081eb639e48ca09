"""
Loop scheduler states and the allowed transitions between them.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet


class LoopState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    ENCODING = "encoding"
    INFERRING = "inferring"
    DECODING = "decoding"
    RENDERING = "rendering"
    SCHEDULED = "scheduled"


# INFERRING -> SCHEDULED is the early exit taken when inference fails
# recoverably; every other edge is the forward cycle.
TRANSITIONS: Dict[LoopState, FrozenSet[LoopState]] = {
    LoopState.IDLE: frozenset({LoopState.CAPTURING}),
    LoopState.CAPTURING: frozenset({LoopState.ENCODING}),
    LoopState.ENCODING: frozenset({LoopState.INFERRING}),
    LoopState.INFERRING: frozenset({LoopState.DECODING, LoopState.SCHEDULED}),
    LoopState.DECODING: frozenset({LoopState.RENDERING}),
    LoopState.RENDERING: frozenset({LoopState.SCHEDULED}),
    LoopState.SCHEDULED: frozenset({LoopState.CAPTURING}),
}


def can_transition(current: LoopState, target: LoopState) -> bool:
    return target in TRANSITIONS[current]
