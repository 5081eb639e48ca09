"""
Inference backend interface.

A backend is the externally served model seen as an opaque async function
from input tensor to RawOutputSet. Backends bind the model's own output
order to named fields through an OutputBinding, so the decoder never
indexes model outputs by position.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np

from models.tensors import RawOutputSet


class InferenceBackend(Protocol):
    async def wait_ready(self) -> None:
        """Resolve once the model can serve requests; raise InferenceError otherwise."""
        ...

    async def infer(self, tensor: np.ndarray) -> RawOutputSet:
        """Run the model on one (1, H, W, 3) tensor; raise InferenceError on failure."""
        ...

    def close(self) -> None:
        ...
