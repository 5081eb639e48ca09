"""
TensorFlow Lite inference backend (on-device path).

Uses tflite_runtime if installed. Output tensors are read in the order of
get_output_details() and bound through the configured OutputBinding.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from dataclasses import dataclass, field
from typing import List

import numpy as np

from models.errors import InferenceError
from models.tensors import RawOutputSet
from .backend import InferenceBackend
from .binding import OutputBinding


@dataclass(frozen=True)
class TFLiteConfig:
    model_path: str
    num_threads: int = 2
    binding: OutputBinding = field(default_factory=OutputBinding)


class TFLiteBackend(InferenceBackend):
    def __init__(self, cfg: TFLiteConfig):
        self.cfg = cfg
        try:
            from tflite_runtime.interpreter import Interpreter  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "tflite_runtime is not installed. Install with `pip install tflite-runtime` "
                "or switch model.backend to 'tfserving'."
            ) from e

        if not os.path.exists(cfg.model_path):
            raise FileNotFoundError(f"Model file not found: {cfg.model_path}")

        logging.info(f"Loading TFLite model from: {cfg.model_path}")
        self._interp = Interpreter(model_path=cfg.model_path, num_threads=cfg.num_threads)
        self._interp.allocate_tensors()
        self._input = self._interp.get_input_details()[0]
        self._lock = threading.Lock()

    async def wait_ready(self) -> None:
        # The interpreter is loaded synchronously in __init__
        return None

    async def infer(self, tensor: np.ndarray) -> RawOutputSet:
        outputs = await asyncio.to_thread(self._invoke, tensor)
        return self.cfg.binding.bind(outputs)

    def _invoke(self, tensor: np.ndarray) -> List[np.ndarray]:
        with self._lock:
            try:
                if tuple(self._input["shape"]) != tensor.shape:
                    self._interp.resize_tensor_input(self._input["index"], list(tensor.shape))
                    self._interp.allocate_tensors()
                    self._input = self._interp.get_input_details()[0]
                self._interp.set_tensor(self._input["index"], tensor.astype(self._input["dtype"]))
                self._interp.invoke()
                return [
                    np.array(self._interp.get_tensor(d["index"]))
                    for d in self._interp.get_output_details()
                ]
            except (RuntimeError, ValueError) as e:
                raise InferenceError(f"TFLite invoke failed: {e}") from e

    def close(self) -> None:
        return None
