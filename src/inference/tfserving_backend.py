"""
TensorFlow Serving REST backend.

The model is served externally; this adapter posts the input tensor to the
predict endpoint and binds the returned outputs by slot. HTTP calls are
blocking, so they run in a worker thread and the event loop stays free.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np
import requests

from models.errors import InferenceError
from models.tensors import RawOutputSet
from .backend import InferenceBackend
from .binding import OutputBinding


@dataclass(frozen=True)
class TFServingConfig:
    """
    Attributes:
        url: Base URL of the model server (e.g., http://127.0.0.1:8501).
        model_name: Served model name.
        signature_name: Serving signature to call.
        timeout: Per-request timeout in seconds.
        ready_timeout: Seconds to wait for the model to become AVAILABLE.
        binding: Output slot binding.
    """
    url: str = "http://127.0.0.1:8501"
    model_name: str = "mask_detector"
    signature_name: str = "serving_default"
    timeout: float = 5.0
    ready_timeout: float = 30.0
    binding: OutputBinding = field(default_factory=OutputBinding)

    @property
    def model_url(self) -> str:
        return f"{self.url.rstrip('/')}/v1/models/{self.model_name}"


class TFServingBackend(InferenceBackend):
    """
    Example:
        backend = TFServingBackend(TFServingConfig(url="http://127.0.0.1:8501"))
        await backend.wait_ready()
        raw = await backend.infer(tensor)
    """

    def __init__(self, cfg: TFServingConfig, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self._session = session or requests.Session()

    async def wait_ready(self, poll_interval: float = 0.5) -> None:
        deadline = time.monotonic() + self.cfg.ready_timeout
        while True:
            if await asyncio.to_thread(self._is_available):
                logging.info(f"Model ready: {self.cfg.model_url}")
                return
            if time.monotonic() >= deadline:
                raise InferenceError(
                    f"Model {self.cfg.model_name} not available at {self.cfg.url} "
                    f"after {self.cfg.ready_timeout}s"
                )
            await asyncio.sleep(poll_interval)

    def _is_available(self) -> bool:
        try:
            resp = self._session.get(self.cfg.model_url, timeout=self.cfg.timeout)
            resp.raise_for_status()
            statuses = resp.json().get("model_version_status", [])
        except (requests.RequestException, ValueError) as e:
            logging.debug(f"Model status check failed: {e}")
            return False
        return any(s.get("state") == "AVAILABLE" for s in statuses)

    async def infer(self, tensor: np.ndarray) -> RawOutputSet:
        outputs = await asyncio.to_thread(self._predict, tensor)
        return self.cfg.binding.bind(outputs)

    def _predict(self, tensor: np.ndarray) -> Any:
        # Columnar ("inputs") request keeps the batch axis on every output
        payload: Dict[str, Any] = {
            "signature_name": self.cfg.signature_name,
            "inputs": tensor.tolist(),
        }
        try:
            resp = self._session.post(
                f"{self.cfg.model_url}:predict", json=payload, timeout=self.cfg.timeout
            )
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as e:
            raise InferenceError(f"Predict request to {self.cfg.model_url} failed: {e}") from e
        except ValueError as e:
            raise InferenceError(f"Predict response is not JSON: {e}") from e

        if "error" in body:
            raise InferenceError(f"Model server error: {body['error']}")
        if "outputs" not in body:
            raise InferenceError("Predict response has no 'outputs'")
        return body["outputs"]

    def close(self) -> None:
        self._session.close()
