"""
Detection loop engine.

Drives the per-frame cycle: capture a frame, encode it, run inference,
decode and filter the outputs, render the overlay, then wait for the next
display tick. Exactly one cycle runs at a time; the next cycle starts only
when the display clock answers the request made after rendering.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, List, Optional

from codec.tensor_codec import TensorCodec
from detection.filter import DetectionFilter
from inference.backend import InferenceBackend
from models.config import LoopConfig
from models.detection import Detection
from models.errors import DetectionLoopError, IllegalTransition
from models.frame import FrameData
from observation.base import FrameSource
from overlay.renderer import OverlayRenderer
from overlay.surface import DrawingSurface
from .clock import DisplayClock
from .scope import ScopeStats, TensorScope
from .states import LoopState, can_transition

CycleCallback = Callable[[FrameData, List[Detection]], None]


@dataclass
class LoopStats:
    """Runtime statistics for the detection loop."""
    cycle_count: int = 0
    skipped_cycles: int = 0
    consecutive_failures: int = 0
    last_detection_count: int = 0
    inference_ms: Optional[float] = None
    start_time: float = field(default_factory=time.time)
    last_frame_ts: Optional[float] = None
    last_stats_log_time: float = field(default_factory=time.time)
    cycle_times: Deque[float] = field(default_factory=lambda: deque(maxlen=30))

    def fps(self) -> float:
        """Completed cycles per second over the recent window."""
        if len(self.cycle_times) < 2:
            return 0.0
        span = self.cycle_times[-1] - self.cycle_times[0]
        return (len(self.cycle_times) - 1) / span if span > 0 else 0.0


class DetectionLoop:
    """
    Display-paced detect-decode-render loop.

    Example:
        loop = DetectionLoop(source, backend, codec, detection_filter,
                             renderer, surface, RefreshClock(60))
        await loop.run()
    """

    def __init__(
        self,
        source: FrameSource,
        backend: InferenceBackend,
        codec: TensorCodec,
        detection_filter: DetectionFilter,
        renderer: OverlayRenderer,
        surface: DrawingSurface,
        clock: DisplayClock,
        config: Optional[LoopConfig] = None,
    ):
        self.source = source
        self.backend = backend
        self.codec = codec
        self.detection_filter = detection_filter
        self.renderer = renderer
        self.surface = surface
        self.clock = clock
        self.config = config or LoopConfig()
        self.stats = LoopStats()
        self.scope_stats = ScopeStats()
        self.last_detections: List[Detection] = []
        self._state: Optional[LoopState] = None
        self._running = False
        self._cycle_lock = asyncio.Lock()
        self._callbacks: List[CycleCallback] = []

    @property
    def state(self) -> Optional[LoopState]:
        """Current state; None until start() has passed the readiness barrier."""
        return self._state

    @property
    def running(self) -> bool:
        return self._running

    def add_callback(self, callback: CycleCallback) -> None:
        """
        Add a callback to be called after each rendered cycle.

        Args:
            callback: Function taking (frame_data, detections) as arguments.
        """
        self._callbacks.append(callback)

    async def start(self) -> None:
        """Wait until both the frame source and the model are ready, then enter IDLE."""
        if self._state is not None:
            return
        logging.info("Waiting for frame source and model to become ready")
        await asyncio.gather(self.source.wait_ready(), self.backend.wait_ready())
        self._state = LoopState.IDLE
        self.stats = LoopStats()
        logging.info(f"Detection loop ready: source={self.source.source_id}")

    async def run(self, max_cycles: Optional[int] = None) -> None:
        """
        Run cycles until stopped, a fatal error occurs, or max_cycles cycles ran.

        Raises:
            DetectionLoopError: The fatal error that ended the loop.
        """
        await self.start()
        self._running = True
        cycles = 0
        try:
            while self._running:
                await self.run_cycle()
                cycles += 1
                self._handle_periodic_tasks()
                if self._should_give_up() or (max_cycles is not None and cycles >= max_cycles):
                    break
                await self.clock.next_tick()
        except DetectionLoopError as e:
            logging.error(f"Detection loop stopped on fatal error: {type(e).__name__}: {e}")
            raise
        finally:
            self._running = False
            logging.info(
                f"Detection loop stopped: cycles={self.stats.cycle_count}, "
                f"skipped={self.stats.skipped_cycles}"
            )

    def stop(self) -> None:
        """Signal the loop to stop after the current cycle."""
        self._running = False

    async def run_cycle(self) -> Optional[List[Detection]]:
        """
        Run one capture-to-render cycle and leave the loop SCHEDULED.

        Returns:
            The rendered detections, or None when the cycle was skipped
            because of a recoverable error.
        """
        async with self._cycle_lock:
            detections = await self._cycle()
            self._transition(LoopState.SCHEDULED)
            return detections

    async def _cycle(self) -> Optional[List[Detection]]:
        self._transition(LoopState.CAPTURING)
        frame_data = self.source.current_frame()

        with TensorScope(self.scope_stats) as scope:
            self._transition(LoopState.ENCODING)
            tensor = scope.track(self.codec.encode(frame_data))

            self._transition(LoopState.INFERRING)
            started = time.perf_counter()
            try:
                raw = await self.backend.infer(tensor)
            except DetectionLoopError as e:
                if e.fatal:
                    raise
                self._record_failure(e)
                return None
            except Exception as e:
                logging.exception(f"Unexpected inference failure: {e}")
                self._record_failure(e)
                return None
            self.stats.inference_ms = (time.perf_counter() - started) * 1000.0
            scope.track(*raw.arrays())

            self._transition(LoopState.DECODING)
            width, height = self.surface.dimensions
            proposals = self.codec.decode(raw, width, height)
            detections = self.detection_filter.filter(proposals)

            self._transition(LoopState.RENDERING)
            self.renderer.render(detections, self.surface)

        self._record_success(frame_data, detections)
        return detections

    def _record_success(self, frame_data: FrameData, detections: List[Detection]) -> None:
        now = time.time()
        self.stats.cycle_count += 1
        self.stats.consecutive_failures = 0
        self.stats.last_detection_count = len(detections)
        self.stats.last_frame_ts = frame_data.timestamp
        self.stats.cycle_times.append(now)
        self.last_detections = detections

        for callback in self._callbacks:
            try:
                callback(frame_data, detections)
            except Exception as e:
                logging.warning(f"Callback error: {e}")

    def _record_failure(self, error: Exception) -> None:
        self.stats.skipped_cycles += 1
        self.stats.consecutive_failures += 1
        logging.warning(
            f"Cycle skipped ({self.stats.consecutive_failures} in a row): "
            f"{type(error).__name__}: {error}"
        )

    def _should_give_up(self) -> bool:
        limit = self.config.max_consecutive_failures
        if limit and self.stats.consecutive_failures >= limit:
            logging.error(f"Too many consecutive failures ({self.stats.consecutive_failures}), stopping")
            return True
        return False

    def _transition(self, target: LoopState) -> None:
        current = self._state
        if current is None:
            raise IllegalTransition(f"Loop has not started; cannot enter {target.value}")
        if not can_transition(current, target):
            raise IllegalTransition(f"Illegal transition {current.value} -> {target.value}")
        self._state = target

    def _handle_periodic_tasks(self) -> None:
        """Log statistics periodically."""
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            logging.info(
                f"Loop stats: cycles={self.stats.cycle_count}, "
                f"skipped={self.stats.skipped_cycles}, fps={self.stats.fps():.1f}, "
                f"inference_ms={self.stats.inference_ms}, "
                f"detections={self.stats.last_detection_count}"
            )
            self.stats.last_stats_log_time = now

    def snapshot(self) -> dict[str, Any]:
        """Status summary for observers (web API, logs)."""
        return {
            "state": self._state.value if self._state else None,
            "running": self._running,
            "cycle_count": self.stats.cycle_count,
            "skipped_cycles": self.stats.skipped_cycles,
            "fps": self.stats.fps(),
            "inference_ms": self.stats.inference_ms,
            "last_frame_ts": self.stats.last_frame_ts,
            "open_scopes": self.scope_stats.open_scopes,
            "detections": [d.to_dict() for d in self.last_detections],
        }
