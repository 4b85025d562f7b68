"""Audio context: the sample clock, the output mix and the timer queue."""

from __future__ import annotations

import heapq
import itertools
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from ..core.interfaces import IAudioOutput
from ..logger import get_logger
from .nodes import (
    DestinationNode,
    GainNode,
    LowpassFilterNode,
    OscillatorNode,
    StereoPannerNode,
)

logger = get_logger(__name__)


@dataclass(order=True)
class _Timer:
    when: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class AudioContext:
    """Owns the graph's destination and clock, driven by an output backend.

    ``current_time`` is the number of frames rendered so far divided by the
    sample rate. Graph changes and block rendering are serialized by
    ``lock``; callers that build or tear down nodes should hold it.
    """

    CHANNELS = 2

    def __init__(self, output: IAudioOutput) -> None:
        self._output = output
        self._sample_rate = int(output.sample_rate)
        self._frames_rendered = 0
        self._timers: List[_Timer] = []
        self._timer_seq = itertools.count()
        self._closed = False

        self.lock = threading.RLock()
        self.destination = DestinationNode(self)

        self._output.start(self.render)
        logger.info(f"Audio context running at {self._sample_rate} Hz")

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def current_time(self) -> float:
        return self._frames_rendered / self._sample_rate

    @property
    def output(self) -> IAudioOutput:
        return self._output

    @property
    def closed(self) -> bool:
        return self._closed

    def create_oscillator(self, waveform: str = "sine", frequency: float = 440.0, detune: float = 0.0) -> OscillatorNode:
        return OscillatorNode(self, waveform, frequency, detune)

    def create_gain(self, gain: float = 1.0) -> GainNode:
        return GainNode(self, gain)

    def create_lowpass(self, frequency: float = 350.0, q: float = 1.0) -> LowpassFilterNode:
        return LowpassFilterNode(self, frequency, q)

    def create_stereo_panner(self, pan: float = 0.0) -> StereoPannerNode:
        return StereoPannerNode(self, pan)

    def call_at(self, when: float, callback: Callable[[], None]) -> _Timer:
        """Run callback once the clock has passed ``when`` (context seconds).

        Timers cannot be taken back once queued except through ``cancel``;
        callbacks must tolerate firing after the thing they target is gone.
        """
        timer = _Timer(float(when), next(self._timer_seq), callback)
        with self.lock:
            heapq.heappush(self._timers, timer)
        return timer

    def cancel(self, timer: _Timer) -> None:
        timer.cancelled = True

    @property
    def pending_timers(self) -> int:
        with self.lock:
            return sum(1 for t in self._timers if not t.cancelled)

    def render(self, frames: int) -> np.ndarray:
        """Render the next block of the mix and advance the clock.

        Returns:
            A (frames, 2) float32 array clipped to [-1, 1]
        """
        with self.lock:
            if self._closed or frames <= 0:
                return np.zeros((max(frames, 0), self.CHANNELS), dtype=np.float32)

            times = (self._frames_rendered + np.arange(frames)) / self._sample_rate
            block = self.destination.process(times)
            self._frames_rendered += frames
            self._run_due_timers()

        return np.clip(block, -1.0, 1.0).astype(np.float32)

    def _run_due_timers(self) -> None:
        now = self.current_time
        while self._timers and self._timers[0].when <= now:
            timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            try:
                timer.callback()
            except Exception as e:
                logger.error(f"Error in scheduled callback at t={timer.when:.3f}: {e}", exc_info=True)

    def close(self) -> None:
        """Stop the output backend. Further renders produce silence."""
        with self.lock:
            if self._closed:
                return
            self._closed = True
            self._timers.clear()
        self._output.stop()
        logger.info("Audio context closed")


class OfflineOutput(IAudioOutput):
    """An output with no device: blocks are rendered only when asked for.

    Used for tests and WAV export, where the clock should move exactly as
    far as the caller says.
    """

    def __init__(self, sample_rate: int = 44100, blocksize: int = 256) -> None:
        self._sample_rate = int(sample_rate)
        self.blocksize = int(blocksize)
        self._render: Optional[Callable[[int], np.ndarray]] = None
        self._running = False

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def start(self, render: Callable[[int], np.ndarray]) -> None:
        self._render = render
        self._running = True

    def stop(self) -> None:
        self._running = False

    def is_running(self) -> bool:
        return self._running

    def pull(self, frames: int) -> np.ndarray:
        """Render exactly ``frames`` frames, in blocks of ``blocksize``."""
        if not self._running or self._render is None:
            raise RuntimeError("Offline output is not running")
        blocks = []
        remaining = int(frames)
        while remaining > 0:
            n = min(self.blocksize, remaining)
            blocks.append(self._render(n))
            remaining -= n
        if not blocks:
            return np.zeros((0, AudioContext.CHANNELS), dtype=np.float32)
        return np.concatenate(blocks)

    def advance(self, seconds: float) -> np.ndarray:
        return self.pull(int(round(seconds * self._sample_rate)))
