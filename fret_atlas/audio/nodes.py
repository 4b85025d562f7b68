"""Signal generators and processors that make up a voice.

Nodes form a pull graph: the destination asks each connected input for a
block of samples at a set of context times, and each node asks its own
inputs in turn. Mono blocks are 1-D arrays, stereo blocks have shape
(frames, 2).
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, ClassVar, List, Optional, Tuple

import numpy as np
from scipy.signal import lfilter

from ..logger import get_logger
from .params import AudioParam

if TYPE_CHECKING:
    from .context import AudioContext

logger = get_logger(__name__)


class AudioNode:
    """Base class: connection bookkeeping and input mixing."""

    def __init__(self, context: "AudioContext") -> None:
        self.context = context
        self._inputs: List[AudioNode] = []
        self._outputs: List[AudioNode] = []

    def connect(self, destination: "AudioNode") -> "AudioNode":
        """Route this node's output into destination. Returns destination for chaining."""
        if destination.context is not self.context:
            raise ValueError("Cannot connect nodes from different contexts")
        if destination not in self._outputs:
            self._outputs.append(destination)
            destination._inputs.append(self)
        return destination

    def disconnect(self) -> None:
        """Detach from every destination. Safe to call more than once."""
        for destination in self._outputs:
            if self in destination._inputs:
                destination._inputs.remove(self)
        self._outputs.clear()

    @property
    def is_connected(self) -> bool:
        return bool(self._outputs)

    @property
    def inputs(self) -> Tuple["AudioNode", ...]:
        return tuple(self._inputs)

    def _mix_inputs(self, times: np.ndarray) -> np.ndarray:
        """Sum all inputs; mono unless some input is stereo."""
        mix = np.zeros(len(times), dtype=np.float64)
        for node in list(self._inputs):
            block = node.process(times)
            if block.ndim == 2 and mix.ndim == 1:
                mix = np.repeat(mix[:, None], 2, axis=1)
            if block.ndim == 1 and mix.ndim == 2:
                block = block[:, None]
            mix = mix + block
        return mix

    def process(self, times: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class OscillatorNode(AudioNode):
    """Periodic waveform source, silent outside its [start, stop) window."""

    WAVEFORMS: ClassVar[Tuple[str, ...]] = ("sine", "triangle")

    def __init__(
        self,
        context: "AudioContext",
        waveform: str = "sine",
        frequency: float = 440.0,
        detune: float = 0.0,
    ) -> None:
        super().__init__(context)
        if waveform not in self.WAVEFORMS:
            raise ValueError(f"Unsupported waveform: {waveform}")
        self.waveform = waveform
        self.frequency = AudioParam(frequency, "frequency")
        self.detune = AudioParam(detune, "detune")  # cents
        self._start_time: Optional[float] = None
        self._stop_time: float = math.inf

    @property
    def start_time(self) -> Optional[float]:
        return self._start_time

    @property
    def stop_time(self) -> float:
        return self._stop_time

    def start(self, when: float = 0.0) -> None:
        if self._start_time is not None:
            raise RuntimeError("Oscillator already started")
        self._start_time = float(when)

    def stop(self, when: float) -> None:
        """Schedule the end of output. An earlier stop always wins."""
        if self._start_time is None:
            raise RuntimeError("Oscillator stopped before it was started")
        self._stop_time = min(self._stop_time, max(float(when), self._start_time))

    def has_ended(self, time: float) -> bool:
        return time >= self._stop_time

    def process(self, times: np.ndarray) -> np.ndarray:
        out = np.zeros(len(times), dtype=np.float64)
        if self._start_time is None or len(times) == 0:
            return out

        active = (times >= self._start_time) & (times < self._stop_time)
        if not active.any():
            return out

        # Frequency and detune are read once per block
        t0 = float(times[0])
        hz = self.frequency.value_at(t0) * 2.0 ** (self.detune.value_at(t0) / 1200.0)
        phase = 2.0 * np.pi * hz * (times[active] - self._start_time)
        if self.waveform == "sine":
            out[active] = np.sin(phase)
        else:
            out[active] = (2.0 / np.pi) * np.arcsin(np.sin(phase))
        return out


class GainNode(AudioNode):
    """Multiplies the mixed input by an automated gain."""

    def __init__(self, context: "AudioContext", gain: float = 1.0) -> None:
        super().__init__(context)
        self.gain = AudioParam(gain, "gain")

    def process(self, times: np.ndarray) -> np.ndarray:
        mix = self._mix_inputs(times)
        gain = self.gain.values(times)
        return mix * (gain[:, None] if mix.ndim == 2 else gain)


class LowpassFilterNode(AudioNode):
    """Second-order low-pass (RBJ cookbook biquad).

    The cutoff is sampled at the start of every block; filter state carries
    over between blocks so a moving cutoff does not click.
    """

    MIN_CUTOFF: ClassVar[float] = 10.0

    def __init__(
        self, context: "AudioContext", frequency: float = 350.0, q: float = 1.0
    ) -> None:
        super().__init__(context)
        if q <= 0:
            raise ValueError(f"Filter Q must be positive, got {q}")
        self.frequency = AudioParam(frequency, "cutoff")
        self.q = float(q)
        self._zi: Optional[np.ndarray] = None

    def coefficients(self, cutoff_hz: float) -> Tuple[np.ndarray, np.ndarray]:
        nyquist = self.context.sample_rate / 2.0
        cutoff_hz = min(max(cutoff_hz, self.MIN_CUTOFF), nyquist * 0.99)
        w0 = 2.0 * np.pi * cutoff_hz / self.context.sample_rate
        alpha = np.sin(w0) / (2.0 * self.q)
        cos_w0 = np.cos(w0)
        b = np.array([(1 - cos_w0) / 2, 1 - cos_w0, (1 - cos_w0) / 2])
        a = np.array([1 + alpha, -2 * cos_w0, 1 - alpha])
        return b / a[0], a / a[0]

    def process(self, times: np.ndarray) -> np.ndarray:
        x = self._mix_inputs(times)
        if len(times) == 0:
            return x

        b, a = self.coefficients(self.frequency.value_at(float(times[0])))
        channels = 1 if x.ndim == 1 else x.shape[1]
        if self._zi is None or self._zi.shape != (2, channels):
            self._zi = np.zeros((2, channels))

        if x.ndim == 1:
            y, zi = lfilter(b, a, x, zi=self._zi[:, 0])
            self._zi[:, 0] = zi
            return y
        y, self._zi = lfilter(b, a, x, axis=0, zi=self._zi)
        return y


class StereoPannerNode(AudioNode):
    """Equal-power placement of a mono signal between left (-1) and right (+1)."""

    def __init__(self, context: "AudioContext", pan: float = 0.0) -> None:
        super().__init__(context)
        self.pan = AudioParam(pan, "pan")

    def process(self, times: np.ndarray) -> np.ndarray:
        x = self._mix_inputs(times)
        if x.ndim == 2:
            x = x.mean(axis=1)
        pan = self.pan.value_at(float(times[0])) if len(times) else 0.0
        position = (min(max(pan, -1.0), 1.0) + 1.0) / 2.0
        left = np.cos(position * np.pi / 2.0)
        right = np.sin(position * np.pi / 2.0)
        return np.stack([x * left, x * right], axis=1)


class DestinationNode(AudioNode):
    """Final stereo mix handed to the output device."""

    def process(self, times: np.ndarray) -> np.ndarray:
        mix = self._mix_inputs(times)
        if mix.ndim == 1:
            mix = np.repeat(mix[:, None], 2, axis=1)
        return mix
