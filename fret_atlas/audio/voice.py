"""One sounding note: oscillators, envelope, filter and pan."""

from __future__ import annotations

import random
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional, Tuple

from ..logger import get_logger
from ..note_types import Timbre
from .context import AudioContext
from .nodes import AudioNode, GainNode, LowpassFilterNode, OscillatorNode, StereoPannerNode
from .params import AudioParam

logger = get_logger(__name__)

# (multiple of the fundamental, relative amplitude, waveform)
Partial = Tuple[float, float, str]

DEFAULT_PARTIALS: Tuple[Partial, ...] = (
    (1.0, 0.55, "triangle"),
    (2.0, 0.22, "sine"),
    (3.0, 0.14, "sine"),
)


@dataclass(frozen=True)
class SynthSettings:
    """Timing and tone constants for a voice, in seconds, Hz and linear gain.

    The defaults were tuned by ear for a soft felt-piano pluck.
    """

    attack_time: float = 0.003
    peak_gain: float = 0.6
    decay_time: float = 0.18
    sustain_gain: float = 0.24
    duration: float = 0.9
    release_floor: float = 0.0001
    stop_fade_time: float = 0.01
    fade_floor: float = 0.0001
    cleanup_delay: float = 0.1
    filter_q: float = 0.8
    filter_start_hz: float = 9000.0
    filter_end_hz: float = 3200.0
    filter_sweep_fraction: float = 0.7
    pan_width: float = 0.08
    detune_cents: float = 2.0
    partials: Tuple[Partial, ...] = DEFAULT_PARTIALS

    def __post_init__(self):
        # JSON config hands partials over as lists
        try:
            partials = tuple((float(m), float(g), str(w)) for m, g, w in self.partials)
        except (TypeError, ValueError) as e:
            raise ValueError(
                f"partials must be a list of [multiple, gain, waveform], got {self.partials!r}"
            ) from e
        object.__setattr__(self, "partials", partials)
        if not 0 < self.attack_time < self.decay_time < self.duration:
            raise ValueError(
                "Envelope times must satisfy 0 < attack_time < decay_time < duration, got "
                f"{self.attack_time}, {self.decay_time}, {self.duration}"
            )
        for name in ("peak_gain", "sustain_gain", "release_floor", "filter_start_hz", "filter_end_hz"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.stop_fade_time <= 0 or self.cleanup_delay < 0 or self.fade_floor < 0:
            raise ValueError(
                "stop_fade_time must be positive, cleanup_delay and fade_floor non-negative"
            )
        if not 0 < self.filter_sweep_fraction <= 1:
            raise ValueError(f"filter_sweep_fraction must be in (0, 1], got {self.filter_sweep_fraction}")
        if not self.partials:
            raise ValueError("At least one partial is required")

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "SynthSettings":
        """Build settings from a config section, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(config) - known
        if unknown:
            logger.warning(f"Ignoring unknown synth settings: {sorted(unknown)}")
        try:
            return cls(**{k: v for k, v in config.items() if k in known})
        except TypeError as e:
            raise ValueError(f"Invalid synth settings: {e}") from e

    def to_config(self) -> Dict[str, Any]:
        config = asdict(self)
        config["partials"] = [list(p) for p in self.partials]
        return config


class Voice:
    """A fully built note, ready to be connected to the context's destination.

    Topology: one oscillator per partial, each through its own fixed gain,
    summed into the envelope gain, then low-pass filter, then stereo panner.
    Nothing touches the destination until ``connect``.
    """

    def __init__(
        self,
        context: AudioContext,
        frequency: float,
        timbre: Timbre,
        settings: SynthSettings,
        generation: int,
        start_time: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.context = context
        self.frequency = float(frequency)
        self.timbre = timbre
        self.settings = settings
        self.generation = generation
        self.start_time = context.current_time if start_time is None else float(start_time)
        self._natural_end = self.start_time + settings.duration
        self._end_time = self._natural_end
        self._faded_at: Optional[float] = None
        rng = rng or random.Random()

        self.envelope_gain: GainNode = context.create_gain(0.0)
        self.filter: LowpassFilterNode = context.create_lowpass(settings.filter_start_hz, settings.filter_q)
        self.panner: StereoPannerNode = context.create_stereo_panner(settings.pan_width * timbre.pan_direction)
        self.envelope_gain.connect(self.filter).connect(self.panner)

        self.oscillators: List[OscillatorNode] = []
        self._partial_gains: List[GainNode] = []
        for index, (multiple, amplitude, waveform) in enumerate(settings.partials):
            # Slight random detune on the fundamental only
            detune = rng.uniform(-settings.detune_cents, settings.detune_cents) if index == 0 else 0.0
            osc = context.create_oscillator(waveform, self.frequency * multiple, detune)
            gain = context.create_gain(amplitude)
            osc.connect(gain).connect(self.envelope_gain)
            self.oscillators.append(osc)
            self._partial_gains.append(gain)

        self._schedule()

    def _schedule(self) -> None:
        s = self.settings
        t = self.start_time

        env = self.envelope_gain.gain
        env.set_value_at_time(0.0, t)
        env.linear_ramp_to_value_at_time(s.peak_gain, t + s.attack_time)
        env.exponential_ramp_to_value_at_time(s.sustain_gain, t + s.decay_time)
        env.exponential_ramp_to_value_at_time(s.release_floor, t + s.duration)

        # Brightness falls off over the note, like a struck string
        cutoff = self.filter.frequency
        cutoff.set_value_at_time(s.filter_start_hz, t)
        cutoff.exponential_ramp_to_value_at_time(s.filter_end_hz, t + s.duration * s.filter_sweep_fraction)

        for osc in self.oscillators:
            osc.start(t)
            osc.stop(t + s.duration)

    @property
    def envelope(self) -> AudioParam:
        return self.envelope_gain.gain

    @property
    def end_time(self) -> float:
        """When the oscillators stop: the natural end, or the end of a fade."""
        return self._end_time

    @property
    def is_fading(self) -> bool:
        return self._faded_at is not None

    @property
    def is_connected(self) -> bool:
        return self.panner.is_connected

    @property
    def nodes(self) -> List[AudioNode]:
        return [*self.oscillators, *self._partial_gains, self.envelope_gain, self.filter, self.panner]

    def gain_at(self, time: float) -> float:
        return self.envelope.value_at(time)

    def connect(self) -> None:
        self.panner.connect(self.context.destination)

    def fade_out(self, now: float) -> float:
        """Ramp the envelope down from wherever it is, then stop the oscillators.

        The gain never rises after ``now``. Returns the time the voice falls
        silent.
        """
        if self._faded_at is not None or now >= self._end_time:
            return self._end_time

        fade_end = now + self.settings.stop_fade_time
        env = self.envelope
        env.cancel_and_hold_at_time(now)
        held = env.value_at(now)
        env.linear_ramp_to_value_at_time(min(self.settings.fade_floor, held), fade_end)
        for osc in self.oscillators:
            osc.stop(fade_end)

        self._faded_at = now
        self._end_time = min(self._end_time, fade_end)
        logger.debug(f"Voice {self.generation} fading from {held:.4f} at t={now:.4f}")
        return self._end_time

    def disconnect(self) -> None:
        """Detach every node. Safe to call more than once."""
        for node in self.nodes:
            node.disconnect()

    def __repr__(self):
        return (
            f"Voice(generation={self.generation}, frequency={self.frequency:.2f}, "
            f"timbre={self.timbre.value}, start={self.start_time:.3f}, end={self._end_time:.3f})"
        )
