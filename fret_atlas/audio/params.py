"""Time-automated parameter values (gain, cutoff frequency) for audio nodes."""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List

import numpy as np

from ..logger import get_logger

logger = get_logger(__name__)


class RampKind(Enum):
    """How the value approaches an automation event from the one before it."""

    SET = auto()  # Hold the previous value, jump at the event time
    LINEAR = auto()
    EXPONENTIAL = auto()


@dataclass(order=True)
class AutomationEvent:
    time: float
    seq: int  # Insertion order, breaks ties between events at the same time
    kind: RampKind = field(compare=False)
    value: float = field(compare=False)


class AudioParam:
    """A value that follows a schedule of set/ramp events over context time.

    Before the first event the default value applies. A ramp event starts
    from the time and value of the event before it (or from time 0 and the
    default value), and after the last event its value is held.
    """

    def __init__(self, default_value: float, name: str = "param") -> None:
        self.name = name
        self._default = float(default_value)
        self._events: List[AutomationEvent] = []
        self._seq = 0

    @property
    def default_value(self) -> float:
        return self._default

    @property
    def events(self) -> List[AutomationEvent]:
        return list(self._events)

    def _insert(self, kind: RampKind, value: float, time: float) -> "AudioParam":
        if not np.isfinite(value) or not np.isfinite(time):
            raise ValueError(f"{self.name}: non-finite automation ({value} at {time})")
        if time < 0:
            raise ValueError(f"{self.name}: negative automation time {time}")
        self._seq += 1
        bisect.insort(self._events, AutomationEvent(float(time), self._seq, kind, float(value)))
        return self

    def set_value_at_time(self, value: float, time: float) -> "AudioParam":
        return self._insert(RampKind.SET, value, time)

    def linear_ramp_to_value_at_time(self, value: float, end_time: float) -> "AudioParam":
        return self._insert(RampKind.LINEAR, value, end_time)

    def exponential_ramp_to_value_at_time(
        self, value: float, end_time: float
    ) -> "AudioParam":
        # An exponential curve can never reach or cross zero
        if value <= 0:
            raise ValueError(
                f"{self.name}: exponential ramp target must be positive, got {value}"
            )
        return self._insert(RampKind.EXPONENTIAL, value, end_time)

    def cancel_scheduled_values(self, cancel_time: float) -> "AudioParam":
        """Drop every event at or after cancel_time."""
        self._events = [e for e in self._events if e.time < cancel_time]
        return self

    def cancel_and_hold_at_time(self, cancel_time: float) -> "AudioParam":
        """Drop events from cancel_time on, freezing the value reached there.

        A ramp that was still in progress at cancel_time is cut short: it now
        ends at cancel_time with the value it had reached, so the curve up to
        that point is unchanged.
        """
        held = self.value_at(cancel_time)
        following = [e for e in self._events if e.time >= cancel_time]
        self._events = [e for e in self._events if e.time < cancel_time]

        kind = RampKind.SET
        if following and following[0].kind is not RampKind.SET:
            kind = following[0].kind
            if kind is RampKind.EXPONENTIAL and held <= 0:
                kind = RampKind.SET
        self._seq += 1
        self._events.append(AutomationEvent(float(cancel_time), self._seq, kind, held))
        logger.debug(f"{self.name}: held at {held:.5f} from t={cancel_time:.4f}")
        return self

    def values(self, times: np.ndarray) -> np.ndarray:
        """Evaluate the schedule at each of the given (ascending) times."""
        times = np.asarray(times, dtype=np.float64)
        out = np.full(times.shape, self._default, dtype=np.float64)

        prev_time, prev_value = 0.0, self._default
        for event in self._events:
            span = event.time - prev_time
            mask = (times >= prev_time) & (times < event.time)
            if span > 0 and mask.any():
                progress = (times[mask] - prev_time) / span
                if event.kind is RampKind.LINEAR:
                    out[mask] = prev_value + (event.value - prev_value) * progress
                elif event.kind is RampKind.EXPONENTIAL and prev_value * event.value > 0:
                    out[mask] = prev_value * np.power(event.value / prev_value, progress)
                else:
                    out[mask] = prev_value
            prev_time, prev_value = event.time, event.value

        if self._events:
            out[times >= prev_time] = prev_value
        return out

    def value_at(self, time: float) -> float:
        return float(self.values(np.array([time]))[0])

    def __repr__(self):
        return f"AudioParam({self.name!r}, default={self._default}, events={len(self._events)})"
