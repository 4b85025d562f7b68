"""Monophonic note player: at most one voice sounds at a time."""

from __future__ import annotations

import random
from dataclasses import dataclass
from functools import partial
from typing import Callable, Optional, Union

from ..core.interfaces import IVoiceEngine
from ..errors import UnsupportedPitch
from ..logger import get_logger
from ..note_types import Timbre
from ..pitch_table import DEFAULT_TABLE, PitchTable
from .context import AudioContext
from .voice import SynthSettings, Voice

logger = get_logger(__name__)


@dataclass(frozen=True)
class Idle:
    """No audio context yet."""


@dataclass(frozen=True)
class Ready:
    """Context open, nothing sounding."""


@dataclass(frozen=True)
class Sounding:
    """One voice owns the output until it is released or replaced."""

    voice: Voice


EngineState = Union[Idle, Ready, Sounding]


class VoiceEngine(IVoiceEngine):
    """Plays one note at a time, fading out the previous one first.

    The audio context is created lazily through ``context_factory`` on the
    first ``init``/``play``, since output devices may only be available
    after a user action.
    """

    def __init__(
        self,
        context_factory: Callable[[], AudioContext],
        settings: Optional[SynthSettings] = None,
        pitch_table: Optional[PitchTable] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize the engine without touching any audio device.

        Args:
            context_factory: Builds the audio context on first use
            settings: Envelope and tone constants (default SynthSettings())
            pitch_table: Frequency lookup (default A4 = 440 Hz table)
            rng: Random source for the fundamental's detune
        """
        self._context_factory = context_factory
        self._settings = settings or SynthSettings()
        self._pitch_table = pitch_table or DEFAULT_TABLE
        self._rng = rng or random.Random()

        self._context: Optional[AudioContext] = None
        self._state: EngineState = Idle()
        self._generation = 0

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def context(self) -> Optional[AudioContext]:
        return self._context

    @property
    def settings(self) -> SynthSettings:
        return self._settings

    @property
    def current_voice(self) -> Optional[Voice]:
        state = self._state
        return state.voice if isinstance(state, Sounding) else None

    def init(self) -> AudioContext:
        """Open the audio context if it isn't open yet. Idempotent."""
        if self._context is None or self._context.closed:
            self._context = self._context_factory()
            self._state = Ready()
            logger.info("Voice engine ready")
        return self._context

    def play(
        self, pitch_class: str, octave: int, timbre: Union[Timbre, str] = Timbre.PRIMARY
    ) -> Optional[UnsupportedPitch]:
        """Start a note, fading out whatever was sounding.

        Returns:
            None if the note started, or an UnsupportedPitch describing why
            nothing was played. Unsupported pitches never raise and leave
            the engine untouched.
        """
        timbre = Timbre.parse(timbre)
        try:
            frequency = self._pitch_table.frequency_of(pitch_class, octave)
        except (ValueError, TypeError) as e:
            logger.warning(f"Not playing {pitch_class}{octave}: {e}")
            return UnsupportedPitch(pitch_class, octave, str(e))

        context = self.init()
        with context.lock:
            now = context.current_time
            state = self._state
            if isinstance(state, Sounding):
                self._release(state.voice, now)
                self._state = Ready()

            self._generation += 1
            voice = Voice(
                context,
                frequency,
                timbre,
                self._settings,
                self._generation,
                start_time=now,
                rng=self._rng,
            )
            voice.connect()
            self._state = Sounding(voice)
            context.call_at(
                voice.end_time + self._settings.cleanup_delay,
                partial(self._on_voice_finished, voice),
            )

        logger.debug(
            f"Playing {pitch_class}{octave} ({frequency:.2f}Hz, {timbre.value}) "
            f"as voice {voice.generation} at t={now:.3f}"
        )
        return None

    def stop_current(self) -> None:
        """Fade out the sounding voice. Does nothing if none is sounding."""
        context = self._context
        if context is None:
            return

        with context.lock:
            state = self._state
            if not isinstance(state, Sounding):
                return
            self._release(state.voice, context.current_time)
            self._state = Ready()
        logger.debug(f"Stopped voice {state.voice.generation}")

    def _release(self, voice: Voice, now: float) -> None:
        """Fade a voice out and schedule its teardown. Caller holds the lock."""
        silent_at = voice.fade_out(now)
        self._context.call_at(
            silent_at + self._settings.cleanup_delay,
            partial(self._on_voice_finished, voice),
        )

    def _on_voice_finished(self, voice: Voice) -> None:
        """Timer callback: tear a voice down once its sound is over.

        Every voice gets one of these for its natural end, and another if it
        is faded early, so it must tolerate the voice being long gone.
        """
        voice.disconnect()
        state = self._state
        if isinstance(state, Sounding) and state.voice.generation == voice.generation:
            self._state = Ready()
            logger.debug(f"Voice {voice.generation} finished")
        else:
            logger.debug(f"Cleanup for superseded voice {voice.generation}")

    def close(self) -> None:
        """Stop any sound and release the output device."""
        if self._context is None:
            return
        self.stop_current()
        self._context.close()
        self._context = None
        self._state = Idle()
        logger.info("Voice engine closed")
