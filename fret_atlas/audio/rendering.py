"""Render notes offline, through the same engine used for live playback."""

import random
from pathlib import Path
from typing import Optional, Union

import numpy as np
import soundfile as sf

from ..logger import get_logger
from ..note_types import Timbre
from ..pitch_table import PitchTable
from .context import AudioContext, OfflineOutput
from .voice import SynthSettings
from .voice_engine import VoiceEngine

logger = get_logger(__name__)


def render_note(
    pitch_class: str,
    octave: int,
    timbre: Union[Timbre, str] = Timbre.PRIMARY,
    settings: Optional[SynthSettings] = None,
    sample_rate: int = 44100,
    pitch_table: Optional[PitchTable] = None,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Render one note from onset until it has been torn down.

    Returns:
        A (frames, 2) float32 array

    Raises:
        UnsupportedPitch: If the pitch has no frequency table entry
    """
    settings = settings or SynthSettings()
    output = OfflineOutput(sample_rate=sample_rate)
    engine = VoiceEngine(
        lambda: AudioContext(output),
        settings=settings,
        pitch_table=pitch_table,
        rng=random.Random(seed),
    )

    error = engine.play(pitch_class, octave, timbre)
    if error is not None:
        raise error

    audio = output.advance(settings.duration + settings.cleanup_delay)
    engine.close()
    logger.debug(f"Rendered {pitch_class}{octave}: {len(audio)} frames at {sample_rate} Hz")
    return audio


def render_note_to_wav(
    path: Union[str, Path],
    pitch_class: str,
    octave: int,
    timbre: Union[Timbre, str] = Timbre.PRIMARY,
    settings: Optional[SynthSettings] = None,
    sample_rate: int = 44100,
    pitch_table: Optional[PitchTable] = None,
    seed: Optional[int] = None,
) -> Path:
    """Render a note and write it as a 16-bit stereo WAV file."""
    path = Path(path)
    audio = render_note(
        pitch_class, octave, timbre, settings, sample_rate, pitch_table=pitch_table, seed=seed
    )
    sf.write(str(path), audio, sample_rate, subtype="PCM_16")
    logger.info(f"Wrote {pitch_class}{octave} to {path}")
    return path

