"""Factory for creating Fret Atlas components."""

from typing import Any, Callable, Dict, Optional

from ..logger import get_logger
from ..audio.context import AudioContext, OfflineOutput
from ..audio.voice_engine import VoiceEngine
from ..errors import AudioDeviceError
from ..fretboard import PositionMapper
from ..note_types import DisplayMode
from ..pitch_table import PitchTable
from ..reference import NoteReference
from .config import ConfigManager
from .interfaces import IAudioOutput

logger = get_logger(__name__)


def _sounddevice_output(**kwargs) -> IAudioOutput:
    # Deferred: importing sounddevice needs the PortAudio library
    try:
        from ..audio.audio_output import SoundDeviceOutput
    except OSError as e:
        raise AudioDeviceError(f"Audio output unavailable: {e}") from e

    return SoundDeviceOutput(**kwargs)


def _offline_output(sample_rate: int = 44100, blocksize: int = 256, **_ignored) -> IAudioOutput:
    return OfflineOutput(sample_rate=sample_rate, blocksize=blocksize)


class ComponentFactory:
    """Factory for creating Fret Atlas components."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

        # Register default component implementations
        self.audio_output_builders: Dict[str, Callable[..., IAudioOutput]] = {
            "default": _sounddevice_output,
            "sounddevice": _sounddevice_output,
            "offline": _offline_output,
        }

    def create_audio_output(
        self, implementation: str = "default", **kwargs: Any
    ) -> IAudioOutput:
        """Create an audio output.

        Args:
            implementation: Name of the implementation to use
            **kwargs: Additional parameters to pass to the constructor

        Returns:
            Audio output instance

        Raises:
            ValueError: If the implementation is not registered
        """
        if implementation not in self.audio_output_builders:
            raise ValueError(f"Unknown audio output implementation: {implementation}")

        # Get default configuration
        config = self.config_manager.get_config("audio_output")

        # Override with provided parameters
        config.update(kwargs)

        instance = self.audio_output_builders[implementation](**config)
        logger.info(f"Created audio output: {implementation}")
        return instance

    def create_pitch_table(self) -> PitchTable:
        config = self.config_manager.get_config("instrument")
        return PitchTable(reference_hz=config["reference_hz"])

    def create_position_mapper(self) -> PositionMapper:
        config = self.config_manager.get_config("instrument")
        return PositionMapper(num_frets=config["num_frets"])

    def create_voice_engine(
        self, output: str = "default", **output_kwargs: Any
    ) -> VoiceEngine:
        """Create a voice engine whose output opens on first use.

        Args:
            output: Name of the audio output implementation
            **output_kwargs: Overrides for the audio_output configuration

        Returns:
            Voice engine instance (no device opened yet)
        """
        if output not in self.audio_output_builders:
            raise ValueError(f"Unknown audio output implementation: {output}")

        def context_factory() -> AudioContext:
            return AudioContext(self.create_audio_output(output, **output_kwargs))

        engine = VoiceEngine(
            context_factory,
            settings=self.config_manager.synth_settings(),
            pitch_table=self.create_pitch_table(),
        )
        logger.info(f"Created voice engine with {output} output")
        return engine

    def create_reference(
        self,
        engine: Optional[VoiceEngine] = None,
        display_mode: Optional[DisplayMode] = None,
        output: str = "default",
    ) -> NoteReference:
        """Create the note reference facade, building an engine if none is given."""
        return NoteReference(
            engine=engine or self.create_voice_engine(output),
            mapper=self.create_position_mapper(),
            pitch_table=self.create_pitch_table(),
            display_mode=display_mode,
        )
