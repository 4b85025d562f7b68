"""Audio output handling for note playback."""

from __future__ import annotations
import numpy as np
import sounddevice as sd
from typing import Any, Callable, ClassVar, Dict, List, Optional

from ..errors import AudioDeviceError
from ..logger import get_logger
from ..core.interfaces import IAudioOutput

logger = get_logger(__name__)


class SoundDeviceOutput(IAudioOutput):
    """Audio output using the sounddevice library."""

    # Audio configuration
    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    BLOCKSIZE: ClassVar[int] = 256  # Frames per callback; small keeps play() latency low
    CHANNELS: ClassVar[int] = 2  # Stereo, for the timbre pan

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        blocksize: Optional[int] = None,
    ) -> None:
        """Initialize the audio output handler.

        Args:
            device_id: Audio output device ID, or None for the default device
            sample_rate: Sample rate in Hz, or None for default (44100)
            blocksize: Frames per callback, or None for default (256)
        """
        self._device_id = device_id
        self._sample_rate = sample_rate or self.SAMPLE_RATE
        self._blocksize = blocksize or self.BLOCKSIZE

        self._stream: Optional[sd.OutputStream] = None
        self._render: Optional[Callable[[int], np.ndarray]] = None
        self._running = False

        # Initialize audio device
        self._init_audio_device()

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def device_id(self) -> Optional[int]:
        return self._device_id

    def _init_audio_device(self) -> None:
        """Pick the first sample rate the output device accepts."""
        # Common supported sample rates to try
        common_rates = [44100, 48000, 22050, 16000]

        # Make sure requested rate is first
        if self._sample_rate in common_rates:
            common_rates.remove(self._sample_rate)
        common_rates.insert(0, self._sample_rate)

        for rate in common_rates:
            try:
                sd.check_output_settings(
                    device=self._device_id,
                    samplerate=rate,
                    channels=self.CHANNELS,
                    dtype="float32",
                )
                self._sample_rate = rate  # Update to the working rate
                logger.info(
                    f"Audio output initialized: ID={self._device_id}, Rate={rate}Hz"
                )
                return
            except Exception as e:
                logger.warning(f"Sample rate {rate} Hz not supported: {e}")
                continue

        raise AudioDeviceError(
            f"Could not initialize output device {self._device_id} with any supported sample rate"
        )

    def _audio_callback(
        self,
        outdata: np.ndarray,
        frames: int,
        _time_info: Any,
        status: sd.CallbackFlags,
    ) -> None:
        """Fill the device buffer from the render callback.

        Note:
            This is called from the PortAudio thread, so it should be fast
            and avoid any blocking operations to prevent audio glitches.
        """
        if status:
            logger.warning(f"Audio callback status: {status}")

        if self._render is None:
            outdata.fill(0)
            return

        outdata[:] = self._render(frames)

    def start(self, render: Callable[[int], np.ndarray]) -> None:
        """Open the output stream and start pulling blocks from render."""
        if self._running:
            logger.warning("Audio output already running")
            return

        self._render = render
        try:
            self._stream = sd.OutputStream(
                device=self._device_id,
                samplerate=self._sample_rate,
                blocksize=self._blocksize,
                channels=self.CHANNELS,
                dtype="float32",
                callback=self._audio_callback,
                latency="low",
            )
            self._stream.start()
        except Exception as e:
            logger.error(f"Failed to start audio output: {e}")
            if self._stream is not None:
                self._stream.close()
                self._stream = None
            raise AudioDeviceError(f"Could not start audio output: {e}") from e

        self._running = True
        logger.info(f"Audio output started with sample rate {self._sample_rate} Hz")

    def is_running(self) -> bool:
        return self._running

    def stop(self) -> None:
        """Stop playback and close the stream."""
        if not self._running:
            return

        try:
            if self._stream:
                self._stream.stop()
                self._stream.close()
                self._stream = None
            logger.info("Audio output stopped")
        except Exception as e:
            logger.error(f"Error stopping audio output: {e}")
        finally:
            self._running = False


def list_output_devices() -> List[Dict[str, Any]]:
    """Describe every device with at least one output channel."""
    devices = []
    for device_id, device in enumerate(sd.query_devices()):
        if device["max_output_channels"] > 0:
            devices.append(
                {
                    "id": device_id,
                    "name": device["name"],
                    "channels": device["max_output_channels"],
                    "default_samplerate": device["default_samplerate"],
                }
            )
    return devices


def default_output_device() -> Optional[int]:
    try:
        return sd.default.device[1]
    except Exception:
        logger.warning("Could not get default output device, using None")
        return None
