"""Configuration management for Fret Atlas components."""

from typing import Dict, Any, Optional
import json
import os
from pathlib import Path

from ..audio.voice import SynthSettings
from ..logger import get_logger

logger = get_logger(__name__)


class ConfigManager:
    """Configuration manager for Fret Atlas components.

    Each section starts from built-in defaults; a ``<section>.json`` file in
    the config directory overrides them key by key. Files are only read,
    never written.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Directory holding configuration files, or None to use default
        """
        if config_dir is None:
            # Use ~/.config/fret_atlas by default
            home = os.path.expanduser("~")
            config_dir = os.path.join(home, ".config", "fret_atlas")

        self.config_dir = Path(config_dir)

        # Default configurations
        self.default_configs = {
            "synth": SynthSettings().to_config(),
            "audio_output": {
                "device_id": None,
                "sample_rate": 44100,
                "blocksize": 256,
            },
            "instrument": {
                "num_frets": 24,
                "reference_hz": 440.0,
            },
        }

        # Load existing configurations or fall back to defaults
        self.configs = {}
        for config_name, default_config in self.default_configs.items():
            self.configs[config_name] = self.load_config(config_name, default_config)

    def load_config(self, name: str, default_config: Dict[str, Any]) -> Dict[str, Any]:
        """Load configuration from file, filling gaps from the defaults.

        Args:
            name: Configuration name
            default_config: Default configuration to use if file doesn't exist

        Returns:
            Configuration dictionary
        """
        config_file = self.config_dir / f"{name}.json"

        if not config_file.exists():
            return dict(default_config)

        try:
            with open(config_file, "r") as f:
                config = json.load(f)
            if not isinstance(config, dict):
                raise ValueError(f"expected a JSON object, got {type(config).__name__}")
            logger.info(f"Loaded configuration from {config_file}")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading configuration from {config_file}: {e}")
            return dict(default_config)

        # Ensure all default keys are present
        for key, value in default_config.items():
            if key not in config:
                config[key] = value
        return config

    def get_config(self, name: str) -> Dict[str, Any]:
        """Get configuration by name.

        Args:
            name: Configuration name

        Returns:
            A copy of the configuration dictionary (empty if unknown)
        """
        return dict(self.configs.get(name, {}))

    def update_config(self, name: str, updates: Dict[str, Any]) -> bool:
        """Apply updates to a configuration for the rest of this process.

        Args:
            name: Configuration name
            updates: Dictionary of updates to apply

        Returns:
            True if updated, False if the configuration is unknown
        """
        if name not in self.configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name].update(updates)
        return True

    def reset_config(self, name: str) -> bool:
        """Reset configuration to default.

        Args:
            name: Configuration name

        Returns:
            True if reset successfully, False otherwise
        """
        if name not in self.default_configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name] = dict(self.default_configs[name])
        return True

    def synth_settings(self) -> SynthSettings:
        return SynthSettings.from_config(self.get_config("synth"))
