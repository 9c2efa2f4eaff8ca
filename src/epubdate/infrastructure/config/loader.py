"""Configuration loading and validation."""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any

from dotenv import find_dotenv, load_dotenv

from epubdate.domain.models import BookMetadata, Configuration
from epubdate.domain.exceptions import ConfigurationError
from epubdate.shared.logging import get_logger

logger = get_logger(__name__)

METADATA_FIELDS = ('title', 'author', 'isbn', 'publisher')

CONFIG_FIELDS = {
    'api_host', 'api_token', 'keep_remote', 'input_file',
    'poll_ticks', 'tick_seconds', 'max_polls', 'transport', 'request_timeout',
}


class ConfigLoader:
    """
    Builds the run Configuration from a YAML file, the environment and CLI overrides.

    Precedence, lowest first: YAML file, environment (including a .env file),
    overrides.
    """

    def __init__(self, config_path: Optional[Path] = None, load_env_file: bool = True):
        """
        Initialize config loader.

        Args:
            config_path: Optional path to YAML config file
            load_env_file: Read a .env file into the environment first
        """
        self.config_path = config_path or Path("epubdate.yaml")
        self.load_env_file = load_env_file
        self._logger = get_logger(__name__)

    def load(self, overrides: Optional[Dict[str, Any]] = None) -> Configuration:
        """
        Load configuration from file and environment.

        Args:
            overrides: Values from the command line; None values are skipped

        Returns:
            Configuration instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_dict: Dict[str, Any] = {}

        config_dict.update(self._load_from_file())

        if self.load_env_file:
            load_dotenv(find_dotenv(usecwd=True))
        config_dict.update(self._load_from_env())

        if overrides:
            for k, v in overrides.items():
                if v is None:
                    continue
                config_dict[k] = v

        return self.build(config_dict)

    def build(self, config_dict: Dict[str, Any]) -> Configuration:
        """Turn a flat dict into a validated Configuration."""
        if not config_dict.get('api_token'):
            raise ConfigurationError("No Bookalope API token given (use --token or BOOKALOPE_TOKEN)")
        if not config_dict.get('input_file'):
            raise ConfigurationError("No EPUB file specified")

        metadata = config_dict.get('metadata') or {}
        if not isinstance(metadata, dict):
            raise ConfigurationError("metadata must be a mapping")
        metadata = dict(metadata)
        for name in METADATA_FIELDS:
            if config_dict.get(name) is not None:
                metadata[name] = config_dict[name]
        unknown = set(metadata) - set(METADATA_FIELDS)
        if unknown:
            raise ConfigurationError(f"Unknown metadata fields: {', '.join(sorted(unknown))}")

        filtered = {k: v for k, v in config_dict.items() if k in CONFIG_FIELDS}
        filtered['input_file'] = Path(filtered['input_file'])
        filtered['api_token'] = str(filtered['api_token'])

        # 0 means poll without bound
        if filtered.get('max_polls') == 0:
            filtered['max_polls'] = None

        try:
            return Configuration(
                metadata=BookMetadata(**{k: str(v) for k, v in metadata.items()}),
                **filtered
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    def _load_from_file(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            self._logger.debug(f"Config file not found: {self.config_path}")
            return {}

        self._logger.info(f"Loading config from {self.config_path}")
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Cannot parse {self.config_path}: {e}") from e

        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"{self.config_path} must contain a mapping")
        return yaml_config

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        if token := os.getenv("BOOKALOPE_TOKEN"):
            env_config["api_token"] = token

        if host := os.getenv("BOOKALOPE_HOST"):
            env_config["api_host"] = host

        if keep := os.getenv("BOOKALOPE_KEEP"):
            env_config["keep_remote"] = keep.lower() in ("true", "1", "yes")

        if transport := os.getenv("EPUBDATE_TRANSPORT"):
            env_config["transport"] = transport.lower()

        if max_polls := os.getenv("EPUBDATE_MAX_POLLS"):
            try:
                env_config["max_polls"] = int(max_polls)
            except ValueError:
                self._logger.warning(f"Invalid EPUBDATE_MAX_POLLS value: {max_polls}")

        if poll_ticks := os.getenv("EPUBDATE_POLL_TICKS"):
            try:
                env_config["poll_ticks"] = int(poll_ticks)
            except ValueError:
                self._logger.warning(f"Invalid EPUBDATE_POLL_TICKS value: {poll_ticks}")

        if timeout := os.getenv("EPUBDATE_REQUEST_TIMEOUT"):
            try:
                env_config["request_timeout"] = float(timeout)
            except ValueError:
                self._logger.warning(f"Invalid EPUBDATE_REQUEST_TIMEOUT value: {timeout}")

        return env_config
