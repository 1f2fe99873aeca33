"""
Client Configuration Management
"""

import os
import json
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any

from dotenv import load_dotenv

from reportsdesk.exceptions import ConfigurationError


DEFAULT_API_BASE_URL = "http://localhost:5000/api"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ClientConfig:
    """Configuration for the ReportsDesk client"""

    # API settings
    api_base_url: str = DEFAULT_API_BASE_URL
    timeout: float = 30.0
    coalesce_refresh: bool = False

    # Output settings
    verbose: bool = False

    # Logging
    log_level: str = "WARNING"
    log_format: str = "text"  # text, json
    log_file: Optional[str] = None

    # Paths
    config_dir: str = field(default_factory=lambda: str(Path.home() / ".reportsdesk"))
    credentials_file: str = "credentials.json"

    def __post_init__(self):
        """Normalize the base URL and resolve file paths"""
        self.api_base_url = self.normalize_base_url(self.api_base_url)

        if not os.path.isabs(self.credentials_file):
            self.credentials_file = str(Path(self.config_dir) / self.credentials_file)

    @staticmethod
    def normalize_base_url(url: Optional[str]) -> str:
        """Strip trailing slashes; fall back to the local default when unset"""
        url = (url or "").strip()
        if not url:
            return DEFAULT_API_BASE_URL
        if not url.startswith(("http://", "https://")):
            raise ConfigurationError(f"Invalid API base URL: {url}", setting="api_base_url")
        return url.rstrip("/")

    def load_from_file(self, config_path: str) -> None:
        """Load configuration from JSON file"""
        path = Path(config_path)
        if path.exists():
            # A credentials path derived from the old config_dir follows it
            follows_config_dir = Path(self.credentials_file).parent == Path(self.config_dir)

            with open(path, encoding="utf-8") as f:
                data = json.load(f)
                for key, value in data.items():
                    if hasattr(self, key):
                        setattr(self, key, value)
            self.api_base_url = self.normalize_base_url(self.api_base_url)

            if follows_config_dir and "credentials_file" not in data:
                self.credentials_file = str(Path(self.config_dir) / Path(self.credentials_file).name)
            elif not os.path.isabs(self.credentials_file):
                self.credentials_file = str(Path(self.config_dir) / self.credentials_file)

    def save_to_file(self, config_path: Optional[str] = None) -> None:
        """Save configuration to JSON file"""
        path = Path(config_path or (Path(self.config_dir) / "config.json"))
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding="utf-8") as f:
            json.dump(asdict(self), f, indent=2)

    @classmethod
    def load_default(cls, env_file: Optional[str] = None) -> "ClientConfig":
        """Load configuration: defaults, then config.json, then .env and environment"""
        load_dotenv(dotenv_path=env_file, override=False)

        config_dir = os.environ.get("REPORTSDESK_CONFIG_DIR")
        config = cls(config_dir=config_dir) if config_dir else cls()

        default_config_path = Path(config.config_dir) / "config.json"
        if default_config_path.exists():
            config.load_from_file(str(default_config_path))

        # Override with environment variables
        config._load_from_env()

        return config

    def _load_from_env(self) -> None:
        """Load configuration from environment variables"""
        env_mappings = {
            "NEXT_PUBLIC_API_URL": ("api_base_url", self.normalize_base_url),
            "REPORTSDESK_API_URL": ("api_base_url", self.normalize_base_url),  # Takes precedence
            "REPORTSDESK_TIMEOUT": ("timeout", float),
            "REPORTSDESK_COALESCE_REFRESH": ("coalesce_refresh", _parse_bool),
            "REPORTSDESK_LOG_LEVEL": "log_level",
            "REPORTSDESK_LOG_FORMAT": "log_format",
            "REPORTSDESK_LOG_FILE": "log_file",
            "REPORTSDESK_VERBOSE": ("verbose", _parse_bool),
        }

        for env_var, mapping in env_mappings.items():
            value = os.environ.get(env_var)
            if value:
                if isinstance(mapping, tuple):
                    attr, converter = mapping
                    try:
                        setattr(self, attr, converter(value))
                    except ValueError as e:
                        raise ConfigurationError(f"Invalid value for {env_var}: {value}", setting=attr) from e
                else:
                    setattr(self, mapping, value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        return asdict(self)
