"""
Container settings and configuration.

Values come from the environment, with a ``.env`` file loaded first.
"""

import os
from typing import Optional, Dict, Any
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _flag(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Settings:
    """
    Container settings.

    Read once at construction; build a new instance after changing the
    environment.
    """

    def __init__(self):
        """Initialize settings from environment and defaults."""
        # Logging Settings
        self.log_level = os.getenv('LOG_LEVEL', 'INFO')
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        self.log_file = os.getenv('LOG_FILE') or None

        # Container Settings
        self.thread_safe = _flag('CONTAINER_THREAD_SAFE')
        self.collect_metrics = _flag('CONTAINER_COLLECT_METRICS')

        # CLI Settings
        self.bootstrap = os.getenv('CONTAINER_BOOTSTRAP') or None

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key
            default: Default value if not found or unset

        Returns:
            Configuration value
        """
        value = getattr(self, key, None)
        return value if value is not None else default

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return {
            'log_level': self.log_level,
            'log_format': self.log_format,
            'log_file': self.log_file,
            'thread_safe': self.thread_safe,
            'collect_metrics': self.collect_metrics,
            'bootstrap': self.bootstrap,
        }


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Optional[Settings]):
    """Set the global settings instance (useful for testing)."""
    global _settings
    _settings = settings
