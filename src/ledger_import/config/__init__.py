from .loader import AppConfig, ConfigError, DatabaseConfig, load_config
from .vocabulary import Vocabulary, build_vocabulary, default_vocabulary

__all__ = [
    "AppConfig",
    "ConfigError",
    "DatabaseConfig",
    "load_config",
    "Vocabulary",
    "build_vocabulary",
    "default_vocabulary",
]
