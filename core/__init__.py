# Assistant Desk - Core Package
"""
Core package for the assistant's persisted configuration.
This package holds the configuration store, its file persistence and the
provider/model policy, and can be used independently of the UI layer.
"""

from core.config import ConfigStore
from core.model_policy import Provider
from core.models import AppConfig

__all__ = [
    "AppConfig",
    "ConfigStore",
    "Provider",
]
