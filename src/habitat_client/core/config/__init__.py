# Configuration package

from habitat_client.core.config.app_config import HabConfig, load_config

__all__ = [
    "HabConfig",
    "load_config",
]
