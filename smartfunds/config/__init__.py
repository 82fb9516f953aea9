"""Configuration module for the mission engine.

Available Configurations:
- MissionEngineConfig: Storage backend, database URL and log environment
"""

from smartfunds.config.mission_config import (
    DEFAULT_DATABASE_URL,
    TEST_MISSION_ENGINE_CONFIG,
    MissionEngineConfig,
)

__all__ = [
    "DEFAULT_DATABASE_URL",
    "MissionEngineConfig",
    "TEST_MISSION_ENGINE_CONFIG",
]
