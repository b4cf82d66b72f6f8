"""Configuration module for dictaflow."""

from dictaflow.config.settings import EngineConfig, load_config

__all__ = ["EngineConfig", "load_config"]
