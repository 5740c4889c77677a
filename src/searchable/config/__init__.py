"""Configuration module for searchable."""

from searchable.config.settings import JoinKind, RelevanceConfig, Settings, get_settings

__all__ = ["JoinKind", "RelevanceConfig", "Settings", "get_settings"]
