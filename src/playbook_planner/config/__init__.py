"""Configuration module."""

from playbook_planner.config.logging import configure_default_logging, configure_logging
from playbook_planner.config.settings import LogFormat, Settings, settings

__all__ = ["Settings", "settings", "LogFormat", "configure_logging", "configure_default_logging"]
