"""Configuration module: exports Settings and the layered loaders."""

from cms_context.config.loader import load_config, load_settings
from cms_context.config.settings import Settings

__all__ = ["Settings", "load_config", "load_settings"]
