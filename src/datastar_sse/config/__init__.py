"""datastar-sse configuration management."""

from datastar_sse.config.settings import Settings, get_settings, reload_settings

__all__ = ["Settings", "get_settings", "reload_settings"]
