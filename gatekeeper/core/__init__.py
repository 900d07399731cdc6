"""Core configuration, credentials, tokens and error kinds."""

from gatekeeper.core.config import get_settings, settings

__all__ = ["get_settings", "settings"]
