"""Configuration module for the AuthProxy reconciler."""
from .settings import ProviderSettings, load_settings

__all__ = ["ProviderSettings", "load_settings"]
