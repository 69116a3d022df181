"""
Configuration management for contactme
"""
from .settings import Settings, SettingsLoader

__all__ = ["Settings", "SettingsLoader"]
