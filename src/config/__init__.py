"""Configuration module: exports Settings, load_config, and the drive folder list."""

from src.config.drive_folders import DRIVE_FOLDERS, load_drive_folders
from src.config.loader import load_config
from src.config.settings import Settings

__all__ = ["DRIVE_FOLDERS", "Settings", "load_config", "load_drive_folders"]
