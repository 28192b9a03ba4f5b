"""
Settings loader module for the gilts pipeline.
Provides centralized access to the runtime settings stored in settings.yaml.
"""

import os
import yaml
from pathlib import Path
import logging

logger = logging.getLogger(__name__)

# Path to the settings file
# Always resolve relative to the project root (parent of core/)
_CORE_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _CORE_DIR.parent
SETTINGS_FILE = _PROJECT_ROOT / 'settings.yaml'

# Cache for loaded settings to avoid repeated file reads
_settings_cache = None
_cache_mtime = None
_cache_path = None


def get_settings_path():
    """Return the settings file path, honouring the GILTS_SETTINGS_FILE override."""
    override = os.getenv('GILTS_SETTINGS_FILE')
    if override:
        return Path(override)
    return Path(SETTINGS_FILE)


def load_settings():
    """
    Load settings from the YAML file with caching.
    Returns the full settings dictionary, or {} when the file is missing or unreadable.
    """
    global _settings_cache, _cache_mtime, _cache_path

    try:
        settings_path = get_settings_path()

        if settings_path.exists():
            current_mtime = settings_path.stat().st_mtime
            # Reload when the file changed, moved, or was never cached
            if _settings_cache is None or _cache_mtime != current_mtime or _cache_path != settings_path:
                with open(settings_path, 'r', encoding='utf-8') as f:
                    _settings_cache = yaml.safe_load(f) or {}
                _cache_mtime = current_mtime
                _cache_path = settings_path
                logger.info(f"Loaded settings from {settings_path}")
            return _settings_cache
        else:
            logger.warning(f"Settings file {settings_path} not found, using defaults")
            return {}
    except Exception as e:
        logger.error(f"Error loading settings: {e}")
        return {}


def get_app_config():
    """Get application configuration settings."""
    settings = load_settings()
    return settings.get('app_config', {}) or {}


def get_solver_settings():
    """Get Newton-Raphson solver settings (tolerance, max_iterations, derivative_floor)."""
    settings = load_settings()
    return settings.get('solver', {}) or {}


def get_collection_settings():
    """Get batch collection settings (workers, default source)."""
    settings = load_settings()
    return settings.get('collection', {}) or {}


def get_source_layouts():
    """Get per-source column layout overrides."""
    settings = load_settings()
    return settings.get('sources', {}) or {}


def reload_settings():
    """Force reload of settings from disk."""
    global _settings_cache, _cache_mtime, _cache_path
    _settings_cache = None
    _cache_mtime = None
    _cache_path = None
