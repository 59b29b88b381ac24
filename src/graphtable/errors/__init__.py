"""Custom exception hierarchy for graphtable."""

from __future__ import annotations


class GraphTableError(Exception):
    """Base class for all custom errors raised by graphtable."""


# --- Configuration errors ---

class ConfigurationError(GraphTableError):
    """Base class for configuration related failures."""


class SettingsLoadError(ConfigurationError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(ConfigurationError):
    """Raised when settings data fails schema validation."""


class RecordsLoadError(ConfigurationError):
    """Raised when a records file handed to the CLI cannot be read."""


# --- Fetch errors ---

class FetchError(GraphTableError):
    """Raised (and delivered to completions) when an image fetch fails."""


class FetchCancelledError(FetchError):
    """Delivered to a completion whose fetch was cancelled before it finished."""
