"""
Configuration and constants for the bank statement analyzer.

This module provides:
- Default settings for extraction and reconciliation
- Support for user-configurable settings via environment variables
- Loading overrides from a YAML file
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# =============================================================================
# Application Info
# =============================================================================

APP_NAME: str = "Bank Statement Analyzer"
APP_VERSION: str = "1.0.0"

# =============================================================================
# Extraction API Settings
# =============================================================================

EXTRACTION_MODEL: str = "claude-sonnet-4-20250514"
EXTRACTION_MAX_TOKENS: int = 4000

# Seconds to wait for the model before giving up on a request
API_TIMEOUT: float = 120.0
API_RETRY_COUNT: int = 2

# =============================================================================
# Upload Limits
# =============================================================================

MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10 MB
ACCEPTED_CONTENT_TYPES: List[str] = ["application/pdf"]
PDF_SIGNATURE: bytes = b"%PDF-"

# =============================================================================
# Reconciliation Settings
# =============================================================================

# Absolute tolerance in the statement's currency units
RECONCILIATION_TOLERANCE: float = 0.01
DEFAULT_CURRENCY: str = "USD"

CREDIT: str = "credit"
DEBIT: str = "debit"
TRANSACTION_TYPES: List[str] = [CREDIT, DEBIT]

# "ignore": unknown transaction types contribute zero to the net change
# "reject": unknown transaction types fail the reconciliation
UNKNOWN_TYPE_POLICIES: List[str] = ["ignore", "reject"]

# "reject": missing or non-finite numbers fail the extraction
# "zero": required numbers default to 0.0, optional ones are dropped
INVALID_NUMBER_POLICIES: List[str] = ["reject", "zero"]


# =============================================================================
# API Key
# =============================================================================

def get_api_key() -> str:
    """Get the Anthropic API key from environment variable."""
    api_key = os.environ.get("ANTHROPIC_API_KEY", "")
    return api_key


# =============================================================================
# Flexible Configuration System
# =============================================================================

class Config:
    """
    Configuration manager that supports:
    - Environment variables
    - A custom YAML configuration file
    - Runtime overrides
    """

    _instance: Optional["Config"] = None
    _settings: Dict[str, Any] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load_defaults()
            cls._instance._load_custom_config()
        return cls._instance

    def _load_defaults(self) -> None:
        """Load default settings."""
        self._settings = {
            # API settings
            "extraction_model": os.environ.get("EXTRACTION_MODEL", EXTRACTION_MODEL),
            "extraction_max_tokens": int(
                os.environ.get("EXTRACTION_MAX_TOKENS", str(EXTRACTION_MAX_TOKENS))
            ),
            "api_timeout": float(os.environ.get("API_TIMEOUT", str(API_TIMEOUT))),
            "api_retry_count": int(os.environ.get("API_RETRY_COUNT", str(API_RETRY_COUNT))),

            # Upload settings
            "max_upload_bytes": int(os.environ.get("MAX_UPLOAD_BYTES", str(MAX_UPLOAD_BYTES))),

            # Reconciliation settings
            "reconciliation_tolerance": float(
                os.environ.get("RECONCILIATION_TOLERANCE", str(RECONCILIATION_TOLERANCE))
            ),
            "default_currency": os.environ.get("DEFAULT_CURRENCY", DEFAULT_CURRENCY),
            "unknown_type_policy": os.environ.get("UNKNOWN_TYPE_POLICY", "ignore").lower(),
            "invalid_number_policy": os.environ.get("INVALID_NUMBER_POLICY", "reject").lower(),
        }

    def _load_custom_config(self) -> None:
        """Load custom configuration from YAML file if available."""
        config_paths = [
            Path.cwd() / "config.yaml",
            Path.cwd() / "config.yml",
            Path(__file__).parent / "config.yaml",
            Path.home() / ".bankstatementanalyzer" / "config.yaml",
        ]

        for config_path in config_paths:
            if config_path.exists():
                try:
                    with open(config_path, 'r', encoding='utf-8') as f:
                        custom_config = yaml.safe_load(f) or {}
                    self._settings.update(custom_config)
                    logger.info(f"Loaded config from {config_path}")
                    break
                except (OSError, yaml.YAMLError) as e:
                    logger.warning(f"Could not load config from {config_path}: {e}")

        self._check_policies()

    def _check_policies(self) -> None:
        """Fall back to the default for any unrecognised policy value."""
        if self._settings.get("unknown_type_policy") not in UNKNOWN_TYPE_POLICIES:
            logger.warning(
                f"Unknown unknown_type_policy {self._settings.get('unknown_type_policy')!r}, "
                "using 'ignore'"
            )
            self._settings["unknown_type_policy"] = "ignore"
        if self._settings.get("invalid_number_policy") not in INVALID_NUMBER_POLICIES:
            logger.warning(
                f"Unknown invalid_number_policy {self._settings.get('invalid_number_policy')!r}, "
                "using 'reject'"
            )
            self._settings["invalid_number_policy"] = "reject"

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        return self._settings.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value at runtime."""
        self._settings[key] = value

    def reload(self) -> None:
        """Reload configuration from environment and files."""
        self._load_defaults()
        self._load_custom_config()


def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
