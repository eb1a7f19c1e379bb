import json
import os
from pathlib import Path
from typing import Dict, Any

# Package defaults (bundled with code)
PACKAGE_CONFIG_DIR = Path(__file__).parent / "defaults"

# User overrides live outside the package, e.g. ./config/category_aliases.json
CONFIG_DIR_ENV_VAR = "FINANCE_TRACKER_CONFIG_DIR"


def user_config_dir() -> Path:
    """Directory searched for user config files before the bundled defaults"""
    return Path(os.environ.get(CONFIG_DIR_ENV_VAR, "config"))


class ConfigLoader:
    """Load configuration with user overrides"""

    @staticmethod
    def load_config(config_name: str) -> Dict[str, Any]:
        """
        Load config with fallback: user config -> default config

        Args:
            config_name: Name of the config file (e.g., 'category_aliases.json')

        Raises:
            FileNotFoundError: If no config file was found

        Returns:
            Parsed JSON configuration
        """
        user_config_path = user_config_dir() / config_name
        if user_config_path.exists():
            with open(user_config_path) as f:
                return json.load(f)

        default_config_path = PACKAGE_CONFIG_DIR / config_name
        if default_config_path.exists():
            with open(default_config_path) as f:
                return json.load(f)

        raise FileNotFoundError(
            f"Config file '{config_name}' not found in:\n"
            f" - {user_config_path}\n"
            f" - {default_config_path}"
        )

    @staticmethod
    def load_reconciliation_table() -> Dict[str, Any]:
        """Load the category name reconciliation table"""
        return ConfigLoader.load_config('category_aliases.json')

    @staticmethod
    def load_budget_defaults() -> Dict[str, Any]:
        """Load default budget categories and the monthly budget"""
        return ConfigLoader.load_config('budget_defaults.json')

    @staticmethod
    def load_alert_thresholds() -> Dict[str, Any]:
        """Load thresholds used when generating smart alerts"""
        return ConfigLoader.load_config('alerts.json')

    @staticmethod
    def load_settings() -> Dict[str, Any]:
        """Load general application settings (currency, locale, database path)"""
        return ConfigLoader.load_config('settings.json')
