"""Configuration management for the cookie consent manager.

This module provides configuration loading and validation for the consent
engine, including the cookie manifest, the preference cookie settings and
the page bindings for the preference form and the cookie banner.
"""

import os
from pathlib import Path
from typing import Dict, List, Optional, Any
import logging

import yaml
from pydantic import BaseModel, Field, field_validator

from .models import CookieCategory, DEFAULT_PREFERENCE_COOKIE_NAME

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_DAYS = 365


class CookieManagerConfig(BaseModel):
    """Complete cookie manager configuration.

    Accepts the hyphenated option names used in configuration files
    (``delete-undefined-cookies``, ``cookie-manifest``, ...) as well as the
    snake_case field names.
    """

    model_config = {"populate_by_name": True}

    # Cookie evaluation
    delete_undefined_cookies: bool = Field(
        default=True,
        alias="delete-undefined-cookies",
        description="Delete cookies that match no manifest category"
    )
    cookie_manifest: List[CookieCategory] = Field(
        default_factory=list,
        alias="cookie-manifest",
        description="Ordered consent categories"
    )

    # Preference cookie
    user_preference_cookie_name: str = Field(
        default=DEFAULT_PREFERENCE_COOKIE_NAME,
        alias="user-preference-cookie-name",
        description="Name of the cookie holding the consent record"
    )
    user_preference_cookie_secure: bool = Field(
        default=False,
        alias="user-preference-cookie-secure",
        description="Mark the preference cookie as Secure"
    )
    user_preference_cookie_expiry_days: int = Field(
        default=DEFAULT_EXPIRY_DAYS,
        alias="user-preference-cookie-expiry-days",
        description="Lifetime of the preference cookie in days"
    )

    # Page bindings
    user_preference_configuration_form_id: Optional[str] = Field(
        default=None,
        alias="user-preference-configuration-form-id",
        description="Element id of the preference form"
    )
    set_checkboxes_in_preference_form: bool = Field(
        default=False,
        alias="set-checkboxes-in-preference-form",
        description="Pre-fill the preference form from the stored record"
    )
    cookie_banner_id: Optional[str] = Field(
        default=None,
        alias="cookie-banner-id",
        description="Element id of the cookie banner"
    )
    cookie_banner_visibility_class: str = Field(
        default="hidden",
        alias="cookie-banner-visibility-class",
        description="Marker class that hides the banner"
    )
    cookie_banner_visible_on_page_with_preference_form: bool = Field(
        default=True,
        alias="cookie-banner-visible-on-page-with-preference-form",
        description="Show the banner on the page holding the preference form"
    )

    # Environment
    environment: str = Field(default="development", description="Current environment")

    @field_validator('user_preference_cookie_secure', mode='before')
    @classmethod
    def validate_secure(cls, v):
        """Only a literal boolean True enables the Secure flag."""
        return v is True

    @field_validator('user_preference_cookie_expiry_days', mode='before')
    @classmethod
    def validate_expiry_days(cls, v):
        """Fall back to the default lifetime for non-numeric or non-finite values."""
        if isinstance(v, bool):
            return DEFAULT_EXPIRY_DAYS
        try:
            return int(float(v))
        except (TypeError, ValueError, OverflowError):
            logger.warning(f"Unusable preference cookie expiry {v!r}; using {DEFAULT_EXPIRY_DAYS} days")
            return DEFAULT_EXPIRY_DAYS

    @field_validator('user_preference_configuration_form_id', 'cookie_banner_id', mode='before')
    @classmethod
    def validate_element_id(cls, v):
        """Treat non-string and blank element ids as unset."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @property
    def preference_form_enabled(self) -> bool:
        return self.user_preference_configuration_form_id is not None

    @property
    def banner_enabled(self) -> bool:
        return self.cookie_banner_id is not None

    def get_optional_categories(self) -> List[CookieCategory]:
        """Get the categories that require consent, in manifest order."""
        return [category for category in self.cookie_manifest if category.optional]

    def get_category(self, name: str) -> Optional[CookieCategory]:
        """Get the first category with the given name."""
        for category in self.cookie_manifest:
            if category.name == name:
                return category
        return None

    def validate_manifest(self) -> List[str]:
        """Validate the cookie manifest and return issues."""
        issues = []

        names = [category.name for category in self.cookie_manifest]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            issues.append(f"Duplicate category names found: {', '.join(duplicates)}")

        # A prefix starting with an earlier category's prefix never wins
        for index, category in enumerate(self.cookie_manifest):
            for prefix in category.prefixes:
                for earlier in self.cookie_manifest[:index]:
                    if earlier.owns(prefix):
                        issues.append(
                            f"Prefix '{prefix}' of category '{category.name}' is shadowed "
                            f"by category '{earlier.name}'"
                        )
                        break

        return issues


class ConfigLoader:
    """Loads cookie manager configuration from YAML files with environment support."""

    BASE_FILENAME = "cookie-manager.yaml"

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize config loader.

        Args:
            config_dir: Directory containing config files. Defaults to project config/ dir.
        """
        if config_dir is None:
            project_root = Path(__file__).parent.parent
            config_dir = project_root / "config"

        self.config_dir = Path(config_dir)
        self.environment = os.getenv('COOKIE_MANAGER_ENV', 'development')

    def load_config(self, environment: Optional[str] = None) -> CookieManagerConfig:
        """Load cookie manager configuration for specified environment.

        Args:
            environment: Environment name. Defaults to COOKIE_MANAGER_ENV or 'development'.

        Returns:
            Loaded and validated configuration.

        Raises:
            FileNotFoundError: If the base config file is not found.
            ValueError: If configuration is invalid.
        """
        env = environment or self.environment

        base_config_path = self.config_dir / self.BASE_FILENAME
        if not base_config_path.exists():
            raise FileNotFoundError(f"Base cookie manager config not found: {base_config_path}")

        config_data = self._read_yaml(base_config_path)

        env_config_path = self.config_dir / f"cookie-manager.{env}.yaml"
        if env_config_path.exists():
            logger.info(f"Loading environment config: {env_config_path}")
            config_data = self._deep_merge(config_data, self._read_yaml(env_config_path))

        config_data['environment'] = env
        return self.build_config(config_data)

    def load_file(self, config_path: Path) -> CookieManagerConfig:
        """Load configuration from a single file without environment overrides."""
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Cookie manager config not found: {config_path}")
        return self.build_config(self._read_yaml(config_path))

    def build_config(self, config_data: Dict[str, Any]) -> CookieManagerConfig:
        """Validate raw configuration data and log manifest issues."""
        try:
            config = CookieManagerConfig(**config_data)
        except Exception as e:
            raise ValueError(f"Invalid cookie manager configuration: {e}")

        issues = config.validate_manifest()
        if issues:
            logger.warning(f"Cookie manifest validation issues: {issues}")

        logger.info(
            f"Loaded cookie manager configuration with "
            f"{len(config.cookie_manifest)} manifest categories"
        )
        return config

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Cookie manager config must be a mapping: {path}")
        return data

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


# Global configuration instance
_config_loader = ConfigLoader()
_config_cache: Optional[CookieManagerConfig] = None


def get_cookie_manager_config(environment: Optional[str] = None, force_reload: bool = False) -> CookieManagerConfig:
    """Get cookie manager configuration for the specified environment.

    Args:
        environment: Environment name. If None, uses COOKIE_MANAGER_ENV or 'development'.
        force_reload: Force reload from files, ignoring cache.

    Returns:
        Cookie manager configuration instance.
    """
    global _config_cache

    if force_reload or _config_cache is None:
        try:
            _config_cache = _config_loader.load_config(environment)
        except FileNotFoundError:
            logger.warning("Cookie manager config file not found, using default configuration")
            _config_cache = CookieManagerConfig()
        except Exception as e:
            logger.error(f"Failed to load cookie manager config: {e}")
            logger.warning("Using default configuration")
            _config_cache = CookieManagerConfig()

    return _config_cache


def load_config_from_file(config_path: Path) -> CookieManagerConfig:
    """Load cookie manager configuration from a specific file.

    Args:
        config_path: Path to the config file.

    Returns:
        Cookie manager configuration instance.
    """
    return ConfigLoader(Path(config_path).parent).load_file(config_path)
