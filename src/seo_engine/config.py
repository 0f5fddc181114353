from dotenv import load_dotenv
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional
from pathlib import Path
import json
import logging
import os

import yaml

load_dotenv()  # Loads variables from .env file

logger = logging.getLogger(__name__)


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    SEO_LOCALE = os.getenv("SEO_LOCALE", "fr")
    SEO_SITE_NAME = os.getenv("SEO_SITE_NAME", "")
    SEO_SITE_URL = os.getenv("SEO_SITE_URL")
    DATABASE_URL = os.getenv("SEO_DATABASE_URL", "sqlite:///seo_history.db")  # Default to SQLite
    USER_AGENT = os.getenv("SEO_USER_AGENT", "SeoAnalyzer-LinkChecker/1.0")
    LINK_CHECK_TIMEOUT = float(os.getenv("SEO_LINK_CHECK_TIMEOUT", "5"))
    CACHE_TTL_SECONDS = int(os.getenv("SEO_CACHE_TTL_SECONDS", "900"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()


@dataclass
class AnalysisThresholds:
    """Configurable thresholds for on-page analysis."""

    # Title
    title_min: int = 30
    title_max: int = 60

    # Meta description
    meta_description_min: int = 120
    meta_description_max: int = 160

    # URL
    slug_max_length: int = 75

    # Content length (words) per page type
    min_words_generic: int = 300
    min_words_post: int = 800
    min_words_form: int = 150
    min_words_legal: int = 200
    thin_content_words: int = 100

    # Keyword density (percentage)
    keyword_density_min: float = 0.5
    keyword_density_max: float = 2.5
    keyword_stuffing_threshold: float = 3.0

    # Images
    alt_coverage_ratio: float = 0.8
    alt_descriptive_min_length: int = 20

    # Headings
    words_per_heading: int = 300

    # Readability
    long_sentence_ratio: float = 0.3
    long_paragraph_words: int = 150
    long_section_words: int = 400
    consecutive_starts_max: int = 3

    # Social previews
    social_title_max: int = 65
    social_description_max: int = 155

    # Cornerstone content
    cornerstone_min_words: int = 1500
    cornerstone_min_internal_links: int = 5

    # Freshness (days)
    freshness_evergreen_warn_days: int = 730
    freshness_fail_days: int = 365
    freshness_warn_days: int = 180
    freshness_review_warn_days: int = 180
    thin_aging_words: int = 500

    # Quality (words)
    quality_min_words: int = 50
    quality_substantial_words: int = 200

    @classmethod
    def from_env(cls) -> "AnalysisThresholds":
        """Load thresholds from environment variables.

        Environment variables should be prefixed with SEO_THRESHOLD_
        e.g., SEO_THRESHOLD_TITLE_MAX=65

        Returns:
            AnalysisThresholds with values from environment
        """
        thresholds = cls()
        prefix = "SEO_THRESHOLD_"

        for field_name in thresholds.__dataclass_fields__:
            env_key = f"{prefix}{field_name.upper()}"
            env_value = os.getenv(env_key)

            if env_value is not None:
                field_type = thresholds.__dataclass_fields__[field_name].type
                try:
                    if field_type == int:
                        setattr(thresholds, field_name, int(env_value))
                    elif field_type == float:
                        setattr(thresholds, field_name, float(env_value))
                except ValueError:
                    logger.debug(f"Ignoring non-numeric {env_key}={env_value!r}")

        return thresholds

    @classmethod
    def from_file(cls, path: str) -> "AnalysisThresholds":
        """Load thresholds from a JSON or YAML configuration file.

        Args:
            path: Path to configuration file

        Returns:
            AnalysisThresholds with values from file
        """
        file_path = Path(path)

        if not file_path.exists():
            return cls()

        config = _read_config_file(file_path)
        threshold_config = config.get('thresholds', config)
        return cls().with_overrides(threshold_config)

    def with_overrides(self, overrides: Optional[Dict[str, Any]]) -> "AnalysisThresholds":
        """Return a copy with numeric overrides applied.

        Unknown names and non-numeric values are ignored.
        """
        if not overrides:
            return replace(self)

        changes = {}
        for name, value in overrides.items():
            if name not in self.__dataclass_fields__:
                logger.debug(f"Ignoring unknown threshold {name!r}")
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                logger.debug(f"Ignoring non-numeric threshold {name}={value!r}")
                continue
            field_type = self.__dataclass_fields__[name].type
            changes[name] = int(value) if field_type == int else float(value)

        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Convert thresholds to dictionary.

        Returns:
            Dictionary of all threshold values
        """
        return {
            field_name: getattr(self, field_name)
            for field_name in self.__dataclass_fields__
        }

    def save_to_file(self, path: str) -> None:
        """Save current thresholds to a JSON file.

        Args:
            path: Path to save configuration
        """
        with open(path, 'w') as f:
            json.dump({'thresholds': self.to_dict()}, f, indent=2)


# Global default thresholds instance
default_thresholds = AnalysisThresholds()


def _read_config_file(file_path: Path) -> dict:
    with open(file_path, 'r') as f:
        if file_path.suffix.lower() in ('.yaml', '.yml'):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)
    return data or {}


@dataclass
class SeoConfig:
    """Per-site analysis configuration.

    Attributes:
        locale: Language of the analyzed content ('fr', 'en')
        site_name: Brand name appended to titles
        site_url: Canonical origin of the site, used by the canonical checks
        disabled_rules: Rule group names to skip
        thresholds: Numeric thresholds
        override_weights: Group name -> weight applied to every finding of that group
        local_seo_slugs: Extra slugs classified as local SEO landing pages
    """
    locale: str = "fr"
    site_name: str = ""
    site_url: Optional[str] = None
    disabled_rules: List[str] = field(default_factory=list)
    thresholds: AnalysisThresholds = field(default_factory=AnalysisThresholds)
    override_weights: Dict[str, float] = field(default_factory=dict)
    local_seo_slugs: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "SeoConfig":
        return cls(
            locale=settings.SEO_LOCALE,
            site_name=settings.SEO_SITE_NAME,
            site_url=settings.SEO_SITE_URL,
            thresholds=AnalysisThresholds.from_env(),
        )

    @classmethod
    def from_file(cls, path: str) -> "SeoConfig":
        """Load a site configuration from a JSON or YAML file.

        Recognized keys: locale, site_name, site_url, disabled_rules,
        thresholds, override_weights, local_seo_slugs. Missing files give
        the defaults.
        """
        file_path = Path(path)
        if not file_path.exists():
            logger.debug(f"Config file {path} not found, using defaults")
            return cls()

        data = _read_config_file(file_path)
        weights = {}
        for group, weight in (data.get('override_weights') or {}).items():
            if isinstance(weight, (int, float)) and not isinstance(weight, bool):
                weights[group] = float(weight)

        return cls(
            locale=data.get('locale') or "fr",
            site_name=data.get('site_name') or "",
            site_url=data.get('site_url'),
            disabled_rules=list(data.get('disabled_rules') or []),
            thresholds=AnalysisThresholds().with_overrides(data.get('thresholds')),
            override_weights=weights,
            local_seo_slugs=list(data.get('local_seo_slugs') or []),
        )

    def merge_settings(self, persisted: Optional[Dict[str, Any]]) -> "SeoConfig":
        """Merge settings persisted by the site editor into this config.

        Disabled groups are unioned in order, a non-empty site name
        replaces the configured one and numeric thresholds override the
        configured ones. Everything else is kept.

        Args:
            persisted: Settings document; camelCase or snake_case keys

        Returns:
            New SeoConfig
        """
        if not persisted:
            return replace(self)

        disabled = list(self.disabled_rules)
        for name in persisted.get('disabledRules') or persisted.get('disabled_rules') or []:
            if name not in disabled:
                disabled.append(name)

        site_name = persisted.get('siteName') or persisted.get('site_name') or self.site_name
        thresholds = self.thresholds.with_overrides(persisted.get('thresholds'))

        return replace(
            self,
            disabled_rules=disabled,
            site_name=site_name,
            thresholds=thresholds,
        )

    def to_dict(self) -> dict:
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result['thresholds'] = self.thresholds.to_dict()
        return result
