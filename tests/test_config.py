# tests/test_config.py
"""Tests for configuration and locale selection."""

import json

import pytest

from seo_engine.config import AnalysisThresholds, SeoConfig
from seo_engine.locale import resolve_analysis_locale
from seo_engine.locales import get_lexicon


class TestAnalysisThresholds:
    """Test cases for AnalysisThresholds."""

    def test_defaults(self):
        """Default thresholds match the documented values."""
        thresholds = AnalysisThresholds()
        assert (thresholds.title_min, thresholds.title_max) == (30, 60)
        assert thresholds.keyword_stuffing_threshold == 3.0
        assert thresholds.freshness_fail_days == 365

    def test_from_env(self, monkeypatch):
        """SEO_THRESHOLD_* variables override defaults; bad values are ignored."""
        monkeypatch.setenv("SEO_THRESHOLD_TITLE_MAX", "65")
        monkeypatch.setenv("SEO_THRESHOLD_KEYWORD_DENSITY_MAX", "3.5")
        monkeypatch.setenv("SEO_THRESHOLD_TITLE_MIN", "abc")
        thresholds = AnalysisThresholds.from_env()
        assert thresholds.title_max == 65
        assert thresholds.keyword_density_max == 3.5
        assert thresholds.title_min == 30

    def test_with_overrides(self):
        """Numeric overrides apply; unknown names and non-numbers are ignored."""
        base = AnalysisThresholds()
        changed = base.with_overrides({'title_max': 70, 'unknown': 1, 'title_min': "40", 'slug_max_length': True})
        assert changed.title_max == 70
        assert changed.title_min == 30
        assert changed.slug_max_length == 75
        assert base.title_max == 60

    def test_file_round_trip(self, tmp_path):
        """Saved thresholds load back."""
        path = tmp_path / "thresholds.json"
        AnalysisThresholds(title_max=72).save_to_file(str(path))
        assert AnalysisThresholds.from_file(str(path)).title_max == 72

    def test_missing_file(self, tmp_path):
        """A missing file gives defaults."""
        assert AnalysisThresholds.from_file(str(tmp_path / "nope.json")) == AnalysisThresholds()


class TestSeoConfig:
    """Test cases for SeoConfig."""

    def test_yaml_file(self, tmp_path):
        """Site configuration loads from YAML."""
        path = tmp_path / "seo.yaml"
        path.write_text(
            "locale: en\n"
            "site_name: Nova\n"
            "site_url: https://nova.example\n"
            "disabled_rules: [social, schema]\n"
            "thresholds:\n"
            "  title_max: 65\n"
            "override_weights:\n"
            "  title: 4\n"
            "  url: high\n",
            encoding='utf-8',
        )
        config = SeoConfig.from_file(str(path))
        assert config.locale == "en"
        assert config.site_name == "Nova"
        assert config.disabled_rules == ["social", "schema"]
        assert config.thresholds.title_max == 65
        assert config.override_weights == {'title': 4.0}

    def test_json_file(self, tmp_path):
        """Site configuration loads from JSON too."""
        path = tmp_path / "seo.json"
        path.write_text(json.dumps({'local_seo_slugs': ['lyon']}), encoding='utf-8')
        config = SeoConfig.from_file(str(path))
        assert config.locale == "fr"
        assert config.local_seo_slugs == ['lyon']

    def test_merge_settings(self):
        """Persisted settings union disabled groups and override the site name."""
        config = SeoConfig(site_name="Old", disabled_rules=['social'])
        merged = config.merge_settings({
            'disabledRules': ['social', 'freshness'],
            'siteName': "New",
            'thresholds': {'title_min': 25},
        })
        assert merged.disabled_rules == ['social', 'freshness']
        assert merged.site_name == "New"
        assert merged.thresholds.title_min == 25
        assert config.site_name == "Old"

    def test_merge_empty_settings(self):
        """Nothing persisted leaves the configuration unchanged."""
        config = SeoConfig(site_name="Nova")
        assert config.merge_settings(None) == config

    def test_to_dict(self):
        """Thresholds are serialized as a plain dict."""
        data = SeoConfig().to_dict()
        assert data['locale'] == "fr"
        assert data['thresholds']['title_min'] == 30


class TestLocaleResolution:
    """Tests for resolve_analysis_locale."""

    def test_plugin_locale_wins(self):
        """A configured locale takes precedence over the request."""
        assert resolve_analysis_locale("en-US", plugin_locale="fr") == "fr"

    def test_custom_mapping(self):
        """Exact mapping keys come before prefixes."""
        assert resolve_analysis_locale("en-CA", custom_mapping={'en-CA': 'fr'}) == "fr"
        assert resolve_analysis_locale("fr-BE", custom_mapping={'de': 'en'}) == "fr"
        assert resolve_analysis_locale("de-AT", custom_mapping={'de': 'en'}) == "en"

    @pytest.mark.parametrize("request_locale,expected", [
        ("en", "en"),
        ("en-GB", "en"),
        ("fr-CA", "fr"),
        ("es", "fr"),
        (None, "fr"),
    ])
    def test_prefixes_and_default(self, request_locale, expected):
        """en and fr prefixes resolve directly; anything else falls back to fr."""
        assert resolve_analysis_locale(request_locale) == expected

    def test_lexicon_fallback(self):
        """Regional and unknown locale codes map to a lexicon."""
        assert get_lexicon("en-US").code == "en"
        assert get_lexicon("de").code == "fr"
