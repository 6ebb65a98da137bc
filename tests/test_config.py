"""Tests for environment-based settings."""

from src.config import Settings


def test_defaults_when_environment_is_empty():
    settings = Settings.from_env({})

    assert settings.cache_ttl_seconds == 3600
    assert settings.min_interactions == 3
    assert settings.neighbor_count == 10
    assert settings.log_level == "INFO"
    assert settings.interactions_csv is None
    assert settings.catalog_csv is None


def test_values_read_from_environment():
    settings = Settings.from_env(
        {
            "RECOMMENDATION_CACHE_TTL": "120",
            "MIN_INTERACTIONS_FOR_RECOMMENDATIONS": "5",
            "RECOMMENDATION_NEIGHBORS": "20",
            "LOG_LEVEL": "debug",
            "INTERACTIONS_CSV": "data/interactions.csv",
            "CATALOG_CSV": "data/catalog.csv",
        }
    )

    assert settings.cache_ttl_seconds == 120
    assert settings.min_interactions == 5
    assert settings.neighbor_count == 20
    assert settings.log_level == "DEBUG"
    assert settings.interactions_csv == "data/interactions.csv"
    assert settings.catalog_csv == "data/catalog.csv"


def test_unparseable_values_fall_back_to_defaults(caplog):
    settings = Settings.from_env(
        {"RECOMMENDATION_CACHE_TTL": "one hour", "RECOMMENDATION_NEIGHBORS": "-4"}
    )

    assert settings.cache_ttl_seconds == 3600
    assert settings.neighbor_count == 10
    assert "RECOMMENDATION_CACHE_TTL" in caplog.text


def test_blank_values_use_defaults():
    settings = Settings.from_env({"MIN_INTERACTIONS_FOR_RECOMMENDATIONS": " ", "CATALOG_CSV": ""})

    assert settings.min_interactions == 3
    assert settings.catalog_csv is None
