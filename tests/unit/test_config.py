from __future__ import annotations

import pytest

from src.weaveit.config import CreditPricing, load_config, parse_payment_tiers


def test_parse_payment_tiers_default_format() -> None:
    assert parse_payment_tiers("5:30, 10:80 ,20:150") == {"5": 30, "10": 80, "20": 150}


@pytest.mark.parametrize(
    "raw",
    ["", " , ", "5", "5:abc", "5:0", "5:-1", ":30", "5:30,5:40"],
)
def test_parse_payment_tiers_rejects_bad_entries(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_payment_tiers(raw)


def test_pricing_defaults() -> None:
    pricing = CreditPricing()

    assert pricing.cost_of("video") == 2
    assert pricing.cost_of("audio") == 1
    assert pricing.credits_for_tier("20") == 150
    assert pricing.credits_for_tier(" 5 ") == 30
    assert pricing.credits_for_tier("7") is None
    with pytest.raises(ValueError):
        pricing.cost_of("image")


def test_load_config_reads_environment(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("MEDIA_ROOT", str(tmp_path / "media"))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'app.db'}")
    monkeypatch.setenv("TRIAL_CREDITS", "10")
    monkeypatch.setenv("VIDEO_COST", "3")
    monkeypatch.setenv("PAYMENT_TIERS", "1:5")
    monkeypatch.setenv("STAGE_TIMEOUT_SECONDS", "45")
    monkeypatch.setenv("PAYMENT_CONFIRMATION_TOKEN", "token")

    config = load_config()

    assert config.media_paths.artifacts.is_dir()
    assert config.trial_policy.credits == 10
    assert config.trial_policy.days == 7
    assert config.pricing.cost_of("video") == 3
    assert dict(config.pricing.payment_tiers) == {"1": 5}
    assert config.stage_timeout_seconds == 45.0
    assert config.payment_confirmation_token == "token"
    assert config.schema_features.trial_expiry is True
    config.engine.dispose()


@pytest.mark.parametrize(
    ("name", "value"),
    [("TRIAL_CREDITS", "0"), ("AUDIO_COST", "-1"), ("PAYMENT_TIERS", "gold")],
)
def test_load_config_rejects_invalid_values(monkeypatch, tmp_path, name, value) -> None:
    monkeypatch.setenv("MEDIA_ROOT", str(tmp_path / "media"))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'app.db'}")
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        load_config()
