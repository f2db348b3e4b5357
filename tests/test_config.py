from __future__ import annotations

from config import MAX_YEARS_BACK, Config
from pmi_insight.settings.loader import load_settings

ENV_VARS = (
    "APP_DEBUG",
    "FINANCIAL_DATA_PROVIDER",
    "FINANCIAL_DATA_YEARS_BACK",
    "FINANCIAL_DATA_RATE_LIMIT",
    "MA_REVENUE_THRESHOLD",
    "MA_EBITDA_MARGIN_THRESHOLD",
    "MA_EBITDA_THRESHOLD",
)


def _isolate(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PMI_DATABASE_PATH", str(tmp_path / "data" / "pmi.db"))
    monkeypatch.setenv("OUTPUT_DIR", str(tmp_path / "reports"))


def test_config_defaults(monkeypatch, tmp_path):
    _isolate(monkeypatch, tmp_path)
    cfg = Config.from_env()

    assert cfg.debug is False
    assert cfg.financial_data_provider == "mock"
    assert cfg.financial_data_years_back == 3
    assert cfg.rate_limit_per_minute == 60
    assert cfg.database_path.parent.exists()
    assert cfg.output_dir.exists()
    assert cfg.database_uri == f"sqlite:///{tmp_path / 'data' / 'pmi.db'}"

    thresholds = cfg.ma_thresholds()
    assert thresholds.revenue_threshold == 2_000_000
    assert thresholds.ebitda_margin_threshold == 0.10
    assert thresholds.ebitda_threshold == 200_000


def test_environment_overrides(monkeypatch, tmp_path):
    _isolate(monkeypatch, tmp_path)
    monkeypatch.setenv("APP_DEBUG", "yes")
    monkeypatch.setenv("FINANCIAL_DATA_PROVIDER", " Mock ")
    monkeypatch.setenv("FINANCIAL_DATA_YEARS_BACK", "12")
    monkeypatch.setenv("FINANCIAL_DATA_RATE_LIMIT", "5")
    monkeypatch.setenv("MA_REVENUE_THRESHOLD", "5000000")
    monkeypatch.setenv("MA_EBITDA_MARGIN_THRESHOLD", "0")
    monkeypatch.setenv("MA_EBITDA_THRESHOLD", "not-a-number")

    cfg = Config.from_env()

    assert cfg.debug is True
    assert cfg.financial_data_provider == "mock"
    assert cfg.financial_data_years_back == MAX_YEARS_BACK
    assert cfg.rate_limit_per_minute == 5
    assert cfg.ma_revenue_threshold == 5_000_000
    # Zero and unparsable thresholds fall back to the defaults.
    assert cfg.ma_ebitda_margin_threshold == 0.10
    assert cfg.ma_ebitda_threshold == 200_000


def test_load_settings_debug_override(monkeypatch, tmp_path):
    _isolate(monkeypatch, tmp_path)
    monkeypatch.setenv("APP_DEBUG", "1")
    assert load_settings(debug_override=False).debug is False
    assert load_settings().debug is True
