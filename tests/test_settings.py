from lineupforge.config import GeneratorSettings, admin_token, load_settings
from lineupforge.optimizer import WindowPolicy


def test_load_settings_defaults(monkeypatch):
    for name in (
        "LINEUPFORGE_WINDOW_FRACTION",
        "LINEUPFORGE_WINDOW_WIDEN",
        "LINEUPFORGE_WINDOW_MIN",
        "LINEUPFORGE_GROWTH_FACTOR",
        "LINEUPFORGE_TRIES_PER_LINEUP",
        "LINEUPFORGE_ATTEMPT_FACTOR",
    ):
        monkeypatch.delenv(name, raising=False)
    assert load_settings() == GeneratorSettings()


def test_load_settings_reads_and_clamps_env(monkeypatch):
    monkeypatch.setenv("LINEUPFORGE_WINDOW_FRACTION", "0.5")
    monkeypatch.setenv("LINEUPFORGE_WINDOW_WIDEN", "0.2")
    monkeypatch.setenv("LINEUPFORGE_WINDOW_MIN", "0")
    monkeypatch.setenv("LINEUPFORGE_GROWTH_FACTOR", "9")
    monkeypatch.setenv("LINEUPFORGE_TRIES_PER_LINEUP", "oops")
    monkeypatch.setenv("LINEUPFORGE_ATTEMPT_FACTOR", "7")

    settings = load_settings()

    assert settings.window_fraction == 0.5
    assert settings.widened_fraction == 0.5
    assert settings.min_window == 1
    assert settings.growth_factor == 2.0
    assert settings.tries_per_lineup == 25
    assert settings.attempt_ceiling_factor == 7
    assert WindowPolicy.from_settings(settings) == WindowPolicy(0.5, 0.5, 1)


def test_admin_token(monkeypatch):
    monkeypatch.delenv("LINEUPFORGE_ADMIN_TOKEN", raising=False)
    assert admin_token() is None
    monkeypatch.setenv("LINEUPFORGE_ADMIN_TOKEN", "  abc ")
    assert admin_token() == "abc"
