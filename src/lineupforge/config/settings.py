"""Environment-driven defaults for lineup generation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass


logger = logging.getLogger(__name__)

_WINDOW_FRACTION_ENV = "LINEUPFORGE_WINDOW_FRACTION"
_WINDOW_WIDEN_ENV = "LINEUPFORGE_WINDOW_WIDEN"
_WINDOW_MIN_ENV = "LINEUPFORGE_WINDOW_MIN"
_GROWTH_FACTOR_ENV = "LINEUPFORGE_GROWTH_FACTOR"
_TRIES_PER_LINEUP_ENV = "LINEUPFORGE_TRIES_PER_LINEUP"
_ATTEMPT_FACTOR_ENV = "LINEUPFORGE_ATTEMPT_FACTOR"
ADMIN_TOKEN_ENV = "LINEUPFORGE_ADMIN_TOKEN"

_WINDOW_FRACTION_DEFAULT = 0.15
_WINDOW_WIDEN_DEFAULT = 0.25
_WINDOW_MIN_DEFAULT = 3
_GROWTH_FACTOR_DEFAULT = 1.02
_TRIES_PER_LINEUP_DEFAULT = 25
_ATTEMPT_FACTOR_DEFAULT = 40


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


@dataclass(frozen=True)
class GeneratorSettings:
    window_fraction: float = _WINDOW_FRACTION_DEFAULT
    widened_fraction: float = _WINDOW_WIDEN_DEFAULT
    min_window: int = _WINDOW_MIN_DEFAULT
    growth_factor: float = _GROWTH_FACTOR_DEFAULT
    tries_per_lineup: int = _TRIES_PER_LINEUP_DEFAULT
    attempt_ceiling_factor: int = _ATTEMPT_FACTOR_DEFAULT


def load_settings() -> GeneratorSettings:
    """Read generator defaults from ``LINEUPFORGE_*`` environment variables."""

    window_fraction = _env_float(_WINDOW_FRACTION_ENV, _WINDOW_FRACTION_DEFAULT, clamp_min=0.01, clamp_max=1.0)
    widened_fraction = _env_float(_WINDOW_WIDEN_ENV, _WINDOW_WIDEN_DEFAULT, clamp_min=0.01, clamp_max=1.0)
    return GeneratorSettings(
        window_fraction=window_fraction,
        widened_fraction=max(window_fraction, widened_fraction),
        min_window=_env_int(_WINDOW_MIN_ENV, _WINDOW_MIN_DEFAULT, min_value=1),
        growth_factor=_env_float(_GROWTH_FACTOR_ENV, _GROWTH_FACTOR_DEFAULT, clamp_min=1.0, clamp_max=2.0),
        tries_per_lineup=_env_int(_TRIES_PER_LINEUP_ENV, _TRIES_PER_LINEUP_DEFAULT, min_value=1),
        attempt_ceiling_factor=_env_int(_ATTEMPT_FACTOR_ENV, _ATTEMPT_FACTOR_DEFAULT, min_value=1),
    )


def admin_token() -> str | None:
    token = os.getenv(ADMIN_TOKEN_ENV, "").strip()
    return token or None
