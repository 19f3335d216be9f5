"""Technical indicators module."""

from chartstudies.indicators.technical import (
    adx_components,
    calculate_adx,
    calculate_atr,
    calculate_ema,
    calculate_obv,
    calculate_price_channel,
    calculate_rsi,
    calculate_sma,
    calculate_stochastic,
    find_swing_points,
    rsi_components,
    stochastic_components,
    true_ranges,
    wilder_smooth,
)

__all__ = [
    "adx_components",
    "calculate_adx",
    "calculate_atr",
    "calculate_ema",
    "calculate_obv",
    "calculate_price_channel",
    "calculate_rsi",
    "calculate_sma",
    "calculate_stochastic",
    "find_swing_points",
    "rsi_components",
    "stochastic_components",
    "true_ranges",
    "wilder_smooth",
]
