"""Property-based tests for technical indicators.

Tests validate indicator calculations against pandas rolling and ewm
reference implementations.
"""

import math

import pandas as pd
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from chartstudies.indicators import (
    calculate_adx,
    calculate_atr,
    calculate_ema,
    calculate_obv,
    calculate_price_channel,
    calculate_rsi,
    calculate_sma,
    calculate_stochastic,
    find_swing_points,
    stochastic_components,
    true_ranges,
    wilder_smooth,
)


# Strategy for generating realistic price series
@st.composite
def price_series(draw, min_length: int = 30, max_length: int = 150):
    """Generate a realistic price series with positive values and varied movements."""
    length = draw(st.integers(min_value=min_length, max_value=max_length))

    base_price = draw(st.floats(min_value=50.0, max_value=500.0))

    changes = draw(st.lists(
        st.sampled_from([-0.05, -0.03, -0.02, -0.01, -0.005, 0.0,
                         0.005, 0.01, 0.02, 0.03, 0.05]),
        min_size=length - 1,
        max_size=length - 1
    ))

    prices = [base_price]
    for change in changes:
        prices.append(max(0.01, prices[-1] * (1 + change)))

    return prices


@st.composite
def ohlc_series(draw, min_length: int = 30, max_length: int = 150):
    """Generate (high, low, close) lists with high >= close >= low."""
    closes = draw(price_series(min_length=min_length, max_length=max_length))
    wick = st.sampled_from([0.0, 0.002, 0.005, 0.01, 0.02])
    highs = [c * (1 + draw(wick)) for c in closes]
    lows = [c * (1 - draw(wick)) for c in closes]
    return highs, lows, closes


def _wilder_reference(data: list[float], period: int) -> list[float]:
    """Wilder smoothing via pandas ewm, seeded with the mean of data[1:period+1]."""
    seed = sum(data[1:period + 1]) / period
    series = pd.Series([seed] + data[period + 1:])
    smoothed = series.ewm(alpha=1 / period, adjust=False).mean().tolist()
    return [math.nan] * period + smoothed


class TestSMAAccuracy:
    """
    **Feature: chartstudies, Property 1: SMA matches rolling mean**

    *For any* price series, SMA should equal pandas' rolling mean.
    """

    @given(prices=price_series(), period=st.integers(min_value=1, max_value=30))
    @settings(max_examples=100, deadline=None)
    def test_sma_matches_pandas_rolling(self, prices: list[float], period: int):
        ours = calculate_sma(prices, period)
        ref = pd.Series(prices).rolling(period).mean().tolist()

        assert len(ours) == len(prices)
        for i in range(period - 1):
            assert math.isnan(ours[i])
        for i in range(period - 1, len(prices)):
            assert ours[i] == pytest.approx(ref[i], rel=1e-9)

    def test_sma_too_short(self):
        assert all(math.isnan(v) for v in calculate_sma([1.0, 2.0], 5))


class TestEMAAccuracy:
    """
    **Feature: chartstudies, Property 2: EMA seeded with SMA**

    *For any* price series, EMA should equal pandas' ewm(span) applied after
    an SMA seed.
    """

    @given(prices=price_series(), period=st.integers(min_value=2, max_value=25))
    @settings(max_examples=100, deadline=None)
    def test_ema_matches_pandas_ewm(self, prices: list[float], period: int):
        ours = calculate_ema(prices, period)

        seed = sum(prices[:period]) / period
        ref = pd.Series([seed] + prices[period:]).ewm(span=period, adjust=False).mean().tolist()

        for i in range(period - 1, len(prices)):
            assert ours[i] == pytest.approx(ref[i - period + 1], rel=1e-9)


class TestATRAccuracy:
    """
    **Feature: chartstudies, Property 3: ATR uses Wilder's smoothing**

    *For any* OHLC series, ATR should equal a Wilder-smoothed true range
    seeded with the mean of true ranges 1..period.
    """

    @given(data=ohlc_series(), period=st.integers(min_value=2, max_value=20))
    @settings(max_examples=100, deadline=None)
    def test_atr_matches_reference(self, data, period: int):
        high, low, close = data
        ours = calculate_atr(high, low, close, period)
        ref = _wilder_reference(true_ranges(high, low, close), period)

        for i in range(period):
            assert math.isnan(ours[i])
        for i in range(period, len(close)):
            assert ours[i] == pytest.approx(ref[i], rel=1e-9)
            assert ours[i] >= 0

    def test_true_range_includes_gap(self):
        # Gap up: range from previous close (10) to high (15)
        assert true_ranges([11.0, 15.0], [9.0, 14.0], [10.0, 14.5]) == [2.0, 5.0]
        # Gap down: range from low (5) to previous close (10)
        assert true_ranges([11.0, 6.0], [9.0, 5.0], [10.0, 5.5]) == [2.0, 5.0]

    def test_atr_needs_period_plus_one(self):
        high, low, close = [2.0] * 14, [1.0] * 14, [1.5] * 14
        assert all(math.isnan(v) for v in calculate_atr(high, low, close, 14))

    def test_wilder_smooth_seed(self):
        smoothed = wilder_smooth([99.0, 1.0, 2.0, 3.0, 6.0], 3, start=1)
        assert math.isnan(smoothed[2])
        assert smoothed[3] == 2.0
        assert smoothed[4] == (2.0 * 2 + 6.0) / 3


class TestRSIAccuracy:
    """
    **Feature: chartstudies, Property 4: RSI Calculation Accuracy**

    *For any* price series, RSI should match a pandas reference built from
    Wilder-smoothed gains and losses, and stay within [0, 100].
    """

    @given(prices=price_series(), period=st.integers(min_value=2, max_value=20))
    @settings(max_examples=100, deadline=None)
    def test_rsi_matches_reference(self, prices: list[float], period: int):
        ours = calculate_rsi(prices, period)

        diffs = pd.Series(prices).diff().fillna(0.0)
        avg_gain = _wilder_reference(diffs.clip(lower=0).tolist(), period)
        avg_loss = _wilder_reference((-diffs).clip(lower=0).tolist(), period)

        for i in range(period, len(prices)):
            assert 0 <= ours[i] <= 100
            if avg_loss[i] > 1e-9:
                ref = 100 - 100 / (1 + avg_gain[i] / avg_loss[i])
                assert ours[i] == pytest.approx(ref, abs=1e-6)

    def test_rsi_flat_series_is_neutral(self):
        rsi = calculate_rsi([100.0] * 30, 14)
        assert rsi[14:] == [50.0] * 16

    def test_rsi_only_gains_is_100(self):
        rsi = calculate_rsi([float(i) for i in range(1, 31)], 14)
        assert rsi[14:] == [100.0] * 16


class TestADXBounds:
    """
    **Feature: chartstudies, Property 5: ADX and DI bounds**

    *For any* OHLC series, ADX and DI values should stay within [0, 100]
    once defined, and ADX starts at index period + smoothing - 1.
    """

    @given(
        data=ohlc_series(min_length=40),
        period=st.integers(min_value=2, max_value=14),
        smoothing=st.integers(min_value=1, max_value=10),
    )
    @settings(max_examples=100, deadline=None)
    def test_adx_bounds(self, data, period: int, smoothing: int):
        high, low, close = data
        adx, plus_di, minus_di = calculate_adx(high, low, close, period, smoothing)

        first = period + smoothing - 1
        assert math.isnan(adx[first - 1])
        for i in range(first, len(close)):
            assert 0 <= adx[i] <= 100 + 1e-9
        for i in range(period, len(close)):
            assert plus_di[i] >= 0
            assert minus_di[i] >= 0

    def test_flat_series_has_zero_adx(self):
        adx, plus_di, minus_di = calculate_adx([2.0] * 40, [1.0] * 40, [1.5] * 40, 5, 5)
        assert adx[9:] == [0.0] * 31
        assert plus_di[5:] == [0.0] * 35


class TestOBV:
    """
    **Feature: chartstudies, Property 6: OBV running total**

    *For any* series, OBV should equal the first volume plus the signed
    cumulative volume of later candles.
    """

    @given(
        prices=price_series(min_length=2, max_length=100),
        data=st.data(),
    )
    @settings(max_examples=100, deadline=None)
    def test_obv_matches_pandas_cumsum(self, prices: list[float], data):
        volumes = data.draw(st.lists(
            st.integers(min_value=0, max_value=1_000_000).map(float),
            min_size=len(prices),
            max_size=len(prices),
        ))
        ours = calculate_obv(prices, volumes)

        diffs = pd.Series(prices).diff().fillna(0.0)
        direction = diffs.apply(lambda d: 1.0 if d > 0 else (-1.0 if d < 0 else 0.0))
        ref = ((direction * pd.Series(volumes)).cumsum() + volumes[0]).tolist()

        assert ours == pytest.approx(ref)


class TestPriceChannel:
    """
    **Feature: chartstudies, Property 7: Channel bounds**

    *For any* series, the channel should equal pandas' rolling max/min.
    """

    @given(data=ohlc_series(), period=st.integers(min_value=1, max_value=30))
    @settings(max_examples=100, deadline=None)
    def test_channel_matches_rolling(self, data, period: int):
        high, low, _ = data
        upper, lower = calculate_price_channel(high, low, period)
        ref_upper = pd.Series(high).rolling(period).max().tolist()
        ref_lower = pd.Series(low).rolling(period).min().tolist()

        for i in range(period - 1, len(high)):
            assert upper[i] == ref_upper[i]
            assert lower[i] == ref_lower[i]
            assert upper[i] >= lower[i]


class TestStochastic:
    """
    **Feature: chartstudies, Property 8: Stochastic bounds**

    *For any* OHLC series, %K and %D should stay within [0, 100].
    """

    @given(
        data=ohlc_series(),
        k_period=st.integers(min_value=2, max_value=14),
        d_period=st.integers(min_value=1, max_value=5),
        method=st.sampled_from(["sma", "ema"]),
    )
    @settings(max_examples=100, deadline=None)
    def test_stochastic_bounds(self, data, k_period: int, d_period: int, method: str):
        high, low, close = data
        k, d = calculate_stochastic(high, low, close, k_period, d_period, method=method)

        for i in range(k_period - 1, len(close)):
            assert -1e-9 <= k[i] <= 100 + 1e-9
        for i in range(k_period + d_period - 2, len(close)):
            assert -1e-9 <= d[i] <= 100 + 1e-9

    def test_flat_range_is_neutral(self):
        k, d = calculate_stochastic([5.0] * 10, [5.0] * 10, [5.0] * 10, 3, 3)
        assert k[2:] == [50.0] * 8
        assert d[4:] == [50.0] * 6

    def test_ema_method_is_seeded_with_the_mean(self):
        close = [10.0, 11.5, 11.0, 12.5, 13.0, 12.0, 11.0, 11.5, 13.5, 14.0,
                 13.0, 12.5, 12.0, 13.0, 14.5, 15.0, 14.0, 13.5, 12.5, 13.0]
        high = [c + 0.75 for c in close]
        low = [c - 0.5 for c in close]

        raw_k, k, d = stochastic_components(high, low, close, 5, 3, 2, method="ema")

        assert k[5] == pytest.approx((raw_k[4] + raw_k[5]) / 2)
        for i in range(6, len(close)):
            assert k[i] == pytest.approx(k[i - 1] + (raw_k[i] - k[i - 1]) * 2 / 3)
        assert d[7] == pytest.approx(sum(k[5:8]) / 3)
        for i in range(8, len(close)):
            assert d[i] == pytest.approx(d[i - 1] + (k[i] - d[i - 1]) * 0.5)

        _, k_sma, _ = stochastic_components(high, low, close, 5, 3, 2, method="sma")
        assert k[6:] != k_sma[6:]


class TestSwingPoints:
    """Swing highs and lows need `strength` lower highs / higher lows on each side."""

    def test_single_peak_and_trough(self):
        high = [1.0, 2.0, 3.0, 5.0, 3.0, 2.0, 1.0, 2.0, 3.0]
        low = [5.0, 4.0, 3.0, 3.0, 3.0, 4.0, 1.0, 4.0, 5.0]
        highs, lows = find_swing_points(high, low, strength=2)
        assert highs == [3]
        assert lows == [6]

    def test_edges_are_never_swing_points(self):
        high = [9.0, 1.0, 1.0, 1.0, 1.0, 1.0, 9.0]
        highs, lows = find_swing_points(high, high, strength=3)
        assert highs == []
        assert lows == []

    def test_equal_highs_are_not_swing_points(self):
        high = [1.0, 2.0, 5.0, 5.0, 2.0, 1.0]
        highs, _ = find_swing_points(high, [0.0] * 6, strength=1)
        assert highs == []
