"""Technical indicator calculations for chart studies.

Pure functions over price lists. Every function returns a list index-aligned
with its input, with NaN where the indicator is not yet defined. The per-index
helpers (true_range, wilder_step, ema_step, window_mean, ...) are the same ones
the full-series functions use, so a study that updates only its last values
produces exactly the numbers a full recalculation would.
"""

from typing import NamedTuple

NAN = float('nan')

# Below this a smoothed range or DI sum counts as zero
EPSILON = 0.000001


def true_range(high: float, low: float, prev_close: float) -> float:
    """True range of a candle given the previous close.

    Equivalent to the largest of high-low, |high-prev_close| and
    |low-prev_close|, so gaps between sessions are included.
    """
    return max(prev_close, high) - min(prev_close, low)


def true_ranges(high: list[float], low: list[float], close: list[float]) -> list[float]:
    """Calculate the true range of every candle.

    The first candle has no previous close, so its range is |high - low|.
    """
    n = len(close)
    if n == 0:
        return []

    result = [abs(high[0] - low[0])]
    for i in range(1, n):
        result.append(true_range(high[i], low[i], close[i - 1]))
    return result


def wilder_step(prev: float, value: float, period: int) -> float:
    """One step of Wilder's smoothing (EMA with alpha = 1/period)."""
    return (prev * (period - 1) + value) / period


def wilder_smooth(data: list[float], period: int, start: int = 1) -> list[float]:
    """Apply Wilder's smoothing to a series.

    The seed is the simple average of data[start:start + period], stored at
    index start + period - 1. Later values follow wilder_step.

    Args:
        data: Input series
        period: Smoothing period
        start: First index that takes part in the seed average

    Returns:
        Smoothed series, NaN before the seed index.
    """
    n = len(data)
    result = [NAN] * n
    seed_idx = start + period - 1
    if period < 1 or start < 0 or seed_idx >= n:
        return result

    result[seed_idx] = sum(data[start:seed_idx + 1]) / period
    for i in range(seed_idx + 1, n):
        result[i] = wilder_step(result[i - 1], data[i], period)
    return result


def window_mean(values: list[float], i: int, period: int) -> float:
    """Mean of the `period` values ending at index i."""
    return sum(values[i - period + 1:i + 1]) / period


def window_max(values: list[float], i: int, period: int) -> float:
    return max(values[i - period + 1:i + 1])


def window_min(values: list[float], i: int, period: int) -> float:
    return min(values[i - period + 1:i + 1])


def ema_step(prev: float, price: float, period: int) -> float:
    """One step of an exponential moving average with multiplier 2/(period+1)."""
    multiplier = 2 / (period + 1)
    return (price - prev) * multiplier + prev


def calculate_sma(prices: list[float], period: int) -> list[float]:
    """Calculate Simple Moving Average.

    Args:
        prices: List of price values (typically close prices)
        period: Number of periods for the moving average

    Returns:
        List of SMA values. First (period-1) values will be NaN.
    """
    if len(prices) < period or period < 1:
        return [NAN] * len(prices)

    result = [NAN] * (period - 1)
    for i in range(period - 1, len(prices)):
        result.append(window_mean(prices, i, period))

    return result


def calculate_ema(prices: list[float], period: int) -> list[float]:
    """Calculate Exponential Moving Average.

    Args:
        prices: List of price values
        period: Number of periods for the EMA

    Returns:
        List of EMA values. First (period-1) values will be NaN.
    """
    if len(prices) < period or period < 1:
        return [NAN] * len(prices)

    result = [NAN] * (period - 1)

    # First EMA is SMA
    result.append(window_mean(prices, period - 1, period))

    for i in range(period, len(prices)):
        result.append(ema_step(result[-1], prices[i], period))

    return result


def calculate_atr(
    high: list[float],
    low: list[float],
    close: list[float],
    period: int = 14
) -> list[float]:
    """Calculate Average True Range with Wilder's smoothing.

    The seed at index `period` is the average of true ranges 1..period. The
    first true range is left out of the seed because it has no previous close.

    Args:
        high: List of high prices
        low: List of low prices
        close: List of close prices
        period: ATR period (default 14)

    Returns:
        List of ATR values. First `period` values will be NaN.
    """
    n = len(close)
    if n < period + 1 or len(high) != n or len(low) != n or period < 1:
        return [NAN] * n

    return wilder_smooth(true_ranges(high, low, close), period, start=1)


def rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    """Convert average gain/loss into an RSI value (0-100).

    A series with gains and no losses is 100; a completely flat one is 50.
    """
    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else 50.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def price_change(prices: list[float], i: int) -> tuple[float, float]:
    """Split the change into candle i as (gain, loss), both non-negative."""
    diff = prices[i] - prices[i - 1]
    return max(0.0, diff), max(0.0, -diff)


class RSIComponents(NamedTuple):
    rsi: list[float]
    avg_gain: list[float]
    avg_loss: list[float]


def rsi_components(prices: list[float], period: int = 14) -> RSIComponents:
    """Calculate RSI along with the smoothed average gain and loss.

    Averages are seeded at index `period` with the simple mean of the first
    `period` changes, then follow Wilder's smoothing.
    """
    n = len(prices)
    if n < period + 1 or period < 1:
        return RSIComponents([NAN] * n, [NAN] * n, [NAN] * n)

    gains = [0.0]
    losses = [0.0]
    for i in range(1, n):
        gain, loss = price_change(prices, i)
        gains.append(gain)
        losses.append(loss)

    avg_gain = wilder_smooth(gains, period, start=1)
    avg_loss = wilder_smooth(losses, period, start=1)

    rsi = [NAN] * n
    for i in range(period, n):
        rsi[i] = rsi_from_averages(avg_gain[i], avg_loss[i])

    return RSIComponents(rsi, avg_gain, avg_loss)


def calculate_rsi(prices: list[float], period: int = 14) -> list[float]:
    """Calculate Relative Strength Index.

    Args:
        prices: List of price values (typically close prices)
        period: RSI period (default 14)

    Returns:
        List of RSI values (0-100). First `period` values will be NaN.
    """
    return rsi_components(prices, period).rsi


def directional_movement(
    high: float, low: float, prev_high: float, prev_low: float
) -> tuple[float, float]:
    """Return (+DM, -DM) for a candle."""
    up_move = high - prev_high
    down_move = prev_low - low
    plus_dm = up_move if up_move > down_move and up_move > 0 else 0.0
    minus_dm = down_move if down_move > up_move and down_move > 0 else 0.0
    return plus_dm, minus_dm


def directional_indicators(
    smoothed_plus_dm: float, smoothed_minus_dm: float, smoothed_tr: float
) -> tuple[float, float, float]:
    """Return (+DI, -DI, DX) from smoothed movement and range."""
    if smoothed_tr > EPSILON:
        plus_di = smoothed_plus_dm / smoothed_tr * 100
        minus_di = smoothed_minus_dm / smoothed_tr * 100
    else:
        plus_di = minus_di = 0.0

    di_sum = plus_di + minus_di
    dx = abs(plus_di - minus_di) / di_sum * 100 if di_sum > EPSILON else 0.0
    return plus_di, minus_di, dx


class ADXComponents(NamedTuple):
    adx: list[float]
    plus_di: list[float]
    minus_di: list[float]
    dx: list[float]
    smoothed_tr: list[float]
    smoothed_plus_dm: list[float]
    smoothed_minus_dm: list[float]


def adx_components(
    high: list[float],
    low: list[float],
    close: list[float],
    period: int = 14,
    smoothing: int = 14,
) -> ADXComponents:
    """Calculate ADX and every intermediate series.

    True range and directional movement are Wilder-smoothed over `period`
    (seeded at index `period`); DX is then Wilder-smoothed over `smoothing`,
    so the first ADX value sits at index period + smoothing - 1.
    """
    n = len(close)
    if n < period + 1 or len(high) != n or len(low) != n or period < 1 or smoothing < 1:
        return ADXComponents(*([NAN] * n for _ in range(7)))

    plus_dm = [0.0]
    minus_dm = [0.0]
    for i in range(1, n):
        pdm, mdm = directional_movement(high[i], low[i], high[i - 1], low[i - 1])
        plus_dm.append(pdm)
        minus_dm.append(mdm)

    smoothed_tr = wilder_smooth(true_ranges(high, low, close), period, start=1)
    smoothed_plus_dm = wilder_smooth(plus_dm, period, start=1)
    smoothed_minus_dm = wilder_smooth(minus_dm, period, start=1)

    plus_di = [NAN] * n
    minus_di = [NAN] * n
    dx = [NAN] * n
    for i in range(period, n):
        plus_di[i], minus_di[i], dx[i] = directional_indicators(
            smoothed_plus_dm[i], smoothed_minus_dm[i], smoothed_tr[i]
        )

    adx = wilder_smooth(dx, smoothing, start=period)

    return ADXComponents(
        adx, plus_di, minus_di, dx, smoothed_tr, smoothed_plus_dm, smoothed_minus_dm
    )


def calculate_adx(
    high: list[float],
    low: list[float],
    close: list[float],
    period: int = 14,
    smoothing: int = 14,
) -> tuple[list[float], list[float], list[float]]:
    """Calculate Average Directional Index (ADX) with +DI and -DI.

    Args:
        high: List of high prices
        low: List of low prices
        close: List of close prices
        period: DI period (default 14)
        smoothing: ADX smoothing period (default 14)

    Returns:
        Tuple of (ADX, +DI, -DI)
    """
    components = adx_components(high, low, close, period, smoothing)
    return components.adx, components.plus_di, components.minus_di


def obv_step(prev: float, close: float, prev_close: float, volume: float) -> float:
    if close > prev_close:
        return prev + volume
    if close < prev_close:
        return prev - volume
    return prev


def calculate_obv(close: list[float], volume: list[float]) -> list[float]:
    """Calculate On-Balance Volume (OBV).

    Args:
        close: List of close prices
        volume: List of volume values

    Returns:
        List of OBV values
    """
    n = len(close)
    if n == 0 or len(volume) != n:
        return [NAN] * n

    obv = [volume[0]]
    for i in range(1, n):
        obv.append(obv_step(obv[-1], close[i], close[i - 1], volume[i]))

    return obv


def calculate_price_channel(
    high: list[float],
    low: list[float],
    period: int = 20
) -> tuple[list[float], list[float]]:
    """Calculate a price channel (highest high / lowest low).

    The window is the `period` candles ending at (and including) each index.
    Pass close prices as both arguments for a close-only channel.

    Args:
        high: List of high prices
        low: List of low prices
        period: Lookback period (default 20)

    Returns:
        Tuple of (upper, lower). First (period-1) values will be NaN.
    """
    n = len(high)
    if n < period or len(low) != n or period < 1:
        return [NAN] * n, [NAN] * n

    upper = [NAN] * (period - 1)
    lower = [NAN] * (period - 1)
    for i in range(period - 1, n):
        upper.append(window_max(high, i, period))
        lower.append(window_min(low, i, period))

    return upper, lower


def stochastic_raw_k(
    high: list[float], low: list[float], close: list[float], i: int, k_period: int
) -> float:
    """Unsmoothed %K at index i. Neutral 50 when the window has no range."""
    highest_high = window_max(high, i, k_period)
    lowest_low = window_min(low, i, k_period)
    if highest_high == lowest_low:
        return 50.0
    return (close[i] - lowest_low) / (highest_high - lowest_low) * 100


class StochasticComponents(NamedTuple):
    raw_k: list[float]
    k: list[float]
    d: list[float]


def _smooth(
    values: list[float], first: int, period: int, method: str
) -> list[float]:
    """Average `values` over `period` from index `first` on.

    EMA smoothing is seeded at `first` with the simple mean of the window.
    """
    result = [NAN] * len(values)
    for i in range(first, len(values)):
        if method == "ema" and period > 1 and i > first:
            result[i] = ema_step(result[i - 1], values[i], period)
        else:
            result[i] = window_mean(values, i, period)
    return result


def stochastic_components(
    high: list[float],
    low: list[float],
    close: list[float],
    k_period: int = 14,
    d_period: int = 3,
    k_smoothing: int = 1,
    method: str = "sma",
) -> StochasticComponents:
    """Calculate raw %K, smoothed %K and %D.

    %K is raw %K averaged over `k_smoothing` candles (raw %K itself when
    k_smoothing is 1) and %D is %K averaged over `d_period` candles. The
    average is simple for method "sma" and exponential for "ema".
    """
    n = len(close)
    k_first = k_period - 1 + k_smoothing - 1
    d_first = k_first + d_period - 1
    if (n <= d_first or len(high) != n or len(low) != n
            or k_period < 1 or d_period < 1 or k_smoothing < 1):
        return StochasticComponents([NAN] * n, [NAN] * n, [NAN] * n)

    raw_k = [NAN] * n
    for i in range(k_period - 1, n):
        raw_k[i] = stochastic_raw_k(high, low, close, i, k_period)

    if k_smoothing > 1:
        k = _smooth(raw_k, k_first, k_smoothing, method)
    else:
        k = list(raw_k)
    d = _smooth(k, d_first, d_period, method)

    return StochasticComponents(raw_k, k, d)


def calculate_stochastic(
    high: list[float],
    low: list[float],
    close: list[float],
    k_period: int = 14,
    d_period: int = 3,
    k_smoothing: int = 1,
    method: str = "sma",
) -> tuple[list[float], list[float]]:
    """Calculate Stochastic Oscillator (%K and %D).

    Args:
        high: List of high prices
        low: List of low prices
        close: List of close prices
        k_period: %K period (default 14)
        d_period: %D smoothing period (default 3)
        k_smoothing: %K smoothing period (default 1, no smoothing)
        method: "sma" or "ema" averaging for %K smoothing and %D

    Returns:
        Tuple of (%K values, %D values)
    """
    components = stochastic_components(
        high, low, close, k_period, d_period, k_smoothing, method
    )
    return components.k, components.d


def is_swing_high(high: list[float], i: int, strength: int) -> bool:
    """True when high[i] is above the `strength` candles on each side."""
    return all(
        high[i] > high[i - j] and high[i] > high[i + j]
        for j in range(1, strength + 1)
    )


def is_swing_low(low: list[float], i: int, strength: int) -> bool:
    """True when low[i] is below the `strength` candles on each side."""
    return all(
        low[i] < low[i - j] and low[i] < low[i + j]
        for j in range(1, strength + 1)
    )


def find_swing_points(
    high: list[float],
    low: list[float],
    strength: int = 3
) -> tuple[list[int], list[int]]:
    """Find meaningful swing highs and lows.

    Only candles with `strength` candles on both sides are considered, so
    the most recent `strength` candles can never be swing points yet.

    Args:
        high: List of high prices
        low: List of low prices
        strength: Candles required on each side (default 3)

    Returns:
        Tuple of (swing high indices, swing low indices), ascending.
    """
    n = len(high)
    if len(low) != n or strength < 1:
        return [], []

    highs = []
    lows = []
    for i in range(strength, n - strength):
        if is_swing_high(high, i, strength):
            highs.append(i)
        if is_swing_low(low, i, strength):
            lows.append(i)

    return highs, lows
