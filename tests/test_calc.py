"""Tests for the study tools and CLI commands.

**Feature: chartstudies**
"""

import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from click.testing import CliRunner

from chartstudies.cli.calc import _parse_studies, _placement
from chartstudies.cli.main import cli
from chartstudies.models import Candle, CandleSet
from chartstudies.studies import ATR, SMA, Stochastic
from chartstudies.tools import DEFAULT_STUDIES, calculate_studies, load_candle_set, load_candles_csv


def make_candles(count: int) -> list[Candle]:
    base = datetime(2024, 1, 1)
    return [
        Candle(
            timestamp=base + timedelta(days=i),
            open=100.0 + i % 4,
            high=102.0 + i % 4,
            low=99.0 - i % 3,
            close=101.0 + i % 5,
            volume=1000 + i,
        )
        for i in range(count)
    ]


def write_csv(path: Path, candles: list[Candle], shuffle: bool = False) -> None:
    rows = list(candles)
    if shuffle:
        rows = rows[1::2] + rows[0::2]
    lines = ["Timestamp,Open,High,Low,Close,Volume"]
    for c in rows:
        lines.append(
            f"{c.timestamp.isoformat()},{c.open},{c.high},{c.low},{c.close},{c.volume}"
        )
    path.write_text("\n".join(lines) + "\n")


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Isolate the CLI from any real config file."""
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


class TestCalculateStudies:
    def test_defaults(self):
        candle_set = CandleSet(symbol="TEST", candles=make_candles(40))
        result = calculate_studies(candle_set)

        assert result["error"] is None
        assert result["data_points"] == 40
        assert list(result["studies"]) == DEFAULT_STUDIES
        atr = result["studies"]["atr"]
        assert atr["description"] == "ATR(14)"
        assert atr["status"] == "calculated"
        assert atr["value"] == result["instances"]["atr"].values[-1]

    def test_periods_override(self):
        candle_set = CandleSet(symbol="TEST", candles=make_candles(40))
        result = calculate_studies(candle_set, ["sma"], {"sma": 5})
        assert result["studies"]["sma"]["description"] == "SMA(5)"

    def test_insufficient_data_is_not_an_error(self):
        candle_set = CandleSet(symbol="TEST", candles=make_candles(10))
        result = calculate_studies(candle_set, ["atr", "obv"])

        assert result["error"] is None
        assert result["studies"]["atr"]["status"] == "insufficient_data"
        assert result["studies"]["atr"]["value"] is None
        assert result["studies"]["atr"]["required_candles"] == 15
        assert result["studies"]["obv"]["status"] == "calculated"

    def test_unknown_study(self):
        candle_set = CandleSet(symbol="TEST", candles=make_candles(40))
        result = calculate_studies(candle_set, ["atr", "macd"])
        assert "macd" in result["error"]
        assert result["studies"] == {}

    def test_empty_candle_set(self):
        result = calculate_studies(CandleSet(symbol="TEST"))
        assert result["error"] is not None

    def test_invalid_periods(self):
        candle_set = CandleSet(symbol="TEST", candles=make_candles(40))
        result = calculate_studies(candle_set, ["atr"], {"atr": 0})
        assert "periods" in result["error"]


class TestParseStudies:
    def test_valid(self):
        assert _parse_studies("atr, RSI ,adx") == ["atr", "rsi", "adx"]

    def test_drops_unknown_and_duplicates(self):
        assert _parse_studies("atr,macd,atr") == ["atr"]

    def test_falls_back_to_default(self):
        assert _parse_studies("macd") == DEFAULT_STUDIES
        assert _parse_studies("macd", ["obv"]) == ["obv"]


class TestLoadCandles:
    def test_sorts_rows(self):
        candles = make_candles(10)
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "test.csv"
            write_csv(path, candles, shuffle=True)
            loaded = load_candles_csv(path)

        assert [c.timestamp for c in loaded] == [c.timestamp for c in candles]
        assert [c.volume for c in loaded] == [c.volume for c in candles]

    def test_missing_column(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.csv"
            path.write_text("timestamp,close\n2024-01-01,10\n")
            with pytest.raises(ValueError, match="missing columns"):
                load_candles_csv(path)

    def test_symbol_from_file_name(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "reliance.csv"
            write_csv(path, make_candles(5))
            candle_set = load_candle_set(path)

        assert candle_set.symbol == "RELIANCE"
        assert len(candle_set) == 5


class TestCLI:
    def test_calc(self, home):
        path = home / "test.csv"
        write_csv(path, make_candles(40))

        result = CliRunner().invoke(cli, ["calc", str(path), "-s", "atr", "-n", "5"])

        assert result.exit_code == 0, result.output
        assert "ATR(14)" in result.output

    def test_calc_missing_columns(self, home):
        path = home / "bad.csv"
        path.write_text("timestamp,close\n2024-01-01,10\n")

        result = CliRunner().invoke(cli, ["calc", str(path)])
        assert result.exit_code == 1

    def test_point(self, home):
        path = home / "test.csv"
        write_csv(path, make_candles(40))
        expected = ATR.value_at(20, load_candle_set(path), 14)

        result = CliRunner().invoke(cli, ["point", str(path), "-s", "atr", "-i", "20"])

        assert result.exit_code == 0, result.output
        assert f"{expected:,.2f}" in result.output

    def test_studies(self, home):
        result = CliRunner().invoke(cli, ["studies"])
        assert result.exit_code == 0, result.output
        assert "atr" in result.output
        assert "overlay" in result.output
        assert "panel" in result.output

    def test_placement(self):
        assert _placement(SMA) == "overlay"
        assert _placement(ATR) == "panel"
        assert _placement(Stochastic) == "panel"

    def test_init_writes_config(self, home):
        result = CliRunner().invoke(cli, ["init"])

        assert result.exit_code == 0, result.output
        config_path = home / ".config" / "chartstudies" / "config.toml"
        assert config_path.exists()
        assert "[studies]" in config_path.read_text()

    def test_calc_uses_config_defaults(self, home):
        CliRunner().invoke(cli, ["init"])
        path = home / "test.csv"
        write_csv(path, make_candles(40))

        result = CliRunner().invoke(cli, ["calc", str(path)])

        assert result.exit_code == 0, result.output
        assert "RSI(14)" in result.output
