"""
Report Generator for the Forex Technical Analysis Library

Turns an AnalysisSnapshot into plain data for the rendering layer and into
human-readable reports:
    - Console: status-card style summary
    - JSON: machine-readable snapshot
    - Markdown: documentation-ready summary
    - Chart payloads: one self-contained dictionary per chart (series as
      lists with None for undefined points, plus that chart's axis options)
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from forex_ta.analyzer import AnalysisSnapshot

logger = logging.getLogger(__name__)


# =============================================================================
# HELPERS
# =============================================================================

def _clean(value: Any) -> Any:
    """Convert NaN to None and numpy scalars to Python numbers."""
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if hasattr(value, 'item'):
        value = value.item()
        if isinstance(value, float) and math.isnan(value):
            return None
    return value


def series_to_list(series: pd.Series) -> List[Optional[float]]:
    """Series values as a list with None for undefined points."""
    return [_clean(v) for v in series.tolist()]


def _fmt(value: float, precision: int = 5) -> str:
    if value is None or pd.isna(value):
        return "—"
    return f"{value:.{precision}f}"


# =============================================================================
# STRUCTURED OUTPUT
# =============================================================================

def snapshot_to_dict(snapshot: AnalysisSnapshot) -> Dict[str, Any]:
    """
    Convert a snapshot to JSON-serializable data.

    Parameters
    ----------
    snapshot : AnalysisSnapshot
        Output from TechnicalAnalyzer.analyze()

    Returns
    -------
    Dict[str, Any]
        Metadata, latest readings, classifications and key levels
    """
    s = snapshot
    return {
        "metadata": {
            "symbol": s.symbol,
            "bars": s.bars,
            "generated_at": s.generated_at,
            "version": s.version,
            "provenance": s.provenance.to_dict() if s.provenance is not None else None
        },
        "price": _clean(s.price),
        "indicators": {
            "rsi": {"value": _clean(s.rsi), "zone": s.rsi_zone.value},
            "stochastic": {
                "k": _clean(s.stochastic_k),
                "d": _clean(s.stochastic_d),
                "zone": s.stochastic_zone.value
            },
            "macd": {
                "value": _clean(s.macd),
                "signal": _clean(s.macd_signal),
                "histogram": _clean(s.macd_histogram),
                "bias": s.macd_bias.value
            },
            "bollinger": {"position": s.band_position.value}
        },
        "pattern": {
            "name": s.pattern.value,
            "bias": s.pattern.bias.value,
            "description": s.pattern.description
        } if s.pattern is not None else None,
        "trend": {"direction": s.trend.value, "strength": _clean(s.trend_strength)},
        "signal": {
            "value": s.signal.signal.value,
            "reasons": s.signal.reasons
        },
        "key_levels": {
            "support": {k: _clean(v) for k, v in s.key_levels.support.items()},
            "resistance": {k: _clean(v) for k, v in s.key_levels.resistance.items()}
        }
    }


def chart_payload(snapshot: AnalysisSnapshot) -> Dict[str, Dict[str, Any]]:
    """
    Build per-chart data and options for the rendering layer.

    Each chart carries its own labels, datasets and y-axis bounds; nothing
    is registered globally.

    Returns
    -------
    Dict[str, Dict[str, Any]]
        Keys 'price', 'macd', 'stochastic', 'rsi'
    """
    df = snapshot.indicators_df
    labels = [str(label) for label in df.index]

    def dataset(column: str, label: str) -> Dict[str, Any]:
        return {"label": label, "data": series_to_list(df[column])}

    sma_columns = [c for c in df.columns if c.startswith('sma_')]
    price_sets = [dataset('close', 'Price')]
    price_sets += [dataset(c, c.replace('sma_', 'SMA ')) for c in sma_columns]
    price_sets += [dataset('bb_upper', 'BB Upper'), dataset('bb_lower', 'BB Lower')]

    def bounded() -> Dict[str, Any]:
        return {"y_min": 0, "y_max": 100}

    return {
        "price": {
            "labels": list(labels),
            "datasets": price_sets,
            "markers": {
                label: name for label, name in zip(labels, df['pattern'].tolist())
                if name is not None
            },
            "options": {"y_min": None, "y_max": None}
        },
        "macd": {
            "labels": list(labels),
            "datasets": [
                dataset('macd', 'MACD'),
                dataset('macd_signal', 'Signal'),
                dataset('macd_histogram', 'Histogram')
            ],
            "options": {"y_min": None, "y_max": None}
        },
        "stochastic": {
            "labels": list(labels),
            "datasets": [dataset('stoch_k', '%K'), dataset('stoch_d', '%D')],
            "options": bounded()
        },
        "rsi": {
            "labels": list(labels),
            "datasets": [dataset('rsi', 'RSI')],
            "options": bounded()
        }
    }


# =============================================================================
# FILE REPORTS
# =============================================================================

def generate_json_report(snapshot: AnalysisSnapshot, output_path: Path,
                         include_charts: bool = False) -> None:
    """
    Generate JSON report.

    Parameters
    ----------
    snapshot : AnalysisSnapshot
        Analysis results
    output_path : Path
        Output file path
    include_charts : bool
        Also embed the chart payloads
    """
    report = snapshot_to_dict(snapshot)
    if include_charts:
        report["charts"] = chart_payload(snapshot)

    with open(output_path, 'w') as f:
        json.dump(report, f, indent=2, default=str)


def generate_markdown_report(snapshot: AnalysisSnapshot, output_path: Path) -> None:
    """Generate Markdown summary report."""
    s = snapshot
    pattern_md = (
        f"**{s.pattern.value}** ({s.pattern.bias.value}): {s.pattern.description}"
        if s.pattern is not None else "No pattern on the last bars"
    )

    levels_md = "| Level | Price |\n|-------|-------|\n"
    for name, level in list(s.key_levels.resistance.items())[::-1]:
        levels_md += f"| {name} | {level:.5f} |\n"
    for name, level in s.key_levels.support.items():
        levels_md += f"| {name} | {level:.5f} |\n"

    reasons_md = "\n".join(f"- {reason}" for reason in s.signal.reasons)

    md = f'''# Technical Analysis: {s.symbol}

| Field | Value |
|-------|-------|
| Bars | {s.bars} |
| Last Price | {_fmt(s.price)} |
| Generated | {s.generated_at} |
| Version | {s.version} |

## Signal: {s.signal.signal.value}

{reasons_md}

## Indicators

| Indicator | Value | Reading |
|-----------|-------|---------|
| RSI (14) | {_fmt(s.rsi, 1)} | {s.rsi_zone.value} |
| Stochastic %K | {_fmt(s.stochastic_k, 1)} | {s.stochastic_zone.value} |
| MACD | {_fmt(s.macd)} | {s.macd_bias.value.capitalize()} |
| Bollinger Bands | - | {s.band_position.value} |
| Trend | {s.trend_strength:.0f}% | {s.trend.value.capitalize()} |

## Candlestick Pattern

{pattern_md}

## Key Levels

{levels_md}'''

    with open(output_path, 'w') as f:
        f.write(md)


def generate_all_reports(snapshot: AnalysisSnapshot, output_dir: Path) -> Dict[str, Optional[Path]]:
    """Generate JSON and Markdown reports; a failed format maps to None."""
    reports_dir = Path(output_dir) / "reports"
    reports_dir.mkdir(parents=True, exist_ok=True)

    stem = snapshot.symbol.replace('/', '').lower()
    outputs: Dict[str, Optional[Path]] = {}

    json_path = reports_dir / f"{stem}_analysis.json"
    try:
        generate_json_report(snapshot, json_path, include_charts=True)
        outputs['json'] = json_path
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"JSON failed: {e}")
        outputs['json'] = None

    md_path = reports_dir / f"{stem}_analysis.md"
    try:
        generate_markdown_report(snapshot, md_path)
        outputs['md'] = md_path
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Markdown failed: {e}")
        outputs['md'] = None

    return outputs


# =============================================================================
# CONSOLE REPORT
# =============================================================================

def print_analysis_report(snapshot: AnalysisSnapshot) -> None:
    """
    Print the analysis summary to console.

    Parameters
    ----------
    snapshot : AnalysisSnapshot
        Output from TechnicalAnalyzer.analyze()
    """
    s = snapshot

    print("\n" + "=" * 70)
    print("TECHNICAL ANALYSIS REPORT")
    print("=" * 70)
    print(f"Pair: {s.symbol}")
    print(f"Bars: {s.bars}")
    print(f"Last Price: {_fmt(s.price)}")
    print(f"Generated: {s.generated_at}")
    print(f"Version: {s.version}")

    print("\n" + "-" * 70)
    print("SIGNAL")
    print("-" * 70)
    print(f"Signal: {s.signal.signal.value}")
    for reason in s.signal.reasons:
        print(f"  -> {reason}")

    print("\n" + "-" * 70)
    print("INDICATORS")
    print("-" * 70)
    print(f"  RSI (14):        {_fmt(s.rsi, 1):>10}  {s.rsi_zone.value}")
    print(f"  Stoch %K/%D:     {_fmt(s.stochastic_k, 1):>10}  "
          f"{_fmt(s.stochastic_d, 1)}  {s.stochastic_zone.value}")
    print(f"  MACD:            {_fmt(s.macd):>10}  {s.macd_bias.value.capitalize()}")
    print(f"  MACD Histogram:  {_fmt(s.macd_histogram):>10}")
    print(f"  BB Position:     {s.band_position.value:>10}")
    print(f"  Trend:           {s.trend.value.capitalize():>10}  Strength {s.trend_strength:.0f}%")

    if s.pattern is not None:
        print("\n" + "-" * 70)
        print("CANDLESTICK PATTERN")
        print("-" * 70)
        print(f"  {s.pattern.value} ({s.pattern.bias.value}): {s.pattern.description}")

    print("\n" + "-" * 70)
    print("KEY LEVELS")
    print("-" * 70)
    for name, level in list(s.key_levels.resistance.items())[::-1]:
        print(f"  {name}: {level:.5f}")
    print(f"  --: {s.price:.5f}")
    for name, level in s.key_levels.support.items():
        print(f"  {name}: {level:.5f}")

    print("\n" + "=" * 70)
