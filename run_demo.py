#!/usr/bin/env python3
"""
Forex Technical Analysis - Demo Runner

This script demonstrates the complete analysis pipeline:
    Step 1: Price acquisition (synthetic generator, file cache or Yahoo Finance)
    Step 2: Indicator computation, pattern detection and signal synthesis
    Step 3: Report generation (console, JSON, Markdown, indicator Parquet)

EXECUTION
    python run_demo.py
    python run_demo.py --pair USD/JPY --seed 7
    python run_demo.py --pair EUR/USD --source yahoo --timeframe 1D --periods 120

OUTPUT ARTIFACTS
    data/
        {pair}.parquet                  Fetched OHLC bars
    outputs/
        {pair}_indicators.parquet       Indicator series
        reports/{pair}_analysis.json    Snapshot with chart payloads
        reports/{pair}_analysis.md      Markdown summary
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from forex_ta.analyzer import AnalysisSnapshot, TechnicalAnalyzer
from forex_ta.config import INDICATOR_VERSION, AnalysisConfig, get_default_config, load_config
from forex_ta.price_source import FilePriceSource, PriceSource, create_price_source
from forex_ta.report_generator import generate_all_reports, print_analysis_report


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_PAIR: str = "EUR/USD"
DEFAULT_SOURCE: str = "synthetic"
DEFAULT_TIMEFRAME: str = "1H"

# Directory structure
DATA_DIR = Path("data")
OUTPUT_DIR = Path("outputs")


# =============================================================================
# DISPLAY COMPONENTS
# =============================================================================

BANNER = r'''
╔═══════════════════════════════════════════════════════════════════════════════╗
║                                                                               ║
║              FOREX TECHNICAL ANALYSIS                                         ║
║              RSI · Stochastic · MACD · Bollinger · Candlesticks               ║
║                                                                               ║
╚═══════════════════════════════════════════════════════════════════════════════╝
'''


def print_section_header(title: str, char: str = "═") -> None:
    """Print a formatted section header."""
    width = 79
    print()
    print(char * width)
    print(f"  {title}")
    print(char * width)
    print()


# =============================================================================
# PIPELINE STEPS
# =============================================================================

def build_source(args: argparse.Namespace, config: AnalysisConfig) -> PriceSource:
    """Create the price source selected on the command line."""
    if args.source == "synthetic":
        return create_price_source(
            "synthetic",
            params=config.synthetic_feed,
            timeframe=args.timeframe,
            seed=args.seed
        )
    if args.source == "file":
        return create_price_source("file", cache_dir=args.data_dir)
    return create_price_source("yahoo", timeframe=args.timeframe)


def run_analysis(
    args: argparse.Namespace,
    config: AnalysisConfig,
    logger: logging.Logger
) -> Optional[AnalysisSnapshot]:
    """
    Fetch prices and run the indicator pipeline.

    Returns
    -------
    Optional[AnalysisSnapshot]
        Snapshot, or None if fetching or analysis failed
    """
    print_section_header("PRICE ACQUISITION & INDICATORS")

    try:
        source = build_source(args, config)
        logger.info(f"Fetching {args.periods} bars of {args.pair} from {source.name}")
        series = source.fetch(args.pair, args.periods)

        if args.source != "file":
            FilePriceSource(args.data_dir).save(series, args.pair)

        analyzer = TechnicalAnalyzer(config)
        snapshot = analyzer.analyze(series, symbol=args.pair)
        print_analysis_report(snapshot)
        return snapshot

    except Exception as e:
        logger.error(f"Analysis failed: {e}")
        import traceback
        traceback.print_exc()
        return None


def export_outputs(snapshot: AnalysisSnapshot, output_dir: Path, logger: logging.Logger) -> None:
    """Write indicator Parquet and the JSON/Markdown reports."""
    print_section_header("GENERATING REPORTS")

    output_dir.mkdir(parents=True, exist_ok=True)
    stem = snapshot.symbol.replace('/', '').lower()

    indicators_path = output_dir / f"{stem}_indicators.parquet"
    snapshot.indicators_df.to_parquet(indicators_path, compression='snappy')
    logger.info(f"Saved: {indicators_path} ({len(snapshot.indicators_df):,} rows)")

    reports = generate_all_reports(snapshot, output_dir)
    for fmt, path in reports.items():
        if path:
            logger.info(f"Generated {fmt}: {path}")
        else:
            logger.warning(f"{fmt} report not generated")


# =============================================================================
# MAIN
# =============================================================================

def main() -> int:
    """
    Main entry point for the demo runner.

    Returns
    -------
    int
        Exit code (0 for success, 1 for failure)
    """
    start_time = time.time()

    parser = argparse.ArgumentParser(
        description="Forex Technical Analysis - Demo Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_demo.py                                  # Synthetic EUR/USD, 1H bars
  python run_demo.py --pair USD/JPY --seed 7          # Reproducible synthetic JPY pair
  python run_demo.py --source yahoo --timeframe 1D    # Live daily bars from Yahoo Finance
  python run_demo.py --source file --data-dir data    # Re-analyze cached bars
        """
    )

    parser.add_argument(
        "--pair", "-p",
        type=str,
        default=DEFAULT_PAIR,
        help=f"Currency pair (default: {DEFAULT_PAIR})"
    )

    parser.add_argument(
        "--source", "-s",
        choices=["synthetic", "yahoo", "file"],
        default=DEFAULT_SOURCE,
        help=f"Price source (default: {DEFAULT_SOURCE})"
    )

    parser.add_argument(
        "--periods", "-n",
        type=int,
        default=None,
        help="Number of bars to analyze (default: from configuration, 50)"
    )

    parser.add_argument(
        "--timeframe", "-t",
        type=str,
        default=DEFAULT_TIMEFRAME,
        help=f"Bar timeframe: 15m, 1H, 4H, 1D, 1W (default: {DEFAULT_TIMEFRAME})"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for the synthetic source"
    )

    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DATA_DIR,
        help=f"Price cache directory (default: {DATA_DIR})"
    )

    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=OUTPUT_DIR,
        help=f"Output directory (default: {OUTPUT_DIR})"
    )

    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="JSON file with configuration overrides"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {INDICATOR_VERSION}"
    )

    args = parser.parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="  %(asctime)s │ %(levelname)s │ %(message)s",
        datefmt="%H:%M:%S"
    )
    logger = logging.getLogger(__name__)

    try:
        config = load_config(args.config) if args.config else get_default_config()
    except (OSError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if args.periods is None:
        args.periods = config.synthetic_feed.periods

    print(BANNER)
    print(f"  Execution Started: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"  Currency Pair:     {args.pair}")
    print(f"  Source:            {args.source}")
    print(f"  Timeframe:         {args.timeframe}")
    print(f"  Bars:              {args.periods}")
    print(f"  Version:           {INDICATOR_VERSION}")
    print()

    snapshot = run_analysis(args, config, logger)
    if snapshot is None:
        logger.error("Analysis failed - no reports generated")
        return 1

    try:
        export_outputs(snapshot, args.output, logger)
    except Exception as e:
        logger.error(f"Report generation failed: {e}")
        return 1

    print(f"\n  Completed in {time.time() - start_time:.2f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
