#!/usr/bin/env python3
"""
t0-monitor: Event-Time Clustering and Reference Correlation

Main entry point. For each timeframe in the input file this tool:
1. Applies the record selection cuts
2. Clusters records into interaction candidates
3. Computes the consensus t0 and leave-one-out residuals
4. Matches every candidate against the reference detector's events
5. Fills histograms and writes one JSON result per timeframe

Usage:
    # Process a file of timeframes
    t0-monitor --input timeframes.json --config /etc/t0-monitor/config.toml

    # Summary only, no result files
    t0-monitor --input timeframes.json --no-write

Input format:
    {"timeframes": [
        {"index": 0, "first_orbit": 1000,
         "records": [{"record_id": 0, "time_ps": 51234.0,
                      "expected_times": {"pion": 12000.0, ...}, "p": 0.8}, ...],
         "reference_events": [{"bc": 2, "orbit": 1000,
                               "sub_times": [10.0, 5.0, 15.0, 0.0],
                               "valid": [true, true, true, false]}, ...]},
        ...
    ]}
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger('t0-monitor')

from .config import load_config
from .engine.timeframe_processor import TimeframeProcessor
from .exceptions import ConfigurationError
from .output.histogram_sink import HistogramSink
from .output.result_writer import ResultWriter
from .timing.interfaces.data_models import Timeframe


def load_timeframes(input_path: str) -> List[Timeframe]:
    """
    Load timeframes from a JSON file.

    Accepts either {"timeframes": [...]} or a bare list of timeframe objects.
    """
    with open(input_path, 'r') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('timeframes', [])
    if not isinstance(data, list):
        raise ValueError(f"{input_path}: expected a list of timeframes")

    return [Timeframe.from_dict(tf) for tf in data]


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='t0-monitor: event-time clustering and reference correlation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Process with config file
    t0-monitor --input timeframes.json --config /etc/t0-monitor/config.toml

    # Write results elsewhere
    t0-monitor --input timeframes.json --output-dir /tmp/t0-run42
        """
    )

    parser.add_argument(
        '--input', '-i',
        required=True,
        help='JSON file with timeframes to process'
    )
    parser.add_argument(
        '--config', '-c',
        help='Path to TOML configuration file'
    )
    parser.add_argument(
        '--output-dir', '-o',
        help='Directory for per-timeframe JSON results (overrides config)'
    )
    parser.add_argument(
        '--no-write',
        action='store_true',
        help='Do not write result files'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if args.output_dir:
        config.output_dir = args.output_dir

    try:
        timeframes = load_timeframes(args.input)
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.error(f"Failed to load {args.input}: {e}")
        return 1

    histograms = HistogramSink(hypotheses=config.hypotheses)
    processor = TimeframeProcessor(config, sinks=[histograms])
    if config.write_json and not args.no_write:
        try:
            processor.add_sink(ResultWriter(config.output_dir))
        except OSError as e:
            logger.error(f"Cannot use output directory {config.output_dir}: {e}")
            return 1

    logger.info(f"Processing {len(timeframes)} timeframes from {Path(args.input).name}")

    for timeframe in timeframes:
        try:
            processor.process(timeframe)
        except ValueError as e:
            logger.error(f"TF {timeframe.index} rejected: {e}")

    stats = processor.stats
    logger.info("=" * 60)
    logger.info(f"Timeframes: {stats.timeframes}, records: {stats.records}")
    logger.info(f"Clusters: {stats.clusters} ({stats.skipped_clusters} without consensus)")
    logger.info(f"Reference matches: {stats.matches} ({stats.same_bc_matches} same BC)")
    evtime = histograms["EvTimeWrtBC"]
    if evtime.entries:
        logger.info(f"Mean t0 w.r.t. BC: {evtime.mean():+.1f} ps")
    logger.info("=" * 60)

    return 0


if __name__ == '__main__':
    sys.exit(main())
