#!/usr/bin/env python3
"""
Command Line Interface for IQ XCorr.
"""

import os
import sys
import logging
import argparse

from iq_xcorr.calibration.pair_alignment import run_alignment
from iq_xcorr.config import load_config
from iq_xcorr.data.sample_loader import count_samples
from iq_xcorr.errors import CorrelationError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='iq-xcorr',
        description='IQ XCorr - Delay and phase estimation between two IQ recordings',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Correlate command
    corr_parser = subparsers.add_parser('correlate', help='Cross-correlate two captures')
    corr_parser.add_argument('file_a', help='First capture (int16 IQ)')
    corr_parser.add_argument('file_b', help='Second capture (int16 IQ)')
    corr_parser.add_argument('--start', '-s', type=int, default=None,
                             help='Start sample, applied to both files (default: 0)')
    corr_parser.add_argument('--count', '-n', type=int, default=None,
                             help='Number of samples to correlate (default: 10000)')
    corr_parser.add_argument('--workers', '-w', type=int, default=None,
                             help='Worker threads (default: CPU count)')
    corr_parser.add_argument('--config', '-c', help='Configuration file')
    corr_parser.add_argument('--debug', '-d', action='store_true', help='Enable debug logging')

    # Info command
    info_parser = subparsers.add_parser('info', help='Show capture sizes')
    info_parser.add_argument('files', nargs='+', help='Capture files')

    return parser


def _cmd_correlate(args) -> int:
    config = load_config(args.config)
    if args.start is not None:
        config.window.start_offset = args.start
    if args.count is not None:
        config.window.count = args.count
    if args.workers is not None:
        config.correlation.worker_count = args.workers

    result = run_alignment(args.file_a, args.file_b, config)
    peak = result.peak

    print(f"Samples:    {result.n_samples} from offset {result.start_offset}")
    print(f"Shift:      {peak.shift} samples")
    print(f"Phase:      {peak.phase_rad:.6f} rad, {peak.phase_deg:.3f} deg")
    print(f"Magnitude:  {peak.magnitude:.6g}")
    print(f"Confidence: {result.confidence:.2f}")
    return 0


def _cmd_info(args) -> int:
    for path in args.files:
        n = count_samples(path)
        print(f"{path}: {os.path.getsize(path)} bytes, {n} samples")
    return 0


def main(argv=None) -> int:
    """Main entry point for iq-xcorr command."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if getattr(args, 'debug', False):
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        if args.command == 'correlate':
            return _cmd_correlate(args)
        elif args.command == 'info':
            return _cmd_info(args)
    except (CorrelationError, OSError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 1


if __name__ == '__main__':
    sys.exit(main())
