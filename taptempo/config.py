from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import List, Optional

from . import __version__
from .window import MAX_PRECISION, SampleWindow


@dataclass
class TempoConfig:
    """Settings for one tap tempo session."""
    precision: int = 0  # digits after the decimal point
    reset_time: int = 5  # seconds of silence before the window restarts
    sample_size: int = 5  # hits kept in the window
    verbose: bool = False

    def build_window(self) -> SampleWindow:
        """Raises InvalidConfiguration when the settings cannot make a window."""
        return SampleWindow(
            self.sample_size,
            precision=self.precision,
            idle_reset_duration=self.reset_time,
        )


def _parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="taptempo",
        description="Tap a key in cadence and read the tempo back in BPM.",
    )
    parser.add_argument(
        "-p",
        "--precision",
        type=int,
        default=0,
        help=f"Digits after the decimal point in the displayed tempo (max: {MAX_PRECISION}).",
    )
    parser.add_argument(
        "-r",
        "--reset-time",
        type=int,
        default=5,
        help="Seconds without a hit before the calculation resets.",
    )
    parser.add_argument(
        "-s",
        "--sample-size",
        type=int,
        default=5,
        help="Number of hits averaged to process the tempo.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log estimator activity to stderr.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def load_config(argv: Optional[List[str]] = None) -> TempoConfig:
    """Parse command-line arguments into a TempoConfig. Validation is left to the caller."""
    args = _parse_args(argv if argv is not None else [])
    return TempoConfig(
        precision=args.precision,
        reset_time=args.reset_time,
        sample_size=args.sample_size,
        verbose=args.verbose,
    )
