"""
Main entry point for Lab 4: Learning Rate, Momentum and Optimizers

This script provides a command-line interface to run experiments.

Usage:
    python main.py                          # Run all studies
    python main.py --study momentum         # Run a single study
    python main.py --epochs 50 --force      # Shorter runs, ignore cache

Course: CS 599 Deep Learning
Author: Karl Reger
Date: December 2025
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent))

from experiments.config import STUDIES
from experiments.run import run_all


def build_parser():
    parser = argparse.ArgumentParser(
        description="Lab 4: Learning Rate, Momentum and Optimizers - Experiment Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py                              # Run all studies
    python main.py --study learning_rate        # One study
    python main.py --study decay --study patience

After running, check:
    - results/metrics/*.json         # Numerical results
    - plots/*.png                    # Visualization plots
        """,
    )

    parser.add_argument(
        "--study",
        action="append",
        choices=[study["name"] for study in STUDIES],
        help="Study to run (repeatable, default: all)",
    )
    parser.add_argument(
        "--epochs",
        type=int,
        default=None,
        help="Override the number of training epochs per run",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Re-run experiments even if cached results exist",
    )
    parser.add_argument("--results-dir", default="results/metrics")
    parser.add_argument("--plots-dir", default="plots")
    return parser


def main(argv=None):
    """
    Parse command-line arguments and execute requested studies.
    """
    args = build_parser().parse_args(argv)

    if args.epochs is not None and args.epochs < 1:
        print("--epochs must be a positive integer")
        sys.exit(2)

    run_all(
        study_names=args.study,
        epochs=args.epochs,
        force=args.force,
        results_dir=args.results_dir,
        plots_dir=args.plots_dir,
    )


if __name__ == "__main__":
    main()
