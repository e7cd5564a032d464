"""Headless runner for the idle-farm simulation.

Runs a persona through the simulation for a number of ticks, logs the
milestones and prints a summary. ``--export`` writes the final summary as
JSON for offline analysis.
"""

import argparse
import logging
import sys
from pathlib import Path

import orjson

from idlefarm.config.parameters import PERSONA_PRESETS, compile_config
from idlefarm.exceptions import ConfigurationError
from idlefarm.logging_config import configure_logging
from idlefarm.serializers import summary_to_dict, to_json
from idlefarm.simulation.engine import create_engine

logger = logging.getLogger(__name__)


def parse_override(raw: str):
    """Parse ``path=value``; the value is read as JSON when it parses, else as a string."""
    path, sep, value = raw.partition("=")
    if not sep or not path:
        raise argparse.ArgumentTypeError(f"Expected path=value, got {raw!r}")
    try:
        return path.strip(), orjson.loads(value)
    except orjson.JSONDecodeError:
        return path.strip(), value


def run_headless(persona: str, max_ticks: int, seed=None, overrides=None, export=None) -> int:
    """Run one simulation and optionally export the summary.

    Returns:
        Process exit code (0 on victory or a clean stop, 2 if the run got stuck)
    """
    config = compile_config(persona, dict(overrides or []), seed)
    engine = create_engine(config)
    summary = engine.run(max_ticks)

    if export:
        Path(export).write_bytes(to_json(summary_to_dict(summary), pretty=True))
        logger.info(f"Summary exported to: {export}")
    return 2 if summary.stuck else 0


def main():
    """Parse command-line arguments and run the simulation."""
    parser = argparse.ArgumentParser(
        description="Idle Farm Simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # One in-game day as the casual persona
  python main.py --ticks 1440

  # Reproducible speedrun with a larger action budget per check-in
  python main.py --persona speedrunner --seed 42 --set decisions.top_k=5

  # Export the run summary
  python main.py --ticks 10000 --export run.json
        """,
    )
    parser.add_argument(
        "--persona",
        choices=sorted(PERSONA_PRESETS),
        default="casual",
        help="Player persona to simulate (default: casual)",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=1440,
        help="Maximum ticks (in-game minutes at speed 1) to simulate (default: 1440)",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Random seed for deterministic behavior (optional)"
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        type=parse_override,
        action="append",
        default=[],
        metavar="PATH=VALUE",
        help="Override a parameter, e.g. --set victory.plots=40 (repeatable)",
    )
    parser.add_argument(
        "--export",
        type=str,
        default=None,
        metavar="FILENAME",
        help="Write the run summary to a JSON file",
    )
    parser.add_argument(
        "--log-level", type=str, default=None, help="Log level (default: IDLEFARM_LOG_LEVEL or INFO)"
    )

    args = parser.parse_args()
    configure_logging(level=args.log_level)

    try:
        code = run_headless(args.persona, args.ticks, args.seed, args.overrides, args.export)
    except ConfigurationError as exc:
        logger.error(f"Invalid configuration: {exc}")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
