"""Command line harness: print post-break layouts as JSON."""

import argparse
import json
import logging
import sys

from logging_config import configure_logging
from rack import MODES
from rng import MASK32, normalize_seed
from scenario import build_scenario

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a seeded pool break layout")
    parser.add_argument("--mode", choices=MODES, default="8", help="Game: 8-ball or 9-ball")
    parser.add_argument(
        "--seed",
        default=None,
        help="Scenario seed (decimal or 0x-prefixed hex); random when omitted",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=1,
        help="Number of scenarios, using consecutive seeds from --seed",
    )
    parser.add_argument(
        "--text-seeds",
        action="store_true",
        help="Hash a non-numeric --seed instead of replacing it with a random seed",
    )
    parser.add_argument("--indent", type=int, default=2, help="JSON indent (0 = compact)")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for stderr diagnostics",
    )
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.count < 1:
        parser.error("--count must be at least 1")

    configure_logging(args.log_level)

    base = normalize_seed(args.seed, text_seeds=args.text_seeds)
    results = [
        build_scenario(args.mode, (base + i) & MASK32).to_dict()
        for i in range(args.count)
    ]
    degraded = sum(1 for r in results if r["degraded"])
    if degraded:
        logger.warning("%d of %d scenarios used fallback placement", degraded, len(results))

    payload = results[0] if args.count == 1 else results
    indent = args.indent if args.indent > 0 else None
    separators = None if indent else (',', ':')
    json.dump(payload, sys.stdout, indent=indent, separators=separators)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
