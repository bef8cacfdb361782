"""
Command-line interface for the scorer.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import load_settings
from .errors import ScoringInputError
from .scorer import score


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="agent-readiness",
        description="Score how ready a website is for autonomous AI agents and print the result as JSON.",
    )
    parser.add_argument("url", help="Domain or URL to score (e.g. stripe.com)")
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation (default: 2)")
    parser.add_argument("--log-level", default="WARNING", help="Log level for progress messages on stderr")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        result = asyncio.run(score(args.url, settings=load_settings()))
    except ScoringInputError as e:
        sys.stderr.write(f"Error: {e}\n")
        return 2

    sys.stdout.write(result.model_dump_json(by_alias=True, indent=args.indent) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
