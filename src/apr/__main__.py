"""Command line entry point: ``python -m apr``."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .errors import AprError
from .service import SOURCES, calculate_apr, format_result

logger = logging.getLogger("apr")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute the current yyJOE APR.")
    parser.add_argument("--source", choices=SOURCES, default="chain")
    parser.add_argument("--json", action="store_true", help="print the result as JSON")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        result = calculate_apr(args.source)
    except AprError as exc:
        logger.error("APR calculation failed: %s", exc)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        for line in format_result(result):
            print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
