# Entry point for the Refiner load-test harness
#
#   python loadtest.py                  compare OLD and NEW clients
#   python loadtest.py --csv out.csv    same, and export both summaries
#   python loadtest.py smoke            send a single event and print the response

import json
import sys
from typing import List, Optional

from pydantic import ValidationError
from pydantic_settings import SettingsError

from src.loadtest import ComparativeRunner, EventSmokeTest
from src.shared.config import ConfigurationError, LoadTestConfig
from src.shared.logging import LoggingManager


def parse_args(argv: List[str]):
    """Return (mode, csv_path) from the command line."""
    mode = "compare"
    csv_path: Optional[str] = None
    args = list(argv)
    while args:
        arg = args.pop(0)
        if arg.lower() in ("smoke", "--smoke"):
            mode = "smoke"
        elif arg == "--csv":
            if not args:
                raise SystemExit("--csv requires a file path")
            csv_path = args.pop(0)
        else:
            raise SystemExit(f"Unknown argument: {arg}")
    if mode == "smoke" and csv_path is not None:
        raise SystemExit("--csv is only supported when comparing clients")
    return mode, csv_path


def main(argv: List[str]) -> int:
    mode, csv_path = parse_args(argv)

    try:
        config = LoadTestConfig()
        LoggingManager.setup_logging(config.log_level, config.library_log_levels)
        logger = LoggingManager.get_logger(__name__)
        logger.info(f"Starting {mode} against {config.endpoint_url}")

        if mode == "smoke":
            return 0 if EventSmokeTest(config).run() else 1
        ComparativeRunner(config).run(export_path=csv_path)
        return 0
    except (ConfigurationError, ValidationError, SettingsError, json.JSONDecodeError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
