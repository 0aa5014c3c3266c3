"""
Entry point for the serverless_step_functions_local package.

This allows the package to be executed as:
    python -m serverless_step_functions_local --service-path path/to/service

The Step Functions Local emulator runs until 'quit' is typed.
"""

import argparse
import logging
import sys

from colorama import Fore, Style

from .framework import Serverless
from .session import OfflineSession


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="serverless_step_functions_local",
        description="Run state machines of a Serverless service against Step Functions Local",
    )
    parser.add_argument("--service-path", default=".", help="Directory containing the service file")
    parser.add_argument("--config", help="Service file name (default: serverless.yml)")
    parser.add_argument("--stage", help="Stage used to resolve ${opt:stage}")
    parser.add_argument("--region", help="Region used to resolve ${opt:region}")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    options = {k: v for k, v in (("config", args.config), ("stage", args.stage), ("region", args.region)) if v}
    try:
        serverless = Serverless.from_service_path(args.service_path, options)
        OfflineSession(serverless, options).run()
    except Exception as e:
        print(f"{Fore.RED}Fatal error running Step Functions Local: {e}{Style.RESET_ALL}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
