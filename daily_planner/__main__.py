"""Entry point for running the Daily Planner API server."""

import argparse
import logging
from pathlib import Path

import uvicorn

from daily_planner.config import load_settings
from daily_planner.logging_setup import setup_logging
from daily_planner.main import create_app
from daily_planner.storage import JsonFileStorage

logger = logging.getLogger("daily_planner")


def create_arg_parser(defaults) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Daily Planner task API")
    parser.add_argument(
        "--host",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=defaults.port,
        help=f"Port to run on (default: {defaults.port})",
    )
    parser.add_argument(
        "--tasks-file",
        type=Path,
        default=defaults.tasks_file,
        help=f"JSON file holding the tasks (default: {defaults.tasks_file})",
    )
    parser.add_argument(
        "--static-dir",
        type=Path,
        default=defaults.static_dir,
        help="Directory with the frontend files to serve (default: none)",
    )
    return parser


def main(argv=None):
    settings = load_settings()
    args = create_arg_parser(settings).parse_args(argv)

    setup_logging(console_level=settings.log_level, log_file=settings.log_file)

    app = create_app(JsonFileStorage(args.tasks_file), static_dir=args.static_dir)

    logger.info("Daily Planner backend running on http://localhost:%d", args.port)
    logger.info("Tasks are stored in %s", args.tasks_file.resolve())
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
