"""
VML Designer - Entry Point
Opens a document, optionally starts a design session and the control channel.
"""

import argparse
import signal
import sys

from vml_designer.core import Settings, configure_logging, get_logger, get_settings
from vml_designer.runtime import Runtime

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="vml-designer", description=__doc__.strip().splitlines()[0])
    parser.add_argument("document", nargs="?", help="form to open (path or name under the vml dir)")
    parser.add_argument("--db", dest="db_path", help="SQLite database path")
    parser.add_argument("--api", action="store_true", help="enable the HTTP control channel")
    parser.add_argument("--port", type=int, help="control channel port")
    parser.add_argument("--design", action="store_true", help="start a fresh design session")
    parser.add_argument("--restore", action="store_true", help="rebuild the canvas from the last session")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    overrides = {
        "db_path": args.db_path,
        "api_port": args.port,
        "log_level": args.log_level,
        "api_enabled": True if args.api else None,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    return Settings(**overrides) if overrides else get_settings()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = build_settings(args)
    configure_logging(settings.log_level, settings.json_logs)

    runtime = Runtime.create(settings).start()

    def on_signal(signum, frame):
        logger.info("shutdown_signal", signal=signal.Signals(signum).name)
        runtime.request_exit()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, on_signal)

    if args.design or args.restore:
        runtime.begin_design_session(fresh=not args.restore)
    if args.document:
        if runtime.open_form(args.document) is None:
            logger.error("document_open_failed", document=args.document)
            runtime.shutdown()
            return 1

    while not runtime.wait(0.5):
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
