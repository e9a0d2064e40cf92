"""
Raindrops CLI - run the file drop server from a terminal.

Usage examples:
    raindrops serve
    raindrops serve --port 9000 --root ~/Public/drop --no-write
    raindrops clear --root ~/Public/drop
"""

import argparse
import dataclasses
import locale
import logging
from pathlib import Path

from raindrops.base.config import RaindropsConfig, set_config, setup_logging
from raindrops.storage.paths import clear_storage

logger = logging.getLogger(__name__)


def build_config(args) -> RaindropsConfig:
    """Environment-derived config with command line overrides applied."""
    config = RaindropsConfig.from_env()

    security = config.security
    if getattr(args, "pin", None):
        security = dataclasses.replace(security, pin=args.pin)

    storage = config.storage
    if getattr(args, "root", None):
        storage = dataclasses.replace(storage, root=Path(args.root).expanduser())

    log = config.log
    if getattr(args, "debug", False):
        log = dataclasses.replace(log, level="DEBUG")

    return dataclasses.replace(
        config,
        security=security,
        storage=storage,
        log=log,
        host=getattr(args, "host", None) or config.host,
        port=getattr(args, "port", None) or config.port,
        allow_read=config.allow_read and not getattr(args, "no_read", False),
        allow_write=config.allow_write and not getattr(args, "no_write", False),
        debug=config.debug or getattr(args, "debug", False),
    )


def use_system_collation() -> None:
    """Sort listings by the operator's locale (LC_COLLATE from the environment)."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning(f"Locale from environment unavailable, keeping default collation: {e}")


def run_serve(args):
    """Start the HTTP server (and the operator console unless disabled)."""
    from raindrops.cli.console import OperatorConsole
    from raindrops.server.api import serve
    from raindrops.server.state import ApplicationState

    config = build_config(args)
    set_config(config)
    setup_logging(config)
    use_system_collation()

    state = ApplicationState(config=config)

    logger.info(f"Raindrops serving {config.storage_root} on http://{config.host}:{config.port}")
    logger.info(f"PIN: {state.control.pin}")

    if not args.no_console:
        OperatorConsole(state).start()
        logger.info("Operator console ready (type 'help')")

    serve(state)


def run_clear(args):
    """Delete everything in the storage root."""
    config = build_config(args)
    setup_logging(config)
    removed = clear_storage(config.storage_root)
    print(f"Removed {removed} item(s) from {config.storage_root}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Raindrops local network file drop")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Start the file drop server")
    serve_parser.add_argument("--host", help="Interface to bind (default 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, help="TCP port (default 8080)")
    serve_parser.add_argument("--root", help="Directory to share (default ~/Downloads/Raindrops)")
    serve_parser.add_argument("--pin", help="Use this PIN instead of a random one")
    serve_parser.add_argument("--no-read", action="store_true", help="Start with downloads disabled")
    serve_parser.add_argument("--no-write", action="store_true", help="Start with uploads disabled")
    serve_parser.add_argument("--no-console", action="store_true", help="Do not read operator commands from stdin")
    serve_parser.add_argument("--debug", action="store_true", help="Verbose logging")
    serve_parser.set_defaults(func=run_serve)

    clear_parser = subparsers.add_parser("clear", help="Empty the storage root")
    clear_parser.add_argument("--root", help="Directory to clear (default ~/Downloads/Raindrops)")
    clear_parser.set_defaults(func=run_clear)

    args = parser.parse_args(argv)

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
