"""CLI argument parsing and main entry point.

Subcommands:

* ``levante-catalog serve``: run the catalog HTTP API under Uvicorn.
* ``levante-catalog list``: print the local catalog grouped by service.
* ``levante-catalog validate``: check every descriptor file offline.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys
from typing import Optional

import uvicorn

from levante_catalog.catalog.aggregator import CatalogAggregator
from levante_catalog.catalog.models import SOURCES
from levante_catalog.catalog.registry import ServiceRegistry
from levante_catalog.catalog.validation import summarize, validate_tree
from levante_catalog.config.loader import load_catalog_config
from levante_catalog.constants import SERVER_NAME, SERVER_VERSION
from levante_catalog.display.console import (
    render_catalog,
    render_startup_banner,
    render_validation,
    select_descriptors,
)
from levante_catalog.display.logging_config import secret_redaction_filter, setup_logging
from levante_catalog.errors import CatalogBaseError
from levante_catalog.server.app import build_app

module_logger = logging.getLogger(__name__)

uvicorn_svr_inst: Optional[uvicorn.Server] = None


def _resolve_data_dir(args: argparse.Namespace) -> str:
    if getattr(args, "data_dir", None):
        return args.data_dir
    return load_catalog_config(getattr(args, "config", None)).catalog.data_dir


# ── ``levante-catalog serve`` ────────────────────────────────────────────


async def _run_server(args: argparse.Namespace) -> None:
    """Async main for the serve subcommand."""
    global uvicorn_svr_inst

    log_fpath, cfg_log_lvl = setup_logging(args.log_level, quiet=True)
    module_logger.info(
        "---- %s v%s starting (file log level: %s) ----",
        SERVER_NAME,
        SERVER_VERSION,
        cfg_log_lvl,
    )

    config = load_catalog_config(args.config)
    if config.announcements.supabase_key:
        secret_redaction_filter.register(config.announcements.supabase_key)
    if args.data_dir:
        config.catalog.data_dir = args.data_dir
    host = args.host or config.server.host
    port = args.port or config.server.port

    app = build_app(config)
    render_startup_banner(host, port, log_fpath, app.state.aggregator)

    uvicorn_cfg = uvicorn.Config(
        app=app,
        host=host,
        port=port,
        log_config=None,
        log_level=cfg_log_lvl.lower() if cfg_log_lvl == "DEBUG" else "warning",
    )
    uvicorn_svr_inst = uvicorn.Server(uvicorn_cfg)

    module_logger.info("Preparing to start Uvicorn server: http://%s:%s", host, port)
    try:
        await uvicorn_svr_inst.serve()
    except (KeyboardInterrupt, SystemExit) as e_exit:
        module_logger.info("Server stopped due to '%s'.", type(e_exit).__name__)
    except Exception as e_serve:
        module_logger.exception("Unexpected error while running Uvicorn server: %s", e_serve)
        raise
    finally:
        module_logger.info("%s has shut down or is shutting down.", SERVER_NAME)


def _cmd_serve(args: argparse.Namespace) -> None:
    """Entry-point for ``levante-catalog serve``."""

    def _shutdown_handler(sig: int, frame: object) -> None:
        module_logger.info("Signal %s received, shutting down gracefully.", sig)
        if uvicorn_svr_inst is not None:
            uvicorn_svr_inst.should_exit = True

    signal.signal(signal.SIGINT, _shutdown_handler)
    signal.signal(signal.SIGTERM, _shutdown_handler)

    try:
        asyncio.run(_run_server(args))
    except CatalogBaseError as exc:
        module_logger.error("Startup failed: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        module_logger.info("%s main program interrupted by KeyboardInterrupt.", SERVER_NAME)
    finally:
        module_logger.info("%s application finished.", SERVER_NAME)


# ── ``levante-catalog list`` ─────────────────────────────────────────────


def _cmd_list(args: argparse.Namespace) -> None:
    """Entry-point for ``levante-catalog list``."""
    try:
        registry = ServiceRegistry.build(_resolve_data_dir(args))
    except CatalogBaseError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    aggregator = CatalogAggregator(registry)

    if args.json:
        grouped = select_descriptors(aggregator, source=args.source, service=args.service)
        flat = [d.to_dict() for ds in grouped.values() for d in ds]
        print(json.dumps(flat, indent=2, ensure_ascii=False))
        return
    render_catalog(aggregator, source=args.source, service=args.service)


# ── ``levante-catalog validate`` ─────────────────────────────────────────


def _cmd_validate(args: argparse.Namespace) -> None:
    """Entry-point for ``levante-catalog validate``."""
    try:
        results = validate_tree(_resolve_data_dir(args))
    except CatalogBaseError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    render_validation(results)
    if summarize(results)["invalid"]:
        sys.exit(1)


# ── CLI parser construction ──────────────────────────────────────────────


def _add_source_args(sp: argparse.ArgumentParser) -> None:
    sp.add_argument(
        "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="Path to configuration file (YAML). Default: auto-detect config.yaml/config.yml",
    )
    sp.add_argument(
        "--data-dir",
        type=str,
        default=None,
        metavar="DIR",
        help="Descriptor tree root (overrides catalog.data_dir from the config)",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser with serve/list/validate subcommands."""
    parser = argparse.ArgumentParser(
        prog="levante-catalog",
        description=f"{SERVER_NAME} v{SERVER_VERSION}",
    )
    subparsers = parser.add_subparsers(dest="command")

    # ── serve ───────────────────────────────────────────────────
    sp_serve = subparsers.add_parser("serve", help="Run the catalog HTTP API")
    sp_serve.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host address (default: server.host from the config)",
    )
    sp_serve.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port (default: server.port from the config)",
    )
    sp_serve.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Set file logging level (default: info)",
    )
    _add_source_args(sp_serve)
    sp_serve.set_defaults(func=_cmd_serve)

    # ── list ────────────────────────────────────────────────────
    sp_list = subparsers.add_parser("list", help="Print the local catalog")
    sp_list.add_argument("--source", choices=list(SOURCES), default=None)
    sp_list.add_argument("--service", type=str, default=None, metavar="NAME")
    sp_list.add_argument(
        "--json", action="store_true", default=False, help="Emit descriptors as JSON"
    )
    _add_source_args(sp_list)
    sp_list.set_defaults(func=_cmd_list)

    # ── validate ────────────────────────────────────────────────
    sp_validate = subparsers.add_parser(
        "validate", help="Validate every descriptor file in the tree"
    )
    _add_source_args(sp_validate)
    sp_validate.set_defaults(func=_cmd_validate)

    return parser


def main() -> None:
    """Program entry point: parse arguments and dispatch to subcommand."""
    parser = _build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)
    else:
        args.func(args)
