"""Command-line interface for the vault ledger."""
from __future__ import annotations

import argparse
import logging
import sys

from aiohttp import web

from .api import create_app
from .chains import SimulatedChain
from .config import AppConfig, load_config
from .logging_setup import configure_logging
from .services import LedgerEngine

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="vault-ledger",
        description="Yield-aggregation vault ledger",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    serve_parser = sub.add_parser("serve", help="Run the HTTP API on a simulated chain")
    serve_parser.add_argument("--host", default=None, help="Bind address (overrides config)")
    serve_parser.add_argument(
        "--port", type=int, default=None, help="Listen port (overrides config)"
    )

    sub.add_parser("strategies", help="List the genesis strategies")

    return parser


def format_strategies(config: AppConfig) -> str:
    """Render the genesis strategy table."""
    lines = [f"{'ID':>3}  {'NAME':<28} {'PROTOCOL':<12} {'APY':>7} {'RISK':>4}"]
    for strategy_id, seed in enumerate(config.strategies, start=1):
        lines.append(
            f"{strategy_id:>3}  {seed.name:<28} {seed.protocol:<12} "
            f"{seed.apy / 100:>6.2f}% {seed.risk_score:>4}"
        )
    return "\n".join(lines)


def _serve(config: AppConfig, host: str | None, port: int | None) -> None:
    chain = SimulatedChain(mint_on_demand=True)
    engine = LedgerEngine(config, chain)
    app = create_app(engine, chain)
    host = host or config.api.host
    port = port or config.api.port
    logger.info("Serving vault ledger API on %s:%d", host, port)
    web.run_app(app, host=host, port=port, print=None)


def main(argv: list[str] | None = None) -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "serve":
        _serve(config, args.host, args.port)
    elif args.command == "strategies":
        print(format_strategies(config))


if __name__ == "__main__":
    main()
