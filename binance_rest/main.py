"""
Command-line entry point for the Binance REST client.

Calls one client method and prints the response payload as JSON, e.g.:

    binance-rest get_order_book --param symbol=BTCUSDT --param limit=5
"""

import asyncio
import argparse
import json
import sys
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .exchange.client import BinanceClient
from .exchange.exceptions import BinanceError, ExchangeAPIError
from .exchange.exchange_config import load_config
from .utils.logger import setup_logger, log_system_event, EventType


# Methods taking a single positional value instead of a params dict
SCALAR_COMMANDS = {
    "get_24hour_stats": "symbol",
    "get_open_orders": "symbol",
    "get_deposit_address": "asset",
}

NO_ARG_COMMANDS = {
    "ping",
    "get_server_time",
    "get_prices",
    "get_ticker_tape",
    "get_account_information",
}

PARAM_COMMANDS = {
    "get_order_book",
    "get_aggregate_trades_list",
    "get_candles",
    "place_new_order",
    "place_new_test_order",
    "get_order",
    "cancel_order",
    "get_all_orders",
    "get_account_trade_list",
    "request_crypto_withdrawal",
    "get_deposit_history",
    "get_withdrawal_history",
}

COMMANDS = sorted(NO_ARG_COMMANDS | PARAM_COMMANDS | set(SCALAR_COMMANDS))


def parse_params(pairs: List[str]) -> Dict[str, Any]:
    """
    Parse repeated key=value arguments.

    Integers and true/false are decoded, decimals become Decimal so they
    are sent exactly as typed, everything else stays a string.
    """
    params: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {pair!r}")
        try:
            decoded = json.loads(value, parse_float=Decimal)
        except ValueError:
            decoded = value
        params[key] = decoded if isinstance(decoded, (int, Decimal, bool)) else value
    return params


async def run_command(client: BinanceClient, command: str, params: Dict[str, Any]) -> Any:
    """Invoke `command` on `client` and return the response payload."""
    method = getattr(client, command)

    if command in NO_ARG_COMMANDS:
        response = await method()
    elif command in SCALAR_COMMANDS:
        name = SCALAR_COMMANDS[command]
        if name not in params:
            raise ValueError(f"{command} requires --param {name}=...")
        response = await method(params[name])
    else:
        response = await method(params)

    return response.data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="binance-rest",
        description="Binance REST API client"
    )
    parser.add_argument("command", choices=COMMANDS, help="Client method to call")
    parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Request parameter (repeatable)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to JSON configuration file"
    )
    parser.add_argument(
        "--testnet",
        action="store_true",
        default=None,
        help="Use the Spot testnet"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level"
    )
    parser.add_argument(
        "--log-format",
        choices=("console", "json"),
        default="console",
        help="Log output format"
    )
    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logger = setup_logger(log_level=args.log_level, log_format=args.log_format)

    try:
        params = parse_params(args.param)
        config = load_config(args.config, testnet=args.testnet)
    except (ValueError, BinanceError) as e:
        logger.error("invalid_arguments", error=str(e))
        return 2

    log_system_event(logger, EventType.STARTUP, "Running command", command=args.command, testnet=config.testnet)

    async with BinanceClient(config=config) as client:
        try:
            result = await run_command(client, args.command, params)
        except ExchangeAPIError as e:
            log_system_event(
                logger,
                EventType.API_ERROR,
                "Exchange rejected request",
                status_code=e.status_code,
                error_code=e.error_code
            )
            print(json.dumps(e.reason, indent=2, default=str))
            return 1
        except (BinanceError, ValueError) as e:
            logger.error("command_failed", command=args.command, error=str(e), error_type=type(e).__name__)
            return 1

    print(json.dumps(result, indent=2, default=str))
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
