"""CLI entry point for the ZK-DCA toolkit."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import importlib.util
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from aleo_client.bridge import build_bridge_transfer, get_bridge_status
from aleo_client.models import BridgeTransferParams, WalletRecord
from dca.errors import DcaError
from dca.position import Position
from dca.tokens import (
    AVAILABLE_TOKENS,
    find_evm_chain,
    format_token,
    tokens_for_chain,
)
from dca.validation import validate_address
from engine.dca_manager import CreatePositionParams, OperationResult
from engine.dca_runner import (
    DcaRuntime,
    build_ans_client,
    build_bridge_client,
    build_network_client,
    build_runtime,
    resolve_state_path,
    watch_positions,
)
from utils.config_validator import ConfigValidationError, validate_config
from utils.credentials import (
    DEFAULT_OWNER_ENV,
    DEFAULT_SERVICE_NAME,
    DEFAULT_VIEW_KEY_ENV,
    load_wallet_account,
    store_wallet_account,
)
from utils.logging_config import setup_logging

LOGGER = logging.getLogger("zkdca.cli")

SUPPORTED_FORMATS = (".json", ".toml", ".yaml", ".yml")
VERSION = "zkdca 0.1.0"


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", help="Path to JSON/TOML/YAML config file.")
    common.add_argument(
        "--state-path",
        help="Path to positions.json (defaults to the config file directory).",
    )
    common.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )

    parser = argparse.ArgumentParser(
        description="Privacy-preserving DCA positions on Aleo (dry-run wallet)."
    )
    parser.add_argument("--version", action="version", version=VERSION)
    subparsers = parser.add_subparsers(dest="command", required=True)

    create_parser = subparsers.add_parser(
        "create", parents=[common], help="Create a DCA position."
    )
    create_parser.add_argument("--input-token", type=int, default=1)
    create_parser.add_argument("--output-token", type=int, default=2)
    create_parser.add_argument("--amount", type=int, required=True)
    create_parser.add_argument(
        "--interval", type=int, required=True, help="Blocks between executions."
    )
    create_parser.add_argument("--executions", type=int, required=True)
    create_parser.add_argument("--min-output", type=int, required=True)
    create_parser.add_argument(
        "--height", type=int, help="Block height to use instead of querying it."
    )
    create_parser.set_defaults(handler=run_create)

    execute_parser = subparsers.add_parser(
        "execute", parents=[common], help="Execute a due DCA position."
    )
    execute_parser.add_argument("position_id")
    execute_parser.add_argument(
        "--token-record", required=True, help="Token record plaintext from the wallet."
    )
    execute_parser.add_argument("--height", type=int)
    execute_parser.set_defaults(handler=run_execute)

    cancel_parser = subparsers.add_parser(
        "cancel", parents=[common], help="Cancel a DCA position."
    )
    cancel_parser.add_argument("position_id")
    cancel_parser.set_defaults(handler=run_cancel)

    positions_parser = subparsers.add_parser(
        "positions", parents=[common], help="List tracked positions."
    )
    positions_parser.add_argument(
        "--all", action="store_true", help="Include non-active positions."
    )
    positions_parser.set_defaults(handler=run_positions)

    reconcile_parser = subparsers.add_parser(
        "reconcile", parents=[common], help="Rebuild positions from wallet records."
    )
    reconcile_parser.add_argument(
        "--records", required=True, help="JSON file with the wallet's records."
    )
    reconcile_parser.set_defaults(handler=run_reconcile)

    height_parser = subparsers.add_parser(
        "height", parents=[common], help="Print the latest block height."
    )
    height_parser.set_defaults(handler=run_height)

    watch_parser = subparsers.add_parser(
        "watch", parents=[common], help="Poll block height and report due positions."
    )
    watch_parser.add_argument("--max-polls", type=int)
    watch_parser.set_defaults(handler=run_watch)

    ans_parser = subparsers.add_parser(
        "ans", parents=[common], help="Aleo Name Service lookups."
    )
    ans_parser.add_argument(
        "lookup",
        choices=["primary-name", "address", "hash", "resolver", "avatar", "display"],
    )
    ans_parser.add_argument("value", help="Address, name or name hash.")
    ans_parser.add_argument("--category", help="Resolver category (btc, eth, ...).")
    ans_parser.set_defaults(handler=run_ans)

    bridge_parser = subparsers.add_parser(
        "bridge", parents=[common], help="Verulink bridge helpers."
    )
    bridge_parser.add_argument("action", choices=["packets", "status", "transfer"])
    bridge_parser.add_argument("--wallet")
    bridge_parser.add_argument("--chain")
    bridge_parser.add_argument(
        "--filter", default="all", choices=["all", "completed", "pending"]
    )
    bridge_parser.add_argument("--page", type=int, default=1)
    bridge_parser.add_argument("--limit", type=int, default=10)
    bridge_parser.add_argument("--min-signatures", type=int, default=0)
    bridge_parser.add_argument("--source")
    bridge_parser.add_argument("--destination")
    bridge_parser.add_argument("--token")
    bridge_parser.add_argument("--amount")
    bridge_parser.add_argument("--receiver")
    bridge_parser.set_defaults(handler=run_bridge)

    address_parser = subparsers.add_parser(
        "validate-address", help="Check an address format."
    )
    address_parser.add_argument("address")
    address_parser.add_argument("--chain", default="native", choices=["native", "evm"])
    address_parser.set_defaults(handler=run_validate_address)

    tokens_parser = subparsers.add_parser(
        "tokens", help="List DCA tokens, or bridgeable tokens for an EVM chain."
    )
    tokens_parser.add_argument("--chain", help="EVM chain id (e.g. 8453 for Base).")
    tokens_parser.set_defaults(handler=run_tokens)

    store_parser = subparsers.add_parser(
        "store-account", help="Store the wallet account in the OS keychain."
    )
    store_parser.add_argument(
        "--service-name",
        default=DEFAULT_SERVICE_NAME,
        help=f"Keyring service name (default: {DEFAULT_SERVICE_NAME}).",
    )
    store_parser.add_argument(
        "--owner", help=f"Owner address (defaults to ${DEFAULT_OWNER_ENV} or prompt)."
    )
    store_parser.add_argument(
        "--with-view-key",
        action="store_true",
        help=f"Also store a view key (from ${DEFAULT_VIEW_KEY_ENV} or prompt).",
    )
    store_parser.set_defaults(handler=run_store_account)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if hasattr(args, "handler"):
        return args.handler(args)
    parser.print_help()
    return 1


def _guarded(description: str, func: Any, args: argparse.Namespace) -> int:
    try:
        config, config_dir = prepare(args)
        return func(args, config, config_dir)
    except ConfigValidationError as exc:
        LOGGER.error("Configuration validation failed: %s", exc)
        return 2
    except (DcaError, FileNotFoundError, RuntimeError, ValueError) as exc:
        LOGGER.error(str(exc))
        return 2
    except Exception as exc:  # pragma: no cover - safeguard for unexpected issues.
        LOGGER.exception("Unexpected error during %s: %s", description, exc)
        return 3


def prepare(args: argparse.Namespace) -> tuple[dict[str, Any], Path]:
    config: dict[str, Any] = {}
    config_dir = Path.cwd()
    config_arg = getattr(args, "config", None)
    if config_arg:
        config_path = Path(config_arg).expanduser()
        config = load_config(config_path)
        config_dir = config_path.parent
    level = getattr(args, "log_level", None) or config.get("log_level", "INFO")
    configure_logging(str(level))
    validate_config(config)
    return config, config_dir


def configure_logging(level: str) -> None:
    """Configure logging with sanitization and proper formatting."""
    setup_logging(level=level, sanitize=True, structured=False)


def emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True, default=str))


def position_summary(position: Position) -> dict[str, Any]:
    summary = position.to_payload()
    summary["swap"] = (
        f"{position.input_amount} {format_token(position.input_token_id)} -> "
        f"{format_token(position.output_token_id)}"
    )
    summary.pop("record", None)
    return summary


def result_summary(result: OperationResult) -> dict[str, Any]:
    return {
        "success": result.success,
        "tx_id": result.tx_id,
        "error": result.error,
        "request": result.request.to_payload(),
        "position": position_summary(result.position),
    }


def _runtime(
    args: argparse.Namespace, config: dict[str, Any], config_dir: Path
) -> DcaRuntime:
    account = load_wallet_account(DEFAULT_SERVICE_NAME, config)
    state_path = resolve_state_path(config, args.state_path, config_dir)
    return build_runtime(config, account.address, state_path)


def run_create(args: argparse.Namespace) -> int:
    return _guarded("position creation", _do_create, args)


def _do_create(
    args: argparse.Namespace, config: dict[str, Any], config_dir: Path
) -> int:
    async def go() -> OperationResult:
        runtime = _runtime(args, config, config_dir)
        await runtime.start()
        try:
            height = await runtime.current_height(args.height)
            return await runtime.manager.create_position(
                CreatePositionParams(
                    input_token_id=args.input_token,
                    input_amount=args.amount,
                    output_token_id=args.output_token,
                    interval=args.interval,
                    executions_remaining=args.executions,
                    min_output_amount=args.min_output,
                ),
                height,
            )
        finally:
            await runtime.close()

    result = asyncio.run(go())
    emit(result_summary(result))
    return 0 if result.success else 2


def run_execute(args: argparse.Namespace) -> int:
    return _guarded("position execution", _do_execute, args)


def _do_execute(
    args: argparse.Namespace, config: dict[str, Any], config_dir: Path
) -> int:
    async def go() -> OperationResult:
        runtime = _runtime(args, config, config_dir)
        await runtime.start()
        try:
            height = await runtime.current_height(args.height)
            return await runtime.manager.execute_position(
                args.position_id, args.token_record, height
            )
        finally:
            await runtime.close()

    result = asyncio.run(go())
    emit(result_summary(result))
    return 0 if result.success else 2


def run_cancel(args: argparse.Namespace) -> int:
    return _guarded("position cancellation", _do_cancel, args)


def _do_cancel(
    args: argparse.Namespace, config: dict[str, Any], config_dir: Path
) -> int:
    async def go() -> OperationResult:
        runtime = _runtime(args, config, config_dir)
        await runtime.start()
        try:
            return await runtime.manager.cancel_position(args.position_id)
        finally:
            await runtime.close()

    result = asyncio.run(go())
    emit(result_summary(result))
    return 0 if result.success else 2


def run_positions(args: argparse.Namespace) -> int:
    return _guarded("position listing", _do_positions, args)


def _do_positions(
    args: argparse.Namespace, config: dict[str, Any], config_dir: Path
) -> int:
    from engine.state import PositionBook

    book = PositionBook.load(resolve_state_path(config, args.state_path, config_dir))
    positions = book.positions if args.all else book.active()
    emit(
        {
            "last_block_height": book.last_block_height,
            "positions": [position_summary(position) for position in positions],
        }
    )
    return 0


def load_records(records_path: Path) -> list[WalletRecord]:
    if not records_path.exists():
        raise FileNotFoundError(f"Records file not found: {records_path}")
    try:
        data = json.loads(records_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in records file {records_path}: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("records", [])
    if not isinstance(data, list):
        raise ValueError("Records file must contain a list of records.")
    return [WalletRecord.model_validate(item) for item in data]


def run_reconcile(args: argparse.Namespace) -> int:
    return _guarded("reconciliation", _do_reconcile, args)


def _do_reconcile(
    args: argparse.Namespace, config: dict[str, Any], config_dir: Path
) -> int:
    records = load_records(Path(args.records).expanduser())
    runtime = _runtime(args, config, config_dir)
    active = runtime.manager.reconcile(records)
    emit({"positions": [position_summary(position) for position in active]})
    return 0


def run_height(args: argparse.Namespace) -> int:
    return _guarded("block height query", _do_height, args)


def _do_height(
    args: argparse.Namespace, config: dict[str, Any], config_dir: Path
) -> int:
    async def go() -> int:
        network = build_network_client(config)
        try:
            return await network.get_latest_height()
        finally:
            await network.close()

    emit({"height": asyncio.run(go())})
    return 0


def run_watch(args: argparse.Namespace) -> int:
    return _guarded("position watch", _do_watch, args)


def _do_watch(
    args: argparse.Namespace, config: dict[str, Any], config_dir: Path
) -> int:
    async def go() -> None:
        runtime = _runtime(args, config, config_dir)
        await runtime.start()
        try:
            await watch_positions(runtime, max_polls=args.max_polls)
        finally:
            await runtime.close()

    LOGGER.info("Watching positions. Press Ctrl+C to stop.")
    try:
        asyncio.run(go())
    except KeyboardInterrupt:
        LOGGER.info("Stopped watching positions.")
    return 0


def run_ans(args: argparse.Namespace) -> int:
    return _guarded("ANS lookup", _do_ans, args)


def _do_ans(
    args: argparse.Namespace, config: dict[str, Any], config_dir: Path
) -> int:
    if args.lookup == "resolver" and not args.category:
        raise ValueError("--category is required for resolver lookups.")

    async def go() -> Any:
        client = build_ans_client(config)
        try:
            if args.lookup == "primary-name":
                return await client.get_primary_name(args.value)
            if args.lookup == "address":
                return await client.get_address_from_name(args.value)
            if args.lookup == "hash":
                result = await client.get_name_from_hash(args.value)
                return result.model_dump() if result is not None else None
            if args.lookup == "resolver":
                return await client.get_resolver_content(args.value, args.category)
            if args.lookup == "avatar":
                return await client.get_avatar(args.value)
            return await client.format_address_with_ans(args.value)
        finally:
            await client.close()

    emit({"lookup": args.lookup, "value": args.value, "result": asyncio.run(go())})
    return 0


def run_bridge(args: argparse.Namespace) -> int:
    return _guarded("bridge command", _do_bridge, args)


def _do_bridge(
    args: argparse.Namespace, config: dict[str, Any], config_dir: Path
) -> int:
    if args.action == "status":
        emit(get_bridge_status().model_dump())
        return 0
    if args.action == "transfer":
        params = BridgeTransferParams(
            source_chain_id=_required(args.source, "--source"),
            destination_chain_id=_required(args.destination, "--destination"),
            token_address=_required(args.token, "--token"),
            amount=_required(args.amount, "--amount"),
            receiver=_required(args.receiver, "--receiver"),
        )
        emit(build_bridge_transfer(params).model_dump())
        return 0

    async def go() -> Any:
        client = build_bridge_client(config)
        try:
            if args.wallet and args.chain:
                return await client.fetch_packets_by_wallet_and_chain(
                    args.wallet, args.chain, args.filter, args.page, args.limit
                )
            if args.wallet:
                return await client.fetch_packets_by_wallet(
                    args.wallet, args.filter, args.page, args.limit
                )
            if args.chain:
                return await client.fetch_packets_by_chain(
                    args.chain,
                    args.filter,
                    args.min_signatures,
                    args.page,
                    args.limit,
                )
            raise ValueError("Provide --wallet and/or --chain to list packets.")
        finally:
            await client.close()

    emit(asyncio.run(go()).model_dump(by_alias=True))
    return 0


def _required(value: str | None, flag: str) -> str:
    if not value:
        raise ValueError(f"{flag} is required for bridge transfers.")
    return value


def run_validate_address(args: argparse.Namespace) -> int:
    valid = validate_address(args.address, args.chain)
    emit({"address": args.address, "chain": args.chain, "valid": valid})
    return 0 if valid else 1


def run_tokens(args: argparse.Namespace) -> int:
    if not args.chain:
        emit(
            {
                "tokens": [
                    {"id": token.id, "name": format_token(token.id)}
                    for token in AVAILABLE_TOKENS.values()
                ]
            }
        )
        return 0
    chain = find_evm_chain(args.chain)
    if chain is None:
        LOGGER.error("Unknown EVM chain id: %s", args.chain)
        return 2
    emit(
        {
            "chain": chain.name,
            "testnet": chain.testnet,
            "tokens": [token.symbol for token in tokens_for_chain(chain.id)],
        }
    )
    return 0


def run_store_account(args: argparse.Namespace) -> int:
    configure_logging("INFO")
    owner = args.owner or os.getenv(DEFAULT_OWNER_ENV) or input("Owner address: ")
    view_key = None
    if args.with_view_key:
        view_key = os.getenv(DEFAULT_VIEW_KEY_ENV) or getpass.getpass("View key: ")
    try:
        store_wallet_account(args.service_name, owner, view_key=view_key)
    except (RuntimeError, ValueError) as exc:
        LOGGER.error(str(exc))
        return 2
    LOGGER.info("Stored wallet account for service '%s'.", args.service_name)
    return 0


def load_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}. Ensure the path is correct and readable."
        )
    suffix = config_path.suffix.lower()
    if suffix not in SUPPORTED_FORMATS:
        supported = ", ".join(SUPPORTED_FORMATS)
        raise ValueError(
            f"Unsupported config format '{suffix}'. Supported formats: {supported}."
        )
    try:
        if suffix == ".json":
            data = json.loads(config_path.read_text(encoding="utf-8"))
        elif suffix == ".toml":
            data = load_toml(config_path)
        else:
            data = load_yaml(config_path)
    except json.JSONDecodeError as exc:
        raise ValueError(
            f"Invalid JSON in config file {config_path}: {exc}. Validate the file format."
        ) from exc
    except (RuntimeError, ValueError):
        raise
    except Exception as exc:
        raise RuntimeError(
            f"Failed to parse config file {config_path}: {exc}."
        ) from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Config file {config_path} must contain a JSON/TOML/YAML object mapping."
        )
    return data


def load_toml(config_path: Path) -> dict[str, Any]:
    if sys.version_info >= (3, 11):
        import tomllib  # type: ignore[attr-defined]

        return tomllib.loads(config_path.read_text(encoding="utf-8"))
    if importlib.util.find_spec("tomli") is None:
        raise RuntimeError(
            "TOML config parsing requires Python 3.11+ or the 'tomli' package. Install tomli or use JSON/YAML."
        )
    import tomli  # type: ignore[import-not-found]

    return tomli.loads(config_path.read_text(encoding="utf-8"))


def load_yaml(config_path: Path) -> dict[str, Any]:
    import yaml

    data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"YAML config file {config_path} must contain a mapping at the top level."
        )
    return data


if __name__ == "__main__":
    raise SystemExit(main())
