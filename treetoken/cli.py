"""Friendly CLI for TreeToken state files (deploy, invoke operations, inspect)."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import TokenConfig
from .contract import WIRE_OPERATIONS, TreeToken
from .logging import configure_logging
from .models import TransferEntry
from .storage import load_state, save_state

SUCCESS = "✅"
STEP = "🚀"
ERROR = "❌"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_REJECTED = 2

_INT_ARGS = {"amount", "current_block", "currentBlock"}
_BOOL_ARGS = {"pause", "can_mint", "canMint"}
_BLOCK_OPERATIONS = {"mint", "updateMintCap"}


def _poke_yoke_path(path: Path, must_exist: bool = True) -> None:
    if must_exist and not path.exists():
        raise FileNotFoundError(f"{ERROR} Path not found: {path}")


def _print_header(title: str) -> None:
    print(f"{STEP} {title}", file=sys.stderr)


def _load_config(args: argparse.Namespace) -> TokenConfig:
    return TokenConfig.load(args.config) if args.config else TokenConfig.load()


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in ("true", "yes", "1"):
        return True
    if lowered in ("false", "no", "0"):
        return False
    raise ValueError(f"Not a boolean: {raw}")


def _parse_args(pairs: List[str]) -> Dict[str, Any]:
    parsed: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {pair!r}")
        if key in _INT_ARGS:
            parsed[key] = int(raw)
        elif key in _BOOL_ARGS:
            parsed[key] = _parse_bool(raw)
        else:
            parsed[key] = raw
    return parsed


def _parse_entries(raw: str) -> List[TransferEntry]:
    entries: List[TransferEntry] = []
    for chunk in raw.split(","):
        to, sep, amount = chunk.strip().rpartition(":")
        if not sep or not to:
            raise ValueError(f"Expected to:amount, got {chunk!r}")
        entries.append(TransferEntry(to=to, amount=int(amount)))
    return entries


def _cmd_init(args: argparse.Namespace, config: TokenConfig) -> int:
    state_path = Path(args.state)
    try:
        if state_path.exists() and not args.force:
            raise FileExistsError(f"{ERROR} State file already exists: {state_path} (use --force)")
        token = TreeToken.from_config(args.deployer, config)
        save_state(state_path, token.state)
        print(f"{SUCCESS} Deployed TreeToken for {args.deployer} at {state_path}")
        return EXIT_OK
    except Exception as exc:  # noqa: BLE001
        print(f"{ERROR} Init failed: {exc}", file=sys.stderr)
        return EXIT_FAILURE


def _cmd_call(args: argparse.Namespace, config: TokenConfig) -> int:
    state_path = Path(args.state)
    try:
        _poke_yoke_path(state_path, must_exist=True)
        token = TreeToken(load_state(state_path), legacy_mint_block=config.token.legacy_mint_block)

        kwargs = _parse_args(args.arg or [])
        if args.block is not None:
            if args.operation not in _BLOCK_OPERATIONS:
                raise ValueError(f"--block only applies to mint and updateMintCap, not {args.operation}")
            kwargs.setdefault("current_block", args.block)
        if args.entries:
            kwargs["entries"] = _parse_entries(args.entries)

        _print_header(f"{args.operation} by {args.caller}")
        result = token.call(args.operation, args.caller, **kwargs)
    except Exception as exc:  # noqa: BLE001
        print(f"{ERROR} Call failed: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    print(json.dumps(result.to_wire(), sort_keys=True))
    # Rejected calls can still commit: batchTransfer keeps earlier entries, mint keeps the cap refresh.
    save_state(state_path, token.state)
    if not result:
        print(f"{ERROR} {result.error_code.name} ({result.error}): {result.message}", file=sys.stderr)
        return EXIT_REJECTED
    return EXIT_OK


def _cmd_show(args: argparse.Namespace, config: TokenConfig) -> int:
    state_path = Path(args.state)
    try:
        _poke_yoke_path(state_path, must_exist=True)
        state = load_state(state_path)
    except Exception as exc:  # noqa: BLE001
        print(f"{ERROR} Show failed: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    if args.address:
        summary: Dict[str, Any] = {
            "address": args.address,
            "balance": state.balance_of(args.address),
            "staked": state.staked_of(args.address),
            "role": state.role_of(args.address).to_dict(),
        }
    else:
        summary = {
            "admin": state.admin,
            "governance": state.governance,
            "paused": state.paused,
            "total_supply": state.total_supply,
            "current_mint_cap": state.current_mint_cap,
            "last_mint_block": state.last_mint_block,
            "holders": len(list(state.holders())),
        }
    print(json.dumps(summary, sort_keys=True, indent=2))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="TreeToken ledger CLI",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_init = sub.add_parser("init", help="Deploy a fresh contract state file")
    p_init.add_argument("--state", required=True, help="Path to the state JSON file")
    p_init.add_argument("--deployer", required=True, help="Address that becomes admin and governance")
    p_init.add_argument("--config", help="Optional JSON/TOML/YAML config file")
    p_init.add_argument("--force", action="store_true", help="Overwrite an existing state file")
    p_init.set_defaults(func=_cmd_init)

    p_call = sub.add_parser("call", help="Invoke one operation against a state file")
    p_call.add_argument("operation", choices=sorted(WIRE_OPERATIONS), help="Operation wire name")
    p_call.add_argument("--state", required=True, help="Path to the state JSON file")
    p_call.add_argument("--caller", help="Authenticated caller address")
    p_call.add_argument("--config", help="Optional JSON/TOML/YAML config file")
    p_call.add_argument("--block", type=int, help="Current block height (mint, updateMintCap)")
    p_call.add_argument(
        "--arg",
        action="append",
        default=[],
        help="Operation argument as key=value (may be repeated)",
    )
    p_call.add_argument("--entries", help="batchTransfer entries as to:amount,to:amount")
    p_call.set_defaults(func=_cmd_call)

    p_show = sub.add_parser("show", help="Print contract or account summary")
    p_show.add_argument("--state", required=True, help="Path to the state JSON file")
    p_show.add_argument("--address", help="Show a single account instead of the contract")
    p_show.add_argument("--config", help="Optional JSON/TOML/YAML config file")
    p_show.set_defaults(func=_cmd_show)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _load_config(args)
    except Exception as exc:  # noqa: BLE001
        print(f"{ERROR} Config failed: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    configure_logging(config.logging.to_options())
    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
