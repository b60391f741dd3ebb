"""JSON snapshots of ContractState for hosts and the CLI."""

from __future__ import annotations

import json
import logging
import os
import secrets
from pathlib import Path
from typing import Union

from .models import ContractState

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def _atomic_write_text(path: Path, text: str) -> None:
    """Write temp file, fsync, then rename over ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp.{os.getpid()}.{secrets.token_hex(8)}")

    fd = os.open(str(tmp_path), os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            if not text.endswith("\n"):
                f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(str(tmp_path), str(path))
    finally:
        tmp_path.unlink(missing_ok=True)


def dump_state(state: ContractState) -> str:
    payload = {"version": SNAPSHOT_VERSION, "state": state.to_dict()}
    return json.dumps(payload, sort_keys=True, indent=2)


def save_state(path: Union[str, Path], state: ContractState) -> Path:
    path = Path(path)
    _atomic_write_text(path, dump_state(state))
    logger.debug(f"Saved state snapshot to {path} (total_supply={state.total_supply})")
    return path


def load_state(path: Union[str, Path]) -> ContractState:
    """
    Load a snapshot written by ``save_state``.

    Raises:
        FileNotFoundError: snapshot does not exist
        ValueError: unsupported version or inconsistent state
    """
    path = Path(path)
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict) or payload.get("version") != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot format in {path}")
    return ContractState.from_dict(payload["state"])
