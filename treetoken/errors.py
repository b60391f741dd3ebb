"""Operation results and error codes for the TreeToken ledger.

Operations never raise for rule violations. Each one returns a
``TokenResult`` carrying either the success value or a ``TokenErrorCode``,
and the host decides how to surface it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class TokenErrorCode(int, Enum):
    """Closed set of failure kinds.

    Using int as base class keeps the numeric wire codes comparable and
    JSON-serializable.
    """

    UNAUTHORIZED = 100
    INSUFFICIENT_BALANCE = 101
    INSUFFICIENT_STAKE = 102
    MAX_SUPPLY_EXCEEDED = 103
    CONTRACT_PAUSED = 104
    INVALID_ADDRESS = 105
    INVALID_AMOUNT = 106
    MINT_CAP_EXCEEDED = 107


@dataclass(frozen=True)
class TokenResult:
    """Outcome of a single ledger operation.

    Examples:
        >>> TokenResult.ok(True).to_wire()
        {'value': True}
        >>> TokenResult.fail(TokenErrorCode.CONTRACT_PAUSED, "paused").to_wire()
        {'error': 104}
    """

    success: bool
    value: Any = None
    error_code: TokenErrorCode | None = None
    message: str = ""

    @classmethod
    def ok(cls, value: Any = True) -> "TokenResult":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, code: TokenErrorCode, message: str = "") -> "TokenResult":
        return cls(success=False, error_code=code, message=message or code.name.lower())

    def __bool__(self) -> bool:
        return self.success

    @property
    def error(self) -> int | None:
        """Numeric error code, or None on success."""
        return None if self.error_code is None else int(self.error_code)

    def to_wire(self) -> Dict[str, Any]:
        """Host-facing shape: ``{"value": v}`` or ``{"error": code}``."""
        if self.success:
            return {"value": self.value}
        return {"error": self.error}

    def log_context(self, op: str, caller: str) -> Dict[str, Any]:
        """Structured fields attached to rejection log records."""
        return {"op": op, "caller": caller, "code": self.error, "reason": self.message}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "value": self.value,
            "error_code": self.error,
            "message": self.message,
        }
