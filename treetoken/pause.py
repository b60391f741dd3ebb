"""Global pause switch guarding balance-mutating operations (minting excepted)."""

from __future__ import annotations

import logging
from typing import Optional

from .access import AccessControl
from .errors import TokenErrorCode, TokenResult
from .models import Address, ContractState

logger = logging.getLogger(__name__)


class PauseGate:
    def __init__(self, state: ContractState, access: AccessControl) -> None:
        self.state = state
        self.access = access

    @property
    def paused(self) -> bool:
        return self.state.paused

    def set_paused(self, caller: Address, pause: bool) -> TokenResult:
        """Admin-only. Returns the new flag value on success."""
        if not self.access.is_admin(caller):
            result = TokenResult.fail(TokenErrorCode.UNAUTHORIZED, "caller is not admin")
            logger.debug(
                f"set_paused by {caller} rejected: UNAUTHORIZED",
                extra={"context": result.log_context("set_paused", caller)},
            )
            return result
        self.state.paused = bool(pause)
        logger.info(f"Contract {'paused' if self.state.paused else 'unpaused'} by {caller}")
        return TokenResult.ok(self.state.paused)

    def check(self) -> Optional[TokenResult]:
        """Failure result when paused, else None.

        Test the return with ``is not None``; a failed TokenResult is falsy.
        """
        if self.state.paused:
            return TokenResult.fail(TokenErrorCode.CONTRACT_PAUSED, "contract is paused")
        return None
