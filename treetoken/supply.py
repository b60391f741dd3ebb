"""
Supply Controller - total supply and the decaying mint cap.

The cap shrinks in basis-point steps once at least ``minting_period``
blocks have elapsed since the last adjustment:

    decay = min(minting_decay_rate * elapsed // 10000, 10000)
    cap   = cap * (10000 - decay) // 10000

Invariants:
- current_mint_cap never increases
- total_supply <= min(current_mint_cap, max_supply) after every successful mint
"""

from __future__ import annotations

import logging
from typing import Optional

from .access import AccessControl
from .errors import TokenErrorCode, TokenResult
from .models import BASIS_POINTS, Address, ContractState, ensure_amount

logger = logging.getLogger(__name__)


def decay_factor(decay_rate: int, blocks_elapsed: int) -> int:
    """Basis-point decay for an elapsed window, saturated at 100%."""
    factor = (decay_rate * blocks_elapsed) // BASIS_POINTS
    if factor > BASIS_POINTS:
        logger.warning(
            f"Decay factor {factor} exceeds {BASIS_POINTS} for {blocks_elapsed} elapsed blocks; clamping"
        )
        return BASIS_POINTS
    return factor


class SupplyController:
    """
    Owns total_supply and current_mint_cap.

    Args:
        state: Shared contract state
        access: Authorization queries for mint
        legacy_mint_block: When set, mint decays the cap against this fixed
            height instead of the supplied block
    """

    def __init__(
        self,
        state: ContractState,
        access: AccessControl,
        legacy_mint_block: Optional[int] = None,
    ) -> None:
        self.state = state
        self.access = access
        self.legacy_mint_block = legacy_mint_block

    def update_mint_cap(self, current_block: int) -> int:
        """Apply decay if a full period has elapsed. Returns the (possibly unchanged) cap."""
        state = self.state
        blocks_elapsed = current_block - state.last_mint_block
        if blocks_elapsed < state.params.minting_period:
            return state.current_mint_cap

        factor = decay_factor(state.params.minting_decay_rate, blocks_elapsed)
        previous = state.current_mint_cap
        state.current_mint_cap = previous * (BASIS_POINTS - factor) // BASIS_POINTS
        state.last_mint_block = current_block
        logger.info(
            f"Mint cap decayed {previous} -> {state.current_mint_cap} "
            f"at block {current_block} (elapsed={blocks_elapsed}, factor={factor})"
        )
        return state.current_mint_cap

    def mint(self, caller: Address, recipient: Address, amount: int, current_block: int) -> TokenResult:
        """
        Credit ``amount`` new tokens to ``recipient``.

        The cap refresh runs before the ceiling checks and stays applied
        even when the mint itself is rejected.
        """
        ensure_amount(amount)
        state = self.state
        if not self.access.is_minter(caller):
            return self._reject(caller, TokenErrorCode.UNAUTHORIZED, "caller is not a minter")
        if state.is_null(recipient):
            return self._reject(caller, TokenErrorCode.INVALID_ADDRESS, "recipient is null address")
        if amount <= 0:
            return self._reject(caller, TokenErrorCode.INVALID_AMOUNT, "amount must be positive")

        block = current_block if self.legacy_mint_block is None else self.legacy_mint_block
        self.update_mint_cap(block)

        new_supply = state.total_supply + amount
        if new_supply > state.current_mint_cap:
            return self._reject(
                caller,
                TokenErrorCode.MINT_CAP_EXCEEDED,
                f"supply {new_supply} exceeds mint cap {state.current_mint_cap}",
            )
        if new_supply > state.params.max_supply:
            return self._reject(
                caller,
                TokenErrorCode.MAX_SUPPLY_EXCEEDED,
                f"supply {new_supply} exceeds max supply {state.params.max_supply}",
            )

        state.balances[recipient] = state.balance_of(recipient) + amount
        state.total_supply = new_supply
        logger.debug(f"Minted {amount} to {recipient} by {caller}; total_supply={new_supply}")
        return TokenResult.ok(True)

    def _reject(self, caller: Address, code: TokenErrorCode, message: str) -> TokenResult:
        result = TokenResult.fail(code, message)
        logger.debug(
            f"mint by {caller} rejected: {code.name} ({message})",
            extra={"context": result.log_context("mint", caller)},
        )
        return result
