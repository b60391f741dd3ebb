"""Staking - moves value between a holder's balance and staked buckets.

Neither operation changes total_supply.
"""

from __future__ import annotations

import logging

from .errors import TokenErrorCode, TokenResult
from .models import Address, ContractState, ensure_amount
from .pause import PauseGate

logger = logging.getLogger(__name__)


class StakingModule:
    def __init__(self, state: ContractState, pause: PauseGate) -> None:
        self.state = state
        self.pause = pause

    def _reject(self, op: str, caller: Address, result: TokenResult) -> TokenResult:
        logger.debug(
            f"{op} by {caller} rejected: {result.error_code.name} ({result.message})",
            extra={"context": result.log_context(op, caller)},
        )
        return result

    def stake(self, caller: Address, amount: int) -> TokenResult:
        ensure_amount(amount)
        if (failure := self.pause.check()) is not None:
            return self._reject("stake", caller, failure)
        if amount <= 0:
            return self._reject("stake", caller, TokenResult.fail(TokenErrorCode.INVALID_AMOUNT, "amount must be positive"))
        balance = self.state.balance_of(caller)
        if balance < amount:
            return self._reject(
                "stake", caller, TokenResult.fail(TokenErrorCode.INSUFFICIENT_BALANCE, "insufficient balance")
            )
        self.state.balances[caller] = balance - amount
        self.state.staked[caller] = self.state.staked_of(caller) + amount
        logger.debug(f"{caller} staked {amount}")
        return TokenResult.ok(True)

    def unstake(self, caller: Address, amount: int) -> TokenResult:
        ensure_amount(amount)
        if (failure := self.pause.check()) is not None:
            return self._reject("unstake", caller, failure)
        if amount <= 0:
            return self._reject(
                "unstake", caller, TokenResult.fail(TokenErrorCode.INVALID_AMOUNT, "amount must be positive")
            )
        staked = self.state.staked_of(caller)
        if staked < amount:
            return self._reject(
                "unstake", caller, TokenResult.fail(TokenErrorCode.INSUFFICIENT_STAKE, "insufficient stake")
            )
        self.state.staked[caller] = staked - amount
        self.state.balances[caller] = self.state.balance_of(caller) + amount
        logger.debug(f"{caller} unstaked {amount}")
        return TokenResult.ok(True)
