"""
Ledger - spendable balances and the allowance relation.

Every operation here is gated by the PauseGate. Single-entry operations
validate fully before mutating, so a rejected call leaves no trace.

batch_transfer is the exception: it applies entries one by one and stops at
the first failing entry WITHOUT undoing the entries already applied.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List

from .errors import TokenErrorCode, TokenResult
from .models import Address, ContractState, TransferEntry, ensure_amount
from .pause import PauseGate

logger = logging.getLogger(__name__)


class Ledger:
    def __init__(self, state: ContractState, pause: PauseGate) -> None:
        self.state = state
        self.pause = pause

    # -- helpers -------------------------------------------------------------

    def _reject(self, op: str, caller: Address, result: TokenResult) -> TokenResult:
        logger.debug(
            f"{op} by {caller} rejected: {result.error_code.name} ({result.message})",
            extra={"context": result.log_context(op, caller)},
        )
        return result

    def _check_transfer(self, sender: Address, recipient: Address, amount: int) -> TokenResult | None:
        if self.state.is_null(recipient):
            return TokenResult.fail(TokenErrorCode.INVALID_ADDRESS, "recipient is null address")
        if amount <= 0:
            return TokenResult.fail(TokenErrorCode.INVALID_AMOUNT, "amount must be positive")
        if self.state.balance_of(sender) < amount:
            return TokenResult.fail(TokenErrorCode.INSUFFICIENT_BALANCE, "insufficient balance")
        return None

    def _move(self, sender: Address, recipient: Address, amount: int) -> None:
        # Debit is written before the credit is read, so sender == recipient nets to zero.
        balances = self.state.balances
        balances[sender] = self.state.balance_of(sender) - amount
        balances[recipient] = self.state.balance_of(recipient) + amount

    # -- operations ----------------------------------------------------------

    def burn(self, caller: Address, amount: int) -> TokenResult:
        ensure_amount(amount)
        if (failure := self.pause.check()) is not None:
            return self._reject("burn", caller, failure)
        if amount <= 0:
            return self._reject("burn", caller, TokenResult.fail(TokenErrorCode.INVALID_AMOUNT, "amount must be positive"))
        balance = self.state.balance_of(caller)
        if balance < amount:
            return self._reject(
                "burn", caller, TokenResult.fail(TokenErrorCode.INSUFFICIENT_BALANCE, "insufficient balance")
            )
        self.state.balances[caller] = balance - amount
        self.state.total_supply -= amount
        logger.debug(f"Burned {amount} from {caller}; total_supply={self.state.total_supply}")
        return TokenResult.ok(True)

    def transfer(self, caller: Address, recipient: Address, amount: int) -> TokenResult:
        ensure_amount(amount)
        if (failure := self.pause.check()) is not None:
            return self._reject("transfer", caller, failure)
        if (failure := self._check_transfer(caller, recipient, amount)) is not None:
            return self._reject("transfer", caller, failure)
        self._move(caller, recipient, amount)
        logger.debug(f"Transferred {amount} from {caller} to {recipient}")
        return TokenResult.ok(True)

    def batch_transfer(self, caller: Address, entries: Iterable[Any]) -> TokenResult:
        """
        Apply each {to, amount} entry in order, re-reading the caller's balance each step.

        On the first failing entry the error is returned and earlier entries
        remain applied. Callers must not assume all-or-nothing semantics.
        """
        legs: List[TransferEntry] = [TransferEntry.from_pair(entry) for entry in entries]
        for leg in legs:
            ensure_amount(leg.amount)
        if (failure := self.pause.check()) is not None:
            return self._reject("batch_transfer", caller, failure)

        for index, leg in enumerate(legs):
            if (failure := self._check_transfer(caller, leg.to, leg.amount)) is not None:
                if index:
                    logger.warning(
                        f"batch_transfer by {caller} stopped at entry {index}; "
                        f"{index} earlier entries remain applied"
                    )
                return self._reject("batch_transfer", caller, failure)
            self._move(caller, leg.to, leg.amount)

        logger.debug(f"Batch of {len(legs)} transfers applied for {caller}")
        return TokenResult.ok(True)

    def approve(self, caller: Address, spender: Address, amount: int) -> TokenResult:
        """Set the (caller, spender) allowance to exactly ``amount``."""
        ensure_amount(amount)
        if (failure := self.pause.check()) is not None:
            return self._reject("approve", caller, failure)
        if self.state.is_null(spender):
            return self._reject(
                "approve", caller, TokenResult.fail(TokenErrorCode.INVALID_ADDRESS, "spender is null address")
            )
        if amount <= 0:
            return self._reject(
                "approve", caller, TokenResult.fail(TokenErrorCode.INVALID_AMOUNT, "amount must be positive")
            )
        self.state.allowances[(caller, spender)] = amount
        logger.debug(f"Allowance {caller} -> {spender} set to {amount}")
        return TokenResult.ok(True)

    def transfer_from(self, caller: Address, owner: Address, recipient: Address, amount: int) -> TokenResult:
        """
        Move ``amount`` from ``owner`` to ``recipient`` against caller's allowance.

        Insufficient allowance reports UNAUTHORIZED (code 100) with the
        message "insufficient allowance".
        """
        ensure_amount(amount)
        if (failure := self.pause.check()) is not None:
            return self._reject("transfer_from", caller, failure)
        if self.state.is_null(recipient):
            return self._reject(
                "transfer_from", caller, TokenResult.fail(TokenErrorCode.INVALID_ADDRESS, "recipient is null address")
            )
        if amount <= 0:
            return self._reject(
                "transfer_from", caller, TokenResult.fail(TokenErrorCode.INVALID_AMOUNT, "amount must be positive")
            )
        allowance = self.state.allowance_of(owner, caller)
        if allowance < amount:
            return self._reject(
                "transfer_from", caller, TokenResult.fail(TokenErrorCode.UNAUTHORIZED, "insufficient allowance")
            )
        if self.state.balance_of(owner) < amount:
            return self._reject(
                "transfer_from", caller, TokenResult.fail(TokenErrorCode.INSUFFICIENT_BALANCE, "insufficient balance")
            )
        self.state.allowances[(owner, caller)] = allowance - amount
        self._move(owner, recipient, amount)
        logger.debug(f"{caller} moved {amount} from {owner} to {recipient} via allowance")
        return TokenResult.ok(True)
