"""Privileged identities and authorization queries."""

from __future__ import annotations

import logging

from .errors import TokenErrorCode, TokenResult
from .models import Address, ContractState, Role

logger = logging.getLogger(__name__)


class AccessControl:
    """
    Owns the administrator, governance and per-address minter roles.

    All mutators require the caller to be the administrator and reject the
    null address as a target.
    """

    def __init__(self, state: ContractState) -> None:
        self.state = state

    # -- predicates ----------------------------------------------------------

    def is_admin(self, caller: Address) -> bool:
        return caller == self.state.admin

    def is_governance(self, caller: Address) -> bool:
        return self.is_admin(caller) or caller == self.state.governance

    def is_minter(self, caller: Address) -> bool:
        return self.is_admin(caller) or self.state.role_of(caller).can_mint

    # -- mutators ------------------------------------------------------------

    def _reject(self, op: str, caller: Address, code: TokenErrorCode, message: str) -> TokenResult:
        result = TokenResult.fail(code, message)
        logger.debug(
            f"{op} by {caller} rejected: {code.name} ({message})",
            extra={"context": result.log_context(op, caller)},
        )
        return result

    def transfer_admin(self, caller: Address, new_admin: Address) -> TokenResult:
        if not self.is_admin(caller):
            return self._reject("transfer_admin", caller, TokenErrorCode.UNAUTHORIZED, "caller is not admin")
        if self.state.is_null(new_admin):
            return self._reject("transfer_admin", caller, TokenErrorCode.INVALID_ADDRESS, "new admin is null address")
        self.state.admin = new_admin
        logger.info(f"Admin transferred from {caller} to {new_admin}")
        return TokenResult.ok(True)

    def set_governance(self, caller: Address, new_governance: Address) -> TokenResult:
        if not self.is_admin(caller):
            return self._reject("set_governance", caller, TokenErrorCode.UNAUTHORIZED, "caller is not admin")
        if self.state.is_null(new_governance):
            return self._reject(
                "set_governance", caller, TokenErrorCode.INVALID_ADDRESS, "governance is null address"
            )
        self.state.governance = new_governance
        logger.info(f"Governance set to {new_governance}")
        return TokenResult.ok(True)

    def set_minter(self, caller: Address, target: Address, can_mint: bool) -> TokenResult:
        """Upsert target's role, overwriting can_mint and keeping can_govern."""
        if not self.is_admin(caller):
            return self._reject("set_minter", caller, TokenErrorCode.UNAUTHORIZED, "caller is not admin")
        if self.state.is_null(target):
            return self._reject("set_minter", caller, TokenErrorCode.INVALID_ADDRESS, "target is null address")
        existing = self.state.role_of(target)
        self.state.roles[target] = Role(can_mint=bool(can_mint), can_govern=existing.can_govern)
        logger.info(f"Minter role for {target} set to {bool(can_mint)}")
        return TokenResult.ok(True)
