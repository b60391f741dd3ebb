"""
TreeToken - the host-facing ledger contract.

Wires AccessControl, PauseGate, SupplyController, Ledger and StakingModule
around one explicitly owned ContractState. Every operation takes the
authenticated caller first and returns a TokenResult; the host supplies
the current block height where one is needed.

Design Principles:
- One state instance per contract; no module-level mutable state
- Deterministic: same state and inputs always produce the same result
- Rule violations are results, never exceptions
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Optional

from .access import AccessControl
from .config import TokenConfig
from .errors import TokenResult
from .ledger import Ledger
from .models import Address, ContractState, Role, TokenParameters
from .pause import PauseGate
from .staking import StakingModule
from .supply import SupplyController

logger = logging.getLogger(__name__)


# Host wire names -> facade method names
WIRE_OPERATIONS: Dict[str, str] = {
    "setPaused": "set_paused",
    "transferAdmin": "transfer_admin",
    "setMinter": "set_minter",
    "setGovernance": "set_governance",
    "updateMintCap": "update_mint_cap",
    "mint": "mint",
    "burn": "burn",
    "transfer": "transfer",
    "batchTransfer": "batch_transfer",
    "approve": "approve",
    "transferFrom": "transfer_from",
    "stake": "stake",
    "unstake": "unstake",
}

# Wire argument names -> Python keyword names
_WIRE_ARGS: Dict[str, str] = {
    "newAdmin": "new_admin",
    "newGovernance": "new_governance",
    "canMint": "can_mint",
    "currentBlock": "current_block",
}


class TreeToken:
    """
    Capped, role-governed fungible token.

    Args:
        state: Existing state to operate on (e.g. loaded from a snapshot)
        legacy_mint_block: When set, mint ignores the supplied block height
            and decays the cap against this fixed value

    Example:
        token = TreeToken.deploy("ST1ADMIN")
        token.mint("ST1ADMIN", "ST2ALICE", 1000, current_block=10)
        token.transfer("ST2ALICE", "ST3BOB", 200)
    """

    def __init__(self, state: ContractState, legacy_mint_block: Optional[int] = None) -> None:
        self.state = state
        self.access = AccessControl(state)
        self.pause_gate = PauseGate(state, self.access)
        self.supply = SupplyController(state, self.access, legacy_mint_block=legacy_mint_block)
        self.ledger = Ledger(state, self.pause_gate)
        self.staking = StakingModule(state, self.pause_gate)

    @classmethod
    def deploy(
        cls,
        deployer: Address,
        params: Optional[TokenParameters] = None,
        legacy_mint_block: Optional[int] = None,
    ) -> "TreeToken":
        params = params or TokenParameters()
        if deployer == params.null_address:
            raise ValueError("deployer cannot be the null address")
        logger.info(f"TreeToken deployed by {deployer}, max_supply={params.max_supply}")
        return cls(ContractState.deploy(deployer, params), legacy_mint_block=legacy_mint_block)

    @classmethod
    def from_config(cls, deployer: Address, config: TokenConfig) -> "TreeToken":
        return cls.deploy(
            deployer,
            params=config.token.to_parameters(),
            legacy_mint_block=config.token.legacy_mint_block,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_admin(self, caller: Address) -> bool:
        return self.access.is_admin(caller)

    def is_governance(self, caller: Address) -> bool:
        return self.access.is_governance(caller)

    def is_minter(self, caller: Address) -> bool:
        return self.access.is_minter(caller)

    def is_paused(self) -> bool:
        return self.state.paused

    def balance_of(self, address: Address) -> int:
        return self.state.balance_of(address)

    def staked_of(self, address: Address) -> int:
        return self.state.staked_of(address)

    def allowance(self, owner: Address, spender: Address) -> int:
        return self.state.allowance_of(owner, spender)

    def role_of(self, address: Address) -> Role:
        return self.state.role_of(address)

    def total_supply(self) -> int:
        return self.state.total_supply

    def current_mint_cap(self) -> int:
        return self.state.current_mint_cap

    # -------------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------------

    def set_paused(self, caller: Address, pause: bool) -> TokenResult:
        return self.pause_gate.set_paused(caller, pause)

    def transfer_admin(self, caller: Address, new_admin: Address) -> TokenResult:
        return self.access.transfer_admin(caller, new_admin)

    def set_governance(self, caller: Address, new_governance: Address) -> TokenResult:
        return self.access.set_governance(caller, new_governance)

    def set_minter(self, caller: Address, target: Address, can_mint: bool) -> TokenResult:
        return self.access.set_minter(caller, target, can_mint)

    # -------------------------------------------------------------------------
    # Supply
    # -------------------------------------------------------------------------

    def update_mint_cap(self, current_block: int) -> TokenResult:
        return TokenResult.ok(self.supply.update_mint_cap(current_block))

    def mint(self, caller: Address, recipient: Address, amount: int, current_block: int) -> TokenResult:
        return self.supply.mint(caller, recipient, amount, current_block)

    def burn(self, caller: Address, amount: int) -> TokenResult:
        return self.ledger.burn(caller, amount)

    # -------------------------------------------------------------------------
    # Balances
    # -------------------------------------------------------------------------

    def transfer(self, caller: Address, recipient: Address, amount: int) -> TokenResult:
        return self.ledger.transfer(caller, recipient, amount)

    def batch_transfer(self, caller: Address, entries: Iterable[Any]) -> TokenResult:
        return self.ledger.batch_transfer(caller, entries)

    def approve(self, caller: Address, spender: Address, amount: int) -> TokenResult:
        return self.ledger.approve(caller, spender, amount)

    def transfer_from(self, caller: Address, owner: Address, recipient: Address, amount: int) -> TokenResult:
        return self.ledger.transfer_from(caller, owner, recipient, amount)

    def stake(self, caller: Address, amount: int) -> TokenResult:
        return self.staking.stake(caller, amount)

    def unstake(self, caller: Address, amount: int) -> TokenResult:
        return self.staking.unstake(caller, amount)

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _resolve(self, operation: str) -> Callable[..., TokenResult]:
        name = WIRE_OPERATIONS.get(operation, operation)
        if name not in WIRE_OPERATIONS.values():
            raise ValueError(f"Unknown operation: {operation}")
        return getattr(self, name)

    def call(self, operation: str, caller: Optional[Address] = None, **kwargs: Any) -> TokenResult:
        """
        Invoke an operation by wire name (``transferFrom``) or Python name (``transfer_from``).

        ``caller`` is required for every operation except ``updateMintCap``.

        Raises:
            ValueError: unknown operation or missing caller
            TypeError: arguments do not match the operation signature
        """
        method = self._resolve(operation)
        arguments = {_WIRE_ARGS.get(k, k): v for k, v in kwargs.items()}
        if method.__name__ == "update_mint_cap":
            return method(**arguments)
        if caller is None:
            raise ValueError(f"Operation {operation} requires a caller")
        return method(caller, **arguments)
