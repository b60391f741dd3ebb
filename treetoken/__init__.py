"""
TreeToken - deterministic ledger for a capped, role-governed fungible token.

Provides:
- Minting under a decaying supply cap
- Transfers, batch transfers and delegated allowances
- Staking between spendable and staked buckets
- An administrator-controlled pause switch
"""

from .errors import TokenErrorCode, TokenResult
from .models import (
    BASIS_POINTS,
    NULL_ADDRESS,
    Address,
    ContractState,
    Role,
    TokenParameters,
    TransferEntry,
)
from .access import AccessControl
from .pause import PauseGate
from .supply import SupplyController, decay_factor
from .ledger import Ledger
from .staking import StakingModule
from .contract import WIRE_OPERATIONS, TreeToken
from .config import TokenConfig
from .storage import load_state, save_state

__all__ = [
    "TokenErrorCode",
    "TokenResult",
    "BASIS_POINTS",
    "NULL_ADDRESS",
    "Address",
    "ContractState",
    "Role",
    "TokenParameters",
    "TransferEntry",
    "AccessControl",
    "PauseGate",
    "SupplyController",
    "decay_factor",
    "Ledger",
    "StakingModule",
    "WIRE_OPERATIONS",
    "TreeToken",
    "TokenConfig",
    "load_state",
    "save_state",
]

__version__ = "0.1.0"
