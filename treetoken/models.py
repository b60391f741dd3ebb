"""
TreeToken Data Models.

Defines the state owned by a single token deployment:
- Address, NULL_ADDRESS: participant identifiers and the reserved sentinel
- Role: per-address capability record
- TransferEntry: one leg of a batch transfer
- TokenParameters: supply ceiling and decay constants
- ContractState: the explicitly passed aggregate every component mutates

Invariants:
- total_supply == sum(balances) + sum(staked)
- No mapping entry is negative; absent entries read as 0
- NULL_ADDRESS never receives value or a role
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Tuple

Address = str

NULL_ADDRESS: Address = "SP000000000000000000002Q6VF78"

BASIS_POINTS = 10_000

DEFAULT_MAX_SUPPLY = 10_000_000_000_000_000
DEFAULT_MINTING_DECAY_RATE = 5_000_000
DEFAULT_MINTING_PERIOD = 1440


def ensure_amount(value: Any, name: str = "amount") -> int:
    """Reject non-integer amounts before any rule is evaluated."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    return value


# -----------------------------------------------------------------------------
# Value Records
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Role:
    """Capabilities granted to one address. Only can_mint is consulted."""
    can_mint: bool = False
    can_govern: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {"can_mint": self.can_mint, "can_govern": self.can_govern}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Role":
        return cls(
            can_mint=bool(data.get("can_mint", False)),
            can_govern=bool(data.get("can_govern", False)),
        )


@dataclass(frozen=True)
class TransferEntry:
    """Recipient and amount for one step of a batch transfer."""
    to: Address
    amount: int

    @classmethod
    def from_pair(cls, pair: "TransferEntry | Tuple[Address, int] | Mapping[str, Any]") -> "TransferEntry":
        if isinstance(pair, TransferEntry):
            return pair
        if isinstance(pair, Mapping):
            return cls(to=pair["to"], amount=pair["amount"])
        to, amount = pair
        return cls(to=to, amount=amount)


@dataclass(frozen=True)
class TokenParameters:
    """Deployment constants. Fixed for the lifetime of a ContractState."""
    max_supply: int = DEFAULT_MAX_SUPPLY
    minting_decay_rate: int = DEFAULT_MINTING_DECAY_RATE
    minting_period: int = DEFAULT_MINTING_PERIOD
    null_address: Address = NULL_ADDRESS

    def __post_init__(self) -> None:
        if self.max_supply <= 0:
            raise ValueError("max_supply must be positive")
        if self.minting_decay_rate < 0:
            raise ValueError("minting_decay_rate must be non-negative")
        if self.minting_period <= 0:
            raise ValueError("minting_period must be positive")
        if not self.null_address:
            raise ValueError("null_address cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_supply": self.max_supply,
            "minting_decay_rate": self.minting_decay_rate,
            "minting_period": self.minting_period,
            "null_address": self.null_address,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TokenParameters":
        return cls(
            max_supply=int(data.get("max_supply", DEFAULT_MAX_SUPPLY)),
            minting_decay_rate=int(data.get("minting_decay_rate", DEFAULT_MINTING_DECAY_RATE)),
            minting_period=int(data.get("minting_period", DEFAULT_MINTING_PERIOD)),
            null_address=str(data.get("null_address", NULL_ADDRESS)),
        )


# -----------------------------------------------------------------------------
# Contract State
# -----------------------------------------------------------------------------

def _allowance_key(owner: Address, spender: Address) -> str:
    return f"{owner}:{spender}"


def _parse_allowance_key(key: str) -> Tuple[Address, Address]:
    owner, sep, spender = key.partition(":")
    if not sep:
        raise ValueError(f"Malformed allowance key: {key!r}")
    return owner, spender


def _non_negative(entries: Mapping[str, Any], what: str) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for key, value in entries.items():
        amount = int(value)
        if amount < 0:
            raise ValueError(f"{what} entry for {key!r} is negative")
        out[key] = amount
    return out


@dataclass
class ContractState:
    """
    Singleton state of one token deployment.

    Created once with ``deploy`` and mutated only by the component
    operations. ``minter`` is carried for snapshot compatibility and is not
    consulted by authorization.
    """
    admin: Address
    governance: Address
    minter: Address
    params: TokenParameters = field(default_factory=TokenParameters)
    paused: bool = False
    total_supply: int = 0
    current_mint_cap: int = 0
    last_mint_block: int = 0
    balances: Dict[Address, int] = field(default_factory=dict)
    staked: Dict[Address, int] = field(default_factory=dict)
    allowances: Dict[Tuple[Address, Address], int] = field(default_factory=dict)
    roles: Dict[Address, Role] = field(default_factory=dict)

    @classmethod
    def deploy(cls, deployer: Address, params: TokenParameters | None = None) -> "ContractState":
        params = params or TokenParameters()
        return cls(
            admin=deployer,
            governance=deployer,
            minter=deployer,
            params=params,
            current_mint_cap=params.max_supply,
        )

    # -- reads ---------------------------------------------------------------

    def is_null(self, address: Address) -> bool:
        return address == self.params.null_address

    def balance_of(self, address: Address) -> int:
        return self.balances.get(address, 0)

    def staked_of(self, address: Address) -> int:
        return self.staked.get(address, 0)

    def allowance_of(self, owner: Address, spender: Address) -> int:
        return self.allowances.get((owner, spender), 0)

    def role_of(self, address: Address) -> Role:
        return self.roles.get(address, Role())

    def check_conservation(self) -> bool:
        """True when total_supply equals the sum of both buckets."""
        return self.total_supply == sum(self.balances.values()) + sum(self.staked.values())

    # -- snapshots -----------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "admin": self.admin,
            "governance": self.governance,
            "minter": self.minter,
            "params": self.params.to_dict(),
            "paused": self.paused,
            "total_supply": self.total_supply,
            "current_mint_cap": self.current_mint_cap,
            "last_mint_block": self.last_mint_block,
            "balances": dict(sorted(self.balances.items())),
            "staked": dict(sorted(self.staked.items())),
            "allowances": {
                _allowance_key(owner, spender): amount
                for (owner, spender), amount in sorted(self.allowances.items())
            },
            "roles": {addr: role.to_dict() for addr, role in sorted(self.roles.items())},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ContractState":
        """Rebuild state from ``to_dict`` output. Raises KeyError/ValueError on malformed input."""
        params = TokenParameters.from_dict(data.get("params", {}))
        allowances: Dict[Tuple[Address, Address], int] = {}
        for key, amount in _non_negative(data.get("allowances", {}), "allowance").items():
            allowances[_parse_allowance_key(key)] = amount

        state = cls(
            admin=data["admin"],
            governance=data["governance"],
            minter=data.get("minter", data["admin"]),
            params=params,
            paused=bool(data.get("paused", False)),
            total_supply=int(data.get("total_supply", 0)),
            current_mint_cap=int(data.get("current_mint_cap", params.max_supply)),
            last_mint_block=int(data.get("last_mint_block", 0)),
            balances=_non_negative(data.get("balances", {}), "balance"),
            staked=_non_negative(data.get("staked", {}), "staked"),
            allowances=allowances,
            roles={addr: Role.from_dict(role) for addr, role in data.get("roles", {}).items()},
        )
        if not state.check_conservation():
            raise ValueError("Snapshot violates supply conservation")
        return state

    def holders(self) -> Iterable[Address]:
        """Addresses with a non-zero balance or stake, sorted."""
        return sorted(
            {a for a, v in self.balances.items() if v} | {a for a, v in self.staked.items() if v}
        )
