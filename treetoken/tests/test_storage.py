import json

import pytest

from treetoken.contract import TreeToken
from treetoken.models import ContractState, Role, TokenParameters, TransferEntry
from treetoken.storage import SNAPSHOT_VERSION, dump_state, load_state, save_state
from treetoken.tests.strategies import ADMIN, ALICE, BOB, CAROL, GENESIS_BLOCK


@pytest.fixture
def busy(funded: TreeToken) -> TreeToken:
    funded.set_minter(ADMIN, BOB, True)
    funded.approve(ALICE, BOB, 75)
    funded.stake(ALICE, 100)
    funded.transfer(ALICE, CAROL, 5)
    return funded


def test_snapshot_uses_reference_allowance_keys(busy):
    data = busy.state.to_dict()
    assert data["allowances"] == {f"{ALICE}:{BOB}": 75}
    assert data["roles"] == {BOB: {"can_mint": True, "can_govern": False}}
    assert data["minter"] == ADMIN


def test_save_and_load(tmp_path, busy):
    path = save_state(tmp_path / "nested" / "state.json", busy.state)
    restored = load_state(path)

    assert restored == busy.state
    assert restored.allowance_of(ALICE, BOB) == 75
    assert restored.role_of(BOB) == Role(can_mint=True)
    assert not list(path.parent.glob(".state.json.tmp.*"))


def test_restored_state_keeps_operating(tmp_path, busy):
    path = save_state(tmp_path / "state.json", busy.state)
    token = TreeToken(load_state(path))
    assert token.mint(BOB, CAROL, 10, current_block=GENESIS_BLOCK)
    assert token.transfer_from(BOB, ALICE, BOB, 75)
    assert token.state.check_conservation()


def test_custom_params_survive(tmp_path):
    params = TokenParameters(max_supply=77, minting_decay_rate=3, minting_period=9, null_address="NULL")
    token = TreeToken.deploy(ADMIN, params=params)
    restored = load_state(save_state(tmp_path / "s.json", token.state))
    assert restored.params == params
    assert restored.is_null("NULL")


def test_dump_is_versioned_and_sorted(busy):
    payload = json.loads(dump_state(busy.state))
    assert payload["version"] == SNAPSHOT_VERSION
    assert list(payload["state"]["balances"]) == sorted(payload["state"]["balances"])


def test_rejects_unknown_version(tmp_path, busy):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"version": 99, "state": busy.state.to_dict()}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_state(path)


def test_rejects_broken_conservation(busy):
    data = busy.state.to_dict()
    data["total_supply"] += 1
    with pytest.raises(ValueError, match="conservation"):
        ContractState.from_dict(data)


def test_rejects_negative_entries(busy):
    data = busy.state.to_dict()
    data["balances"][BOB] = -1
    with pytest.raises(ValueError):
        ContractState.from_dict(data)


def test_rejects_malformed_allowance_key(busy):
    data = busy.state.to_dict()
    data["allowances"] = {"no-separator": 5}
    with pytest.raises(ValueError):
        ContractState.from_dict(data)


def test_holders_lists_nonzero_accounts(busy):
    busy.transfer(CAROL, ALICE, 5)
    assert list(busy.state.holders()) == [ALICE]


def test_transfer_entry_from_pair_forms():
    assert TransferEntry.from_pair((BOB, 3)) == TransferEntry(BOB, 3)
    assert TransferEntry.from_pair({"to": BOB, "amount": 3}) == TransferEntry(BOB, 3)


@pytest.mark.parametrize(
    "kwargs",
    [{"max_supply": 0}, {"minting_decay_rate": -1}, {"minting_period": 0}, {"null_address": ""}],
)
def test_parameters_validated(kwargs):
    with pytest.raises(ValueError):
        TokenParameters(**kwargs)
