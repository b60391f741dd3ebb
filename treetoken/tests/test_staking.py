"""Tests for staking between the spendable and staked buckets."""

import pytest
from hypothesis import given, settings

from treetoken.contract import TreeToken
from treetoken.tests.strategies import ADMIN, ALICE, BOB, GENESIS_BLOCK, amount_strategy


def test_stake(funded):
    assert funded.stake(ALICE, 200).to_wire() == {"value": True}
    assert funded.balance_of(ALICE) == 800
    assert funded.staked_of(ALICE) == 200
    assert funded.total_supply() == 1000


def test_unstake(funded):
    funded.stake(ALICE, 200)
    assert funded.unstake(ALICE, 100)
    assert funded.staked_of(ALICE) == 100
    assert funded.balance_of(ALICE) == 900


def test_stake_accumulates(funded):
    funded.stake(ALICE, 100)
    funded.stake(ALICE, 150)
    assert funded.staked_of(ALICE) == 250


@pytest.mark.parametrize("op", ["stake", "unstake"])
def test_paused(funded, op):
    funded.stake(ALICE, 100)
    funded.set_paused(ADMIN, True)
    assert getattr(funded, op)(ALICE, 10).error == 104
    assert funded.staked_of(ALICE) == 100


@pytest.mark.parametrize("op", ["stake", "unstake"])
@pytest.mark.parametrize("amount", [0, -10])
def test_non_positive(funded, op, amount):
    assert getattr(funded, op)(ALICE, amount).error == 106


def test_stake_more_than_balance(funded):
    assert funded.stake(ALICE, 1001).error == 101
    assert funded.staked_of(ALICE) == 0


def test_unstake_more_than_staked(funded):
    funded.stake(ALICE, 100)
    result = funded.unstake(ALICE, 101)
    assert result.error == 102
    assert funded.staked_of(ALICE) == 100
    assert funded.balance_of(ALICE) == 900


def test_unstake_without_stake(funded):
    assert funded.unstake(BOB, 1).error == 102


def test_staked_value_is_not_spendable(funded):
    funded.stake(ALICE, 900)
    assert funded.transfer(ALICE, BOB, 200).error == 101
    assert funded.burn(ALICE, 200).error == 101


@given(prior=amount_strategy(), data=amount_strategy())
@settings(max_examples=100, deadline=None, derandomize=True)
def test_stake_unstake_round_trip(prior: int, data: int) -> None:
    amount = min(prior, data)
    token = TreeToken.deploy(ADMIN)
    token.mint(ADMIN, ALICE, prior, current_block=GENESIS_BLOCK)

    assert token.stake(ALICE, amount)
    assert token.unstake(ALICE, amount)

    assert token.balance_of(ALICE) == prior
    assert token.staked_of(ALICE) == 0
    assert token.total_supply() == prior


def test_paused_result_matches_ledger(funded):
    funded.set_paused(ADMIN, True)
    staked = funded.stake(ALICE, 10)
    transferred = funded.transfer(ALICE, BOB, 10)
    assert staked.error_code is transferred.error_code
    assert staked.message == transferred.message
