"""Shared pytest fixtures for TreeToken tests."""

from __future__ import annotations

import logging

import pytest

from treetoken.contract import TreeToken
from treetoken.models import TokenParameters
from treetoken.tests.strategies import ADMIN, ALICE, GENESIS_BLOCK


@pytest.fixture(autouse=True)
def _reset_treetoken_logger():
    """Undo configure_logging so later tests see records through caplog."""
    yield
    logger = logging.getLogger("treetoken")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def token() -> TreeToken:
    """Fresh deployment with the reference constants, admin = ADMIN."""
    return TreeToken.deploy(ADMIN)


@pytest.fixture
def funded(token: TreeToken) -> TreeToken:
    """Deployment where ALICE holds 1000 spendable tokens."""
    assert token.mint(ADMIN, ALICE, 1000, current_block=GENESIS_BLOCK)
    return token


@pytest.fixture
def decay_params() -> TokenParameters:
    """Small constants where one 100-block period decays the cap by 10 bp."""
    return TokenParameters(max_supply=1_000_000, minting_decay_rate=1_000, minting_period=100)


@pytest.fixture
def decaying_token(decay_params: TokenParameters) -> TreeToken:
    return TreeToken.deploy(ADMIN, params=decay_params)
