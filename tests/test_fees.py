"""Tests for fee computation"""

import pytest

from dao_sdk.errors import ValidationError
from dao_sdk.fees import (
    LAMPORTS_PER_SOL,
    MAX_UNIT_PRICE,
    MIN_UNIT_PRICE,
    PROPOSAL_FEE_LAMPORTS,
    VOTE_FEE_LAMPORTS,
    check_unit_price,
    expected_fee,
    fiat_to_native,
)
from dao_sdk.instructions import InstructionTag


def test_twenty_dollars_at_one_hundred():
    fee = fiat_to_native(20, 10000)

    assert fee == 200_000_000
    assert fee / LAMPORTS_PER_SOL == 0.2


@pytest.mark.parametrize('unit_price,lamports', [
    (5000, 400_000_000),
    (20000, 100_000_000),
])
def test_matches_program_fee_table(unit_price, lamports):
    assert fiat_to_native(20, unit_price) == lamports


def test_rounds_up():
    # 2_000_000_000_000 / 3 = 666_666_666_666.67
    assert fiat_to_native(20, 3) == 666_666_666_667


def test_custom_scales():
    assert fiat_to_native(1, 1, fiat_scale=1, native_scale=10) == 10


@pytest.mark.parametrize('unit_price', [0, -100])
def test_non_positive_price(unit_price):
    with pytest.raises(ValueError):
        fiat_to_native(20, unit_price)


def test_expected_fee_per_kind():
    assert expected_fee(InstructionTag.CREATE_DAO, 10000) == 200_000_000
    assert expected_fee(InstructionTag.MODULE, 10000) == 200_000_000
    assert expected_fee(InstructionTag.FEATURED, 10000, days=3) == 600_000_000
    assert expected_fee(InstructionTag.FEATURED, 10000, fee_target=5) == 50_000_000
    assert expected_fee(InstructionTag.CREATE_PROPOSAL) == PROPOSAL_FEE_LAMPORTS
    assert expected_fee(InstructionTag.VOTE) == VOTE_FEE_LAMPORTS


def test_expected_fee_needs_price_for_paid_kinds():
    with pytest.raises(ValueError):
        expected_fee(InstructionTag.CREATE_DAO)


def test_check_unit_price_bounds():
    assert check_unit_price(MIN_UNIT_PRICE) == MIN_UNIT_PRICE
    assert check_unit_price(MAX_UNIT_PRICE) == MAX_UNIT_PRICE
    for price in (MIN_UNIT_PRICE - 1, MAX_UNIT_PRICE + 1, True, 100.0):
        with pytest.raises(ValidationError):
            check_unit_price(price)
