"""Fee computation shared by every paid instruction

Prices are integers in minor fiat units (US cents) per SOL. Fees are in
lamports.
"""

from typing import Optional

from .errors import ValidationError
from .instructions import InstructionTag

LAMPORTS_PER_SOL = 1_000_000_000
CENTS_PER_USD = 100

DEFAULT_FEE_TARGET_USD = 20

# Bounds the program accepts for the embedded price ($1 - $10,000)
MIN_UNIT_PRICE = 100
MAX_UNIT_PRICE = 1_000_000

# Flat fees the program charges when the fee recipient is passed
PROPOSAL_FEE_LAMPORTS = 10_000_000
VOTE_FEE_LAMPORTS = 5_000_000


def fiat_to_native(
    target_fiat: int,
    unit_price: int,
    fiat_scale: int = CENTS_PER_USD,
    native_scale: int = LAMPORTS_PER_SOL,
) -> int:
    """
    Convert a fiat amount to native units at the given unit price

    Args:
        target_fiat: Amount in whole fiat units (e.g. 20 for $20)
        unit_price: Price of one native unit in minor fiat units
        fiat_scale: Minor fiat units per whole unit
        native_scale: Smallest native units per native unit

    Returns:
        ceil(target_fiat * fiat_scale * native_scale / unit_price)
    """
    if unit_price <= 0:
        raise ValueError(f"unit_price must be positive, got {unit_price}")
    if target_fiat < 0:
        raise ValueError(f"target_fiat must not be negative, got {target_fiat}")
    numerator = target_fiat * fiat_scale * native_scale
    return -(-numerator // unit_price)


def check_unit_price(unit_price: int) -> int:
    """Reject prices the program would refuse"""
    if isinstance(unit_price, bool) or not isinstance(unit_price, int):
        raise ValidationError(f"Unit price must be an int, got {type(unit_price).__name__}")
    if not MIN_UNIT_PRICE <= unit_price <= MAX_UNIT_PRICE:
        raise ValidationError(
            f"Unit price {unit_price} outside accepted range "
            f"[{MIN_UNIT_PRICE}, {MAX_UNIT_PRICE}] cents"
        )
    return unit_price


def expected_fee(
    tag: InstructionTag,
    unit_price: Optional[int] = None,
    fee_target: int = DEFAULT_FEE_TARGET_USD,
    days: int = 1,
) -> int:
    """Lamports the program moves to the fee recipient for an instruction"""
    tag = InstructionTag(tag)
    if tag == InstructionTag.CREATE_PROPOSAL:
        return PROPOSAL_FEE_LAMPORTS
    if tag == InstructionTag.VOTE:
        return VOTE_FEE_LAMPORTS
    if unit_price is None:
        raise ValueError(f"{tag.name} fee depends on the unit price")
    if tag == InstructionTag.FEATURED:
        return fiat_to_native(fee_target * days, unit_price)
    return fiat_to_native(fee_target, unit_price)
