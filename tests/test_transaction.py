"""Tests for message compilation, serialization and partial signing"""

import base64

import pytest

from dao_sdk.errors import ValidationError
from dao_sdk.keypair import SYSTEM_PROGRAM_ID, Keypair
from dao_sdk.transaction import (
    EMPTY_SIGNATURE,
    AccountMeta,
    Instruction,
    Message,
    Transaction,
    TransactionBuilder,
    encode_length,
)


@pytest.fixture
def identity():
    return Keypair.from_seed(b'\x44' * 32)


@pytest.fixture
def parent():
    return Keypair.from_seed(b'\x55' * 32).public_key


@pytest.fixture
def instruction(payer, identity, parent, program_id, fee_recipient):
    return Instruction(
        program_id=program_id,
        accounts=[
            AccountMeta(payer.public_key, is_signer=True, is_writable=True),
            AccountMeta(identity.public_key, is_signer=True, is_writable=True),
            AccountMeta(parent, is_signer=False, is_writable=False),
            AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(fee_recipient, is_signer=False, is_writable=True),
        ],
        data=b'\x02abc',
    )


@pytest.fixture
def transaction(payer, instruction, blockhash):
    return (
        TransactionBuilder()
        .set_fee_payer(payer.public_key)
        .set_recent_blockhash(blockhash)
        .add_instruction(instruction)
        .build()
    )


@pytest.mark.parametrize('length,encoded', [
    (0, b'\x00'),
    (0x7f, b'\x7f'),
    (0x80, b'\x80\x01'),
    (0x3fff, b'\xff\x7f'),
    (0x4000, b'\x80\x80\x01'),
])
def test_compact_u16(length, encoded):
    assert encode_length(length) == encoded


def test_compile_orders_accounts(transaction, payer, identity, parent, program_id, fee_recipient):
    message = transaction.message

    assert message.account_keys == [
        payer.public_key,
        identity.public_key,
        fee_recipient,
        parent,
        SYSTEM_PROGRAM_ID,
        program_id,
    ]
    assert message.header.num_required_signatures == 2
    assert message.header.num_readonly_signed_accounts == 0
    assert message.header.num_readonly_unsigned_accounts == 3
    assert [message.is_writable(i) for i in range(6)] == [True, True, True, False, False, False]

    compiled = message.instructions[0]
    assert compiled.program_id_index == 5
    assert compiled.accounts == [0, 1, 3, 4, 2]
    assert compiled.data == b'\x02abc'


def test_compile_merges_duplicate_accounts(payer, program_id):
    other = Keypair.from_seed(b'\x66' * 32).public_key
    instruction = Instruction(
        program_id=program_id,
        accounts=[
            AccountMeta(other, is_signer=False, is_writable=False),
            AccountMeta(other, is_signer=False, is_writable=True),
            AccountMeta(payer.public_key, is_signer=False, is_writable=False),
        ],
        data=b'',
    )
    message = Message.compile([instruction], payer.public_key, bytes(32))

    assert message.account_keys == [payer.public_key, other, program_id]
    assert message.header.num_required_signatures == 1
    assert message.header.num_readonly_unsigned_accounts == 1
    assert message.instructions[0].accounts == [1, 1, 0]


def test_message_serialization_layout(transaction):
    raw = transaction.message.serialize()

    assert raw[:3] == bytes([2, 0, 3])
    assert raw[3] == 6
    keys_end = 4 + 6 * 32
    assert raw[keys_end:keys_end + 32] == bytes(range(32))
    # one instruction: program index, 5 accounts, 4 data bytes
    assert raw[keys_end + 32:] == bytes([1, 5, 5, 0, 1, 3, 4, 2, 4]) + b'\x02abc'


def test_partial_sign_leaves_payer_pending(transaction, payer, identity):
    transaction.partial_sign(identity)

    assert transaction.signature_for(identity.public_key) is not None
    assert transaction.signature_for(payer.public_key) is None
    assert transaction.missing_signers() == [payer.public_key]
    assert transaction.signature is None
    assert transaction.verify_signatures(require_all=False)
    assert not transaction.verify_signatures()


def test_serialize_requires_all_signatures_by_default(transaction, identity):
    transaction.partial_sign(identity)

    with pytest.raises(ValidationError):
        transaction.serialize()

    raw = transaction.serialize(require_all_signatures=False)
    assert raw[0] == 2
    assert raw[1:65] == EMPTY_SIGNATURE
    assert raw[65:129] == transaction.signature_for(identity.public_key)
    assert raw[129:] == transaction.message.serialize()


def test_fully_signed(transaction, payer, identity):
    transaction.partial_sign(identity)
    transaction.partial_sign(payer)

    assert transaction.verify_signatures()
    assert transaction.signature is not None
    assert base64.b64decode(transaction.to_base64()) == transaction.serialize()


def test_partial_sign_rejects_non_signer(transaction):
    with pytest.raises(ValidationError):
        transaction.partial_sign(Keypair.from_seed(b'\x77' * 32))


def test_add_signature_from_wallet(transaction, payer):
    signature = payer.sign(transaction.message.serialize())
    transaction.add_signature(payer.public_key, signature)
    assert transaction.signature_for(payer.public_key) == signature


def test_add_signature_rejects_forgery(transaction, payer):
    with pytest.raises(ValidationError):
        transaction.add_signature(payer.public_key, b'\x01' * 64)


def test_wrong_signature_slot_count(transaction):
    with pytest.raises(ValidationError):
        Transaction(transaction.message, signatures=[None])


def test_builder_requires_blockhash_and_payer(payer, instruction, blockhash):
    with pytest.raises(ValueError):
        TransactionBuilder().set_fee_payer(payer.public_key).add_instruction(instruction).build()
    with pytest.raises(ValueError):
        TransactionBuilder().set_recent_blockhash(blockhash).add_instruction(instruction).build()


def test_builder_rejects_bad_blockhash():
    with pytest.raises(ValidationError):
        TransactionBuilder().set_recent_blockhash('111')
