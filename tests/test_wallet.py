"""Tests for the local keypair wallet"""

import json

import pytest

from dao_sdk.errors import ValidationError
from dao_sdk.keypair import SYSTEM_PROGRAM_ID, Keypair
from dao_sdk.transaction import AccountMeta, Instruction, TransactionBuilder
from dao_sdk.wallet import KeypairWallet


def test_from_file(tmp_path, payer, connection):
    path = tmp_path / 'id.json'
    path.write_text(json.dumps(payer.to_json_list()))

    wallet = KeypairWallet.from_file(connection, str(path))

    assert wallet.public_key == payer.public_key


def test_from_file_rejects_non_list(tmp_path, connection):
    path = tmp_path / 'id.json'
    path.write_text(json.dumps({'secret': 'nope'}))

    with pytest.raises(ValidationError):
        KeypairWallet.from_file(connection, str(path))


def test_sign_and_submit_completes_signatures(payer, program_id, connection, blockhash):
    identity = Keypair.from_seed(b'\x31' * 32)
    tx = (
        TransactionBuilder()
        .set_fee_payer(payer.public_key)
        .set_recent_blockhash(blockhash)
        .add_instruction(Instruction(
            program_id=program_id,
            accounts=[
                AccountMeta(payer.public_key, is_signer=True, is_writable=True),
                AccountMeta(identity.public_key, is_signer=True, is_writable=True),
                AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            ],
            data=b'\x00',
        ))
        .build()
        .partial_sign(identity)
    )

    signature = KeypairWallet(payer, connection).sign_and_submit(tx)

    assert connection.submitted == [tx]
    assert tx.verify_signatures()
    assert signature == tx.signature
