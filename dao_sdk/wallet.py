"""Wallets that pay for and finish signing DAO transactions"""

import json
import os
from typing import Optional, Protocol

from .client import LedgerConnection
from .errors import ValidationError
from .keypair import Keypair, PublicKey
from .transaction import Transaction

DEFAULT_KEYPAIR_PATH = os.path.join('~', '.config', 'solana', 'id.json')


class Wallet(Protocol):
    """Payer identity plus the ability to add its signature and submit"""

    @property
    def public_key(self) -> Optional[PublicKey]:
        ...

    def sign_and_submit(self, transaction: Transaction) -> str:
        ...


class KeypairWallet:
    """Wallet backed by a local keypair"""

    def __init__(self, keypair: Keypair, connection: LedgerConnection):
        self.keypair = keypair
        self.connection = connection

    @property
    def public_key(self) -> PublicKey:
        return self.keypair.public_key

    @classmethod
    def from_file(cls, connection: LedgerConnection, path: str = DEFAULT_KEYPAIR_PATH) -> 'KeypairWallet':
        """Load a Solana CLI keypair file (a JSON list of 64 ints)"""
        with open(os.path.expanduser(path), 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValidationError(f"Keypair file {path} must contain a JSON list")
        return cls(Keypair.from_secret_key(bytes(data)), connection)

    def sign_and_submit(self, transaction: Transaction) -> str:
        transaction.partial_sign(self.keypair)
        return self.connection.submit(transaction)
