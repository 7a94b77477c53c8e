"""Shared fixtures: deterministic keys, an in-memory ledger connection"""

import base58
import pytest

from dao_sdk.config import DeploymentConfig
from dao_sdk.keypair import Keypair
from dao_sdk.transaction import FreshnessToken

BLOCKHASH = base58.b58encode(bytes(range(32))).decode('ascii')


class SeededRandomness:
    """Returns a different constant seed on every call and counts calls"""

    def __init__(self, start: int = 1):
        self.next_byte = start
        self.calls = 0

    def __call__(self, size: int) -> bytes:
        self.calls += 1
        value = bytes([self.next_byte]) * size
        self.next_byte = (self.next_byte + 1) % 256
        return value


class FakeConnection:
    """Ledger connection that never touches the network"""

    def __init__(self, blockhash: str = BLOCKHASH, error: Exception = None):
        self.blockhash = blockhash
        self.error = error
        self.token_requests = 0
        self.submitted = []

    def get_freshness_token(self) -> FreshnessToken:
        self.token_requests += 1
        if self.error is not None:
            raise self.error
        return FreshnessToken(blockhash=self.blockhash, last_valid_block_height=1000)

    def submit(self, transaction) -> str:
        self.submitted.append(transaction)
        return transaction.signature

    def confirm(self, signature, commitment='confirmed'):
        raise NotImplementedError


@pytest.fixture
def payer():
    return Keypair.from_seed(b'\xaa' * 32)


@pytest.fixture
def program_id():
    return Keypair.from_seed(b'\xbb' * 32).public_key


@pytest.fixture
def fee_recipient():
    return Keypair.from_seed(b'\xcc' * 32).public_key


@pytest.fixture
def config(program_id, fee_recipient):
    return DeploymentConfig(program_id=program_id, fee_recipient=fee_recipient)


@pytest.fixture
def randomness():
    return SeededRandomness()


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
def make_connection():
    return FakeConnection


@pytest.fixture
def dao_id():
    return str(Keypair.from_seed(b'\x11' * 32).public_key)


@pytest.fixture
def proposal_id():
    return str(Keypair.from_seed(b'\x22' * 32).public_key)


@pytest.fixture
def blockhash():
    return BLOCKHASH


@pytest.fixture
def make_randomness():
    return SeededRandomness
