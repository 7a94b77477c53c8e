"""Python SDK for the DAO program - instruction encoding and transaction assembly"""

from .assembler import BuiltTransaction, TransactionAssembler
from .client import RpcClient, SignatureStatus
from .config import DEVNET, DeploymentConfig
from .errors import (
    DaoSdkError,
    DecodingError,
    EncodingError,
    EncodingOverflow,
    FreshnessTokenUnavailable,
    InvalidIdentifier,
    PriceUnavailable,
    RpcError,
    ValidationError,
    WalletNotConnected,
)
from .fees import expected_fee, fiat_to_native
from .instructions import (
    PROTOCOL_V1,
    PROTOCOL_V2,
    PROTOCOL_V3,
    DaoRecord,
    FeaturedRecord,
    InstructionTag,
    ModuleRecord,
    ModuleType,
    ProposalRecord,
    VoteRecord,
    VoteValue,
)
from .keypair import Keypair, PublicKey
from .oracle import CoinGeckoPriceFeed, FixedPriceFeed
from .transaction import Transaction, TransactionBuilder
from .wallet import KeypairWallet

__version__ = '0.1.0'

__all__ = [
    'BuiltTransaction',
    'TransactionAssembler',
    'RpcClient',
    'SignatureStatus',
    'DEVNET',
    'DeploymentConfig',
    'DaoSdkError',
    'DecodingError',
    'EncodingError',
    'EncodingOverflow',
    'FreshnessTokenUnavailable',
    'InvalidIdentifier',
    'PriceUnavailable',
    'RpcError',
    'ValidationError',
    'WalletNotConnected',
    'expected_fee',
    'fiat_to_native',
    'PROTOCOL_V1',
    'PROTOCOL_V2',
    'PROTOCOL_V3',
    'DaoRecord',
    'FeaturedRecord',
    'InstructionTag',
    'ModuleRecord',
    'ModuleType',
    'ProposalRecord',
    'VoteRecord',
    'VoteValue',
    'Keypair',
    'PublicKey',
    'CoinGeckoPriceFeed',
    'FixedPriceFeed',
    'Transaction',
    'TransactionBuilder',
    'KeypairWallet',
]
