"""Assembles DAO program instructions into partially signed transactions"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from .client import LedgerConnection
from .config import DeploymentConfig
from .errors import FreshnessTokenUnavailable, ValidationError, WalletNotConnected
from .fees import check_unit_price, expected_fee
from .instructions import (
    DaoRecord,
    FeaturedRecord,
    InstructionTag,
    ModuleRecord,
    ProposalRecord,
    VoteRecord,
    check_dao_record,
    check_featured_record,
    check_module_record,
    encode_create_dao,
    encode_create_proposal,
    encode_featured,
    encode_module,
    encode_vote,
)
from .keypair import SYSTEM_PROGRAM_ID, Keypair, PublicKey, RandomSource
from .oracle import PriceFeed, resolve_unit_price
from .transaction import AccountMeta, Instruction, Transaction, TransactionBuilder
from .wallet import Wallet

logger = logging.getLogger(__name__)

Payer = Union[Wallet, PublicKey, None]


@dataclass
class BuiltTransaction:
    """
    A transaction signed by the new record's identity, awaiting the payer

    The identity is single use. Its public key is the id of the created
    record; the secret only needs keeping if the build must be resubmitted
    as is.
    """
    transaction: Transaction
    identity: Keypair
    tag: InstructionTag
    fee_lamports: int
    unit_price: Optional[int] = None

    @property
    def record_id(self) -> str:
        return str(self.identity.public_key)


class TransactionAssembler:
    """Builds one transaction per DAO program command"""

    def __init__(
        self,
        config: DeploymentConfig,
        connection: LedgerConnection,
        price_feed: Optional[PriceFeed] = None,
        randomness: Optional[RandomSource] = None,
    ):
        self.config = config
        self.connection = connection
        self.price_feed = price_feed
        self.randomness = randomness

    def create_dao(
        self,
        payer: Payer,
        record: DaoRecord,
        unit_price: Optional[int] = None,
    ) -> BuiltTransaction:
        """Create a DAO; charges the fiat fee target"""
        payer_key = self._payer_key(payer)
        check_dao_record(record, self.config.protocol)
        price = self._unit_price(unit_price)
        data = encode_create_dao(record, price, self.config.protocol)
        fee = expected_fee(InstructionTag.CREATE_DAO, price, self.config.fee_target_usd)
        return self._assemble(InstructionTag.CREATE_DAO, payer_key, data, None, fee, price)

    def create_proposal(self, payer: Payer, record: ProposalRecord) -> BuiltTransaction:
        payer_key = self._payer_key(payer)
        parent = self._parent_key(record.parent_id, 'dao_id')
        data = encode_create_proposal(record)
        fee = expected_fee(InstructionTag.CREATE_PROPOSAL)
        return self._assemble(InstructionTag.CREATE_PROPOSAL, payer_key, data, parent, fee)

    def vote(self, payer: Payer, record: VoteRecord) -> BuiltTransaction:
        payer_key = self._payer_key(payer)
        parent = self._parent_key(record.parent_id, 'proposal_id')
        data = encode_vote(record, self.config.vote_values)
        fee = expected_fee(InstructionTag.VOTE)
        return self._assemble(InstructionTag.VOTE, payer_key, data, parent, fee)

    def feature_dao(
        self,
        payer: Payer,
        record: FeaturedRecord,
        unit_price: Optional[int] = None,
    ) -> BuiltTransaction:
        """Promote a DAO; the fee target is charged per day"""
        payer_key = self._payer_key(payer)
        parent = self._parent_key(record.parent_id, 'dao_id')
        check_featured_record(record, self.config.protocol)
        price = self._unit_price(unit_price)
        data = encode_featured(record, price, self.config.protocol)
        fee = expected_fee(
            InstructionTag.FEATURED, price, self.config.fee_target_usd, days=record.days,
        )
        return self._assemble(InstructionTag.FEATURED, payer_key, data, parent, fee, price)

    def activate_module(
        self,
        payer: Payer,
        record: ModuleRecord,
        unit_price: Optional[int] = None,
    ) -> BuiltTransaction:
        payer_key = self._payer_key(payer)
        parent = self._parent_key(record.parent_id, 'dao_id')
        check_module_record(record)
        price = self._unit_price(unit_price)
        data = encode_module(record, price)
        fee = expected_fee(InstructionTag.MODULE, price, self.config.fee_target_usd)
        return self._assemble(InstructionTag.MODULE, payer_key, data, parent, fee, price)

    def account_metas(
        self,
        tag: InstructionTag,
        payer: PublicKey,
        identity: PublicKey,
        parent: Optional[PublicKey] = None,
    ) -> List[AccountMeta]:
        """Account list the program expects for an instruction"""
        metas = [
            AccountMeta(payer, is_signer=True, is_writable=True),
            AccountMeta(identity, is_signer=True, is_writable=True),
        ]
        if tag != InstructionTag.CREATE_DAO:
            if parent is None:
                raise ValidationError(f"{tag.name} requires a parent account")
            metas.append(AccountMeta(parent, is_signer=False, is_writable=False))
        metas.append(AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False))
        metas.append(AccountMeta(self.config.fee_recipient, is_signer=False, is_writable=True))
        return metas

    @staticmethod
    def _payer_key(payer: Payer) -> PublicKey:
        if isinstance(payer, PublicKey):
            return payer
        public_key = getattr(payer, 'public_key', None)
        if public_key is None:
            raise WalletNotConnected()
        if isinstance(public_key, str):
            return PublicKey.from_string(public_key)
        if not isinstance(public_key, PublicKey):
            raise ValidationError(f"Unsupported wallet public key {public_key!r}")
        return public_key

    @staticmethod
    def _parent_key(value: str, field: str) -> PublicKey:
        if not value:
            raise ValidationError(f"{field} is required")
        return PublicKey.from_string(value)

    def _unit_price(self, override: Optional[int]) -> int:
        return check_unit_price(resolve_unit_price(override, self.price_feed))

    def _assemble(
        self,
        tag: InstructionTag,
        payer: PublicKey,
        data: bytes,
        parent: Optional[PublicKey],
        fee_lamports: int,
        unit_price: Optional[int] = None,
    ) -> BuiltTransaction:
        identity = Keypair.generate(self.randomness)
        logger.debug("Generated %s account %s", tag.name, identity.public_key)

        instruction = Instruction(
            program_id=self.config.program_id,
            accounts=self.account_metas(tag, payer, identity.public_key, parent),
            data=data,
        )

        token = self.connection.get_freshness_token()
        builder = TransactionBuilder().set_fee_payer(payer).add_instruction(instruction)
        try:
            builder.set_recent_blockhash(token.blockhash)
        except ValidationError as e:
            raise FreshnessTokenUnavailable(f"Unusable blockhash from ledger: {e}") from e

        transaction = builder.build().partial_sign(identity)
        return BuiltTransaction(
            transaction=transaction,
            identity=identity,
            tag=tag,
            fee_lamports=fee_lamports,
            unit_price=unit_price,
        )
