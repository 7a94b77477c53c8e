"""Instruction data builders for the DAO program

Every instruction is a tag byte followed by its fields in declaration order.
Field order is the wire contract with the program and must not change.
"""

import time
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import FrozenSet, Optional, Union

from .encoding import (
    BinaryReader,
    encode_i64_le,
    encode_string,
    encode_u8,
    encode_u64_le,
)
from .errors import DecodingError, ValidationError


class InstructionTag(IntEnum):
    """Leading byte of instruction data. Append only."""
    CREATE_DAO = 0
    CREATE_PROPOSAL = 1
    VOTE = 2
    FEATURED = 3
    MODULE = 4


class VoteValue(Enum):
    FOR = 'for'
    AGAINST = 'against'
    YES = 'yes'
    NO = 'no'
    ABSTAIN = 'abstain'

    @classmethod
    def parse(cls, value: Union['VoteValue', str]) -> 'VoteValue':
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Invalid vote value {value!r}") from None


FOR_AGAINST: FrozenSet[VoteValue] = frozenset({VoteValue.FOR, VoteValue.AGAINST})
YES_NO_ABSTAIN: FrozenSet[VoteValue] = frozenset({VoteValue.YES, VoteValue.NO, VoteValue.ABSTAIN})


class ModuleType(Enum):
    POD = 'POD'
    POL = 'POL'

    @classmethod
    def parse(cls, value: Union['ModuleType', str]) -> 'ModuleType':
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                f"Invalid module type {value!r}. Must be either \"POD\" or \"POL\"."
            ) from None


@dataclass(frozen=True)
class ProtocolVersion:
    """
    Wire layout revision of the deployed program

    Deployed program revisions disagree on two fields. A deployment uses
    exactly one revision; payloads for one are rejected by the others.
    """
    name: str
    dao_token_address: bool
    featured_days: bool


PROTOCOL_V1 = ProtocolVersion('v1', dao_token_address=False, featured_days=False)
PROTOCOL_V2 = ProtocolVersion('v2', dao_token_address=True, featured_days=False)
PROTOCOL_V3 = ProtocolVersion('v3', dao_token_address=True, featured_days=True)

PROTOCOLS = {p.name: p for p in (PROTOCOL_V1, PROTOCOL_V2, PROTOCOL_V3)}


@dataclass(frozen=True)
class DaoRecord:
    """DAO profile. All fields are free text."""
    name: str
    description: str
    discord: str = ''
    twitter: str = ''
    telegram: str = ''
    instagram: str = ''
    tiktok: str = ''
    website: str = ''
    treasury: str = ''
    profile: str = ''
    token_address: str = ''

    TEXT_FIELDS = (
        'name', 'description', 'discord', 'twitter', 'telegram',
        'instagram', 'tiktok', 'website', 'treasury', 'profile',
    )


@dataclass(frozen=True)
class ProposalRecord:
    name: str
    description: str
    dao_id: str
    start_time: int
    end_time: int
    pod_id: str = ''

    @property
    def parent_id(self) -> str:
        return self.dao_id

    def check_schedule(self, now: Optional[int] = None) -> None:
        """
        Apply the program's time checks ahead of submission

        Builders do not call this; the program enforces the same rules.
        """
        now = int(time.time()) if now is None else now
        if self.start_time < now:
            raise ValidationError(f"Proposal start_time {self.start_time} is in the past")
        if self.end_time <= self.start_time:
            raise ValidationError("Proposal end_time must be after start_time")


@dataclass(frozen=True)
class VoteRecord:
    vote_value: Union[VoteValue, str]
    proposal_id: str

    @property
    def parent_id(self) -> str:
        return self.proposal_id


@dataclass(frozen=True)
class FeaturedRecord:
    dao_id: str
    days: int = 1

    @property
    def parent_id(self) -> str:
        return self.dao_id


@dataclass(frozen=True)
class ModuleRecord:
    dao_id: str
    module_type: Union[ModuleType, str]

    @property
    def parent_id(self) -> str:
        return self.dao_id


@dataclass(frozen=True)
class DecodedInstruction:
    tag: InstructionTag
    record: object
    fee_price: Optional[int] = None


def _require_identifier(value: str, field: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{field} is required")


def check_dao_record(record: DaoRecord, version: ProtocolVersion = PROTOCOL_V2) -> None:
    """Reject a record the protocol cannot carry, before any fee price is fetched"""
    if not version.dao_token_address and record.token_address:
        raise ValidationError(f"Protocol {version.name} has no token_address field")


def check_featured_record(record: FeaturedRecord, version: ProtocolVersion = PROTOCOL_V2) -> None:
    _require_identifier(record.dao_id, 'dao_id')
    if version.featured_days:
        if isinstance(record.days, bool) or not isinstance(record.days, int) or record.days < 1:
            raise ValidationError(f"days must be a positive int, got {record.days!r}")
    elif record.days != 1:
        raise ValidationError(f"Protocol {version.name} features for exactly one period")


def check_module_record(record: ModuleRecord) -> ModuleType:
    module_type = ModuleType.parse(record.module_type)
    _require_identifier(record.dao_id, 'dao_id')
    return module_type


def encode_create_dao(
    record: DaoRecord,
    fee_price: int,
    version: ProtocolVersion = PROTOCOL_V2,
) -> bytes:
    """Build CreateDao instruction data"""
    check_dao_record(record, version)

    parts = [encode_u8(InstructionTag.CREATE_DAO)]
    parts.extend(encode_string(getattr(record, field)) for field in DaoRecord.TEXT_FIELDS)
    if version.dao_token_address:
        parts.append(encode_string(record.token_address))
    parts.append(encode_u64_le(fee_price))
    return b''.join(parts)


def encode_create_proposal(record: ProposalRecord) -> bytes:
    """Build CreateProposal instruction data

    The schedule is not checked here; see ProposalRecord.check_schedule.
    """
    _require_identifier(record.dao_id, 'dao_id')
    return b''.join([
        encode_u8(InstructionTag.CREATE_PROPOSAL),
        encode_string(record.name),
        encode_string(record.description),
        encode_string(record.dao_id),
        encode_string(record.pod_id),
        encode_i64_le(record.start_time),
        encode_i64_le(record.end_time),
    ])


def encode_vote(record: VoteRecord, allowed: FrozenSet[VoteValue] = FOR_AGAINST) -> bytes:
    """Build Vote instruction data"""
    vote = VoteValue.parse(record.vote_value)
    if vote not in allowed:
        choices = ', '.join(sorted(v.value for v in allowed))
        raise ValidationError(f"Vote {vote.value!r} not accepted here; expected one of {choices}")
    _require_identifier(record.proposal_id, 'proposal_id')
    return b''.join([
        encode_u8(InstructionTag.VOTE),
        encode_string(vote.value),
        encode_string(record.proposal_id),
    ])


def encode_featured(
    record: FeaturedRecord,
    fee_price: int,
    version: ProtocolVersion = PROTOCOL_V2,
) -> bytes:
    """Build Featured instruction data"""
    check_featured_record(record, version)

    parts = [encode_u8(InstructionTag.FEATURED), encode_string(record.dao_id)]
    if version.featured_days:
        parts.append(encode_u64_le(record.days))
    parts.append(encode_u64_le(fee_price))
    return b''.join(parts)


def encode_module(record: ModuleRecord, fee_price: int) -> bytes:
    """Build Module instruction data"""
    module_type = check_module_record(record)
    return b''.join([
        encode_u8(InstructionTag.MODULE),
        encode_string(record.dao_id),
        encode_string(module_type.value),
        encode_u64_le(fee_price),
    ])


def decode_instruction(data: bytes, version: ProtocolVersion = PROTOCOL_V2) -> DecodedInstruction:
    """Parse instruction data back into its record, the way the program reads it"""
    reader = BinaryReader(data)
    if not reader.remaining():
        raise DecodingError("Empty instruction data")
    raw_tag = reader.read_u8()
    try:
        tag = InstructionTag(raw_tag)
    except ValueError:
        raise DecodingError(f"Unknown instruction tag {raw_tag}") from None

    fee_price = None
    if tag == InstructionTag.CREATE_DAO:
        texts = {field: reader.read_string() for field in DaoRecord.TEXT_FIELDS}
        if version.dao_token_address:
            texts['token_address'] = reader.read_string()
        record = DaoRecord(**texts)
        fee_price = reader.read_u64()
    elif tag == InstructionTag.CREATE_PROPOSAL:
        name = reader.read_string()
        description = reader.read_string()
        dao_id = reader.read_string()
        pod_id = reader.read_string()
        record = ProposalRecord(
            name=name,
            description=description,
            dao_id=dao_id,
            pod_id=pod_id,
            start_time=reader.read_i64(),
            end_time=reader.read_i64(),
        )
    elif tag == InstructionTag.VOTE:
        raw_vote = reader.read_string()
        try:
            vote = VoteValue(raw_vote)
        except ValueError:
            raise DecodingError(f"Unknown vote value {raw_vote!r}") from None
        record = VoteRecord(vote_value=vote, proposal_id=reader.read_string())
    elif tag == InstructionTag.FEATURED:
        dao_id = reader.read_string()
        days = reader.read_u64() if version.featured_days else 1
        record = FeaturedRecord(dao_id=dao_id, days=days)
        fee_price = reader.read_u64()
    else:
        dao_id = reader.read_string()
        raw_module = reader.read_string()
        try:
            module_type = ModuleType(raw_module)
        except ValueError:
            raise DecodingError(f"Unknown module type {raw_module!r}") from None
        record = ModuleRecord(dao_id=dao_id, module_type=module_type)
        fee_price = reader.read_u64()

    reader.expect_end()
    return DecodedInstruction(tag=tag, record=record, fee_price=fee_price)
