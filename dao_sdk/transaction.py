"""Transaction builder and utilities"""

import base64
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

import base58

from .errors import ValidationError
from .keypair import SIGNATURE_LENGTH, Keypair, PublicKey

BLOCKHASH_LENGTH = 32
EMPTY_SIGNATURE = bytes(SIGNATURE_LENGTH)


@dataclass(frozen=True)
class AccountMeta:
    """Account reference passed to an instruction"""
    pubkey: PublicKey
    is_signer: bool
    is_writable: bool


@dataclass(frozen=True)
class Instruction:
    """Uncompiled instruction"""
    program_id: PublicKey
    accounts: List[AccountMeta]
    data: bytes


@dataclass
class MessageHeader:
    """Transaction message header"""
    num_required_signatures: int
    num_readonly_signed_accounts: int
    num_readonly_unsigned_accounts: int


@dataclass
class CompiledInstruction:
    """Compiled instruction"""
    program_id_index: int
    accounts: List[int]
    data: bytes


@dataclass
class Message:
    """Transaction message"""
    header: MessageHeader
    account_keys: List[PublicKey]
    recent_blockhash: bytes
    instructions: List[CompiledInstruction]

    @classmethod
    def compile(
        cls,
        instructions: List[Instruction],
        fee_payer: PublicKey,
        recent_blockhash: bytes,
    ) -> 'Message':
        """Order accounts and replace keys with indexes"""
        # Insertion order is kept within each group, so the fee payer stays first
        metas: Dict[PublicKey, List[bool]] = {fee_payer: [True, True]}

        def merge(pubkey: PublicKey, is_signer: bool, is_writable: bool):
            flags = metas.setdefault(pubkey, [False, False])
            flags[0] = flags[0] or is_signer
            flags[1] = flags[1] or is_writable

        for instruction in instructions:
            for meta in instruction.accounts:
                merge(meta.pubkey, meta.is_signer, meta.is_writable)
            merge(instruction.program_id, False, False)

        account_keys = sorted(metas, key=lambda k: (not metas[k][0], not metas[k][1]))
        signers = [k for k in account_keys if metas[k][0]]

        header = MessageHeader(
            num_required_signatures=len(signers),
            num_readonly_signed_accounts=sum(1 for k in signers if not metas[k][1]),
            num_readonly_unsigned_accounts=sum(
                1 for k in account_keys if not metas[k][0] and not metas[k][1]
            ),
        )

        index = {key: i for i, key in enumerate(account_keys)}
        compiled = [
            CompiledInstruction(
                program_id_index=index[instruction.program_id],
                accounts=[index[meta.pubkey] for meta in instruction.accounts],
                data=instruction.data,
            )
            for instruction in instructions
        ]

        return cls(
            header=header,
            account_keys=account_keys,
            recent_blockhash=recent_blockhash,
            instructions=compiled,
        )

    def signer_keys(self) -> List[PublicKey]:
        return self.account_keys[:self.header.num_required_signatures]

    def is_writable(self, index: int) -> bool:
        header = self.header
        if index < header.num_required_signatures:
            return index < header.num_required_signatures - header.num_readonly_signed_accounts
        return index < len(self.account_keys) - header.num_readonly_unsigned_accounts

    def serialize(self) -> bytes:
        """Serialize message to bytes"""
        parts = []

        # Header
        parts.append(bytes([
            self.header.num_required_signatures,
            self.header.num_readonly_signed_accounts,
            self.header.num_readonly_unsigned_accounts,
        ]))

        # Account keys
        parts.append(encode_length(len(self.account_keys)))
        for key in self.account_keys:
            parts.append(bytes(key))

        # Recent blockhash
        parts.append(self.recent_blockhash)

        # Instructions
        parts.append(encode_length(len(self.instructions)))
        for instruction in self.instructions:
            parts.append(bytes([instruction.program_id_index]))
            parts.append(encode_length(len(instruction.accounts)))
            parts.append(bytes(instruction.accounts))
            parts.append(encode_length(len(instruction.data)))
            parts.append(instruction.data)

        return b''.join(parts)


def encode_length(length: int) -> bytes:
    """Encode length as compact-u16"""
    if not 0 <= length <= 0xFFFF:
        raise ValidationError(f"Length {length} does not fit compact-u16")
    result = []
    while length > 0x7f:
        result.append((length & 0x7f) | 0x80)
        length >>= 7
    result.append(length)
    return bytes(result)


class Transaction:
    """Transaction object

    Holds one signature slot per required signer. Empty slots are None
    until the matching key signs.
    """

    def __init__(self, message: Message, signatures: Optional[List[Optional[bytes]]] = None):
        self.message = message
        required = message.header.num_required_signatures
        if signatures is None:
            signatures = [None] * required
        if len(signatures) != required:
            raise ValidationError(f"Expected {required} signature slots, got {len(signatures)}")
        self.signatures: List[Optional[bytes]] = list(signatures)

    @property
    def fee_payer(self) -> PublicKey:
        return self.message.account_keys[0]

    @property
    def signature(self) -> Optional[str]:
        """Fee payer signature in base58, the transaction id once signed"""
        first = self.signatures[0] if self.signatures else None
        return base58.b58encode(first).decode('ascii') if first else None

    def _signer_index(self, pubkey: PublicKey) -> int:
        try:
            return self.message.signer_keys().index(pubkey)
        except ValueError:
            raise ValidationError(f"{pubkey} is not a required signer") from None

    def partial_sign(self, *keypairs: Keypair) -> 'Transaction':
        """Sign with some of the required signers, leaving other slots as they are"""
        message = self.message.serialize()
        for keypair in keypairs:
            index = self._signer_index(keypair.public_key)
            self.signatures[index] = keypair.sign(message)
        return self

    def add_signature(self, pubkey: PublicKey, signature: bytes) -> 'Transaction':
        """Attach a signature produced elsewhere, e.g. by a wallet"""
        if len(signature) != SIGNATURE_LENGTH:
            raise ValidationError(f"Signature must be {SIGNATURE_LENGTH} bytes")
        index = self._signer_index(pubkey)
        if not pubkey.verify(self.message.serialize(), signature):
            raise ValidationError(f"Signature does not verify for {pubkey}")
        self.signatures[index] = bytes(signature)
        return self

    def signature_for(self, pubkey: PublicKey) -> Optional[bytes]:
        return self.signatures[self._signer_index(pubkey)]

    def missing_signers(self) -> List[PublicKey]:
        return [
            key for key, sig in zip(self.message.signer_keys(), self.signatures)
            if sig is None
        ]

    def verify_signatures(self, require_all: bool = True) -> bool:
        """Check every present signature; optionally require all slots filled"""
        message = self.message.serialize()
        for key, sig in zip(self.message.signer_keys(), self.signatures):
            if sig is None:
                if require_all:
                    return False
                continue
            if not key.verify(message, sig):
                return False
        return True

    def serialize(self, require_all_signatures: bool = True) -> bytes:
        """Serialize transaction to bytes

        Missing signatures are written as zero bytes when
        require_all_signatures is False.
        """
        missing = self.missing_signers()
        if require_all_signatures and missing:
            raise ValidationError(
                "Missing signatures for: " + ', '.join(str(k) for k in missing)
            )

        parts = [encode_length(len(self.signatures))]
        for sig in self.signatures:
            parts.append(sig if sig is not None else EMPTY_SIGNATURE)
        parts.append(self.message.serialize())
        return b''.join(parts)

    def to_base64(self, require_all_signatures: bool = True) -> str:
        return base64.b64encode(self.serialize(require_all_signatures)).decode('ascii')


def decode_blockhash(blockhash: Union[str, bytes]) -> bytes:
    if isinstance(blockhash, str):
        try:
            blockhash = base58.b58decode(blockhash)
        except ValueError as e:
            raise ValidationError(f"Invalid blockhash {blockhash!r}: {e}") from e
    if len(blockhash) != BLOCKHASH_LENGTH:
        raise ValidationError(f"Blockhash must be {BLOCKHASH_LENGTH} bytes, got {len(blockhash)}")
    return bytes(blockhash)


class TransactionBuilder:
    """Builder for constructing transactions"""

    def __init__(self):
        self.instructions: List[Instruction] = []
        self.fee_payer: Optional[PublicKey] = None
        self.recent_blockhash: Optional[bytes] = None

    def add_instruction(self, instruction: Instruction) -> 'TransactionBuilder':
        """Add an instruction"""
        self.instructions.append(instruction)
        return self

    def set_fee_payer(self, fee_payer: PublicKey) -> 'TransactionBuilder':
        self.fee_payer = fee_payer
        return self

    def set_recent_blockhash(self, blockhash: Union[str, bytes]) -> 'TransactionBuilder':
        """Set recent blockhash"""
        self.recent_blockhash = decode_blockhash(blockhash)
        return self

    def build(self) -> Transaction:
        """Build the transaction"""
        if self.recent_blockhash is None:
            raise ValueError("Recent blockhash not set")
        if self.fee_payer is None:
            raise ValueError("Fee payer not set")
        if not self.instructions:
            raise ValueError("No instructions added")

        message = Message.compile(self.instructions, self.fee_payer, self.recent_blockhash)
        return Transaction(message)


@dataclass(frozen=True)
class FreshnessToken:
    """Recent blockhash and the last block height it is valid for"""
    blockhash: str
    last_valid_block_height: Optional[int] = None
    context_slot: Optional[int] = field(default=None, compare=False)
