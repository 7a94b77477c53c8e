"""Ed25519 identities for accounts and signers"""

from typing import Callable, List, Optional

import base58
import nacl.exceptions
import nacl.signing
import nacl.utils

from .errors import InvalidIdentifier, ValidationError

PUBLIC_KEY_LENGTH = 32
SEED_LENGTH = 32
SECRET_KEY_LENGTH = 64
SIGNATURE_LENGTH = 64

# Returns n cryptographically secure random bytes
RandomSource = Callable[[int], bytes]


def default_random_source(size: int) -> bytes:
    return nacl.utils.random(size)


class PublicKey:
    """32-byte account address, displayed as base58"""

    __slots__ = ('_bytes',)

    def __init__(self, value: bytes):
        value = bytes(value)
        if len(value) != PUBLIC_KEY_LENGTH:
            raise ValidationError(
                f"Public key must be {PUBLIC_KEY_LENGTH} bytes, got {len(value)}"
            )
        self._bytes = value

    @classmethod
    def from_string(cls, value: str) -> 'PublicKey':
        """Parse a base58 address"""
        if not isinstance(value, str) or not value:
            raise InvalidIdentifier(str(value), "empty identifier")
        try:
            raw = base58.b58decode(value)
        except ValueError as e:
            raise InvalidIdentifier(value, str(e)) from e
        if len(raw) != PUBLIC_KEY_LENGTH:
            raise InvalidIdentifier(value, f"decodes to {len(raw)} bytes, expected {PUBLIC_KEY_LENGTH}")
        return cls(raw)

    def __bytes__(self) -> bytes:
        return self._bytes

    def __str__(self) -> str:
        return base58.b58encode(self._bytes).decode('ascii')

    def __repr__(self) -> str:
        return f"PublicKey({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self._bytes == other._bytes

    def __hash__(self) -> int:
        return hash(self._bytes)

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Check an Ed25519 signature made by this key"""
        try:
            nacl.signing.VerifyKey(self._bytes).verify(message, signature)
        except nacl.exceptions.BadSignatureError:
            return False
        return True


SYSTEM_PROGRAM_ID = PublicKey(bytes(PUBLIC_KEY_LENGTH))


class Keypair:
    """Ed25519 signing key with its public key"""

    def __init__(self, signing_key: nacl.signing.SigningKey):
        self._signing_key = signing_key
        self.public_key = PublicKey(bytes(signing_key.verify_key))

    @classmethod
    def generate(cls, randomness: Optional[RandomSource] = None) -> 'Keypair':
        """Create a new keypair from a fresh 32-byte seed"""
        source = randomness or default_random_source
        return cls.from_seed(source(SEED_LENGTH))

    @classmethod
    def from_seed(cls, seed: bytes) -> 'Keypair':
        if len(seed) != SEED_LENGTH:
            raise ValidationError(f"Seed must be {SEED_LENGTH} bytes, got {len(seed)}")
        return cls(nacl.signing.SigningKey(bytes(seed)))

    @classmethod
    def from_secret_key(cls, secret_key: bytes) -> 'Keypair':
        """Load a 64-byte secret key (seed followed by public key)"""
        secret_key = bytes(secret_key)
        if len(secret_key) != SECRET_KEY_LENGTH:
            raise ValidationError(
                f"Secret key must be {SECRET_KEY_LENGTH} bytes, got {len(secret_key)}"
            )
        keypair = cls.from_seed(secret_key[:SEED_LENGTH])
        if bytes(keypair.public_key) != secret_key[SEED_LENGTH:]:
            raise ValidationError("Secret key does not match its embedded public key")
        return keypair

    @property
    def secret_key(self) -> bytes:
        return bytes(self._signing_key) + bytes(self.public_key)

    def to_json_list(self) -> List[int]:
        """Secret key as a list of ints, the Solana CLI keypair file format"""
        return list(self.secret_key)

    def sign(self, message: bytes) -> bytes:
        """Return the 64-byte detached signature of message"""
        return self._signing_key.sign(message).signature

    def __repr__(self) -> str:
        return f"Keypair(public_key={str(self.public_key)!r})"
