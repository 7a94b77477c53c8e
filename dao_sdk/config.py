"""Deployment configuration"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet

from .errors import ValidationError
from .fees import DEFAULT_FEE_TARGET_USD
from .instructions import FOR_AGAINST, PROTOCOL_V2, PROTOCOLS, ProtocolVersion, VoteValue
from .keypair import PublicKey


@dataclass(frozen=True)
class DeploymentConfig:
    """Everything that differs between deployments of the DAO program"""
    program_id: PublicKey
    fee_recipient: PublicKey
    fee_target_usd: int = DEFAULT_FEE_TARGET_USD
    protocol: ProtocolVersion = PROTOCOL_V2
    vote_values: FrozenSet[VoteValue] = FOR_AGAINST
    commitment: str = 'confirmed'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'programId': str(self.program_id),
            'feeRecipient': str(self.fee_recipient),
            'feeTargetUsd': self.fee_target_usd,
            'protocol': self.protocol.name,
            'voteValues': sorted(v.value for v in self.vote_values),
            'commitment': self.commitment,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeploymentConfig':
        protocol_name = data.get('protocol', PROTOCOL_V2.name)
        try:
            protocol = PROTOCOLS[protocol_name]
        except KeyError:
            raise ValidationError(f"Unknown protocol version {protocol_name!r}") from None

        vote_values = data.get('voteValues')
        return cls(
            program_id=PublicKey.from_string(data['programId']),
            fee_recipient=PublicKey.from_string(data['feeRecipient']),
            fee_target_usd=data.get('feeTargetUsd', DEFAULT_FEE_TARGET_USD),
            protocol=protocol,
            vote_values=(
                frozenset(VoteValue.parse(v) for v in vote_values)
                if vote_values is not None else FOR_AGAINST
            ),
            commitment=data.get('commitment', 'confirmed'),
        )


DEVNET = DeploymentConfig(
    program_id=PublicKey.from_string('BLFfy2mhNyhwHB135oux43d4EtffJsmJ4LxSX66e7tHk'),
    fee_recipient=PublicKey.from_string('BAGek78CDYQ8phuDqNk7sQzD7LdJeKkb7jD4y2AyR3tJ'),
)

DEVNET_RPC_URL = 'https://api.devnet.solana.com'
