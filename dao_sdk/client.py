"""RPC Client for the Solana cluster hosting the DAO program"""

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import httpx

from .errors import FreshnessTokenUnavailable, RpcError
from .keypair import PublicKey
from .transaction import FreshnessToken, Transaction

logger = logging.getLogger(__name__)

COMMITMENT_LEVELS = ('processed', 'confirmed', 'finalized')


@dataclass
class SignatureStatus:
    """Status of a submitted transaction at one point in time"""
    signature: str
    slot: Optional[int] = None
    confirmations: Optional[int] = None
    confirmation_status: Optional[str] = None
    err: Optional[Any] = None
    confirmed: bool = False

    def reached(self, commitment: str) -> bool:
        """True if the transaction landed without error at commitment or higher"""
        if self.err is not None or self.confirmation_status not in COMMITMENT_LEVELS:
            return False
        return (COMMITMENT_LEVELS.index(self.confirmation_status)
                >= COMMITMENT_LEVELS.index(commitment))

    @classmethod
    def from_dict(cls, signature: str, data: Optional[Dict[str, Any]]) -> 'SignatureStatus':
        if data is None:
            return cls(signature=signature)
        return cls(
            signature=signature,
            slot=data.get('slot'),
            confirmations=data.get('confirmations'),
            confirmation_status=data.get('confirmationStatus'),
            err=data.get('err'),
        )


class LedgerConnection(Protocol):
    def get_freshness_token(self) -> FreshnessToken:
        ...

    def submit(self, transaction: Transaction) -> str:
        ...

    def confirm(self, signature: str, commitment: str = 'confirmed') -> SignatureStatus:
        ...


class RpcClient:
    """Client for interacting with a Solana JSON-RPC endpoint"""

    def __init__(
        self,
        rpc_url: str,
        timeout: int = 30,
        commitment: str = 'confirmed',
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.commitment = commitment
        self._transport = transport
        self._request_ids = itertools.count(1)

    def _call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Make an RPC call"""
        request = {
            'jsonrpc': '2.0',
            'id': next(self._request_ids),
            'method': method,
            'params': params or [],
        }

        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            response = client.post(self.rpc_url, json=request)
            response.raise_for_status()

            result = response.json()

            if 'error' in result:
                error = result['error']
                if not isinstance(error, dict):
                    raise RpcError(-1, str(error))
                raise RpcError(error.get('code', -1), error.get('message', 'unknown error'))

            return result.get('result')

    def get_slot(self) -> int:
        """Get current slot"""
        return self._call('getSlot', [{'commitment': self.commitment}])

    def get_latest_blockhash(self) -> Dict[str, Any]:
        """Get latest blockhash"""
        return self._call('getLatestBlockhash', [{'commitment': self.commitment}])

    def get_balance(self, address: PublicKey) -> int:
        """Get account balance in lamports"""
        result = self._call('getBalance', [str(address), {'commitment': self.commitment}])
        return result['value']

    def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        return self._call('getMinimumBalanceForRentExemption', [size])

    def send_transaction(self, transaction: Transaction, skip_preflight: bool = False) -> str:
        """Send a fully signed transaction, returning its signature"""
        config = {
            'encoding': 'base64',
            'skipPreflight': skip_preflight,
            'preflightCommitment': self.commitment,
        }
        return self._call('sendTransaction', [transaction.to_base64(), config])

    def get_signature_statuses(self, signatures: List[str]) -> List[SignatureStatus]:
        result = self._call(
            'getSignatureStatuses',
            [signatures, {'searchTransactionHistory': True}],
        )
        return [
            SignatureStatus.from_dict(sig, data)
            for sig, data in zip(signatures, result['value'])
        ]

    def get_freshness_token(self) -> FreshnessToken:
        """Latest blockhash, with every failure reported as FreshnessTokenUnavailable"""
        try:
            result = self.get_latest_blockhash()
            value = result['value']
            token = FreshnessToken(
                blockhash=value['blockhash'],
                last_valid_block_height=value.get('lastValidBlockHeight'),
                context_slot=(result.get('context') or {}).get('slot'),
            )
        except (httpx.HTTPError, RpcError, ValueError) as e:
            raise FreshnessTokenUnavailable(f"Failed to fetch recent blockhash: {e}") from e
        except (KeyError, TypeError) as e:
            raise FreshnessTokenUnavailable(f"Malformed getLatestBlockhash response: {e}") from e
        logger.debug("Fetched blockhash %s", token.blockhash)
        return token

    def submit(self, transaction: Transaction) -> str:
        signature = self.send_transaction(transaction)
        logger.debug("Submitted transaction %s", signature)
        return signature

    def confirm(self, signature: str, commitment: Optional[str] = None) -> SignatureStatus:
        """Single status lookup; polling is left to the caller"""
        commitment = commitment or self.commitment
        if commitment not in COMMITMENT_LEVELS:
            raise ValueError(f"Unknown commitment {commitment!r}")
        status = self.get_signature_statuses([signature])[0]
        status.confirmed = status.reached(commitment)
        return status
