"""Errors raised by the DAO program SDK"""


class DaoSdkError(Exception):
    """Base class for all SDK errors"""


class WalletNotConnected(DaoSdkError):
    """No wallet identity is available to pay for the transaction"""

    def __init__(self, message: str = "Wallet not connected"):
        super().__init__(message)


class ValidationError(DaoSdkError):
    """Input rejected before encoding"""


class InvalidIdentifier(ValidationError):
    """A string could not be parsed as a public key"""

    def __init__(self, value: str, reason: str = "not a valid public key"):
        self.value = value
        super().__init__(f"Invalid identifier {value!r}: {reason}")


class PriceUnavailable(DaoSdkError):
    """The price feed failed or returned an unusable response"""


class FreshnessTokenUnavailable(DaoSdkError):
    """The ledger connection could not supply a recent blockhash"""


class EncodingError(DaoSdkError):
    """A value cannot be represented in the wire format"""


class EncodingOverflow(EncodingError):
    """A number does not fit its fixed width"""

    def __init__(self, value: int, width: str):
        self.value = value
        self.width = width
        super().__init__(f"{value} does not fit in {width}")


class DecodingError(EncodingError):
    """A byte stream is truncated or malformed"""


class RpcError(DaoSdkError):
    """RPC Error"""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"RPC Error {code}: {message}")
