"""
Call payload encoding and return payload decoding.

Every method used by the explorer is niladic, so a call payload is just the
4-byte selector. Decoding turns the raw bytes handed back by the aggregator
into the method's single logical return value.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from ..models import DEFAULT_DECIMALS, NOT_AVAILABLE, CallDescriptor, DecodedField
from .errors import DecodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractMethod:
    """A niladic contract method and the ABI types it returns."""

    name: str
    output_types: Tuple[str, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}()"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)


PAIR_METHODS = (
    ContractMethod("token0", ("address",)),
    ContractMethod("token1", ("address",)),
    ContractMethod("getReserves", ("uint112", "uint112", "uint32")),
    ContractMethod("totalSupply", ("uint256",)),
)

TOKEN_METHODS = (
    ContractMethod("name", ("string",)),
    ContractMethod("symbol", ("string",)),
    ContractMethod("decimals", ("uint8",)),
)

# Substituted when a token does not implement a metadata method
FALLBACK_VALUES: Dict[str, Any] = {"decimals": DEFAULT_DECIMALS}


class ContractInterface:
    """
    Encoder/decoder for a fixed set of niladic contract methods.

    Args:
        name: Label used in log messages
        methods: Methods this interface knows about
    """

    def __init__(self, name: str, methods: Iterable[ContractMethod]):
        self.name = name
        self.methods: Dict[str, ContractMethod] = {m.name: m for m in methods}
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def get_method(self, method: str) -> ContractMethod:
        try:
            return self.methods[method]
        except KeyError:
            raise ValueError(f"Unknown {self.name} method: {method}") from None

    def encode_call(self, method: str) -> bytes:
        """Encode the call payload for ``method``."""
        return self.get_method(method).selector

    def build_call(self, target: str, method: str) -> CallDescriptor:
        return CallDescriptor(target=target, call_data=self.encode_call(method))

    def build_calls(self, target: str, methods: Iterable[str]) -> List[CallDescriptor]:
        return [self.build_call(target, method) for method in methods]

    def decode_result(self, method: str, data: bytes) -> Any:
        """
        Decode a raw return payload for ``method``.

        Args:
            method: Method name the payload was returned for
            data: Raw return bytes

        Returns:
            A checksum address for address methods, ``(reserve0, reserve1)``
            for getReserves, otherwise the single decoded value

        Raises:
            DecodeError: If the payload is empty or malformed
        """
        contract_method = self.get_method(method)
        raw = bytes(data or b"")

        if not raw:
            raise DecodeError(method, "empty return data")

        try:
            values = decode(list(contract_method.output_types), raw)
        except (DecodingError, UnicodeDecodeError, ValueError, OverflowError) as e:
            if contract_method.output_types == ("string",):
                return self._decode_bytes32_string(method, raw, e)
            raise DecodeError(method, str(e)) from e

        if method == "getReserves":
            reserve0, reserve1, _ = values
            return reserve0, reserve1

        value = values[0]
        if contract_method.output_types[0] == "address":
            return to_checksum_address(value)
        return value

    def decode_with_fallback(self, method: str, data: bytes) -> DecodedField:
        """
        Decode ``method`` without raising.

        A failed decode resolves to 18 for decimals and "N/A" for anything
        else; the failure is logged and kept on the returned field.
        """
        try:
            return DecodedField.success(self.decode_result(method, data))
        except DecodeError as e:
            fallback = FALLBACK_VALUES.get(method, NOT_AVAILABLE)
            self.logger.warning(f"{e}; using default {fallback!r}")
            return DecodedField.default(fallback, str(e))

    @staticmethod
    def _decode_bytes32_string(method: str, raw: bytes, cause: Exception) -> str:
        # Older tokens (MKR, SAI) return name/symbol as a right padded bytes32
        if len(raw) != 32:
            raise DecodeError(method, str(cause)) from cause
        try:
            text = raw.rstrip(b"\x00").decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(method, str(e)) from e
        if not text or "\x00" in text:
            raise DecodeError(method, str(cause)) from cause
        return text


pair_interface = ContractInterface("pair", PAIR_METHODS)
token_interface = ContractInterface("token", TOKEN_METHODS)
