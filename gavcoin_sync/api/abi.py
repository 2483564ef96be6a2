"""
Contract call encoding on top of ``eth_abi``.

Call data is the 4-byte selector of the canonical signature followed by the
ABI-encoded arguments. Only single return values are decoded.
"""

from typing import Any, Sequence

from eth_abi import decode, encode, is_encodable, is_encodable_type
from eth_abi.exceptions import DecodingError
from eth_utils import decode_hex, function_signature_to_4byte_selector

from .base import ContractCallError


def function_selector(signature: str) -> bytes:
    return function_signature_to_4byte_selector(signature)


def encode_arguments(types: Sequence[str], args: Sequence[Any]) -> bytes:
    """
    ABI-encode call arguments.

    Raises:
        ContractCallError: If the argument count does not match, a type is
            unknown to the codec, or a value cannot be encoded as its type
    """
    if len(types) != len(args):
        raise ContractCallError(
            f"Expected {len(types)} arguments, got {len(args)}"
        )

    for arg_type, value in zip(types, args):
        if not is_encodable_type(arg_type):
            raise ContractCallError(f"Unsupported argument type: {arg_type}")
        if not is_encodable(arg_type, value):
            raise ContractCallError(f"Value {value!r} is not a valid {arg_type}")

    return encode(list(types), list(args))


def encode_call(signature: str, types: Sequence[str], args: Sequence[Any]) -> str:
    """Encode a full call as ``0x``-prefixed hex call data."""
    data = function_selector(signature) + encode_arguments(types, args)
    return "0x" + data.hex()


def decode_result(output_type: str, data: str) -> Any:
    """
    Decode a single return value from ``eth_call`` output.

    Addresses come back checksummed.
    """
    try:
        raw = decode_hex(data) if data else b""
    except (TypeError, ValueError) as e:
        raise ContractCallError(f"Return data is not hex: {data!r}") from e

    # A call to an address without code returns empty data
    if not raw:
        raise ContractCallError(f"Empty return data for {output_type}")

    try:
        (value,) = decode([output_type], raw)
    except DecodingError as e:
        raise ContractCallError(f"Short return data for {output_type}: {data!r}") from e

    return value
