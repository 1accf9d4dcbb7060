"""
Call data for the XCM transfer proxy.

The proxy forwards tokens to the X-Tokens precompile with a multilocation
destination `(uint8 parents, bytes[] interior)` and a destination weight,
encoded as the single argument `((uint8,bytes[]),uint64)`.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError

from harness_errors import InvalidPayload, MalformedEncoding

XCM_CALL_DATA_TYPE = "((uint8,bytes[]),uint64)"

PARACHAIN_SELECTOR = b"\x00"
ACCOUNT_ID32_SELECTOR = b"\x01"
NETWORK_ANY = 0

RELAY_CHAIN_PARENTS = 1
DEFAULT_WEIGHT = 800_000_000


def _hex_bytes(value: Union[bytes, str]) -> bytes:
    if isinstance(value, bytes):
        return value
    raw = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        return bytes.fromhex(raw)
    except ValueError as e:
        raise InvalidPayload(f"not a hex string: {value!r}") from e


def parachain_junction(para_id: int) -> bytes:
    if not 0 <= para_id < 2**32:
        raise InvalidPayload(f"parachain id out of uint32 range: {para_id}")
    return PARACHAIN_SELECTOR + para_id.to_bytes(4, "big")


def account_id32_junction(public_key: Union[bytes, str], network: int = NETWORK_ANY) -> bytes:
    key = _hex_bytes(public_key)
    if len(key) != 32:
        raise InvalidPayload(f"AccountId32 must be 32 bytes, got {len(key)}")
    if not 0 <= network <= 0xFF:
        raise InvalidPayload(f"network id out of uint8 range: {network}")
    return ACCOUNT_ID32_SELECTOR + key + bytes([network])


@dataclass(frozen=True)
class XcmDestination:
    parents: int
    interior: Tuple[bytes, ...]

    @classmethod
    def to_parachain_account(
        cls, para_id: int, public_key: Union[bytes, str], parents: int = RELAY_CHAIN_PARENTS
    ) -> "XcmDestination":
        return cls(
            parents=parents,
            interior=(parachain_junction(para_id), account_id32_junction(public_key)),
        )


def encode_xcm_call_data(destination: XcmDestination, weight: int = DEFAULT_WEIGHT) -> bytes:
    if not 0 <= destination.parents <= 0xFF:
        raise InvalidPayload(f"parents out of uint8 range: {destination.parents}")
    if not 0 <= weight < 2**64:
        raise InvalidPayload(f"weight out of uint64 range: {weight}")
    interior = [_hex_bytes(junction) for junction in destination.interior]
    return abi_encode(
        [XCM_CALL_DATA_TYPE], [((destination.parents, interior), weight)]
    )


def decode_xcm_call_data(data: Union[bytes, str]) -> Tuple[XcmDestination, int]:
    if isinstance(data, str):
        try:
            data = _hex_bytes(data)
        except InvalidPayload as e:
            raise MalformedEncoding(str(e)) from e
    try:
        (((parents, interior), weight),) = abi_decode([XCM_CALL_DATA_TYPE], data)
    except DecodingError as e:
        raise MalformedEncoding(str(e)) from e
    return XcmDestination(parents=parents, interior=tuple(interior)), weight


def interior_from_hex(junctions: Sequence[str]) -> Tuple[bytes, ...]:
    return tuple(_hex_bytes(junction) for junction in junctions)
