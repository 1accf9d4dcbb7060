"""Packed deposit data for bridge handler contracts"""

from typing import Optional, Union

from web3 import Web3

from harness_errors import InvalidPayload


def _pad32(value: int) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidPayload(f"expected an unsigned integer, got {value!r}")
    if value >= 2**256:
        raise InvalidPayload(f"value out of uint256 range: {value}")
    return value.to_bytes(32, "big")


def _as_bytes(value: Union[bytes, str]) -> bytes:
    if isinstance(value, bytes):
        return value
    try:
        return Web3.to_bytes(hexstr=value)
    except ValueError as e:
        raise InvalidPayload(f"not a hex string: {value!r}") from e


def erc_deposit_data(amount_or_id: int, recipient: Union[bytes, str]) -> bytes:
    recipient = _as_bytes(recipient)
    return _pad32(amount_or_id) + _pad32(len(recipient)) + recipient


def erc721_deposit_proposal_data(
    token_id: int, recipient: Union[bytes, str], metadata: Union[bytes, str]
) -> bytes:
    metadata = _as_bytes(metadata)
    return erc_deposit_data(token_id, recipient) + _pad32(len(metadata)) + metadata


def generic_deposit_data(metadata: Optional[Union[bytes, str]]) -> bytes:
    if metadata is None:
        return _pad32(0)
    metadata = _as_bytes(metadata)
    return _pad32(len(metadata)) + metadata


def resource_id(contract_address: str, chain_id: int) -> bytes:
    if not Web3.is_address(contract_address):
        raise InvalidPayload(f"not an address: {contract_address!r}")
    if not 0 <= chain_id <= 0xFF:
        raise InvalidPayload(f"chain id out of uint8 range: {chain_id}")
    raw = Web3.to_bytes(hexstr=contract_address) + bytes([chain_id])
    return raw.rjust(32, b"\0")


def nonce_and_id(nonce: int, chain_id: int) -> bytes:
    # uint72 nonceAndID = (uint72(depositNonce) << 8) | uint72(chainID)
    if not 0 <= nonce < 2**64:
        raise InvalidPayload(f"nonce out of uint64 range: {nonce}")
    if not 0 <= chain_id <= 0xFF:
        raise InvalidPayload(f"chain id out of uint8 range: {chain_id}")
    return ((nonce << 8) | chain_id).to_bytes(9, "big")
