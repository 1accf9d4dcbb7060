"""
Anycall swap payload codec.

The trade proxies behind the anycall router decode their call data as

    struct AnycallInfo {
        uint256 amountOut;
        uint256 amountOutMin;
        uint256 amountInMax;
        address[] path;
        address receiver;
        uint256 deadline;
        bool toNative;
    }

with `abi.decode(data, (AnycallInfo))`, so the wire format is the standard ABI
encoding of that single tuple argument: one offset word pointing at the tuple,
the tuple's seven-slot head (slot 3 holds the path offset relative to the tuple
start) and the length-prefixed path.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError, EncodingError
from web3 import Web3

from harness_errors import InvalidPayload, MalformedEncoding

ANYCALL_INFO_TYPE = "(uint256,uint256,uint256,address[],address,uint256,bool)"

MAX_UINT256 = 2**256 - 1
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

WORD = 32
HEAD_SLOTS = 7
PATH_SLOT = 3
# outer offset word + tuple head + path length word
MIN_ENCODED_LENGTH = WORD + HEAD_SLOTS * WORD + WORD


def _normalize_address(value):
    if isinstance(value, str) and Web3.is_address(value):
        return Web3.to_checksum_address(value)
    return value


@dataclass(frozen=True)
class SwapPayload:
    amount_out: int
    amount_out_min: int
    amount_in_max: int
    path: Tuple[str, ...]
    receiver: str
    deadline: int = MAX_UINT256
    to_native: bool = False

    def __post_init__(self):
        object.__setattr__(
            self, "path", tuple(_normalize_address(hop) for hop in self.path)
        )
        object.__setattr__(self, "receiver", _normalize_address(self.receiver))

    def as_abi_tuple(self) -> tuple:
        return (
            self.amount_out,
            self.amount_out_min,
            self.amount_in_max,
            list(self.path),
            self.receiver,
            self.deadline,
            self.to_native,
        )

    @property
    def token_in(self) -> str:
        return self.path[0]

    @property
    def token_out(self) -> str:
        return self.path[-1]


def _check_uint256(name: str, value):
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPayload(f"{name} must be an integer, got {value!r}")
    if not 0 <= value <= MAX_UINT256:
        raise InvalidPayload(f"{name} out of uint256 range: {value}")


def validate(payload: SwapPayload):
    _check_uint256("amount_out", payload.amount_out)
    _check_uint256("amount_out_min", payload.amount_out_min)
    _check_uint256("amount_in_max", payload.amount_in_max)
    _check_uint256("deadline", payload.deadline)

    if len(payload.path) < 2:
        raise InvalidPayload(
            f"path needs at least two tokens, got {len(payload.path)}"
        )
    for index, hop in enumerate(payload.path):
        if not isinstance(hop, str) or not Web3.is_address(hop):
            raise InvalidPayload(f"path[{index}] is not an address: {hop!r}")
        if index and hop == payload.path[index - 1]:
            raise InvalidPayload(f"path[{index}] repeats the previous hop {hop}")

    if not isinstance(payload.receiver, str) or not Web3.is_address(
        payload.receiver
    ):
        raise InvalidPayload(f"receiver is not an address: {payload.receiver!r}")

    if payload.amount_out != 0 and payload.amount_out_min > payload.amount_out:
        raise InvalidPayload(
            f"amount_out_min {payload.amount_out_min} exceeds amount_out {payload.amount_out}"
        )
    if not isinstance(payload.to_native, bool):
        raise InvalidPayload(f"to_native must be a bool, got {payload.to_native!r}")


def deadline_from_now(seconds: int, now: int) -> int:
    return now + seconds


def is_expired(payload: SwapPayload, now: int) -> bool:
    return payload.deadline != MAX_UINT256 and payload.deadline <= now


def encode(payload: SwapPayload) -> bytes:
    validate(payload)
    try:
        return abi_encode([ANYCALL_INFO_TYPE], [payload.as_abi_tuple()])
    except EncodingError as e:
        raise InvalidPayload(str(e)) from e


def encode_hex(payload: SwapPayload) -> str:
    return "0x" + encode(payload).hex()


def _to_bytes(data: Union[bytes, bytearray, str]) -> bytes:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, str):
        raw = data[2:] if data.startswith(("0x", "0X")) else data
        try:
            return bytes.fromhex(raw)
        except ValueError as e:
            raise MalformedEncoding(f"not a hex string: {e}") from e
    raise MalformedEncoding(f"expected bytes or hex string, got {type(data).__name__}")


def _word(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + WORD], "big")


def _check_layout(data: bytes):
    size = len(data)
    if size < MIN_ENCODED_LENGTH:
        raise MalformedEncoding(
            f"encoding is {size} bytes, at least {MIN_ENCODED_LENGTH} required"
        )
    if size % WORD:
        raise MalformedEncoding(f"encoding length {size} is not a multiple of {WORD}")

    tuple_start = _word(data, 0)
    if tuple_start < WORD or tuple_start + HEAD_SLOTS * WORD > size:
        raise MalformedEncoding(f"tuple offset {tuple_start} outside buffer")

    path_offset = _word(data, tuple_start + PATH_SLOT * WORD)
    if path_offset < HEAD_SLOTS * WORD:
        raise MalformedEncoding(f"path offset {path_offset} points into tuple head")
    path_start = tuple_start + path_offset
    if path_start + WORD > size:
        raise MalformedEncoding(f"path offset {path_offset} outside buffer")

    path_length = _word(data, path_start)
    if path_start + WORD + path_length * WORD > size:
        raise MalformedEncoding(
            f"path of {path_length} entries overruns {size} byte buffer"
        )


def decode(data: Union[bytes, bytearray, str]) -> SwapPayload:
    """Decode and validate a payload.

    Well-formed ABI data that breaks a payload invariant (a one-hop path,
    amount_out_min above amount_out) raises MalformedEncoding like any other
    undecodable input.
    """
    data = _to_bytes(data)
    _check_layout(data)
    try:
        (values,) = abi_decode([ANYCALL_INFO_TYPE], data)
    except DecodingError as e:
        raise MalformedEncoding(str(e)) from e

    amount_out, amount_out_min, amount_in_max, path, receiver, deadline, to_native = values
    payload = SwapPayload(
        amount_out=amount_out,
        amount_out_min=amount_out_min,
        amount_in_max=amount_in_max,
        path=tuple(Web3.to_checksum_address(hop) for hop in path),
        receiver=Web3.to_checksum_address(receiver),
        deadline=deadline,
        to_native=to_native,
    )
    try:
        validate(payload)
    except InvalidPayload as e:
        raise MalformedEncoding(f"decoded payload is invalid: {e}") from e
    return payload


def swap_payload(
    amount_in_max: int,
    path: Sequence[str],
    receiver: str,
    amount_out: int = 0,
    amount_out_min: int = 0,
    deadline: int = MAX_UINT256,
    to_native: bool = False,
) -> SwapPayload:
    """Exact-input payload as the trade proxy tests build it"""
    return SwapPayload(
        amount_out=amount_out,
        amount_out_min=amount_out_min,
        amount_in_max=amount_in_max,
        path=tuple(path),
        receiver=receiver,
        deadline=deadline,
        to_native=to_native,
    )
