"""
Tests for the anycall swap payload codec.
"""

import pytest
from eth_abi import encode as abi_encode

from anycall_codec import (
    ANYCALL_INFO_TYPE,
    MAX_UINT256,
    MIN_ENCODED_LENGTH,
    SwapPayload,
    decode,
    deadline_from_now,
    encode,
    encode_hex,
    is_expired,
    swap_payload,
)
from harness_errors import InvalidPayload, MalformedEncoding

TOKEN_A = "0x1111111111111111111111111111111111111111"
TOKEN_B = "0x2222222222222222222222222222222222222222"
TOKEN_C = "0x4444444444444444444444444444444444444444"
RECEIVER = "0x3333333333333333333333333333333333333333"


def word(value: int) -> bytes:
    return value.to_bytes(32, "big")


def address_word(address: str) -> bytes:
    return bytes.fromhex(address[2:]).rjust(32, b"\0")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def sushi_payload():
    """Payload built by the encodeSushiCallData script."""
    return swap_payload(
        amount_in_max=1000000000000000000,
        path=[TOKEN_A, TOKEN_B],
        receiver=RECEIVER,
    )


# =============================================================================
# Encoding
# =============================================================================


def test_encode_matches_abi_tuple_layout(sushi_payload):
    expected = b"".join(
        [
            word(0x20),
            word(0),
            word(0),
            word(1000000000000000000),
            word(7 * 32),
            address_word(RECEIVER),
            word(MAX_UINT256),
            word(0),
            word(2),
            address_word(TOKEN_A),
            address_word(TOKEN_B),
        ]
    )

    assert encode(sushi_payload) == expected


def test_encode_is_deterministic(sushi_payload):
    again = swap_payload(
        amount_in_max=1000000000000000000,
        path=[TOKEN_A, TOKEN_B],
        receiver=RECEIVER,
    )

    assert encode(sushi_payload) == encode(sushi_payload) == encode(again)


def test_encode_hex_is_prefixed(sushi_payload):
    assert encode_hex(sushi_payload) == "0x" + encode(sushi_payload).hex()


def test_to_native_sets_last_head_slot():
    payload = swap_payload(1000, [TOKEN_A, TOKEN_B], RECEIVER, to_native=True)

    assert encode(payload)[7 * 32 : 8 * 32] == word(1)


# =============================================================================
# Round trip
# =============================================================================


@pytest.mark.parametrize(
    "payload",
    [
        swap_payload(1000000000000000000, [TOKEN_A, TOKEN_B], RECEIVER),
        swap_payload(100000000, [TOKEN_A, TOKEN_C, TOKEN_B], RECEIVER, amount_out=25000000),
        SwapPayload(
            amount_out=MAX_UINT256,
            amount_out_min=MAX_UINT256,
            amount_in_max=MAX_UINT256,
            path=(TOKEN_B, TOKEN_A),
            receiver=RECEIVER,
            deadline=1700000000,
            to_native=True,
        ),
    ],
)
def test_decode_reverses_encode(payload):
    assert decode(encode(payload)) == payload


def test_decode_accepts_hex_string(sushi_payload):
    assert decode(encode_hex(sushi_payload)) == sushi_payload


def test_lowercase_addresses_are_checksummed():
    payload = swap_payload(
        10,
        ["0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed", TOKEN_B],
        RECEIVER,
    )

    assert payload.token_in == "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
    assert decode(encode(payload)) == payload


# =============================================================================
# Invariants
# =============================================================================


@pytest.mark.parametrize("path", [[], [TOKEN_A]])
def test_short_path_rejected(path):
    with pytest.raises(InvalidPayload):
        encode(swap_payload(1000, path, RECEIVER))


def test_empty_path_entry_rejected():
    with pytest.raises(InvalidPayload):
        encode(swap_payload(1000, [TOKEN_A, ""], RECEIVER))


def test_repeated_hop_rejected():
    with pytest.raises(InvalidPayload):
        encode(swap_payload(1000, [TOKEN_A, TOKEN_A], RECEIVER))


def test_invalid_receiver_rejected():
    with pytest.raises(InvalidPayload):
        encode(swap_payload(1000, [TOKEN_A, TOKEN_B], "0x1234"))


def test_amount_out_min_above_amount_out_rejected():
    with pytest.raises(InvalidPayload):
        encode(
            swap_payload(1000, [TOKEN_A, TOKEN_B], RECEIVER, amount_out=10, amount_out_min=11)
        )


def test_amount_out_min_unconstrained_when_amount_out_zero():
    payload = swap_payload(1000, [TOKEN_A, TOKEN_B], RECEIVER, amount_out=0, amount_out_min=11)

    assert decode(encode(payload)) == payload


@pytest.mark.parametrize("amount", [-1, MAX_UINT256 + 1, "1000"])
def test_amount_outside_uint256_rejected(amount):
    with pytest.raises(InvalidPayload):
        encode(swap_payload(amount, [TOKEN_A, TOKEN_B], RECEIVER))


def test_deadline_helpers():
    bounded = swap_payload(1000, [TOKEN_A, TOKEN_B], RECEIVER, deadline=deadline_from_now(3600, 1000))

    assert bounded.deadline == 4600
    assert not is_expired(bounded, 4599)
    assert is_expired(bounded, 4600)
    assert not is_expired(swap_payload(1000, [TOKEN_A, TOKEN_B], RECEIVER), 2**255)


# =============================================================================
# Malformed input
# =============================================================================


@pytest.mark.parametrize("size", [0, 32, 7 * 32, MIN_ENCODED_LENGTH - 32])
def test_short_zero_bytes_rejected(size):
    with pytest.raises(MalformedEncoding):
        decode(b"\0" * size)


def test_zero_bytes_of_minimum_length_rejected():
    with pytest.raises(MalformedEncoding):
        decode(b"\0" * MIN_ENCODED_LENGTH)


def test_truncated_encoding_rejected(sushi_payload):
    data = encode(sushi_payload)

    with pytest.raises(MalformedEncoding):
        decode(data[:-32])
    with pytest.raises(MalformedEncoding):
        decode(data[:-5])


def test_path_offset_outside_buffer_rejected(sushi_payload):
    data = bytearray(encode(sushi_payload))
    data[4 * 32 : 5 * 32] = word(len(data))

    with pytest.raises(MalformedEncoding):
        decode(bytes(data))


def test_path_offset_into_head_rejected(sushi_payload):
    data = bytearray(encode(sushi_payload))
    data[4 * 32 : 5 * 32] = word(32)

    with pytest.raises(MalformedEncoding):
        decode(bytes(data))


def test_path_length_overrun_rejected(sushi_payload):
    data = bytearray(encode(sushi_payload))
    data[8 * 32 : 9 * 32] = word(2**200)

    with pytest.raises(MalformedEncoding):
        decode(bytes(data))


def test_non_boolean_flag_rejected(sushi_payload):
    data = bytearray(encode(sushi_payload))
    data[7 * 32 : 8 * 32] = word(2)

    with pytest.raises(MalformedEncoding):
        decode(bytes(data))


def test_non_hex_string_rejected():
    with pytest.raises(MalformedEncoding):
        decode("0xnothex")


@pytest.mark.parametrize(
    "values",
    [
        (0, 0, 1000, [TOKEN_A], RECEIVER, MAX_UINT256, False),
        (10, 11, 1000, [TOKEN_A, TOKEN_B], RECEIVER, MAX_UINT256, False),
        (0, 0, 1000, [TOKEN_A, TOKEN_A], RECEIVER, MAX_UINT256, False),
    ],
)
def test_well_formed_encoding_of_invalid_payload_rejected(values):
    data = abi_encode([ANYCALL_INFO_TYPE], [values])

    with pytest.raises(MalformedEncoding):
        decode(data)
