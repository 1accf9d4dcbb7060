import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dotenv import dotenv_values

from harness_logger import Logger
from xcm_codec import DEFAULT_WEIGHT

# MultichainRouter swap id used by the trade proxy tests
DEFAULT_SWAP_ID = "0x77c98d585b510c5aadf26ef775493ce359f0a8c6df644911f3f84b3df59aab8c"

# Equilibrium parachain and recipient used by the XCM transfer proxy tests
DEFAULT_PARACHAIN_ID = 0x7DB
DEFAULT_XCM_RECIPIENT = "4829b1e41449bd2cc7f04df856052f4d439f2f3e7f346c9702b94928ddf04707"


@dataclass
class NetworkConfig:
    rpc_url: str
    chain_id: int
    gas_price_gwei: float = 1
    max_priority_fee_gwei: Optional[float] = None
    max_fee_gwei: Optional[float] = None
    receipt_timeout: int = 120
    query_retries: int = 3
    retry_delay: float = 2.0
    from_sec: int = 1
    to_sec: int = 300

    @property
    def eip1559(self) -> bool:
        return self.max_priority_fee_gwei is not None and self.max_fee_gwei is not None


@dataclass
class ScenarioAddresses:
    router: Optional[str] = None
    trade_proxy: Optional[str] = None
    token_in: Optional[str] = None
    token_out: Optional[str] = None
    xcm_proxy: Optional[str] = None
    pair: Optional[str] = None
    weth: Optional[str] = None
    native_pair: Optional[str] = None
    native_receiver: Optional[str] = None
    xcm_token: Optional[str] = None
    xcm_receiver: Optional[str] = None


@dataclass
class HarnessConfig:
    network: NetworkConfig
    addresses: ScenarioAddresses = field(default_factory=ScenarioAddresses)
    swap_id: str = DEFAULT_SWAP_ID
    swap_amount: int = 100000000
    from_chain_id: int = 0
    expected_delta_in: Optional[int] = None
    expected_delta_out: Optional[int] = None
    # the pair gains the whole swap amount on an exact-input swap
    expected_pair_delta_in: Optional[int] = None
    to_native: bool = False
    xcm_amount: Optional[int] = None
    xcm_parachain_id: int = DEFAULT_PARACHAIN_ID
    xcm_recipient_key: str = DEFAULT_XCM_RECIPIENT
    xcm_weight: int = DEFAULT_WEIGHT


def _optional(values: Dict[str, str], key: str, cast=str, default=None):
    value = values.get(key)
    if value is None or value == "":
        return default
    try:
        return cast(value)
    except ValueError as e:
        raise ValueError(f"Invalid value for {key}: {value!r}") from e


def _int(value: str) -> int:
    return int(value, 0)


def _flag(value: str) -> bool:
    if value.lower() in ("1", "true", "yes", "y"):
        return True
    if value.lower() in ("0", "false", "no", "n"):
        return False
    raise ValueError(value)


def _required(values: Dict[str, str], key: str, cast=str):
    value = _optional(values, key, cast)
    if value is None:
        raise ValueError(f"Missing required setting {key}")
    return value


def load_config(env_path: str = ".env", environ: Optional[Dict[str, str]] = None) -> HarnessConfig:
    """Merge a dotenv file with the process environment, environment first."""
    values = {}
    if os.path.exists(env_path):
        Logger.debug(f"Loading settings from {env_path}")
        values.update(dotenv_values(env_path))
    values.update(os.environ if environ is None else environ)

    network = NetworkConfig(
        rpc_url=_required(values, "RPC_URL"),
        chain_id=_required(values, "CHAIN_ID", int),
        gas_price_gwei=_optional(values, "GAS_PRICE_GWEI", float, 1),
        max_priority_fee_gwei=_optional(values, "MAX_PRIORITY_FEE_GWEI", float),
        max_fee_gwei=_optional(values, "MAX_FEE_GWEI", float),
        receipt_timeout=_optional(values, "RECEIPT_TIMEOUT", int, 120),
        query_retries=_optional(values, "QUERY_RETRIES", int, 3),
        retry_delay=_optional(values, "RETRY_DELAY", float, 2.0),
        from_sec=_optional(values, "FROM_SEC", int, 1),
        to_sec=_optional(values, "TO_SEC", int, 300),
    )
    addresses = ScenarioAddresses(
        router=_optional(values, "ROUTER_ADDRESS"),
        trade_proxy=_optional(values, "TRADE_PROXY_ADDRESS"),
        token_in=_optional(values, "TOKEN_IN"),
        token_out=_optional(values, "TOKEN_OUT"),
        xcm_proxy=_optional(values, "XCM_PROXY_ADDRESS"),
        pair=_optional(values, "PAIR_ADDRESS"),
        weth=_optional(values, "WETH"),
        native_pair=_optional(values, "NATIVE_PAIR_ADDRESS"),
        native_receiver=_optional(values, "NATIVE_RECEIVER"),
        xcm_token=_optional(values, "XCM_TOKEN"),
        xcm_receiver=_optional(values, "XCM_RECEIVER"),
    )
    return HarnessConfig(
        network=network,
        addresses=addresses,
        swap_id=_optional(values, "SWAP_ID", str, DEFAULT_SWAP_ID),
        swap_amount=_optional(values, "SWAP_AMOUNT", int, 100000000),
        from_chain_id=_optional(values, "FROM_CHAIN_ID", int, 0),
        expected_delta_in=_optional(values, "EXPECTED_DELTA_IN", int),
        expected_delta_out=_optional(values, "EXPECTED_DELTA_OUT", int),
        expected_pair_delta_in=_optional(values, "EXPECTED_PAIR_DELTA_IN", int),
        to_native=_optional(values, "TO_NATIVE", _flag, False),
        xcm_amount=_optional(values, "XCM_AMOUNT", int),
        xcm_parachain_id=_optional(values, "XCM_PARACHAIN_ID", _int, DEFAULT_PARACHAIN_ID),
        xcm_recipient_key=_optional(values, "XCM_RECIPIENT_KEY", str, DEFAULT_XCM_RECIPIENT),
        xcm_weight=_optional(values, "XCM_WEIGHT", int, DEFAULT_WEIGHT),
    )


def load_private_keys(path: str = "keys.txt") -> List[str]:
    private_keys = []
    with open(path, "r") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                private_keys.append(line)
    return private_keys
