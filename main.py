import random
import time

from web3 import Web3

import anycall_codec
from anycall_codec import MAX_UINT256, swap_payload
from contract_abi import erc20_abi, multichain_router_abi, trade_proxy_abi
from dapp import (
    NATIVE_ASSET,
    AnySwapInSubmitter,
    Dapp,
    ProxyExecSubmitter,
    Web3BalanceReader,
    connect,
)
from deposit_data import erc_deposit_data
from harness_config import (
    DEFAULT_PARACHAIN_ID,
    DEFAULT_XCM_RECIPIENT,
    HarnessConfig,
    load_config,
    load_private_keys,
)
from harness_logger import Logger
from settlement import ScenarioConfig, SettlementHarness
from xcm_codec import DEFAULT_WEIGHT, XcmDestination, encode_xcm_call_data


# --CONFIG--#
# Network, addresses and expected deltas live in .env (see DESIGN.md); private keys in keys.txt, one per line
ENV_PATH = ".env"
KEYS_PATH = "keys.txt"

# encodeSushiCallData defaults
DEFAULT_AMOUNT_IN_MAX = 1000000000000000000
DEFAULT_TOKEN_A = "0x1111111111111111111111111111111111111111"
DEFAULT_TOKEN_B = "0x2222222222222222222222222222222222222222"
DEFAULT_RECEIVER = "0x3333333333333333333333333333333333333333"
# ----------#


def prompt(text: str, default):
    value = input(f"{text} [{default}]: ").strip()
    return value or default


def encode_swap_call_data():
    path = prompt("Token path (comma separated)", f"{DEFAULT_TOKEN_A},{DEFAULT_TOKEN_B}")
    payload = swap_payload(
        amount_in_max=int(prompt("amountInMax", DEFAULT_AMOUNT_IN_MAX)),
        path=[hop.strip() for hop in str(path).split(",")],
        receiver=prompt("Receiver", DEFAULT_RECEIVER),
        amount_out=int(prompt("amountOut", 0)),
        amount_out_min=int(prompt("amountOutMin", 0)),
        deadline=int(prompt("Deadline", MAX_UINT256)),
        to_native=str(prompt("toNative (y/n)", "n")).lower() == "y",
    )
    print(f"encode arguments: {payload.as_abi_tuple()}")
    print(f"\nencoded data:\n{anycall_codec.encode_hex(payload)}")


def decode_swap_call_data():
    payload = anycall_codec.decode(input("Encoded data: ").strip())
    print(f"amountOut:    {payload.amount_out}")
    print(f"amountOutMin: {payload.amount_out_min}")
    print(f"amountInMax:  {payload.amount_in_max}")
    print(f"path:         {' -> '.join(payload.path)}")
    print(f"receiver:     {payload.receiver}")
    print(f"deadline:     {payload.deadline}")
    print(f"toNative:     {payload.to_native}")


def generate_xcm_transfer_data():
    destination = XcmDestination.to_parachain_account(
        para_id=int(prompt("Parachain id", DEFAULT_PARACHAIN_ID)),
        public_key=prompt("Recipient public key", DEFAULT_XCM_RECIPIENT),
    )
    weight = int(prompt("Weight", DEFAULT_WEIGHT))
    data = encode_xcm_call_data(destination, weight)
    print(f"dataPassedToDest: {Web3.to_hex(data)}")


def generate_deposit_data():
    amount = int(prompt("Token amount or id", 100))
    recipient = prompt("Recipient", DEFAULT_RECEIVER)
    print(f"depositData: {Web3.to_hex(erc_deposit_data(amount, recipient))}")


def _require(config: HarnessConfig, names):
    missing = [name for name in names if not getattr(config.addresses, name)]
    if missing:
        raise ValueError(f"Missing scenario addresses: {', '.join(missing)}")


def _checksum(address: str) -> str:
    return Web3.to_checksum_address(address)


def build_swap_scenario(wallet: str, config: HarnessConfig, now: int = None) -> ScenarioConfig:
    """Token to token swap, exact input, settled to the signing wallet."""
    _require(config, ("trade_proxy", "token_in", "token_out", "pair"))
    if config.expected_delta_out is None:
        raise ValueError("Missing required setting EXPECTED_DELTA_OUT")
    addresses = config.addresses
    token_in = _checksum(addresses.token_in)
    token_out = _checksum(addresses.token_out)
    pair = _checksum(addresses.pair)

    pair_delta_in = config.expected_pair_delta_in
    if pair_delta_in is None:
        pair_delta_in = config.swap_amount
    return ScenarioConfig(
        holdings=[
            (wallet, token_in),
            (wallet, token_out),
            (pair, token_in),
            (pair, token_out),
            (wallet, pair),
        ],
        payload=swap_payload(config.swap_amount, [token_in, token_out], wallet),
        expected_deltas={
            (wallet, token_in): config.expected_delta_in or 0,
            (wallet, token_out): config.expected_delta_out,
            (pair, token_in): pair_delta_in,
            (pair, token_out): -config.expected_delta_out,
        },
        target=_checksum(addresses.trade_proxy),
        name=f"token to token {wallet}",
        now=now,
    )


def build_native_swap_scenario(
    wallet: str, config: HarnessConfig, now: int = None
) -> ScenarioConfig:
    """Exact-output swap into WETH for a quarter of the swap amount.

    With TO_NATIVE the output is unwrapped and paid to NATIVE_RECEIVER, which
    must not be the signer: gas spent by the signer would break an exact
    native balance delta.
    """
    _require(config, ("trade_proxy", "token_in", "weth", "native_pair"))
    if config.expected_pair_delta_in is None:
        raise ValueError("Missing required setting EXPECTED_PAIR_DELTA_IN")
    addresses = config.addresses
    token_in = _checksum(addresses.token_in)
    weth = _checksum(addresses.weth)
    pair = _checksum(addresses.native_pair)
    receiver = _checksum(addresses.native_receiver or wallet)
    amount_out = config.swap_amount // 4

    if config.to_native:
        if receiver == wallet:
            raise ValueError("NATIVE_RECEIVER must differ from the signing wallet")
        received = (receiver, NATIVE_ASSET)
    else:
        received = (receiver, weth)
    holdings = [(wallet, token_in), received, (pair, token_in), (pair, weth), (wallet, pair)]
    return ScenarioConfig(
        holdings=holdings,
        payload=swap_payload(
            config.swap_amount,
            [token_in, weth],
            receiver,
            amount_out=amount_out,
            to_native=config.to_native,
        ),
        expected_deltas={
            (wallet, token_in): config.expected_delta_in or 0,
            received: amount_out,
            (pair, token_in): config.expected_pair_delta_in,
            (pair, weth): -amount_out,
        },
        target=_checksum(addresses.trade_proxy),
        name=f"token to native {wallet}",
        now=now,
    )


def build_xcm_scenario(caller: str, config: HarnessConfig) -> ScenarioConfig:
    """Proxy exec of a parachain transfer; on success the proxy's tokens are burned."""
    _require(config, ("xcm_proxy", "xcm_token", "xcm_receiver"))
    if config.xcm_amount is None:
        raise ValueError("Missing required setting XCM_AMOUNT")
    addresses = config.addresses
    token = _checksum(addresses.xcm_token)
    proxy = _checksum(addresses.xcm_proxy)
    receiver = _checksum(addresses.xcm_receiver)

    destination = XcmDestination.to_parachain_account(
        para_id=config.xcm_parachain_id, public_key=config.xcm_recipient_key
    )
    return ScenarioConfig(
        holdings=[(caller, token), (proxy, token), (receiver, token)],
        payload=encode_xcm_call_data(destination, config.xcm_weight),
        expected_deltas={(proxy, token): -config.xcm_amount},
        target=proxy,
        name=f"xcm transfer {caller}",
    )


def _harness(web3: Web3, submitter, config: HarnessConfig) -> SettlementHarness:
    return SettlementHarness(
        Web3BalanceReader(web3),
        submitter,
        query_retries=config.network.query_retries,
        retry_delay=config.network.retry_delay,
    )


def run_swap_scenario(private_key: str, config: HarnessConfig, web3: Web3 = None, native=False):
    _require(config, ("router",))
    web3 = web3 or connect(config.network.rpc_url)
    wallet = _checksum(web3.eth.account.from_key(private_key).address)
    now = web3.eth.get_block("latest").timestamp
    if native:
        scenario = build_native_swap_scenario(wallet, config, now)
    else:
        scenario = build_swap_scenario(wallet, config, now)

    trade_proxy = Dapp(web3, scenario.target, trade_proxy_abi)
    Logger.info(
        f"decode_anycall_info: {trade_proxy.call('decode_anycall_info', anycall_codec.encode(scenario.payload))}"
    )
    router = Dapp(web3, config.addresses.router, multichain_router_abi)
    submitter = AnySwapInSubmitter(
        router,
        private_key,
        config.network,
        config.swap_id,
        scenario.payload.token_in,
        config.swap_amount,
        config.from_chain_id,
    )
    return _harness(web3, submitter, config).run_scenario(scenario)


def run_xcm_scenario(private_key: str, config: HarnessConfig, web3: Web3 = None):
    web3 = web3 or connect(config.network.rpc_url)
    caller = _checksum(web3.eth.account.from_key(private_key).address)
    scenario = build_xcm_scenario(caller, config)
    token = Dapp(web3, config.addresses.xcm_token, erc20_abi)

    # fund the proxy first so the snapshots only see the exec
    Logger.step(f"Transferring {config.xcm_amount} to {scenario.target}")
    token.execute_transaction(
        private_key, "transfer", (scenario.target, config.xcm_amount), config.network
    )
    submitter = ProxyExecSubmitter(
        web3,
        private_key,
        config.network,
        token.address,
        config.addresses.xcm_receiver,
        config.xcm_amount,
    )
    return _harness(web3, submitter, config).run_scenario(scenario)


def run_for_each_key(run, config: HarnessConfig, private_keys):
    failed_keys = []
    for index, key in enumerate(private_keys):
        try:
            result = run(key, config)
            if not result.ok:
                failed_keys.append(key)
        except Exception as e:
            print(f"Scenario failed for key #{index + 1} | Error: {e}")
            failed_keys.append(key)
        if index < len(private_keys) - 1:
            random_sleep(config.network.from_sec, config.network.to_sec)
    print(f"{len(private_keys) - len(failed_keys)}/{len(private_keys)} scenarios verified")
    return failed_keys


def random_sleep(from_sec: int, to_sec: int):
    sleep_duration = random.randint(from_sec, to_sec)
    print(f"Sleeping for {sleep_duration} seconds")
    time.sleep(sleep_duration)


if __name__ == "__main__":
    choice = int(
        input(
            "\n----------------------\n1: Encode anycall swap call data\n2: Decode anycall swap call data\n3: Generate XCM transfer data\n4: Generate ERC20 deposit data\n5: Run token to token settlement scenario (every key in keys.txt)\n6: Run token to native settlement scenario (every key in keys.txt)\n7: Run XCM transfer proxy settlement scenario (every key in keys.txt)\nChoice: "
        )
    )
    if choice == 1:
        encode_swap_call_data()
    elif choice == 2:
        decode_swap_call_data()
    elif choice == 3:
        generate_xcm_transfer_data()
    elif choice == 4:
        generate_deposit_data()
    elif choice in (5, 6, 7):
        config = load_config(ENV_PATH)
        private_keys = load_private_keys(KEYS_PATH)
        if choice == 5:
            run_for_each_key(run_swap_scenario, config, private_keys)
        elif choice == 6:
            run_for_each_key(
                lambda key, config: run_swap_scenario(key, config, native=True),
                config,
                private_keys,
            )
        else:
            run_for_each_key(run_xcm_scenario, config, private_keys)
    else:
        print(f"Wrong choice number. 1 | 2 | 3 ...")
