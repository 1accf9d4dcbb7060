import threading

import requests
from web3 import Web3
from web3.exceptions import (
    ContractLogicError,
    TimeExhausted,
    Web3Exception,
    Web3RPCError,
)

from anycall_codec import ZERO_ADDRESS
from contract_abi import anycall_proxy_abi, erc20_abi
from harness_config import NetworkConfig
from harness_errors import NetworkError, QueryError, SubmissionRejected
from harness_logger import Logger

NATIVE_ASSET = ZERO_ADDRESS

TRANSPORT_ERRORS = (requests.exceptions.ConnectionError, requests.exceptions.Timeout)

_sender_locks = {}
_sender_locks_guard = threading.Lock()


def sender_lock(address: str) -> threading.Lock:
    # nonce read, sign and send must not interleave for one sender
    with _sender_locks_guard:
        return _sender_locks.setdefault(address.lower(), threading.Lock())


def connect(rpc_url: str) -> Web3:
    return Web3(Web3.HTTPProvider(rpc_url))


class Dapp:
    def __init__(self, web3: Web3, contract_address: str, abi):
        self.web3 = web3
        self.address = Web3.to_checksum_address(contract_address)
        self.contract = self.web3.eth.contract(self.address, abi=abi)

    def call(self, function_name: str, *args):
        return getattr(self.contract.functions, function_name)(*args).call()

    def _fee_params(self, network: NetworkConfig) -> dict:
        if network.eip1559:
            return {
                "maxPriorityFeePerGas": Web3.to_wei(network.max_priority_fee_gwei, "gwei"),
                "maxFeePerGas": Web3.to_wei(network.max_fee_gwei, "gwei"),
            }
        return {"gasPrice": Web3.to_wei(network.gas_price_gwei, "gwei")}

    def _send(self, private_key, address, function_name, args, network, value) -> str:
        transaction = getattr(self.contract.functions, function_name)(
            *args
        ).build_transaction(
            {
                "from": address,
                "value": value,
                # pending, so a transaction still in the mempool is counted
                "nonce": self.web3.eth.get_transaction_count(address, "pending"),
                "chainId": network.chain_id,
                **self._fee_params(network),
            }
        )
        transaction["gas"] = int(self.web3.eth.estimate_gas(transaction))
        signed_txn = self.web3.eth.account.sign_transaction(transaction, private_key)
        return Web3.to_hex(self.web3.eth.send_raw_transaction(signed_txn.raw_transaction))

    def execute_transaction(
        self,
        private_key: str,
        function_name: str,
        args: tuple,
        network: NetworkConfig,
        value: int = 0,
    ) -> str:
        address = Web3.to_checksum_address(
            self.web3.eth.account.from_key(private_key).address
        )
        try:
            with sender_lock(address):
                transaction_hash = self._send(
                    private_key, address, function_name, args, network, value
                )
        except (ContractLogicError, Web3RPCError) as e:
            raise SubmissionRejected(f"{function_name} rejected: {e}") from e
        except TRANSPORT_ERRORS as e:
            raise NetworkError(f"{function_name} not sent: {e}") from e
        Logger.transaction(function_name, transaction_hash)

        try:
            receipt = self.web3.eth.wait_for_transaction_receipt(
                transaction_hash, timeout=network.receipt_timeout
            )
        except TimeExhausted as e:
            raise NetworkError(
                f"{function_name} {transaction_hash} not mined within {network.receipt_timeout}s"
            ) from e
        except TRANSPORT_ERRORS as e:
            raise NetworkError(
                f"{function_name} {transaction_hash} receipt unavailable: {e}"
            ) from e
        if receipt["status"] != 1:
            raise SubmissionRejected(
                f"{function_name} reverted in {transaction_hash}", tx_hash=transaction_hash
            )
        return transaction_hash


class Web3BalanceReader:
    """Balances of ERC20 tokens, or of the native asset for NATIVE_ASSET."""

    def __init__(self, web3: Web3):
        self.web3 = web3

    def get_balance(self, account: str, asset: str) -> int:
        try:
            account = Web3.to_checksum_address(account)
            if asset == NATIVE_ASSET:
                return self.web3.eth.get_balance(account)
            token = self.web3.eth.contract(Web3.to_checksum_address(asset), abi=erc20_abi)
            return token.functions.balanceOf(account).call()
        except (Web3Exception, ValueError, requests.exceptions.RequestException) as e:
            raise QueryError(f"balance of {account} in {asset} unavailable: {e}") from e


class AnySwapInSubmitter:
    """Swap in on the destination router and execute the payload on a trade proxy."""

    def __init__(
        self,
        router: Dapp,
        private_key: str,
        network: NetworkConfig,
        swap_id: str,
        token: str,
        amount: int,
        from_chain_id: int = 0,
    ):
        self.router = router
        self.private_key = private_key
        self.network = network
        self.swap_id = swap_id
        self.token = token
        self.amount = amount
        self.from_chain_id = from_chain_id

    def submit(self, target: str, encoded_payload: bytes) -> str:
        return self.router.execute_transaction(
            self.private_key,
            "anySwapInAndExec",
            (
                self.swap_id,
                Web3.to_checksum_address(self.token),
                self.amount,
                self.from_chain_id,
                Web3.to_checksum_address(target),
                encoded_payload,
            ),
            self.network,
        )


class ProxyExecSubmitter:
    def __init__(
        self,
        web3: Web3,
        private_key: str,
        network: NetworkConfig,
        token: str,
        receiver: str,
        amount: int,
    ):
        self.web3 = web3
        self.private_key = private_key
        self.network = network
        self.token = token
        self.receiver = receiver
        self.amount = amount

    def submit(self, target: str, encoded_payload: bytes) -> str:
        proxy = Dapp(self.web3, target, anycall_proxy_abi)
        return proxy.execute_transaction(
            self.private_key,
            "exec",
            (
                Web3.to_checksum_address(self.token),
                Web3.to_checksum_address(self.receiver),
                self.amount,
                encoded_payload,
            ),
            self.network,
        )
