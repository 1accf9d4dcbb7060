"""
Settlement harness.

A scenario captures the balances of a fixed set of (account, asset) holdings,
submits an encoded payload (a swap, or raw call data such as an XCM
transfer), captures the same holdings again and checks the balance deltas
against an expected table. Each step depends on the chain
state observed by the previous one, so a scenario is strictly sequential;
independent scenarios can run side by side through `run_scenarios`.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Protocol, Sequence, Tuple, Union

import anycall_codec
from anycall_codec import SwapPayload
from harness_errors import (
    HarnessError,
    InvalidPayload,
    NetworkError,
    QueryError,
    SubmissionRejected,
    VerificationMismatch,
)
from harness_logger import Logger

Holding = Tuple[str, str]
BalanceDelta = Dict[Holding, int]


class BalanceReader(Protocol):
    def get_balance(self, account: str, asset: str) -> int: ...


class Submitter(Protocol):
    def submit(self, target: str, encoded_payload: bytes) -> str: ...


class ScenarioState(Enum):
    IDLE = "idle"
    SNAPSHOT_BEFORE = "snapshot_before"
    SUBMITTED = "submitted"
    SNAPSHOT_AFTER = "snapshot_after"
    VERIFIED = "verified"
    FAILED = "failed"


@dataclass(frozen=True)
class SettlementSnapshot:
    balances: Dict[Holding, int]

    def diff(self, after: "SettlementSnapshot") -> BalanceDelta:
        return {
            holding: after.balances[holding] - balance
            for holding, balance in self.balances.items()
        }


@dataclass
class ScenarioConfig:
    holdings: Sequence[Holding]
    # a SwapPayload is validated and encoded; raw bytes (XCM call data) go out as is
    payload: Union[SwapPayload, bytes]
    expected_deltas: BalanceDelta
    target: str
    name: str = ""
    # block timestamp used to reject an already expired deadline
    now: Optional[int] = None

    def __post_init__(self):
        self.holdings = [tuple(holding) for holding in self.holdings]
        unknown = [h for h in self.expected_deltas if tuple(h) not in self.holdings]
        if unknown:
            raise ValueError(f"Expected deltas for holdings not snapshotted: {unknown}")

    def expected_for(self, holding: Holding) -> int:
        return self.expected_deltas.get(holding, 0)


@dataclass
class Verified:
    deltas: BalanceDelta
    tx_hash: str
    before: SettlementSnapshot
    after: SettlementSnapshot

    ok = True

    def raise_for_failure(self):
        pass


@dataclass
class Failed:
    reason: str
    failed_at: ScenarioState
    expected_deltas: BalanceDelta
    observed_deltas: Optional[BalanceDelta] = None
    error: Optional[HarnessError] = None
    tx_hash: Optional[str] = None
    before: Optional[SettlementSnapshot] = None
    after: Optional[SettlementSnapshot] = None
    mismatches: Dict[Holding, Tuple[int, int]] = field(default_factory=dict)

    ok = False

    def raise_for_failure(self):
        if self.error is not None:
            raise self.error
        raise HarnessError(self.reason)


ScenarioResult = Union[Verified, Failed]


def verify(
    before: SettlementSnapshot, after: SettlementSnapshot, expected: BalanceDelta
) -> BalanceDelta:
    """Return the observed deltas, raising VerificationMismatch unless every
    holding moved by exactly the expected amount (zero when not listed).

    An expected entry for a holding absent from `before` can never be checked
    and raises ValueError.
    """
    missing = [holding for holding in expected if holding not in before.balances]
    if missing:
        raise ValueError(f"Expected deltas for holdings not snapshotted: {missing}")
    observed = before.diff(after)
    mismatches = {
        holding: (expected.get(holding, 0), delta)
        for holding, delta in observed.items()
        if delta != expected.get(holding, 0)
    }
    if mismatches:
        raise VerificationMismatch(mismatches)
    return observed


class SettlementHarness:
    def __init__(
        self,
        balance_reader: BalanceReader,
        submitter: Submitter,
        query_retries: int = 3,
        retry_delay: float = 2.0,
    ):
        self.balance_reader = balance_reader
        self.submitter = submitter
        self.query_retries = query_retries
        self.retry_delay = retry_delay

    def _read(self, account: str, asset: str) -> int:
        attempts = max(1, self.query_retries)
        for attempt in range(1, attempts + 1):
            try:
                return self.balance_reader.get_balance(account, asset)
            except QueryError as e:
                if attempt == attempts:
                    raise
                Logger.warning(f"Balance read failed ({attempt}/{attempts}): {e}")
                time.sleep(self.retry_delay * attempt)

    def snapshot(self, holdings: Sequence[Holding]) -> SettlementSnapshot:
        balances = {}
        for account, asset in holdings:
            balances[(account, asset)] = self._read(account, asset)
            Logger.debug(f"  {account} / {asset}: {balances[(account, asset)]}")
        return SettlementSnapshot(balances)

    def run_scenario(self, config: ScenarioConfig) -> ScenarioResult:
        label = config.name or "scenario"
        state = ScenarioState.IDLE
        before = after = None
        tx_hash = None

        def failed(reason, error=None, **extra):
            Logger.error(f"{label}: {reason}")
            return Failed(
                reason=reason,
                failed_at=state,
                expected_deltas=dict(config.expected_deltas),
                error=error,
                tx_hash=tx_hash,
                before=before,
                after=after,
                **extra,
            )

        if isinstance(config.payload, SwapPayload):
            try:
                encoded = anycall_codec.encode(config.payload)
                if config.now is not None and anycall_codec.is_expired(config.payload, config.now):
                    raise InvalidPayload(
                        f"deadline {config.payload.deadline} already passed at {config.now}"
                    )
            except InvalidPayload as e:
                return failed(f"invalid payload: {e}", e)
        else:
            encoded = bytes(config.payload)

        Logger.step(f"[1/4] {label}: capturing balances before submission")
        try:
            before = self.snapshot(config.holdings)
        except QueryError as e:
            return failed(f"balance query failed: {e}", e)
        state = ScenarioState.SNAPSHOT_BEFORE

        Logger.step(f"[2/4] {label}: submitting payload to {config.target}")
        Logger.debug(f"Payload: 0x{encoded.hex()}")
        try:
            tx_hash = self.submitter.submit(config.target, encoded)
        except SubmissionRejected as e:
            tx_hash = e.tx_hash
            return failed(f"submission rejected: {e.reason}", e)
        except NetworkError as e:
            return failed(f"submission outcome unknown, not resubmitting: {e}", e)
        state = ScenarioState.SUBMITTED
        Logger.success(f"{label}: submitted {tx_hash}")

        Logger.step(f"[3/4] {label}: capturing balances after submission")
        try:
            after = self.snapshot(config.holdings)
        except QueryError as e:
            return failed(f"balance query failed: {e}", e)
        state = ScenarioState.SNAPSHOT_AFTER

        Logger.step(f"[4/4] {label}: verifying balance deltas")
        try:
            deltas = verify(before, after, config.expected_deltas)
        except VerificationMismatch as e:
            return failed(
                str(e), e, observed_deltas=before.diff(after), mismatches=e.mismatches
            )

        for (account, asset), delta in deltas.items():
            Logger.info(f"  {account} / {asset}: {delta:+d}")
        Logger.success(f"{label}: settlement verified")
        return Verified(deltas=deltas, tx_hash=tx_hash, before=before, after=after)

    def run_scenarios(
        self, configs: Sequence[ScenarioConfig], max_workers: int = 4
    ) -> List[ScenarioResult]:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(self.run_scenario, configs))


def run_scenario(
    config: ScenarioConfig, balance_reader: BalanceReader, submitter: Submitter
) -> ScenarioResult:
    return SettlementHarness(balance_reader, submitter).run_scenario(config)
