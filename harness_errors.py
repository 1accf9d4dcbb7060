class HarnessError(Exception):
    pass


class InvalidPayload(HarnessError):
    pass


class MalformedEncoding(HarnessError):
    pass


class QueryError(HarnessError):
    pass


class NetworkError(HarnessError):
    pass


class SubmissionRejected(HarnessError):
    def __init__(self, reason: str, tx_hash: str = None):
        super().__init__(reason)
        self.reason = reason
        self.tx_hash = tx_hash


class VerificationMismatch(HarnessError):
    """Observed balance deltas differ from the expected table.

    `mismatches` maps (account, asset) to (expected, observed).
    """

    def __init__(self, mismatches: dict):
        self.mismatches = mismatches
        lines = [
            f"{account} / {asset}: expected {expected:+d}, observed {observed:+d}"
            for (account, asset), (expected, observed) in mismatches.items()
        ]
        super().__init__("Balance deltas mismatch: " + "; ".join(lines))
