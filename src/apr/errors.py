"""Exception types shared by the readers and the aggregator."""


class AprError(Exception):
    pass


class TransientTransportError(AprError):
    """Timeout or connection reset; the identical request may be retried."""


class ContractCallError(AprError):
    def __init__(self, function: str, address: str, reason: str):
        super().__init__(f"error calling {function} on {address}: {reason}")
        self.function = function
        self.address = address
        self.reason = reason


class GraphQueryError(AprError):
    """Unreachable subgraph endpoint or malformed GraphQL response."""


class AprComputationError(AprError):
    """A missing input or a zero denominator reached the reward aggregator."""

    def __init__(self, field: str, detail: str = "missing value"):
        super().__init__(f"{field}: {detail}")
        self.field = field
        self.detail = detail
