"""Error taxonomy shared by the calculation services and the crud layer."""


class ValidationError(ValueError):
    """Input rejected before it touches the ledger (non-positive amounts, bad anchors)."""


class InsufficientSharesError(ValueError):
    """A sell (or reverse split) would take a holding below zero shares."""

    def __init__(self, requested, available):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot remove {requested} shares, only {available} held."
        )


class StoreUnavailableError(Exception):
    """Transient failure talking to the ledger database; safe to retry."""
