"""Track changes to grants so reporting consumers can refresh."""
from grant_core.events.signal import Signal


class DomainEvents:
    def __init__(self) -> None:
        self.grant_changed: Signal[str] = Signal()         # grant_id
        self.expenditures_changed: Signal[str] = Signal()  # grant_id
        self.compliance_changed: Signal[str] = Signal()    # grant_id


# SINGLE global instance
domain_events = DomainEvents()
