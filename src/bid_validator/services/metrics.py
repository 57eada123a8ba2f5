"""
Prometheus Metrics for Monitoring.

Exposes rejection counts per reason so policy drift on either side of
the auction shows up on dashboards.
"""

from typing import Optional, Protocol

from prometheus_client import REGISTRY, CollectorRegistry, Counter

from bid_validator.core.config import Settings, get_settings
from bid_validator.core.rules import RejectionReason


class RejectionReporter(Protocol):
    """What the validator needs from a metrics backend."""

    def record_rejection(self, reason: RejectionReason) -> None: ...

    def record_accepted(self) -> None: ...

    def record_ad_removed(self) -> None: ...


class NullReporter:
    """Reporter that drops everything, for callers without metrics."""

    def record_rejection(self, reason: RejectionReason) -> None:
        pass

    def record_accepted(self) -> None:
        pass

    def record_ad_removed(self) -> None:
        pass


class ValidatorMetrics:
    """
    Prometheus metrics for the bid validator.

    One counter series per rejection reason; all series are created up
    front so every reason is visible at zero before its first rejection.
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        self.registry = registry

        self.bids_rejected = Counter(
            "bid_validator_bids_rejected_total",
            "Bids removed from responses, by rejection reason",
            ["reason"],
            registry=registry,
        )

        self.bids_accepted = Counter(
            "bid_validator_bids_accepted_total",
            "Bids that passed every check",
            registry=registry,
        )

        self.ads_removed = Counter(
            "bid_validator_ads_removed_total",
            "Ads removed because no bid survived",
            registry=registry,
        )

        for reason in RejectionReason:
            self.bids_rejected.labels(reason=reason.value)

    # =========================================================================
    # REPORTER INTERFACE
    # =========================================================================

    def record_rejection(self, reason: RejectionReason) -> None:
        self.bids_rejected.labels(reason=reason.value).inc()

    def record_accepted(self) -> None:
        self.bids_accepted.inc()

    def record_ad_removed(self) -> None:
        self.ads_removed.inc()

    def rejection_count(self, reason: RejectionReason) -> float:
        """Current counter value for a reason."""
        value = self.registry.get_sample_value(
            "bid_validator_bids_rejected_total", {"reason": reason.value}
        )
        return value or 0.0


# Global metrics instance (singleton)
_metrics: Optional[ValidatorMetrics] = None


def get_metrics(settings: Optional[Settings] = None) -> RejectionReporter:
    """Get or create the global reporter, honouring metrics_enabled."""
    global _metrics
    if settings is None:
        settings = get_settings()
    if not settings.metrics_enabled:
        return NullReporter()
    if _metrics is None:
        _metrics = ValidatorMetrics()
    return _metrics
