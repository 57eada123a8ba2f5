"""Pytest fixtures for Bid Validator tests."""

import pytest
from prometheus_client import CollectorRegistry

from bid_validator.core.config import Settings
from bid_validator.core.metadata import Metadata
from bid_validator.core.validator import BidValidator
from bid_validator.models.bidding import (
    Ad,
    AdSlot,
    AdSlotBid,
    BidRequest,
    DirectDeal,
    MatchingAdData,
)
from bid_validator.services.metrics import ValidatorMetrics


@pytest.fixture
def mock_settings() -> Settings:
    """Create settings that ignore the environment."""
    return Settings(
        metadata_path=None,
        metrics_enabled=True,
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def metadata() -> Metadata:
    """Packaged metadata tables."""
    return Metadata.load()


@pytest.fixture
def metrics() -> ValidatorMetrics:
    """Metrics bound to a private registry so tests don't share counters."""
    return ValidatorMetrics(registry=CollectorRegistry())


@pytest.fixture
def validator(metadata, metrics) -> BidValidator:
    return BidValidator(metadata, reporter=metrics)


@pytest.fixture
def constrained_slot() -> AdSlot:
    """Slot 1 with one excluded code of every kind and deal 1."""
    return AdSlot(
        id=1,
        widths=[200],
        heights=[50],
        excluded_attribute={1},
        excluded_product_category={1},
        excluded_sensitive_category={1},
        allowed_vendor_type={1},
        allowed_restricted_category={1},
        matching_ad_data=[
            MatchingAdData(billing_ids=[10], direct_deals=[DirectDeal(direct_deal_id=1)])
        ],
    )


@pytest.fixture
def request_(constrained_slot) -> BidRequest:
    return BidRequest(id="0", adslots=[constrained_slot])


@pytest.fixture
def make_ad():
    """Factory for ads bidding on slot 1 unless explicit bids are given."""

    def _make_ad(*bids: AdSlotBid, **attrs) -> Ad:
        if not bids:
            bids = (AdSlotBid(id=1, max_cpm_micros=100_000_000),)
        return Ad(adslots=list(bids), **attrs)

    return _make_ad
