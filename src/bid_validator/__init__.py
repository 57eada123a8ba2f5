"""Policy filter for ad exchange bid responses."""

from bid_validator.core.metadata import Metadata
from bid_validator.core.rules import RejectionReason
from bid_validator.core.validator import BidValidator
from bid_validator.models.bidding import BidRequest, BidResponse, MalformedInputError

__all__ = [
    "BidRequest",
    "BidResponse",
    "BidValidator",
    "MalformedInputError",
    "Metadata",
    "RejectionReason",
]
