"""
Bid request and bid response models.

Mirrors the exchange's wire schema closely enough for validation:
request ad slots carry the publisher's constraints, response ads carry
the creative's declared attributes and one bid per targeted slot.
Python field names are plural where the wire name is a repeated field;
the wire names are accepted and emitted as aliases.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, ValidationError

# Code sets serialize as sorted lists so pruned output is stable
CodeSet = Annotated[set[int], PlainSerializer(sorted, return_type=list[int])]


class MalformedInputError(ValueError):
    """Raised when a request or response is missing or mistypes a required field."""

    def __init__(self, field_name: str, message: str = "missing required identifier"):
        self.field = field_name
        super().__init__(f"{field_name}: {message}")

    @classmethod
    def from_validation_error(cls, root: str, error: ValidationError) -> MalformedInputError:
        """Report the first failing location of a pydantic error."""
        first = error.errors()[0]
        location = ".".join(str(part) for part in (root, *first["loc"]))
        return cls(location, first["msg"])


class WireModel(BaseModel):
    """Base for wire objects: unknown fields ignored, names or aliases accepted."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ============================================================================
# REQUEST
# ============================================================================


class DirectDeal(WireModel):
    """A pre-negotiated deal the publisher accepts on a slot."""

    direct_deal_id: int
    fixed_cpm_micros: Optional[int] = None


class MatchingAdData(WireModel):
    """Billing ids and deals of the bidder that match a slot."""

    billing_ids: list[int] = Field(default_factory=list, alias="billing_id")
    direct_deals: list[DirectDeal] = Field(default_factory=list, alias="direct_deal")


class AdSlot(WireModel):
    """A placement being auctioned, with the publisher's constraints."""

    id: Optional[int]
    widths: list[int] = Field(default_factory=list, alias="width")
    heights: list[int] = Field(default_factory=list, alias="height")
    excluded_attribute: CodeSet = Field(default_factory=set)
    excluded_product_category: CodeSet = Field(default_factory=set)
    excluded_sensitive_category: CodeSet = Field(default_factory=set)
    allowed_vendor_type: CodeSet = Field(default_factory=set)  # empty = any vendor
    allowed_restricted_category: CodeSet = Field(default_factory=set)  # empty = any
    matching_ad_data: list[MatchingAdData] = Field(default_factory=list)
    requires_deal: bool = False

    @property
    def deal_ids(self) -> set[int]:
        """Every direct deal permitted on this slot."""
        return {
            deal.direct_deal_id
            for data in self.matching_ad_data
            for deal in data.direct_deals
        }

    @property
    def sizes(self) -> list[tuple[int, int]]:
        return list(zip(self.widths, self.heights))


class BidRequest(WireModel):
    """Incoming auction request."""

    id: str
    adslots: list[AdSlot] = Field(default_factory=list, alias="adslot")
    seller_network_id: Optional[int] = None


# ============================================================================
# RESPONSE
# ============================================================================


class AdSlotBid(WireModel):
    """A bid for one slot, nested inside a response ad."""

    id: Optional[int]
    max_cpm_micros: int = 0
    deal_id: Optional[int] = None
    billing_id: Optional[int] = None


class Ad(WireModel):
    """A candidate creative and the slots it bids on."""

    adslots: list[AdSlotBid] = Field(default_factory=list, alias="adslot")
    attribute: CodeSet = Field(default_factory=set)
    category: CodeSet = Field(default_factory=set)
    vendor_type: CodeSet = Field(default_factory=set)
    restricted_category: CodeSet = Field(default_factory=set)
    click_through_url: list[str] = Field(default_factory=list)
    buyer_creative_id: Optional[str] = None


class BidResponse(WireModel):
    """Outgoing bidder response; pruned in place by the validator."""

    ads: list[Ad] = Field(default_factory=list, alias="ad")

    @property
    def bid_count(self) -> int:
        return sum(len(ad.adslots) for ad in self.ads)


# ============================================================================
# WIRE CONVERSION
# ============================================================================


def parse_request(data: Any) -> BidRequest:
    """Validate a decoded JSON bid request."""
    try:
        return BidRequest.model_validate(data)
    except ValidationError as e:
        raise MalformedInputError.from_validation_error("bid_request", e) from e


def parse_response(data: Any) -> BidResponse:
    """Validate a decoded JSON bid response."""
    try:
        return BidResponse.model_validate(data)
    except ValidationError as e:
        raise MalformedInputError.from_validation_error("bid_response", e) from e


def dump_wire(model: WireModel) -> dict[str, Any]:
    """JSON-ready dict using wire names, with unset optionals left out."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
