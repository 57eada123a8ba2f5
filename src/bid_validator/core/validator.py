"""
Bid response validator.

Prunes a bidder's response down to the bids the request's ad slots
actually accept. Every bid is matched to its slot, checked against the
slot's deals, then run through the policy rules with fast-fail. Failing
bids are removed in place and ads left without bids are dropped.

Policy failures never raise; only structurally broken input does.
"""

from collections import Counter
from typing import Optional

import structlog

from bid_validator.core.metadata import Metadata
from bid_validator.core.rules import RULES, Rule, RejectionReason, evaluate_rules
from bid_validator.models.bidding import (
    Ad,
    AdSlot,
    AdSlotBid,
    BidRequest,
    BidResponse,
    MalformedInputError,
)
from bid_validator.services.metrics import RejectionReporter, get_metrics

logger = structlog.get_logger()


class BidValidator:
    """
    Removes non-compliant bids and ads from a bid response.

    Holds no per-call state, so one instance can serve concurrent
    validations as long as each call gets its own response object.
    """

    def __init__(
        self,
        metadata: Metadata,
        reporter: Optional[RejectionReporter] = None,
        rules: tuple[Rule, ...] = RULES,
    ):
        self.metadata = metadata
        self.reporter = reporter if reporter is not None else get_metrics()
        self.rules = rules

    def validate(self, request: BidRequest, response: BidResponse) -> None:
        """
        Prune ``response`` in place against ``request``.

        Raises MalformedInputError before touching the response if either
        side is missing identifiers needed for slot matching.
        """
        slots = self._index_slots(request)
        self._check_response(response)

        bids_in = response.bid_count
        ads_in = len(response.ads)
        rejected: Counter[RejectionReason] = Counter()

        kept_ads: list[Ad] = []
        for ad in response.ads:
            if not ad.adslots:
                self._reject(RejectionReason.NO_SLOTS, request, ad, None)
                rejected[RejectionReason.NO_SLOTS] += 1
                self.reporter.record_ad_removed()
                continue

            kept_bids: list[AdSlotBid] = []
            for bid in ad.adslots:
                reason = self.check_bid(slots, ad, bid)
                if reason is None:
                    kept_bids.append(bid)
                    self.reporter.record_accepted()
                else:
                    self._reject(reason, request, ad, bid)
                    rejected[reason] += 1
            ad.adslots[:] = kept_bids

            if ad.adslots:
                kept_ads.append(ad)
            else:
                logger.debug(
                    "ad_removed",
                    request_id=request.id,
                    creative=ad.buyer_creative_id,
                )
                self.reporter.record_ad_removed()

        response.ads[:] = kept_ads

        logger.info(
            "validation_complete",
            request_id=request.id,
            ads_in=ads_in,
            ads_out=len(response.ads),
            bids_in=bids_in,
            bids_out=response.bid_count,
            rejected={reason.value: n for reason, n in rejected.items()},
        )

    def check_bid(
        self,
        slots: dict[int, AdSlot],
        ad: Ad,
        bid: AdSlotBid,
    ) -> Optional[RejectionReason]:
        """Slot match, then deal match, then policy rules. None means accepted."""
        slot = slots.get(bid.id)
        if slot is None:
            return RejectionReason.UNMATCHED_SLOT

        deal_reason = self._check_deal(slot, bid)
        if deal_reason is not None:
            return deal_reason

        return evaluate_rules(slot, ad, self.metadata, self.rules)

    def _check_deal(self, slot: AdSlot, bid: AdSlotBid) -> Optional[RejectionReason]:
        if bid.deal_id is not None:
            if bid.deal_id not in slot.deal_ids:
                return RejectionReason.DEAL_MISMATCH
            return None
        if slot.requires_deal:
            return RejectionReason.DEAL_REQUIRED
        return None

    def _index_slots(self, request: BidRequest) -> dict[int, AdSlot]:
        slots: dict[int, AdSlot] = {}
        for slot in request.adslots:
            if slot.id is None:
                raise MalformedInputError("adslot.id")
            if slot.id in slots:
                raise MalformedInputError("adslot.id", f"duplicate slot id {slot.id}")
            slots[slot.id] = slot
        return slots

    def _check_response(self, response: BidResponse) -> None:
        for ad in response.ads:
            for bid in ad.adslots:
                if bid.id is None:
                    raise MalformedInputError("ad.adslot.id")

    def _reject(
        self,
        reason: RejectionReason,
        request: BidRequest,
        ad: Ad,
        bid: Optional[AdSlotBid],
    ) -> None:
        self.reporter.record_rejection(reason)
        logger.debug(
            "bid_rejected",
            request_id=request.id,
            reason=reason.value,
            slot=bid.id if bid else None,
            deal=bid.deal_id if bid else None,
            creative=ad.buyer_creative_id,
            vendors=sorted(ad.vendor_type),
        )
