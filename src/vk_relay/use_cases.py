"""Business logic use cases."""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum

from vk_relay.core import (
    AudioRef,
    ChannelClient,
    ExtractedAttachments,
    FeedClient,
    ProcessedLedger,
    SourceItem,
)
from vk_relay.core import fuzzy
from vk_relay.core.extractor import extract_attachments
from vk_relay.core.formatting import (
    append_audio_lines,
    append_links,
    compose_text,
    with_error_marker,
)
from vk_relay.core.outbound import OutboundUnit, UnitKind, plan_units
from vk_relay.errors import BridgeError, PartialDeliveryError

LOGGER = logging.getLogger(__name__)


class MarkPolicy(str, Enum):
    """When a dispatched item is recorded in the ledger."""

    ON_ATTEMPT = "on_attempt"
    ON_SUCCESS = "on_success"


class ItemOutcome(str, Enum):
    """Terminal state of one item in a poll cycle."""

    SKIPPED_SEEN = "skipped_seen"
    SKIPPED_PINNED = "skipped_pinned"
    DISPATCHED = "dispatched"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class DispatchResult:
    """What happened to the planned units of one item."""

    total: int
    sent: int = 0
    error: str = ""
    partial_unit: bool = False
    fallback_sent: bool = False

    @property
    def ok(self) -> bool:
        return self.sent == self.total and not self.error


@dataclass
class PollSummary:
    """Outcome counts for one poll cycle."""

    fetched: int = 0
    outcomes: dict[ItemOutcome, int] = field(default_factory=dict)

    def record(self, outcome: ItemOutcome) -> None:
        self.outcomes[outcome] = self.outcomes.get(outcome, 0) + 1

    def count(self, outcome: ItemOutcome) -> int:
        return self.outcomes.get(outcome, 0)


class RelayService:
    """Relay new feed items to the channel, one at a time, oldest first."""

    def __init__(
        self,
        feed: FeedClient,
        channel: ChannelClient,
        ledger: ProcessedLedger,
        mark_policy: MarkPolicy = MarkPolicy.ON_ATTEMPT,
        posts_per_poll: int = 20,
        match_threshold: float = fuzzy.MATCH_THRESHOLD,
    ) -> None:
        self.feed = feed
        self.channel = channel
        self.ledger = ledger
        self.mark_policy = MarkPolicy(mark_policy)
        self.posts_per_poll = posts_per_poll
        self.match_threshold = match_threshold

    async def process_new_posts(self) -> PollSummary:
        """Fetch the latest batch and relay every unseen item.

        Fetch errors propagate to the caller; nothing of the batch is kept.
        """
        LOGGER.info("Checking for new posts...")
        items = await self.feed.fetch_items(self.posts_per_poll, 0)
        summary = PollSummary(fetched=len(items))

        if not items:
            LOGGER.info("No posts found")
            return summary

        LOGGER.info("Found %d posts", len(items))

        # Feed returns newest first; the channel must see posts chronologically
        for item in reversed(items):
            summary.record(await self.process_post(item))

        LOGGER.info(
            "Finished processing posts: %d dispatched, %d partial, %d failed",
            summary.count(ItemOutcome.DISPATCHED),
            summary.count(ItemOutcome.PARTIAL),
            summary.count(ItemOutcome.FAILED),
        )
        return summary

    async def process_post(self, item: SourceItem) -> ItemOutcome:
        """Run one item through dedup, transformation and dispatch.

        Errors are contained here so the rest of the batch keeps going.
        """
        key = item.key

        if self.ledger.is_processed(key):
            LOGGER.debug("Post %s already processed, skipping", key)
            return ItemOutcome.SKIPPED_SEEN

        if item.pinned:
            LOGGER.info("Skipping pinned post %s", key)
            self.ledger.mark_processed(key)
            return ItemOutcome.SKIPPED_PINNED

        LOGGER.info("Processing post %s", key)

        try:
            text, attachments = await self.transform(item)
            result = await self.dispatch(text, attachments)
        except Exception:
            LOGGER.exception("Error processing post %s", key)
            outcome = ItemOutcome.FAILED
        else:
            if result.ok:
                outcome = ItemOutcome.DISPATCHED
            elif result.sent or result.partial_unit or result.fallback_sent:
                outcome = ItemOutcome.PARTIAL
            else:
                outcome = ItemOutcome.FAILED

        if outcome == ItemOutcome.DISPATCHED or self.mark_policy == MarkPolicy.ON_ATTEMPT:
            self.ledger.mark_processed(key)

        if outcome == ItemOutcome.DISPATCHED:
            LOGGER.info("Successfully processed post %s", key)
        else:
            LOGGER.warning("Post %s finished as %s", key, outcome.value)
        return outcome

    async def transform(self, item: SourceItem) -> tuple[str, ExtractedAttachments]:
        """Build the outgoing text and the resolved attachment lists."""
        attachments = extract_attachments(item.attachments)

        if not item.text.strip() and attachments.is_empty:
            LOGGER.warning("Post %s has neither text nor attachments", item.key)

        audios = await self.resolve_audio(attachments.audios)
        attachments = replace(attachments, audios=tuple(audios))

        text = compose_text(item)
        text = append_links(text, attachments.links + attachments.videos)
        text = append_audio_lines(text, [a for a in audios if not a.is_resolved])
        return text, attachments

    async def resolve_audio(self, refs: tuple[AudioRef, ...]) -> list[AudioRef]:
        """Try to find a URL for every audio that came without one.

        Refs that cannot be resolved are kept as they are.
        """
        resolved = []
        for ref in refs:
            if ref.is_resolved or not ref.can_resolve:
                resolved.append(ref)
                continue

            query = f"{ref.artist} - {ref.title}"
            try:
                candidates = await self.feed.lookup_candidates(query)
            except BridgeError as e:
                LOGGER.warning("Audio lookup failed for '%s': %s", query, e)
                resolved.append(ref)
                continue

            best = fuzzy.match(candidates, ref.artist, ref.title, self.match_threshold)
            if best and best.url:
                LOGGER.info("Resolved audio '%s' (score %.2f)", query, best.score)
                resolved.append(replace(ref, url=best.url))
            else:
                LOGGER.info("No matching audio track found for: %s", query)
                resolved.append(ref)
        return resolved

    async def dispatch(self, text: str, attachments: ExtractedAttachments) -> DispatchResult:
        """Send planned units in order; stop at the first failure.

        If the failed unit was the one carrying the text and none of it was
        delivered, the text is sent once more on its own with an error marker.
        """
        units = plan_units(text, attachments)
        result = DispatchResult(total=len(units))

        for unit in units:
            try:
                await self._send_unit(unit)
            except PartialDeliveryError as e:
                LOGGER.error("Partially sent %s: %s", unit.kind.value, e)
                result.error = str(e)
                result.partial_unit = True
                break
            except BridgeError as e:
                LOGGER.error("Failed to send %s: %s", unit.kind.value, e)
                result.error = str(e)
                break
            result.sent += 1

        if result.error and result.sent == 0 and not result.partial_unit and text:
            try:
                await self.channel.send_text(with_error_marker(text))
                result.fallback_sent = True
            except BridgeError as e:
                LOGGER.error("Fallback text message failed, giving up: %s", e)

        return result

    async def _send_unit(self, unit: OutboundUnit) -> None:
        if unit.kind == UnitKind.TEXT:
            await self.channel.send_text(unit.caption)
        elif unit.kind == UnitKind.PHOTO:
            await self.channel.send_photo(unit.url, unit.caption)
        elif unit.kind == UnitKind.ALBUM:
            await self.channel.send_album(list(unit.urls), unit.caption)
        elif unit.kind == UnitKind.ANIMATION:
            await self.channel.send_animation(unit.url, unit.caption)
        elif unit.kind == UnitKind.AUDIO:
            await self.channel.send_audio(
                unit.url, unit.caption, unit.title, unit.performer, duration=unit.duration
            )
        elif unit.kind == UnitKind.DOCUMENT:
            await self.channel.send_document(unit.url, unit.caption)
        else:
            raise ValueError(f"Unsupported unit kind: {unit.kind}")
