"""Core domain layer."""

from vk_relay.core.entities import (
    Attachment,
    AttachmentKind,
    AudioAttachment,
    AudioRef,
    AudioTrack,
    DocumentAttachment,
    DocumentRef,
    ExtractedAttachments,
    LinkAttachment,
    MatchCandidate,
    PhotoAttachment,
    PhotoSize,
    SourceItem,
    VideoAttachment,
)
from vk_relay.core.interfaces import ChannelClient, FeedClient, LedgerStore
from vk_relay.core.ledger import ProcessedLedger

__all__ = [
    "Attachment",
    "AttachmentKind",
    "AudioAttachment",
    "AudioRef",
    "AudioTrack",
    "DocumentAttachment",
    "DocumentRef",
    "ExtractedAttachments",
    "LinkAttachment",
    "MatchCandidate",
    "PhotoAttachment",
    "PhotoSize",
    "SourceItem",
    "VideoAttachment",
    "ChannelClient",
    "FeedClient",
    "LedgerStore",
    "ProcessedLedger",
]
