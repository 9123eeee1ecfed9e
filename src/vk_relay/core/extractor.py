"""Split an item's attachments into typed lists.

Every extractor is a pure, order-preserving filter+map over the attachment
tuple. They are independent of each other: a malformed attachment breaks only
the list it belongs to.
"""

import logging
from typing import Callable, Sequence, TypeVar

from vk_relay.core.entities import (
    VK_BASE_URL,
    Attachment,
    AudioAttachment,
    AudioRef,
    DocumentAttachment,
    DocumentRef,
    ExtractedAttachments,
    LinkAttachment,
    PhotoAttachment,
    VideoAttachment,
)
from vk_relay.errors import MalformedAttachmentError

LOGGER = logging.getLogger(__name__)

# VK marks GIF documents with doc type 3
GIF_DOC_TYPE = 3

T = TypeVar("T")


def is_animation(doc: DocumentAttachment) -> bool:
    """Return True for documents that are really GIF animations."""
    return (
        (doc.ext or "").lower() == "gif"
        or doc.doc_type == GIF_DOC_TYPE
        or (doc.title or "").lower().endswith(".gif")
    )


def extract_photos(attachments: Sequence[Attachment]) -> list[str]:
    """Return the URL of the largest rendition of every photo."""
    urls = []
    for attachment in attachments:
        if not isinstance(attachment, PhotoAttachment):
            continue
        if not attachment.sizes:
            raise MalformedAttachmentError("Photo attachment has no sizes")
        # max() keeps the first of equal areas
        largest = max(attachment.sizes, key=lambda size: size.area)
        if not largest.url:
            raise MalformedAttachmentError("Photo size has no url")
        urls.append(largest.url)
    return urls


def extract_animations(attachments: Sequence[Attachment]) -> list[str]:
    urls = []
    for attachment in attachments:
        if isinstance(attachment, DocumentAttachment) and is_animation(attachment):
            if not attachment.url:
                raise MalformedAttachmentError(f"GIF document '{attachment.title}' has no url")
            urls.append(attachment.url)
    return urls


def extract_audios(attachments: Sequence[Attachment]) -> list[AudioRef]:
    """Pass audio attachments through untouched. Resolution happens later."""
    return [
        AudioRef(
            url=attachment.url or None,
            artist=attachment.artist,
            title=attachment.title,
            duration=attachment.duration,
        )
        for attachment in attachments
        if isinstance(attachment, AudioAttachment)
    ]


def extract_links(attachments: Sequence[Attachment]) -> list[str]:
    urls = []
    for attachment in attachments:
        if not isinstance(attachment, LinkAttachment):
            continue
        if not attachment.url:
            raise MalformedAttachmentError("Link attachment has no url")
        urls.append(attachment.url)
    return urls


def extract_documents(attachments: Sequence[Attachment]) -> list[DocumentRef]:
    """Return every document that is not a GIF."""
    documents = []
    for attachment in attachments:
        if not isinstance(attachment, DocumentAttachment) or is_animation(attachment):
            continue
        if not attachment.url:
            raise MalformedAttachmentError(f"Document '{attachment.title}' has no url")
        documents.append(
            DocumentRef(url=attachment.url, title=attachment.title, ext=attachment.ext)
        )
    return documents


def extract_videos(attachments: Sequence[Attachment]) -> list[str]:
    """Return watch-page links for videos. The channel cannot embed them."""
    urls = []
    for attachment in attachments:
        if not isinstance(attachment, VideoAttachment):
            continue
        if attachment.owner_id is None or attachment.id is None:
            raise MalformedAttachmentError("Video attachment has no owner_id/id")
        urls.append(f"{VK_BASE_URL}/video{attachment.owner_id}_{attachment.id}")
    return urls


def _safe_extract(
    name: str,
    extractor: Callable[[Sequence[Attachment]], list[T]],
    attachments: Sequence[Attachment],
) -> tuple[T, ...]:
    try:
        return tuple(extractor(attachments))
    except MalformedAttachmentError as e:
        LOGGER.warning("Skipping %s attachments: %s", name, e)
        return ()


def extract_attachments(attachments: Sequence[Attachment]) -> ExtractedAttachments:
    """Run every extractor, isolating failures per attachment type."""
    return ExtractedAttachments(
        photos=_safe_extract("photo", extract_photos, attachments),
        animations=_safe_extract("animation", extract_animations, attachments),
        audios=_safe_extract("audio", extract_audios, attachments),
        links=_safe_extract("link", extract_links, attachments),
        documents=_safe_extract("document", extract_documents, attachments),
        videos=_safe_extract("video", extract_videos, attachments),
    )
