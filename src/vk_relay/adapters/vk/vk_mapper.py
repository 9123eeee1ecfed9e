"""Map raw VK API objects to core entities.

The VK API returns loosely typed JSON. Everything is validated here, at the
client boundary, so the rest of the code only deals with typed attachments.
Missing nested fields are kept as None; the extractor decides whether that
makes an attachment unusable.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from vk_relay.core.entities import (
    Attachment,
    AttachmentKind,
    AudioAttachment,
    AudioTrack,
    DocumentAttachment,
    LinkAttachment,
    PhotoAttachment,
    PhotoSize,
    SourceItem,
    VideoAttachment,
)
from vk_relay.errors import MalformedItemError

LOGGER = logging.getLogger(__name__)


def _as_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _payload(raw: dict, key: str) -> dict:
    payload = raw.get(key)
    return payload if isinstance(payload, dict) else {}


def parse_photo(photo: dict) -> PhotoAttachment:
    sizes = []
    for size in photo.get("sizes") or []:
        if not isinstance(size, dict):
            continue
        sizes.append(
            PhotoSize(
                url=size.get("url"),
                width=_as_int(size.get("width")) or 0,
                height=_as_int(size.get("height")) or 0,
            )
        )
    return PhotoAttachment(sizes=tuple(sizes))


def parse_attachment(raw: dict) -> Optional[Attachment]:
    """Convert one raw attachment. Unknown types return None."""
    kind = raw.get("type")

    if kind == AttachmentKind.PHOTO.value:
        return parse_photo(_payload(raw, "photo"))

    if kind == AttachmentKind.DOC.value:
        doc = _payload(raw, "doc")
        return DocumentAttachment(
            url=doc.get("url"),
            title=doc.get("title") or "",
            ext=doc.get("ext") or "",
            doc_type=_as_int(doc.get("type")),
        )

    if kind == AttachmentKind.AUDIO.value:
        audio = _payload(raw, "audio")
        return AudioAttachment(
            url=audio.get("url") or None,
            artist=audio.get("artist"),
            title=audio.get("title"),
            duration=_as_int(audio.get("duration")),
        )

    if kind == AttachmentKind.VIDEO.value:
        video = _payload(raw, "video")
        return VideoAttachment(
            owner_id=_as_int(video.get("owner_id")),
            id=_as_int(video.get("id")),
        )

    if kind == AttachmentKind.LINK.value:
        return LinkAttachment(url=_payload(raw, "link").get("url"))

    LOGGER.debug("Ignoring unsupported attachment type: %s", kind)
    return None


def parse_post(raw: dict) -> SourceItem:
    """Convert a ``wall.get`` item into a SourceItem."""
    post_id = _as_int(raw.get("id"))
    owner_id = _as_int(raw.get("owner_id"))
    if not post_id or owner_id is None:
        raise MalformedItemError(f"Post without id/owner_id: {raw.get('id')!r}")

    attachments = []
    for entry in raw.get("attachments") or []:
        if not isinstance(entry, dict):
            continue
        attachment = parse_attachment(entry)
        if attachment is not None:
            attachments.append(attachment)

    timestamp = _as_int(raw.get("date")) or 0

    return SourceItem(
        id=post_id,
        owner_id=owner_id,
        date=datetime.fromtimestamp(timestamp, tz=timezone.utc),
        text=raw.get("text") or "",
        attachments=tuple(attachments),
        pinned=bool(raw.get("is_pinned")),
    )


def parse_track(raw: dict) -> AudioTrack:
    """Convert an audio search result."""
    return AudioTrack(
        artist=raw.get("artist") or "",
        title=raw.get("title") or "",
        url=raw.get("url") or None,
    )
