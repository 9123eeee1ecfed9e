"""Planning of the messages sent to the channel for one item."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from vk_relay.core.entities import ExtractedAttachments
from vk_relay.core.formatting import document_caption


class UnitKind(str, Enum):
    """Kind of a single send operation."""

    TEXT = "text"
    PHOTO = "photo"
    ALBUM = "album"
    ANIMATION = "animation"
    AUDIO = "audio"
    DOCUMENT = "document"


@dataclass(frozen=True)
class OutboundUnit:
    """One send operation. Carries at most one caption."""

    kind: UnitKind
    urls: tuple[str, ...] = ()
    caption: str = ""
    title: Optional[str] = None
    performer: Optional[str] = None
    duration: Optional[int] = None

    @property
    def url(self) -> str:
        return self.urls[0] if self.urls else ""


def plan_units(text: str, attachments: ExtractedAttachments) -> list[OutboundUnit]:
    """Build the ordered list of send operations for one item.

    Order is fixed: photos (one photo or one album), animations, audios that
    have a URL, documents. The text is the caption of the first unit only;
    documents without text fall back to their own title. An item without any
    sendable media becomes a single text message.
    """
    units: list[OutboundUnit] = []

    if len(attachments.photos) == 1:
        units.append(OutboundUnit(UnitKind.PHOTO, urls=attachments.photos))
    elif attachments.photos:
        units.append(OutboundUnit(UnitKind.ALBUM, urls=attachments.photos))

    for url in attachments.animations:
        units.append(OutboundUnit(UnitKind.ANIMATION, urls=(url,)))

    for audio in attachments.audios:
        if audio.is_resolved:
            units.append(
                OutboundUnit(
                    UnitKind.AUDIO,
                    urls=(audio.url,),
                    title=audio.title,
                    performer=audio.artist,
                    duration=audio.duration,
                )
            )

    for doc in attachments.documents:
        units.append(
            OutboundUnit(UnitKind.DOCUMENT, urls=(doc.url,), caption=document_caption(doc))
        )

    if not units:
        return [OutboundUnit(UnitKind.TEXT, caption=text)]

    # Text is consumed by the first unit; a document keeps its title only if there is no text
    first = units[0]
    if text or first.kind != UnitKind.DOCUMENT:
        units[0] = replace(first, caption=text)
    return units
