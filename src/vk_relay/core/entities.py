"""Core domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union


VK_BASE_URL = "https://vk.com"


class AttachmentKind(str, Enum):
    """Attachment type tag as reported by the feed."""

    PHOTO = "photo"
    DOC = "doc"
    AUDIO = "audio"
    VIDEO = "video"
    LINK = "link"


@dataclass(frozen=True)
class PhotoSize:
    """One rendition of a photo."""

    url: Optional[str]
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class PhotoAttachment:
    sizes: tuple[PhotoSize, ...] = ()
    kind: AttachmentKind = field(default=AttachmentKind.PHOTO, init=False)


@dataclass(frozen=True)
class DocumentAttachment:
    """Generic document. GIFs arrive through this type as well."""

    url: Optional[str]
    title: str = ""
    ext: str = ""
    doc_type: Optional[int] = None
    kind: AttachmentKind = field(default=AttachmentKind.DOC, init=False)


@dataclass(frozen=True)
class AudioAttachment:
    url: Optional[str] = None
    artist: Optional[str] = None
    title: Optional[str] = None
    duration: Optional[int] = None
    kind: AttachmentKind = field(default=AttachmentKind.AUDIO, init=False)


@dataclass(frozen=True)
class VideoAttachment:
    owner_id: Optional[int]
    id: Optional[int]
    kind: AttachmentKind = field(default=AttachmentKind.VIDEO, init=False)


@dataclass(frozen=True)
class LinkAttachment:
    url: Optional[str]
    kind: AttachmentKind = field(default=AttachmentKind.LINK, init=False)


Attachment = Union[
    PhotoAttachment,
    DocumentAttachment,
    AudioAttachment,
    VideoAttachment,
    LinkAttachment,
]


@dataclass(frozen=True)
class SourceItem:
    """A single wall post as fetched from the feed."""

    id: int
    owner_id: int
    date: datetime
    text: str
    attachments: tuple[Attachment, ...] = ()
    pinned: bool = False

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Item id cannot be empty")

    @property
    def key(self) -> str:
        """Dedup key shared with the ledger."""
        return f"{self.owner_id}_{self.id}"

    @property
    def url(self) -> str:
        return f"{VK_BASE_URL}/wall{self.owner_id}_{self.id}"


@dataclass(frozen=True)
class AudioRef:
    """Audio attachment on its way to the channel, possibly without a URL."""

    url: Optional[str] = None
    artist: Optional[str] = None
    title: Optional[str] = None
    duration: Optional[int] = None

    @property
    def is_resolved(self) -> bool:
        return bool(self.url)

    @property
    def can_resolve(self) -> bool:
        return bool(self.artist and self.title)

    @property
    def display_line(self) -> str:
        """Empty when the audio has neither artist nor title."""
        parts = [part for part in (self.artist, self.title) if part]
        return f"♪ {' - '.join(parts)}" if parts else ""


@dataclass(frozen=True)
class DocumentRef:
    url: str
    title: str
    ext: str


@dataclass(frozen=True)
class AudioTrack:
    """Audio search result returned by the feed lookup."""

    artist: str
    title: str
    url: Optional[str] = None


@dataclass(frozen=True)
class MatchCandidate:
    """Best fuzzy match for an audio reference."""

    artist: str
    title: str
    url: Optional[str]
    score: float


@dataclass(frozen=True)
class ExtractedAttachments:
    """Attachments of one item split into typed lists."""

    photos: tuple[str, ...] = ()
    animations: tuple[str, ...] = ()
    audios: tuple[AudioRef, ...] = ()
    links: tuple[str, ...] = ()
    documents: tuple[DocumentRef, ...] = ()
    videos: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (
            self.photos
            or self.animations
            or self.audios
            or self.links
            or self.documents
            or self.videos
        )
