"""Tests for attachment extraction."""

import pytest

from vk_relay.core import (
    AudioAttachment,
    AudioRef,
    DocumentAttachment,
    DocumentRef,
    LinkAttachment,
    PhotoAttachment,
    PhotoSize,
    VideoAttachment,
)
from vk_relay.core.extractor import (
    extract_animations,
    extract_attachments,
    extract_audios,
    extract_documents,
    extract_links,
    extract_photos,
    extract_videos,
    is_animation,
)
from vk_relay.errors import MalformedAttachmentError


def _photo(*sizes: tuple[str, int, int]) -> PhotoAttachment:
    return PhotoAttachment(sizes=tuple(PhotoSize(url=u, width=w, height=h) for u, w, h in sizes))


@pytest.fixture
def mixed_attachments():
    """Attachment list covering every kind."""
    return (
        _photo(("small", 100, 100), ("large", 800, 600), ("medium", 400, 300)),
        DocumentAttachment(url="gif1", title="funny", ext="gif"),
        AudioAttachment(artist="A", title="B"),
        LinkAttachment(url="https://example.com"),
        DocumentAttachment(url="pdf1", title="report.pdf", ext="pdf", doc_type=1),
        VideoAttachment(owner_id=-5, id=7),
        DocumentAttachment(url="gif2", title="anim.GIF", ext="bin"),
        DocumentAttachment(url="gif3", title="clip", ext="", doc_type=3),
    )


def test_empty_attachments() -> None:
    """Test that no attachments give empty lists."""
    extracted = extract_attachments(())
    
    assert extracted.photos == ()
    assert extracted.animations == ()
    assert extracted.audios == ()
    assert extracted.links == ()
    assert extracted.documents == ()
    assert extracted.videos == ()


def test_extract_photos_picks_largest() -> None:
    attachments = [
        _photo(("a-small", 10, 10), ("a-big", 100, 100)),
        _photo(("b-only", 50, 50)),
    ]
    
    assert extract_photos(attachments) == ["a-big", "b-only"]


def test_extract_photos_tie_keeps_first_rendition() -> None:
    attachments = [_photo(("first", 100, 50), ("second", 50, 100))]
    
    assert extract_photos(attachments) == ["first"]


def test_extract_photos_without_sizes_is_malformed() -> None:
    with pytest.raises(MalformedAttachmentError):
        extract_photos([PhotoAttachment(sizes=())])


@pytest.mark.parametrize("doc, expected", [
    (DocumentAttachment(url="u", title="x", ext="gif"), True),
    (DocumentAttachment(url="u", title="x", ext="GIF"), True),
    (DocumentAttachment(url="u", title="x.Gif", ext="bin"), True),
    (DocumentAttachment(url="u", title="x", ext="", doc_type=3), True),
    (DocumentAttachment(url="u", title="x.pdf", ext="pdf", doc_type=1), False),
])
def test_is_animation(doc: DocumentAttachment, expected: bool) -> None:
    assert is_animation(doc) is expected


def test_gif_documents_are_never_generic(mixed_attachments) -> None:
    """Test that GIFs land only in the animation list."""
    animations = extract_animations(mixed_attachments)
    documents = extract_documents(mixed_attachments)
    
    assert animations == ["gif1", "gif2", "gif3"]
    assert documents == [DocumentRef(url="pdf1", title="report.pdf", ext="pdf")]


def test_extract_audios_pass_through(mixed_attachments) -> None:
    assert extract_audios(mixed_attachments) == [AudioRef(url=None, artist="A", title="B")]


def test_extract_links_and_videos(mixed_attachments) -> None:
    assert extract_links(mixed_attachments) == ["https://example.com"]
    assert extract_videos(mixed_attachments) == ["https://vk.com/video-5_7"]


def test_extraction_is_idempotent(mixed_attachments) -> None:
    """Test that running extraction twice yields the same lists."""
    assert extract_attachments(mixed_attachments) == extract_attachments(mixed_attachments)


def test_malformed_field_is_isolated() -> None:
    """A broken photo must not take down the other attachment types."""
    attachments = (
        PhotoAttachment(sizes=()),
        LinkAttachment(url="https://example.com"),
        DocumentAttachment(url="doc", title="a.txt", ext="txt"),
    )
    
    extracted = extract_attachments(attachments)
    
    assert extracted.photos == ()
    assert extracted.links == ("https://example.com",)
    assert extracted.documents == (DocumentRef(url="doc", title="a.txt", ext="txt"),)
