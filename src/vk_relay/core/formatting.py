"""Text composition for channel messages.

Messages are sent with Telegram's HTML parse mode, so every piece of text that
comes from the feed is escaped before it is combined with markup.
"""

from html import escape
from typing import Iterable

from vk_relay.core.entities import AudioRef, DocumentRef, SourceItem

SOURCE_LINK_LABEL = "Оригинальный пост"
LINKS_HEADER = "Ссылки:"
DOCUMENT_CAPTION_PREFIX = "Документ:"
ERROR_MARKER = "⚠️ Не удалось отправить вложения поста."


def _link(url: str, label: str) -> str:
    return f'<a href="{escape(url)}">{escape(label, quote=False)}</a>'


def compose_text(item: SourceItem) -> str:
    """Item text followed by a link back to the original post."""
    source_link = _link(item.url, SOURCE_LINK_LABEL)
    text = escape(item.text or "", quote=False).strip()
    if not text:
        return source_link
    return f"{text}\n\n{source_link}"


def append_links(text: str, urls: Iterable[str]) -> str:
    """Append a block listing external links."""
    lines = [_link(url, url) for url in urls]
    if not lines:
        return text
    return f"{text}\n\n{LINKS_HEADER}\n" + "\n".join(lines)


def append_audio_lines(text: str, refs: Iterable[AudioRef]) -> str:
    """Append one ``♪ artist - title`` line per audio that could not be sent as a file."""
    lines = [escape(ref.display_line, quote=False) for ref in refs if ref.display_line]
    if not lines:
        return text
    return f"{text}\n\n" + "\n".join(lines)


def document_caption(doc: DocumentRef) -> str:
    return escape(f"{DOCUMENT_CAPTION_PREFIX} {doc.title}", quote=False)


def with_error_marker(text: str) -> str:
    return f"{ERROR_MARKER}\n\n{text}" if text else ERROR_MARKER
