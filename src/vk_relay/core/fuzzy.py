"""Fuzzy matching of audio search results against an artist/title pair.

Posts often carry audio attachments whose direct URL is withheld by the feed.
The only way to recover them is to search by "artist - title" and pick the
result that looks close enough. Scoring:

- both strings are normalized (lowercase, punctuation dropped, whitespace
  collapsed);
- per-field similarity is 1 for equal strings, ``len(shorter)/len(longer)`` when
  one contains the other, and ``1 - distance/max_len`` (Levenshtein) otherwise;
- the composite score weighs artist 0.6 and title 0.4.

A candidate is accepted only when its composite score reaches the threshold.
"""

import re
from typing import Optional, Protocol, Sequence

from rapidfuzz.distance import Levenshtein

from vk_relay.core.entities import MatchCandidate

ARTIST_WEIGHT = 0.6
TITLE_WEIGHT = 0.4
MATCH_THRESHOLD = 0.7

# Letters and digits of any script survive; underscore is a \w char but not a letter.
_PUNCTUATION = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")


class Track(Protocol):
    artist: Optional[str]
    title: Optional[str]
    url: Optional[str]


def normalize(value: Optional[str]) -> str:
    """Normalize a string for comparison."""
    if not value:
        return ""
    value = _PUNCTUATION.sub("", value.lower())
    return _WHITESPACE.sub(" ", value).strip()


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit costs for insertion, deletion and substitution."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """Similarity of two already normalized strings, in [0, 1]."""
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    if a in b or b in a:
        shorter, longer = sorted((len(a), len(b)))
        return shorter / longer

    return 1 - levenshtein(a, b) / max(len(a), len(b))


def score_candidate(candidate: Track, target_artist: str, target_title: str) -> float:
    """Composite score of one candidate against normalized targets."""
    artist_score = similarity(target_artist, normalize(candidate.artist))
    title_score = similarity(target_title, normalize(candidate.title))
    return ARTIST_WEIGHT * artist_score + TITLE_WEIGHT * title_score


def match(
    candidates: Sequence[Track],
    target_artist: Optional[str],
    target_title: Optional[str],
    threshold: float = MATCH_THRESHOLD,
) -> Optional[MatchCandidate]:
    """Return the best scoring candidate, or None if nothing reaches ``threshold``.

    Among equal top scores the first candidate in input order wins.
    """
    if not candidates:
        return None

    artist = normalize(target_artist)
    title = normalize(target_title)

    scored = [
        (score_candidate(candidate, artist, title), candidate)
        for candidate in candidates
    ]
    # sorted() is stable with reverse=True, so ties keep input order
    scored.sort(key=lambda pair: pair[0], reverse=True)

    best_score, best = scored[0]
    if best_score < threshold:
        return None

    return MatchCandidate(
        artist=best.artist or "",
        title=best.title or "",
        url=best.url,
        score=best_score,
    )
