"""Case-insensitive search and match highlighting for list views.

The same predicate drives both the row filter and the highlighted
rendering, so a row is shown in a filtered view exactly when its text
renders with at least one highlighted segment.
"""

import re
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Segment:
    """A run of text, flagged when it matches the search term."""
    text: str
    matched: bool = False


@lru_cache(maxsize=64)
def _compile(term: str) -> re.Pattern:
    # The term is user input; escape it so it is always a literal.
    return re.compile(f"({re.escape(term)})", re.IGNORECASE)


def contains(text: str, term: str) -> bool:
    """Return True if text contains term, ignoring case.

    An empty term matches everything.
    """
    if not term:
        return True
    return _compile(term).search(text) is not None


def highlight(text: str, term: str) -> list[Segment]:
    """Split text into matched and unmatched segments.

    All non-overlapping occurrences of term are marked. Joining the
    segment texts reproduces the input exactly.
    """
    if not term:
        return [Segment(text)]

    parts = _compile(term).split(text)
    # re.split with one capturing group alternates plain, match, plain, ...
    segments = [
        Segment(part, matched=bool(i % 2))
        for i, part in enumerate(parts)
        if part
    ]
    return segments or [Segment(text)]


def row_matches(fields: dict[str, str], search_fields: tuple[str, ...], term: str) -> bool:
    """Return True if any of the searchable fields contains term."""
    if not term:
        return True
    return any(contains(fields.get(name) or "", term) for name in search_fields)


def preview(text: str, term: str, limit: int) -> list[Segment]:
    """Highlight the first limit characters of text, then mark the cut.

    Only the kept prefix is searched; the trailing "..." is never part
    of a match.
    """
    segments = highlight(text[:limit], term)
    if len(text) > limit:
        segments.append(Segment("..."))
    return segments
