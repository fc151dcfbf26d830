# series_api/identifiers.py
from __future__ import annotations

import hashlib
import re

from series_api.models import NormalizedRef


class InvalidReference(Exception):
    """Raised when a series reference is empty or unusable."""
    pass


_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RUN = re.compile(r"\s+")
_HYPHEN_RUN = re.compile(r"-+")
_DECIMAL = re.compile(r"[0-9]+")


def slugify(text: str) -> str:
    """
    Canonical URL-safe slug:
      "Indian Premier League 2025" -> "indian-premier-league-2025"
      "ICC Men's T20 World Cup"    -> "icc-mens-t20-world-cup"

    Idempotent: slugify(slugify(x)) == slugify(x).
    """
    s = str(text or "").lower()
    s = _NON_SLUG_CHARS.sub("", s)
    s = _WHITESPACE_RUN.sub("-", s)
    s = _HYPHEN_RUN.sub("-", s)
    return s.strip("-")


def is_uuid_shaped(value: str) -> bool:
    # Format only: no version/variant validation
    if len(value) != 36:
        return False
    groups = value.split("-")
    return len(groups) == 5 and all(groups)


def is_legacy_id(value: str) -> bool:
    return bool(_DECIMAL.fullmatch(value))


def normalize(reference: str) -> NormalizedRef:
    """
    Classify a raw series reference as uuid / legacy_id / slug and derive
    its canonical slug (the session-cache key).

    Classification looks at the reference exactly as given: " 12 " is a
    slug, not a legacy id. Only the empty string is rejected.
    """
    raw = "" if reference is None else str(reference)
    if raw == "":
        raise InvalidReference("Series reference must be a non-empty string")

    if is_uuid_shaped(raw):
        kind = "uuid"
    elif is_legacy_id(raw):
        kind = "legacy_id"
    else:
        kind = "slug"

    slug = slugify(raw)
    if not slug:
        # e.g. "!!!" or "   " - keep resolution total with a stable key derived from the input
        slug = "series-" + hashlib.sha1(raw.encode("utf-8")).hexdigest()[:8]

    return NormalizedRef(raw=raw, kind=kind, slug=slug)
