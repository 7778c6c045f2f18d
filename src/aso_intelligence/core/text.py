"""Keyword/title text helpers: match classification, keyword extraction, dates."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from .models import MatchType

_TOKEN_RE = re.compile(r"[^\W\d_]+(?:'[^\W\d_]+)?")


def match_type(keyword: str, title: str) -> MatchType:
    """Classify how ``keyword`` appears in ``title``.

    The full phrase as a substring is an exact match. Otherwise each
    whitespace-separated word is looked up on its own: all present is broad,
    some present is partial.
    """
    keyword = keyword.lower()
    title = title.lower()

    if keyword in title:
        return MatchType.EXACT

    matches = [word in title for word in keyword.split()]
    if matches and all(matches):
        return MatchType.BROAD
    if any(matches):
        return MatchType.PARTIAL
    return MatchType.NONE


def extract_keywords(text: str) -> list[str]:
    """Extract candidate keywords from free text.

    Lower-cases, drops digits and English stop words, and de-duplicates
    while keeping first-occurrence order.
    """
    seen: set[str] = set()
    keywords = []
    for token in _TOKEN_RE.findall(text.lower()):
        if token in ENGLISH_STOP_WORDS or token in seen:
            continue
        seen.add(token)
        keywords.append(token)
    return keywords


def days_since(moment: datetime) -> int:
    """Whole days elapsed between ``moment`` and now. Naive datetimes are UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    delta = datetime.now(timezone.utc) - moment
    return delta.days
