"""Relevance ranking for try directories.

Text similarity is computed against a directory's bare name (the name with
its ``YYYY-MM-DD-`` prefix removed) and blended with an exponential recency
decay. Everything here is pure: no filesystem access, no clock reads unless
the caller omits ``now``.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from datetime import datetime

from .candidates import Candidate, ScoredCandidate

DEFAULT_HALF_LIFE_DAYS = 30.0
EMPTY_QUERY_TEXT_SCORE = 0.5
TEXT_WEIGHT = 0.7
TIME_WEIGHT = 0.3
TOKEN_SCORE_WEIGHT = 0.7

_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}-(?=.)")
_TOKEN_SEPARATORS_RE = re.compile(r"[-_ .]+")
_SECONDS_PER_DAY = 86_400.0


def bare_name(name: str) -> str:
    """Strip a leading ``YYYY-MM-DD-`` date stamp from a directory name."""
    return _DATE_PREFIX_RE.sub("", name, count=1)


def _split_camel_case(part: str) -> list[str]:
    tokens: list[str] = []
    current: list[str] = []
    prev = ""
    for ch in part:
        if current and ch.isupper() and not prev.isupper():
            tokens.append("".join(current))
            current = []
        current.append(ch)
        prev = ch
    if current:
        tokens.append("".join(current))
    return tokens


def tokenize(text: str) -> list[str]:
    """Split on ``-``, ``_``, space, ``.`` and camelCase humps; lower-cased.

    Call with original-case text: camelCase boundaries are lost once folded.
    """
    tokens: list[str] = []
    for part in _TOKEN_SEPARATORS_RE.split(text):
        if not part:
            continue
        tokens.extend(token.casefold() for token in _split_camel_case(part))
    return tokens


def is_subsequence(query: str, text: str) -> bool:
    """Return whether all characters of ``query`` occur in ``text`` in order."""
    if not query:
        return True
    idx = 0
    for ch in text:
        if ch == query[idx]:
            idx += 1
            if idx == len(query):
                return True
    return False


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance with unit insert/delete/substitute costs."""
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i] + [0] * len(b)
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current[j] = min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost,
            )
        previous = current
    return previous[-1]


def is_exact_match(name: str, query: str) -> bool:
    """Case-insensitive equality against the bare name or the full name.

    Accepting the full name keeps auto-completion (which inserts the full
    dated name) pinned to the directory it completed.
    """
    if not query:
        return False
    folded_query = query.casefold()
    return bare_name(name).casefold() == folded_query or name.casefold() == folded_query


def token_match_ratio(query_tokens: list[str], name_tokens: list[str]) -> float:
    """Fraction of query tokens that prefix at least one name token."""
    if not query_tokens or not name_tokens:
        return 0.0
    matched = sum(
        1 for query_token in query_tokens if any(token.startswith(query_token) for token in name_tokens)
    )
    return matched / len(query_tokens)


def text_score(name: str, query: str) -> float:
    """Score how well ``query`` matches the bare form of ``name``.

    Rules are tried in order and the first one that applies wins: exact,
    prefix, substring, subsequence, multi-token, then an edit-distance
    fallback. An empty query is neutral (0.5).
    """
    if not query:
        return EMPTY_QUERY_TEXT_SCORE

    bare = bare_name(name)
    folded_name = bare.casefold()
    folded_query = query.casefold()
    name_len = len(folded_name)
    query_len = len(folded_query)

    if is_exact_match(name, query):
        return 1.0

    if folded_name.startswith(folded_query):
        return 0.8 + 0.2 * query_len / name_len

    position = folded_name.find(folded_query)
    if position >= 0:
        position_score = 1.0 - position / name_len
        length_score = query_len / name_len
        return 0.5 + 0.3 * position_score + 0.2 * length_score

    if is_subsequence(folded_query, folded_name):
        return 0.3 + 0.4 * (query_len / name_len)

    query_tokens = tokenize(query)
    name_tokens = tokenize(bare)
    if len(query_tokens) > 1 or len(name_tokens) > 1:
        ratio = token_match_ratio(query_tokens, name_tokens)
        if ratio > 0:
            return TOKEN_SCORE_WEIGHT * ratio

    distance = levenshtein(folded_query, folded_name)
    max_len = max(query_len, name_len)
    if max_len and distance <= max_len / 3:
        return 0.2 * (1.0 - distance / max_len)
    return 0.0


def time_score(modified_at: datetime, now: datetime, half_life_days: float = DEFAULT_HALF_LIFE_DAYS) -> float:
    """Exponential recency decay that halves every ``half_life_days``."""
    days_since = (now - modified_at).total_seconds() / _SECONDS_PER_DAY
    score = math.exp(-math.log(2) * days_since / half_life_days)
    return max(0.0, min(1.0, score))


class Scorer:
    """Ranks candidates for a query with a fixed recency half-life."""

    def __init__(self, half_life_days: float = DEFAULT_HALF_LIFE_DAYS) -> None:
        if half_life_days <= 0:
            raise ValueError("half_life_days must be positive")
        self.half_life_days = float(half_life_days)

    def score_candidate(self, candidate: Candidate, query: str, now: datetime) -> ScoredCandidate:
        text = text_score(candidate.name, query)
        recency = time_score(candidate.modified_at, now, self.half_life_days)
        total = TEXT_WEIGHT * text + TIME_WEIGHT * recency if query else recency
        return ScoredCandidate(
            candidate=candidate,
            text_score=text,
            time_score=recency,
            total_score=total,
        )

    def score_all(
        self,
        candidates: Iterable[Candidate],
        query: str,
        now: datetime | None = None,
    ) -> list[ScoredCandidate]:
        """Score candidates in input order, dropping non-matches for a query."""
        now = datetime.now() if now is None else now
        scored: list[ScoredCandidate] = []
        for candidate in candidates:
            result = self.score_candidate(candidate, query, now)
            if query and result.text_score == 0.0:
                continue
            scored.append(result)
        return scored

    def rank(
        self,
        candidates: Iterable[Candidate],
        query: str,
        now: datetime | None = None,
    ) -> list[ScoredCandidate]:
        """Return matches ordered best-first.

        With a query, order by total score and break exact ties by recency.
        Without one, order purely by modification time, newest first.
        """
        scored = self.score_all(candidates, query, now)
        # Both sorts are stable, so the score sort keeps recency order within ties.
        scored.sort(key=lambda item: item.modified_at, reverse=True)
        if query:
            scored.sort(key=lambda item: item.total_score, reverse=True)
        return scored


def score(
    candidates: Iterable[Candidate],
    query: str,
    now: datetime | None = None,
    half_life_days: float = DEFAULT_HALF_LIFE_DAYS,
) -> list[ScoredCandidate]:
    """Rank ``candidates`` for ``query``; see :meth:`Scorer.rank`."""
    return Scorer(half_life_days).rank(candidates, query, now)


def relative_age(modified_at: datetime, now: datetime | None = None) -> str:
    """Human-readable age label such as ``"3 days ago"``."""
    now = datetime.now() if now is None else now
    seconds = (now - modified_at).total_seconds()
    if seconds < 60:
        return "just now"

    for unit, unit_seconds, limit in (
        ("minute", 60, 3_600),
        ("hour", 3_600, 86_400),
        ("day", 86_400, 7 * 86_400),
        ("week", 7 * 86_400, 30 * 86_400),
        ("month", 30 * 86_400, 365 * 86_400),
    ):
        if seconds < limit:
            count = int(seconds // unit_seconds)
            return f"1 {unit} ago" if count == 1 else f"{count} {unit}s ago"

    years = int(seconds // (365 * 86_400))
    return "1 year ago" if years == 1 else f"{years} years ago"


__all__ = [
    "DEFAULT_HALF_LIFE_DAYS",
    "Scorer",
    "bare_name",
    "is_exact_match",
    "is_subsequence",
    "levenshtein",
    "relative_age",
    "score",
    "text_score",
    "time_score",
    "token_match_ratio",
    "tokenize",
]
