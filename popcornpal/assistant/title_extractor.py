"""
Mine an AI free-text answer for movie/show titles.

Matchers run in priority order (emphasis, quotes, year annotations) and the
first one that yields anything wins; results are never merged across matchers.
This is a best-effort heuristic, not a title parser.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

MAX_TITLES = 5
MAX_RAW_LENGTH = 100
MIN_TITLE_LENGTH = 3
MAX_YEAR_PHRASE_LENGTH = 40

_EMPHASIS_RE = re.compile(r"\*\*(.+?)\*\*", re.DOTALL)
_QUOTED_RE = re.compile(r'"([^"\n]+)"|“([^”\n]+)”|(?<!\w)\'([^\'\n]+)\'(?!\w)')

_TITLE_WORD = r"[A-Z0-9][\w'’:&.,!?-]*"
_CONNECTOR = r"(?:of|the|a|an|and|in|on|to|for|with|at|from|vs\.?)"
_YEAR_RE = re.compile(
    rf"(?<![\w'])({_TITLE_WORD}(?:\s+(?:{_TITLE_WORD}|{_CONNECTOR}))*?)\s*(?:\((\d{{4}})\)|\bfrom\s+(\d{{4}})\b)"
)

_LEADING_ARTICLE_RE = re.compile(r"^(?:the|a|an)\s+", re.IGNORECASE)
_TRAILING_KIND_RE = re.compile(r"\s+(?:movie|film)$", re.IGNORECASE)

_BARE_WORDS = {
    "a", "an", "the", "of", "in", "on", "at", "to", "for", "with", "by",
    "from", "into", "about", "and", "or", "but", "as", "if",
}

Matcher = Callable[[str], list[str]]


def normalize_title(raw: str) -> str:
    title = raw.strip()
    title = _LEADING_ARTICLE_RE.sub("", title)
    title = _TRAILING_KIND_RE.sub("", title)
    return title.strip()


def _keep(raw: str, normalized: str) -> bool:
    return len(normalized) >= MIN_TITLE_LENGTH and len(raw) < MAX_RAW_LENGTH


def match_emphasis(text: str) -> list[str]:
    titles: list[str] = []
    for match in _EMPHASIS_RE.finditer(text):
        raw = match.group(1)
        normalized = normalize_title(raw)
        if _keep(raw, normalized):
            titles.append(normalized)
    return titles


def _acceptable_quote(raw: str) -> bool:
    candidate = raw.strip()
    if not candidate or not candidate[0].isupper():
        return False
    if candidate.lower() in _BARE_WORDS:
        return False
    if not (MIN_TITLE_LENGTH - 1 < len(candidate) < MAX_RAW_LENGTH):
        return False
    lowered = candidate.lower()
    return "http" not in lowered and "@" not in candidate


def match_quoted(text: str) -> list[str]:
    titles: list[str] = []
    for match in _QUOTED_RE.finditer(text):
        raw = next(group for group in match.groups() if group is not None)
        if not _acceptable_quote(raw):
            continue
        normalized = normalize_title(raw)
        if _keep(raw, normalized):
            titles.append(normalized)
    return titles


def match_year_annotated(text: str) -> list[str]:
    titles: list[str] = []
    for match in _YEAR_RE.finditer(text):
        raw = match.group(1)
        if not (2 <= len(raw) <= MAX_YEAR_PHRASE_LENGTH):
            continue
        normalized = normalize_title(raw)
        if _keep(raw, normalized):
            titles.append(normalized)
    return titles


MATCHERS: tuple[tuple[str, Matcher], ...] = (
    ("emphasis", match_emphasis),
    ("quoted", match_quoted),
    ("year", match_year_annotated),
)


def _dedupe(titles: Iterable[str], limit: int) -> tuple[str, ...]:
    seen: set[str] = set()
    unique: list[str] = []
    for title in titles:
        if title in seen:
            continue
        seen.add(title)
        unique.append(title)
        if len(unique) >= limit:
            break
    return tuple(unique)


@dataclass(frozen=True)
class ExtractionResult:
    titles: tuple[str, ...] = ()
    strategy: Optional[str] = None

    def __bool__(self) -> bool:
        return bool(self.titles)


def extract_titles(
    text: str,
    matchers: tuple[tuple[str, Matcher], ...] = MATCHERS,
    limit: int = MAX_TITLES,
) -> ExtractionResult:
    if not text:
        return ExtractionResult()
    for name, matcher in matchers:
        titles = _dedupe(matcher(text), limit)
        if titles:
            return ExtractionResult(titles=titles, strategy=name)
    return ExtractionResult()
