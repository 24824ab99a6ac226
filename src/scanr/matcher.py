"""Line matching against a PatternSet

Produces match truth and match spans for a single line. Inversion is never
applied here: callers combine the result with the invert option themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from scanr.patterns import PatternSet


class MatchMode(Enum):
    """How much work evaluate() does for a line"""

    FIRST_MATCH = 'first_match'  # stop at the first pattern that matches
    LOCATE_ALL = 'locate_all'  # every non-overlapping match of every pattern


@dataclass(frozen=True)
class MatchSpan:
    """A located match: character offset into the line and its length."""

    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass(frozen=True)
class MatchResult:
    is_match: bool
    spans: tuple[MatchSpan, ...] = ()


NO_MATCH = MatchResult(False)


@dataclass
class LineRecord:
    """One input line with its match outcome.

    Attributes:
        line_number: 1-based position in the source stream
        text: Line content without its terminator
        matched: Literal match truth (before any inversion)
        spans: Ordered, merged match spans (empty in first-match mode or on no match)
    """

    line_number: int
    text: str
    matched: bool
    spans: tuple[MatchSpan, ...] = field(default_factory=tuple)


def is_word_char(ch: str) -> bool:
    # same class as re's \w for str patterns
    return ch.isalnum() or ch == '_'


def is_word_boundary(text: str, index: int) -> bool:
    """Reproduce re's \\b at index: a word/non-word transition, with the outside of the string as non-word."""
    before = index > 0 and is_word_char(text[index - 1])
    after = index < len(text) and is_word_char(text[index])
    return before != after


def merge_spans(spans: list[MatchSpan]) -> tuple[MatchSpan, ...]:
    """Sort spans by start and merge the ones that overlap.

    Touching spans stay separate so that two back-to-back matches are still
    reported as two matches.
    """
    if not spans:
        return ()

    ordered = sorted(spans, key=lambda s: (s.start, s.end))
    merged = [ordered[0]]
    for span in ordered[1:]:
        last = merged[-1]
        if span.start < last.end:
            if span.end > last.end:
                merged[-1] = MatchSpan(last.start, span.end - last.start)
        else:
            merged.append(span)
    return tuple(merged)


def find_literal(line: str, needle: str, whole_word: bool, whole_line: bool, first_only: bool) -> list[MatchSpan]:
    """
    Locate a fixed string without going through re.

    Args:
        line: Text to search
        needle: Fixed string to look for
        whole_word: Only accept occurrences with a word boundary on both sides
        whole_line: Only accept the line being exactly the needle
        first_only: Stop after the first accepted occurrence

    Returns:
        Accepted occurrences in order, non-overlapping
    """
    if whole_line:
        if line != needle:
            return []
        if whole_word and not (is_word_boundary(line, 0) and is_word_boundary(line, len(line))):
            return []
        return [MatchSpan(0, len(needle))]

    spans = []
    start = 0
    while start <= len(line):
        idx = line.find(needle, start)
        if idx == -1:
            break
        end = idx + len(needle)
        if not whole_word or (is_word_boundary(line, idx) and is_word_boundary(line, end)):
            spans.append(MatchSpan(idx, len(needle)))
            if first_only:
                break
            start = end if needle else idx + 1
        else:
            start = idx + 1
    return spans


def evaluate(line: str, pattern_set: PatternSet, mode: MatchMode) -> MatchResult:
    """
    Match a line against every pattern of a set.

    In LOCATE_ALL mode zero-length matches make the line match but contribute
    no span, and spans coming from different patterns are merged where they
    overlap.

    Args:
        line: Line text without terminator
        pattern_set: Compiled patterns
        mode: FIRST_MATCH or LOCATE_ALL

    Returns:
        MatchResult with match truth and spans
    """
    first_only = mode == MatchMode.FIRST_MATCH

    if pattern_set.literal_fast_path:
        found = []
        matched = False
        for pattern in pattern_set.patterns:
            spans = find_literal(line, pattern.raw, pattern.whole_word, pattern.whole_line, first_only)
            if not spans:
                continue
            if first_only:
                return MatchResult(True, (spans[0],))
            matched = True
            found.extend(s for s in spans if s.length > 0)
        if not matched:
            return NO_MATCH
        return MatchResult(True, merge_spans(found))

    if first_only:
        for regex in pattern_set.compiled:
            m = regex.search(line)
            if m is not None:
                return MatchResult(True, (MatchSpan(m.start(), m.end() - m.start()),))
        return NO_MATCH

    found = []
    matched = False
    for regex in pattern_set.compiled:
        for m in regex.finditer(line):
            matched = True
            if m.end() > m.start():
                found.append(MatchSpan(m.start(), m.end() - m.start()))
    if not matched:
        return NO_MATCH
    return MatchResult(True, merge_spans(found))


class LineMatcher:
    """Worker-local matcher bound to one PatternSet and mode."""

    def __init__(self, pattern_set: PatternSet, mode: MatchMode = MatchMode.FIRST_MATCH):
        self.pattern_set = pattern_set
        self.mode = mode

    def evaluate(self, line: str) -> MatchResult:
        return evaluate(line, self.pattern_set, self.mode)

    def record(self, line_number: int, text: str) -> LineRecord:
        result = self.evaluate(text)
        spans = result.spans if self.mode == MatchMode.LOCATE_ALL else ()
        return LineRecord(line_number=line_number, text=text, matched=result.is_match, spans=spans)
