"""Pattern construction and compilation

Raw patterns are turned into regular expressions here: fixed-string escaping,
whole-word boundaries, whole-line anchors and case folding. Execution is left
entirely to the re module; this module only decides what gets compiled.

Compilation happens once per run, before any file is opened, so a bad pattern
aborts the run instead of failing separately in every worker.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from scanr.errors import InvalidPatternError

logger = logging.getLogger(__name__)

LEADING_ANCHORS = ('^', '\\A', '\\b')
TRAILING_ANCHORS = ('$', '\\Z', '\\b')


def _is_escaped(text: str, index: int) -> bool:
    """True if the character at index is preceded by an odd run of backslashes."""
    backslashes = 0
    i = index - 1
    while i >= 0 and text[i] == '\\':
        backslashes += 1
        i -= 1
    return backslashes % 2 == 1


def has_leading_anchor(regex: str) -> bool:
    return regex.startswith(LEADING_ANCHORS)


def has_trailing_anchor(regex: str) -> bool:
    """Check for an unescaped $, \\Z or \\b at the very end of a regex."""
    if regex.endswith('$'):
        return not _is_escaped(regex, len(regex) - 1)
    if regex.endswith(('\\Z', '\\b')):
        # the backslash itself must not be escaped
        return not _is_escaped(regex, len(regex) - 2)
    return False


def wrap_whole_word(regex: str) -> str:
    """Wrap a regex in word boundaries, skipping sides that are already anchored."""
    prefix = '' if has_leading_anchor(regex) else '\\b'
    suffix = '' if has_trailing_anchor(regex) else '\\b'
    return f'{prefix}(?:{regex}){suffix}'


def wrap_whole_line(regex: str) -> str:
    return f'^(?:{regex})$'


@dataclass(frozen=True)
class Pattern:
    """A raw pattern string and the flags it is compiled with."""

    raw: str
    ignore_case: bool = False
    whole_word: bool = False
    whole_line: bool = False
    literal: bool = False

    def to_regex(self) -> str:
        regex = re.escape(self.raw) if self.literal else self.raw
        if self.whole_word:
            regex = wrap_whole_word(regex)
        if self.whole_line:
            regex = wrap_whole_line(regex)
        return regex

    @property
    def flags(self) -> int:
        return re.IGNORECASE if self.ignore_case else 0

    def compile(self) -> re.Pattern:
        regex = self.to_regex()
        try:
            return re.compile(regex, self.flags)
        except re.error as e:
            raise InvalidPatternError(self.raw, str(e)) from e


class PatternSet:
    """An ordered, immutable collection of compiled patterns.

    A line matches the set when it matches any member. All members share the
    same flags, taken from the run configuration.
    """

    def __init__(self, patterns: tuple[Pattern, ...], compiled: tuple[re.Pattern, ...]):
        self._patterns = patterns
        self._compiled = compiled

    @classmethod
    def build(
        cls,
        raw_patterns: Iterable[str],
        ignore_case: bool = False,
        whole_word: bool = False,
        whole_line: bool = False,
        literal: bool = False,
    ) -> PatternSet:
        """
        Compile raw pattern strings into a PatternSet.

        Args:
            raw_patterns: Pattern strings in the order given by the user
            ignore_case: Compile with re.IGNORECASE
            whole_word: Require word boundaries around each match
            whole_line: Require each match to span the whole line
            literal: Escape all regex metacharacters first

        Returns:
            The compiled PatternSet

        Raises:
            InvalidPatternError: If the list is empty or any pattern fails to compile
        """
        patterns = tuple(
            Pattern(raw, ignore_case=ignore_case, whole_word=whole_word, whole_line=whole_line, literal=literal)
            for raw in raw_patterns
        )
        if not patterns:
            raise InvalidPatternError('', 'no pattern provided')

        compiled = tuple(p.compile() for p in patterns)

        logger.debug(f'[PATTERNS] Compiled {len(compiled)} pattern(s): {[c.pattern for c in compiled]}')
        return cls(patterns, compiled)

    @classmethod
    def from_config(cls, config) -> PatternSet:
        return cls.build(
            config.patterns,
            ignore_case=config.ignore_case,
            whole_word=config.whole_word,
            whole_line=config.whole_line,
            literal=config.literal,
        )

    @property
    def patterns(self) -> tuple[Pattern, ...]:
        return self._patterns

    @property
    def compiled(self) -> tuple[re.Pattern, ...]:
        return self._compiled

    @property
    def literal_fast_path(self) -> bool:
        """Fixed, case-sensitive strings can be located with str.find instead of re."""
        first = self._patterns[0]
        return first.literal and not first.ignore_case

    @property
    def whole_word(self) -> bool:
        return self._patterns[0].whole_word

    @property
    def whole_line(self) -> bool:
        return self._patterns[0].whole_line

    def __len__(self) -> int:
        return len(self._patterns)

    def __iter__(self) -> Iterator[tuple[Pattern, re.Pattern]]:
        return iter(zip(self._patterns, self._compiled))
