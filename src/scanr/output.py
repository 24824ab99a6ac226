"""Output formatting and the serialized output sink"""

import threading
from typing import TextIO

import click

from scanr.matcher import MatchSpan

MATCH_DELIMITER = ':'
CONTEXT_DELIMITER = '-'
SEPARATOR = '--'

# click.style keyword arguments per output role
ROLE_STYLES = {
    'path': dict(fg='blue'),
    'line_number': dict(fg='green'),
    'match': dict(fg='bright_red', bold=True),
    'delimiter': dict(fg='bright_black'),
    'separator': dict(fg='cyan'),
}


def decorate(text: str, role: str, colorize: bool) -> str:
    """Apply the terminal style for an output role; identity when color is off."""
    if not colorize or not text:
        return text
    return click.style(text, **ROLE_STYLES[role])


def highlight_spans(text: str, spans: tuple[MatchSpan, ...], colorize: bool) -> str:
    """Highlight sorted, non-overlapping spans within a line."""
    if not colorize or not spans:
        return text

    parts = []
    pos = 0
    for span in spans:
        parts.append(text[pos : span.start])
        parts.append(decorate(text[span.start : span.end], 'match', colorize))
        pos = span.end
    parts.append(text[pos:])
    return ''.join(parts)


class LineFormatter:
    """Formats output records for one stream.

    Record layout is ``[path][:|-][line_number][:|-]content`` where ``:`` marks
    a selected line and ``-`` marks a context line.
    """

    def __init__(self, label: str, with_filename: bool = True, show_line_numbers: bool = False, color: bool = False):
        self.label = label
        self.with_filename = with_filename
        self.show_line_numbers = show_line_numbers
        self.color = color

    def _prefix(self, line_number: int, delimiter: str) -> str:
        parts = []
        styled_delimiter = decorate(delimiter, 'delimiter', self.color)
        if self.with_filename:
            parts.append(decorate(self.label, 'path', self.color) + styled_delimiter)
        if self.show_line_numbers:
            parts.append(decorate(str(line_number), 'line_number', self.color) + styled_delimiter)
        return ''.join(parts)

    def match_line(self, line_number: int, text: str, spans: tuple[MatchSpan, ...] = ()) -> str:
        return self._prefix(line_number, MATCH_DELIMITER) + highlight_spans(text, spans, self.color)

    def match_part(self, line_number: int, text: str, span: MatchSpan) -> str:
        return self._prefix(line_number, MATCH_DELIMITER) + decorate(text[span.start : span.end], 'match', self.color)

    def context_line(self, line_number: int, text: str) -> str:
        return self._prefix(line_number, CONTEXT_DELIMITER) + text

    def separator(self) -> str:
        return decorate(SEPARATOR, 'separator', self.color)

    def count(self, match_count: int) -> str:
        if not self.with_filename:
            return str(match_count)
        return decorate(self.label, 'path', self.color) + decorate(MATCH_DELIMITER, 'delimiter', self.color) + str(match_count)

    def filename(self) -> str:
        return decorate(self.label, 'path', self.color)


class OutputSink:
    """The single serialization point for terminal output.

    Every write_block() call holds the lock for exactly one group of lines, so
    blocks from different workers never interleave. Diagnostics go through
    the same lock.
    """

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None, color: bool = False):
        self.out = out
        self.err = err
        self.color = color
        self._lock = threading.Lock()

    def write_block(self, lines: list[str]) -> None:
        if not lines:
            return
        text = '\n'.join(lines)
        with self._lock:
            click.echo(text, file=self.out, color=self.color)

    def diagnostic(self, message: str) -> None:
        with self._lock:
            click.echo(f'scanr: {message}', file=self.err, err=True, color=False)
