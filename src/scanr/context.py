"""Context-window sequencing for one input stream

A ContextSequencer consumes LineRecords in order and decides what gets
printed: selected lines, leading context kept in a sliding window, trailing
context driven by a countdown, and ``--`` separators between discontiguous
blocks. One instance is created per stream and never shared between threads.

Emission invariant: line numbers reach the sink in strictly increasing order
and a separator is written exactly when the next emitted line number is more
than one past the previous one (only when context is enabled, and never
before the first emitted line).
"""

import logging
from collections import deque

from scanr.matcher import LineRecord
from scanr.models import OutputMode
from scanr.output import LineFormatter, OutputSink
from scanr.utils import max_block_lines

logger = logging.getLogger(__name__)


class ContextSequencer:
    """
    Stateful output sequencer for one stream.

    Args:
        formatter: Formats records for this stream's label
        sink: Shared serialized output
        mode: What to report for eligible lines
        invert: Eligible lines are the non-matching ones
        before_context: Leading context window size
        after_context: Trailing context line count
        only_matching: Emit one record per span instead of the whole line
        block_limit: Pending lines after which an unfinished block is flushed
    """

    def __init__(
        self,
        formatter: LineFormatter,
        sink: OutputSink,
        mode: OutputMode = OutputMode.FULL,
        invert: bool = False,
        before_context: int = 0,
        after_context: int = 0,
        only_matching: bool = False,
        block_limit: int | None = None,
    ):
        self.formatter = formatter
        self.sink = sink
        self.mode = mode
        self.invert = invert
        self.before_context = before_context
        self.after_context = after_context
        self.only_matching = only_matching
        self.block_limit = block_limit if block_limit is not None else max_block_lines()

        self.context_enabled = before_context > 0 or after_context > 0
        self.before_buffer: deque[tuple[int, str]] = deque(maxlen=before_context)
        self.trailing = 0
        self.last_emitted: int | None = None
        self.match_count = 0
        self.filename_emitted = False
        self.finished = False
        self._pending: list[str] = []

    def feed(self, record: LineRecord) -> None:
        """Consume the next line of the stream."""
        eligible = record.matched != self.invert

        if eligible:
            self.match_count += 1
            if self.mode == OutputMode.FULL:
                self._emit_selected(record)
            elif self.mode == OutputMode.FILES_WITH_MATCHES:
                if not self.filename_emitted:
                    self.filename_emitted = True
                    self.sink.write_block([self.formatter.filename()])
        elif self.trailing > 0 and self.mode == OutputMode.FULL:
            if record.line_number > (self.last_emitted or 0):
                self._emit(record.line_number, [self.formatter.context_line(record.line_number, record.text)])
            self.trailing -= 1
            if self.trailing == 0:
                self._flush()

        if self.before_context > 0:
            self.before_buffer.append((record.line_number, record.text))

    def _emit_selected(self, record: LineRecord) -> None:
        # spans are meaningless on an inverted selection
        spans = () if self.invert else record.spans

        for line_number, text in self.before_buffer:
            if self.last_emitted is None or line_number > self.last_emitted:
                self._emit(line_number, [self.formatter.context_line(line_number, text)])
        self.before_buffer.clear()

        if self.last_emitted is None or record.line_number > self.last_emitted:
            if self.only_matching:
                lines = [self.formatter.match_part(record.line_number, record.text, span) for span in spans]
            else:
                lines = [self.formatter.match_line(record.line_number, record.text, spans)]
            self._emit(record.line_number, lines)

        self.trailing = self.after_context
        if self.trailing == 0 or len(self._pending) >= self.block_limit:
            self._flush()

    def _emit(self, line_number: int, lines: list[str]) -> None:
        """The only place output lines are queued; applies the separator rule."""
        if not lines:
            # an only-matching line without spans prints nothing
            return
        if self.context_enabled and self.last_emitted is not None and line_number > self.last_emitted + 1:
            self._flush()
            self._pending.append(self.formatter.separator())
        self._pending.extend(lines)
        self.last_emitted = line_number

    def _flush(self) -> None:
        if self._pending:
            self.sink.write_block(self._pending)
            self._pending = []

    def finish(self) -> int:
        """Close the stream; returns the number of eligible lines seen."""
        if self.finished:
            return self.match_count
        self.finished = True

        self._flush()
        if self.mode == OutputMode.COUNT:
            self.sink.write_block([self.formatter.count(self.match_count)])

        logger.debug(f'[SEQUENCER] {self.formatter.label}: {self.match_count} eligible line(s)')
        return self.match_count
