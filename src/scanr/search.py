"""Search orchestration: compile, collect, scan in parallel, summarize

The public entry point is run_search(). Pattern compilation happens first and
is the only step that can abort a run before scanning; per-file problems are
reported on the diagnostic channel and the run continues.
"""

import logging
import threading
import time
from contextlib import nullcontext
from functools import partial

import click

from scanr.context import ContextSequencer
from scanr.errors import FileOpenError, NoInputFilesError, ScanrError
from scanr.file_utils import WorkItem, collect_work_items
from scanr.matcher import LineMatcher, MatchMode
from scanr.models import RunSummary, SearchConfig
from scanr.output import LineFormatter, OutputSink
from scanr.patterns import PatternSet
from scanr.scheduler import ResultAggregator, WorkDistributor, WorkQueue
from scanr.utils import strip_line_ending

logger = logging.getLogger(__name__)


def open_stream(item: WorkItem):
    """Open a work item for text reading.

    Stdin is decoded like files (UTF-8, invalid bytes replaced) and wrapped
    so it is never closed.
    """
    if item.is_stdin:
        return nullcontext(click.get_text_stream('stdin', encoding='utf-8', errors='replace'))
    return open(item.path, 'r', encoding='utf-8', errors='replace')


def build_sequencer(item: WorkItem, config: SearchConfig, sink: OutputSink) -> ContextSequencer:
    formatter = LineFormatter(
        item.label,
        with_filename=config.with_filename,
        show_line_numbers=config.show_line_numbers,
        color=config.color,
    )
    return ContextSequencer(
        formatter,
        sink,
        mode=config.output_mode,
        invert=config.invert,
        before_context=config.before_context,
        after_context=config.after_context,
        only_matching=config.only_matching,
    )


def scan_work_item(
    item: WorkItem,
    config: SearchConfig,
    pattern_set: PatternSet,
    sink: OutputSink,
    aggregator: ResultAggregator,
    report_error,
) -> None:
    """
    Scan one stream end-to-end with a private matcher and sequencer.

    A file that cannot be opened is reported and not counted as processed.
    A read failure part-way through keeps whatever was already emitted and
    counted, and is reported as well.
    """
    matcher = LineMatcher(pattern_set, MatchMode.LOCATE_ALL if config.locate_all else MatchMode.FIRST_MATCH)
    sequencer = build_sequencer(item, config, sink)

    try:
        stream = open_stream(item)
    except OSError as e:
        report_error(FileOpenError(item.label, e.strerror or str(e)))
        return

    with stream as handle:
        try:
            for line_number, line in enumerate(handle, start=1):
                sequencer.feed(matcher.record(line_number, strip_line_ending(line)))
        except OSError as e:
            report_error(FileOpenError(item.label, f'read error: {e.strerror or e}'))

    match_count = sequencer.finish()
    aggregator.record_file(match_count)


def run_search(
    config: SearchConfig,
    sink: OutputSink | None = None,
    cancel_event: threading.Event | None = None,
) -> RunSummary:
    """
    Run a complete search as described by config.

    Args:
        config: Validated search configuration
        sink: Output sink; defaults to stdout/stderr with config.color
        cancel_event: Optional flag that stops workers between files

    Returns:
        RunSummary with the aggregate totals

    Raises:
        InvalidPatternError: If any pattern fails to compile (nothing is scanned)
        NoInputFilesError: If no path could be queued
    """
    start_time = time.time()
    pattern_set = PatternSet.from_config(config)

    if sink is None:
        sink = OutputSink(color=config.color)
    aggregator = ResultAggregator()

    def report_error(error: ScanrError) -> None:
        logger.info(f'[SEARCH] {error}')
        aggregator.record_error(error)
        sink.diagnostic(str(error))

    items = collect_work_items(config.paths, config.recursive, report_error)
    if not items:
        raise NoInputFilesError()

    logger.info(
        f'[SEARCH] Scanning {len(items)} item(s) for {len(pattern_set)} pattern(s) '
        f'with up to {config.threads} thread(s)'
    )

    distributor = WorkDistributor(
        WorkQueue(items),
        config.threads,
        partial(
            scan_work_item,
            config=config,
            pattern_set=pattern_set,
            sink=sink,
            aggregator=aggregator,
            report_error=report_error,
        ),
        cancel_event=cancel_event,
    )
    distributor.run()

    summary = aggregator.summary(elapsed=time.time() - start_time)
    if config.show_summary:
        sink.write_block(['', summary.to_cli()])

    logger.info(
        f'[SEARCH] Completed: {summary.total_matches} match(es) in {summary.files_processed} file(s), '
        f'{len(summary.errors)} error(s) in {summary.elapsed:.3f}s'
    )
    return summary
