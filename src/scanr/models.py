"""Pydantic models for search configuration and run results"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from scanr.utils import default_thread_count


class OutputMode(str, Enum):
    """What a stream reports for its output-eligible lines"""

    FULL = 'full'
    COUNT = 'count'
    FILES_WITH_MATCHES = 'files_with_matches'
    QUIET = 'quiet'


class SearchConfig(BaseModel):
    """Configuration record for a single search run.

    Quiet mode wins over every other reporting mode, as in classic grep:
    when quiet is set, filenames_only, count_only and show_line_numbers
    are forced off.
    """

    ignore_case: bool = Field(default=False, description='Case-insensitive matching')
    invert: bool = Field(default=False, description='Select non-matching lines')
    recursive: bool = Field(default=False, description='Descend into directories')
    show_line_numbers: bool = Field(default=False, description='Prefix output with line numbers')
    filenames_only: bool = Field(default=False, description='Print only names of files with matches')
    count_only: bool = Field(default=False, description='Print only per-file counts')
    quiet: bool = Field(default=False, description='Suppress all normal output')
    color: bool = Field(default=False, description='Highlight matches with ANSI colors')
    whole_word: bool = Field(default=False, description='Match whole words only')
    whole_line: bool = Field(default=False, description='Match whole lines only')
    literal: bool = Field(default=False, description='Treat patterns as fixed strings')
    only_matching: bool = Field(default=False, description='Print only the matched parts of lines')
    before_context: int = Field(default=0, ge=0, description='Lines of leading context')
    after_context: int = Field(default=0, ge=0, description='Lines of trailing context')
    threads: int = Field(default_factory=default_thread_count, ge=1, description='Worker thread count')
    patterns: list[str] = Field(..., min_length=1, description='Patterns, any of which may match')
    paths: list[str] = Field(default_factory=list, description='Files or directories; empty means stdin')
    with_filename: bool = Field(default=True, description='Prefix output with the file path')

    @model_validator(mode='before')
    @classmethod
    def quiet_overrides_output_modes(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get('quiet'):
            data = {**data, 'filenames_only': False, 'count_only': False, 'show_line_numbers': False}
        return data

    @property
    def output_mode(self) -> OutputMode:
        if self.quiet:
            return OutputMode.QUIET
        if self.filenames_only:
            return OutputMode.FILES_WITH_MATCHES
        if self.count_only:
            return OutputMode.COUNT
        return OutputMode.FULL

    @property
    def locate_all(self) -> bool:
        """Whether every match span is needed, not just a yes/no answer."""
        return self.only_matching or self.color

    @property
    def show_summary(self) -> bool:
        return self.output_mode == OutputMode.FULL


class RunSummary(BaseModel):
    """Totals for a completed run, read after all workers have joined"""

    total_matches: int = Field(default=0, description='Output-eligible lines across all files')
    files_processed: int = Field(default=0, description='Files scanned to completion')
    files_matched: int = Field(default=0, description='Files with at least one eligible line')
    errors: list[str] = Field(default_factory=list, description='Non-fatal errors reported during the run')
    elapsed: float = Field(default=0.0, description='Wall time in seconds')

    @property
    def matched(self) -> bool:
        return self.total_matches > 0

    def to_cli(self) -> str:
        return f'Total matches found: {self.total_matches} in {self.files_processed} files'
