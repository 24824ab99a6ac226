"""Main CLI entry point"""

import os
import sys

import click
from pydantic import ValidationError

from scanr.__version__ import __version__
from scanr.errors import InvalidPatternError, NoInputFilesError
from scanr.models import SearchConfig
from scanr.search import run_search
from scanr.utils import configure_logging, default_thread_count


def resolve_color(color: bool | None) -> bool:
    """--color/--no-color win; otherwise color only on a terminal without NO_COLOR set."""
    if color is not None:
        return color
    return sys.stdout.isatty() and 'NO_COLOR' not in os.environ


def split_patterns_and_paths(args: tuple[str, ...], regexp: tuple[str, ...]) -> tuple[list[str], list[str]]:
    """With -e the positionals are all paths; otherwise the first positional is the pattern."""
    if regexp:
        return list(regexp), list(args)
    if not args:
        raise click.UsageError('no pattern provided')
    return [args[0]], list(args[1:])


@click.command(context_settings=dict(help_option_names=['-h', '--help']))
@click.argument('args', nargs=-1, metavar='[PATTERN] [PATH...]')
@click.option(
    '--regexp',
    '-e',
    'regexp',
    type=str,
    multiple=True,
    help='Pattern to search for (can be specified multiple times)',
)
@click.option('--ignore-case', '-i', is_flag=True, help='Ignore case distinctions')
@click.option('--invert-match', '-v', 'invert', is_flag=True, help='Select non-matching lines')
@click.option('--recursive', '-r', is_flag=True, help='Search directories recursively')
@click.option('--line-number', '-n', is_flag=True, help='Print line number with output lines')
@click.option('--files-with-matches', '-l', is_flag=True, help='Print only names of files with matches')
@click.option('--count', '-c', is_flag=True, help='Print only a count of selected lines per file')
@click.option('--quiet', '-q', '--silent', is_flag=True, help='Suppress all normal output')
@click.option('--word-regexp', '-w', is_flag=True, help='Match only whole words')
@click.option('--line-regexp', '-x', is_flag=True, help='Match only whole lines')
@click.option('--fixed-strings', '-F', is_flag=True, help='Treat patterns as fixed strings, not regexes')
@click.option('--only-matching', '-o', is_flag=True, help='Print only the matched parts of lines')
@click.option('--before-context', '-B', type=click.IntRange(min=0), help='Print NUM lines of leading context')
@click.option('--after-context', '-A', type=click.IntRange(min=0), help='Print NUM lines of trailing context')
@click.option('--context', '-C', type=click.IntRange(min=0), help='Print NUM lines of context on both sides')
@click.option(
    '--threads',
    '-j',
    type=click.IntRange(min=1),
    default=None,
    help='Number of worker threads (default: SCANR_MAX_THREADS or CPU count)',
)
@click.option('--color/--no-color', default=None, help='Force or disable colored output (default: auto)')
@click.option('--no-filename', is_flag=True, help='Do not prefix output lines with file names')
@click.option('--debug', is_flag=True, help='Enable debug logging on stderr')
@click.version_option(version=__version__, prog_name='scanr')
def scanr_command(
    args,
    regexp,
    ignore_case,
    invert,
    recursive,
    line_number,
    files_with_matches,
    count,
    quiet,
    word_regexp,
    line_regexp,
    fixed_strings,
    only_matching,
    before_context,
    after_context,
    context,
    threads,
    color,
    no_filename,
    debug,
):
    """
    Search for PATTERN in each PATH, or in standard input.

    \b
    Examples:
      scanr -n "error" app.log
      scanr -r -i "timeout" /var/log/
      scanr -C 2 -e "WARN" -e "ERROR" app.log
      scanr -F -o "a.b" notes.txt
      cat app.log | scanr -c "failed"

    \b
    Exit status:
      0  at least one line was selected
      1  no lines were selected, or no file could be scanned
      2  invalid pattern or usage error
    """
    configure_logging(debug)

    patterns, paths = split_patterns_and_paths(args, regexp)

    before_ctx = before_context if before_context is not None else context if context is not None else 0
    after_ctx = after_context if after_context is not None else context if context is not None else 0

    try:
        config = SearchConfig(
            ignore_case=ignore_case,
            invert=invert,
            recursive=recursive,
            show_line_numbers=line_number,
            filenames_only=files_with_matches,
            count_only=count,
            quiet=quiet,
            color=resolve_color(color),
            whole_word=word_regexp,
            whole_line=line_regexp,
            literal=fixed_strings,
            only_matching=only_matching,
            before_context=before_ctx,
            after_context=after_ctx,
            threads=threads if threads is not None else default_thread_count(),
            patterns=patterns,
            paths=paths,
            with_filename=not no_filename,
        )
    except ValidationError as e:
        click.echo(f'scanr: invalid options: {e}', err=True)
        sys.exit(2)

    try:
        summary = run_search(config)
    except InvalidPatternError as e:
        click.echo(f'scanr: {e}', err=True)
        sys.exit(2)
    except NoInputFilesError as e:
        if not config.quiet:
            click.echo(f'scanr: {e}', err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo('scanr: interrupted', err=True)
        sys.exit(130)

    sys.exit(0 if summary.matched else 1)


def main():
    """Entry point for the CLI"""
    scanr_command()


if __name__ == '__main__':
    main()
