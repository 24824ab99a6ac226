"""Tests for the scanr CLI command"""

import os
import shutil
import tempfile

from click.testing import CliRunner

from scanr.__version__ import __version__
from scanr.cli.main import resolve_color, scanr_command, split_patterns_and_paths


class TestScanrCommand:
    """Test scanr CLI invocations"""

    def setup_method(self):
        """Create test files before each test."""
        self.runner = CliRunner()
        self.temp_dir = tempfile.mkdtemp()

        self.log_file = os.path.join(self.temp_dir, 'app.log')
        with open(self.log_file, 'w') as f:
            f.write('start\n')
            f.write('ERROR disk full\n')
            f.write('retrying\n')
            f.write('error: timeout\n')
            f.write('done\n')

        self.other_file = os.path.join(self.temp_dir, 'other.log')
        with open(self.other_file, 'w') as f:
            f.write('nothing to see\n')

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def invoke(self, args, **kwargs):
        return self.runner.invoke(scanr_command, ['-j', '1'] + args, **kwargs)

    def test_match_exits_zero(self):
        result = self.invoke(['ERROR', self.log_file])
        assert result.exit_code == 0
        assert f'{self.log_file}:ERROR disk full' in result.output
        assert 'Total matches found: 1 in 1 files' in result.output

    def test_no_match_exits_one(self):
        result = self.invoke(['absent', self.log_file])
        assert result.exit_code == 1
        assert 'Total matches found: 0 in 1 files' in result.output

    def test_ignore_case(self):
        result = self.invoke(['-i', '-c', 'error', self.log_file])
        assert result.exit_code == 0
        assert f'{self.log_file}:2' in result.output

    def test_line_numbers(self):
        result = self.invoke(['-n', 'timeout', self.log_file])
        assert f'{self.log_file}:4:error: timeout' in result.output

    def test_no_filename(self):
        result = self.invoke(['-n', '--no-filename', 'timeout', self.log_file])
        assert result.output.splitlines()[0] == '4:error: timeout'

    def test_count(self):
        result = self.invoke(['-c', 'e', self.log_file, self.other_file])
        assert result.exit_code == 0
        assert result.output.splitlines() == [f'{self.log_file}:3', f'{self.other_file}:1']

    def test_files_with_matches(self):
        result = self.invoke(['-l', 'ERROR', self.log_file, self.other_file])
        assert result.exit_code == 0
        assert result.output.splitlines() == [self.log_file]

    def test_quiet(self):
        result = self.invoke(['-q', 'ERROR', self.log_file])
        assert result.exit_code == 0
        assert result.output == ''

    def test_quiet_without_match(self):
        result = self.invoke(['--silent', 'absent', self.log_file])
        assert result.exit_code == 1
        assert result.output == ''

    def test_invert(self):
        result = self.invoke(['-v', '-c', '-i', 'error', self.log_file])
        assert f'{self.log_file}:3' in result.output

    def test_multiple_patterns(self):
        result = self.invoke(['-c', '-e', 'start', '-e', 'done', self.log_file])
        assert f'{self.log_file}:2' in result.output

    def test_context(self):
        result = self.invoke(['-n', '--no-filename', '-C', '1', 'ERROR', self.log_file])
        assert result.output.splitlines()[:3] == ['1-start', '2:ERROR disk full', '3-retrying']

    def test_before_overrides_context(self):
        result = self.invoke(['-n', '--no-filename', '-C', '1', '-B', '0', 'ERROR', self.log_file])
        assert result.output.splitlines()[:2] == ['2:ERROR disk full', '3-retrying']

    def test_only_matching(self):
        result = self.invoke(['-o', '--no-filename', '-i', 'error', self.log_file])
        assert result.output.splitlines()[:2] == ['ERROR', 'error']

    def test_fixed_strings(self):
        result = self.invoke(['-F', '-c', 'error:', self.log_file])
        assert f'{self.log_file}:1' in result.output
        result = self.invoke(['-F', 'e.r', self.log_file])
        assert result.exit_code == 1

    def test_word_regexp(self):
        result = self.invoke(['-w', '-c', 'disk', self.log_file])
        assert f'{self.log_file}:1' in result.output
        result = self.invoke(['-w', 'dis', self.log_file])
        assert result.exit_code == 1

    def test_line_regexp(self):
        result = self.invoke(['-x', '-c', 'done', self.log_file])
        assert f'{self.log_file}:1' in result.output
        result = self.invoke(['-x', 'don', self.log_file])
        assert result.exit_code == 1

    def test_stdin(self):
        result = self.invoke(['-n', 'b'], input='a\nb\nc\n')
        assert result.exit_code == 0
        assert '(standard input):2:b' in result.output

    def test_stdin_with_invalid_utf8(self):
        result = self.invoke(['-c', 'hit'], input=b'\xff\xfe hit\nhit\n')
        assert result.exit_code == 0
        assert '(standard input):2' in result.output

    def test_stdin_dash_with_file(self):
        result = self.invoke(['-c', 'x', '-', self.other_file], input='x\n')
        assert result.output.splitlines() == ['(standard input):1', f'{self.other_file}:0']

    def test_recursive(self):
        result = self.invoke(['-r', '-l', 'see', self.temp_dir])
        assert result.exit_code == 0
        assert result.output.splitlines() == [self.other_file]

    def test_directory_without_recursive(self):
        result = self.invoke(['ERROR', self.temp_dir])
        assert result.exit_code == 1
        assert 'Is a directory' in result.output

    def test_missing_file_keeps_going(self):
        missing = os.path.join(self.temp_dir, 'missing.log')
        result = self.invoke(['ERROR', missing, self.log_file])
        assert result.exit_code == 0
        assert 'No such file or directory' in result.output
        assert 'ERROR disk full' in result.output

    def test_invalid_pattern_exits_two(self):
        result = self.invoke(['(unclosed', self.log_file])
        assert result.exit_code == 2
        assert "Invalid regular expression '(unclosed'" in result.output

    def test_no_pattern_is_usage_error(self):
        result = self.runner.invoke(scanr_command, [])
        assert result.exit_code == 2
        assert 'no pattern provided' in result.output

    def test_negative_context_rejected(self):
        result = self.invoke(['-A', '-1', 'x', self.log_file])
        assert result.exit_code == 2

    def test_color_forced(self):
        result = self.invoke(['--color', 'disk', self.log_file])
        assert '\x1b[' in result.output

    def test_no_color(self):
        result = self.invoke(['--no-color', 'disk', self.log_file])
        assert '\x1b[' not in result.output

    def test_color_defaults_off_when_not_a_terminal(self):
        result = self.invoke(['disk', self.log_file])
        assert '\x1b[' not in result.output

    def test_threads_do_not_change_counts(self):
        result_one = self.runner.invoke(scanr_command, ['-j', '1', '-c', 'e', self.log_file, self.other_file])
        result_many = self.runner.invoke(scanr_command, ['-j', '4', '-c', 'e', self.log_file, self.other_file])
        assert sorted(result_one.output.splitlines()) == sorted(result_many.output.splitlines())

    def test_version(self):
        result = self.runner.invoke(scanr_command, ['--version'])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self):
        result = self.runner.invoke(scanr_command, ['--help'])
        assert result.exit_code == 0
        assert '--ignore-case' in result.output
        assert 'Exit status' in result.output

    def test_short_help(self):
        result = self.runner.invoke(scanr_command, ['-h'])
        assert result.exit_code == 0
        assert '--ignore-case' in result.output


class TestHelpers:
    """Tests for CLI helper functions"""

    def test_first_positional_is_pattern(self):
        assert split_patterns_and_paths(('foo', 'a.txt'), ()) == (['foo'], ['a.txt'])

    def test_regexp_makes_all_positionals_paths(self):
        assert split_patterns_and_paths(('a.txt', 'b.txt'), ('foo',)) == (['foo'], ['a.txt', 'b.txt'])

    def test_explicit_color_wins(self, monkeypatch):
        monkeypatch.setenv('NO_COLOR', '1')
        assert resolve_color(True)
        assert not resolve_color(False)

    def test_no_color_env_disables_auto(self, monkeypatch):
        monkeypatch.setenv('NO_COLOR', '1')
        assert not resolve_color(None)
