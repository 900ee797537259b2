#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
KmerTally v0.1.0

Tests for CLI command interface.

Author: KmerTally Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import json
import os

import pytest
from click.testing import CliRunner
from kmertally.cli import main


SIMPLE = ">seq1\nACGTACGT\n"
AMBIGUOUS = ">s\nACGNACGT\n"
MULTI = ">a\nACGTTGCA\nacgtNNNN\nGATTACA\n>b\nTTTTTTTT\n>c\nCAGTCAGTCAGT\n"


def _write(path, content):
    with open(path, 'w') as f:
        f.write(content)


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self):
        """Test that --help runs without error."""
        runner = CliRunner()
        result = runner.invoke(main, ['--help'])

        assert result.exit_code == 0
        assert 'KmerTally' in result.output

    def test_cli_version(self):
        """Test that --version displays version."""
        runner = CliRunner()
        result = runner.invoke(main, ['--version'])

        assert result.exit_code == 0
        assert 'version' in result.output.lower() or '0.1' in result.output

    def test_version_command(self):
        runner = CliRunner()
        result = runner.invoke(main, ['version'])

        assert result.exit_code == 0
        assert 'NumPy' in result.output

    def test_invalid_command(self):
        """Test that invalid commands are handled gracefully."""
        runner = CliRunner()
        result = runner.invoke(main, ['nonexistent_command'])

        assert result.exit_code != 0


class TestCountCommand:
    """Tests for the count command."""

    def test_simple_scenario(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('in.fa', SIMPLE)
            result = runner.invoke(main, ['count', '-k', '4', '-f', 'in.fa', '-t', '1'])

            assert result.exit_code == 0
            assert result.output.splitlines() == [
                "Total nucleotides: 8",
                "Total k-mers: 5",
                "Valid k-mers: 5",
                "Number of distinct 4-mers: 4",
            ]

    def test_ambiguous_scenario(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('in.fa', AMBIGUOUS)
            result = runner.invoke(main, ['count', '--kmer-size', '4', '--input-file', 'in.fa',
                                          '--max-threads', '1'])

            assert result.exit_code == 0
            assert "Total k-mers: 5" in result.output
            assert "Valid k-mers: 1" in result.output
            assert "Number of distinct 4-mers: 1" in result.output

    def test_only_count_omits_distinct_line(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('in.fa', SIMPLE)
            result = runner.invoke(main, ['count', '-k', '4', '-f', 'in.fa', '-c', '-t', '1'])

            assert result.exit_code == 0
            assert len(result.output.splitlines()) == 3
            assert 'distinct' not in result.output

    @pytest.mark.parametrize("k", ['33', '0', '-1', 'abc'])
    def test_invalid_k_rejected(self, k):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('in.fa', SIMPLE)
            result = runner.invoke(main, ['count', '-k', k, '-f', 'in.fa'])

            assert result.exit_code != 0
            assert 'Total nucleotides' not in result.output

    def test_missing_k(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('in.fa', SIMPLE)
            result = runner.invoke(main, ['count', '-f', 'in.fa'])

            assert result.exit_code != 0

    def test_nonexistent_file(self):
        runner = CliRunner()
        result = runner.invoke(main, ['count', '-k', '4', '-f', 'missing.fa'])

        assert result.exit_code != 0
        assert 'Total nucleotides' not in result.output

    def test_negative_threads_rejected(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('in.fa', SIMPLE)
            result = runner.invoke(main, ['count', '-k', '4', '-f', 'in.fa', '-t', '-2'])

            assert result.exit_code != 0

    def test_corrupt_gzip_reports_error(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            with open('in.fa.gz', 'wb') as f:
                f.write(b'not really gzip')
            result = runner.invoke(main, ['count', '-k', '4', '-f', 'in.fa.gz', '-t', '1'])

            assert result.exit_code == 1
            assert 'Error processing file' in result.output
            assert 'Total nucleotides' not in result.output

    def test_gzip_input(self):
        import gzip

        runner = CliRunner()
        with runner.isolated_filesystem():
            with gzip.open('in.fa.gz', 'wt') as f:
                f.write(SIMPLE)
            result = runner.invoke(main, ['count', '-k', '4', '-f', 'in.fa.gz', '-t', '1'])

            assert result.exit_code == 0
            assert "Number of distinct 4-mers: 4" in result.output

    def test_thread_count_does_not_change_output(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('in.fa', MULTI * 20)
            outputs = []
            for extra in (['-t', '1'],
                          ['-t', '4', '--executor', 'thread'],
                          ['-t', '3', '--executor', 'process']):
                result = runner.invoke(main, ['count', '-k', '5', '-f', 'in.fa',
                                              '--unit-size', '2'] + extra)
                assert result.exit_code == 0
                outputs.append(result.output)

            assert outputs[0] == outputs[1] == outputs[2]

    def test_biopython_parser(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('in.fa', MULTI)
            by_lines = runner.invoke(main, ['count', '-k', '3', '-f', 'in.fa', '-t', '1'])
            by_records = runner.invoke(main, ['count', '-k', '3', '-f', 'in.fa', '-t', '1',
                                              '--parser', 'biopython'])

            assert by_lines.exit_code == by_records.exit_code == 0
            assert by_lines.output == by_records.output

    def test_json_report(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('in.fa', SIMPLE)
            result = runner.invoke(main, ['count', '-k', '4', '-f', 'in.fa', '-t', '1',
                                          '--json', 'stats.json'])

            assert result.exit_code == 0
            assert os.path.exists('stats.json')
            with open('stats.json') as f:
                data = json.load(f)
            assert data['distinct_kmers'] == 4
            assert data['total_windows'] == 5

    def test_config_file_sets_count_only(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('in.fa', SIMPLE)
            _write('cfg.yaml', "counting:\n  only_count: true\nhardware:\n  threads: 1\n")
            result = runner.invoke(main, ['count', '-k', '4', '-f', 'in.fa', '--config', 'cfg.yaml'])

            assert result.exit_code == 0
            assert 'distinct' not in result.output

    def test_invalid_config_file(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('in.fa', SIMPLE)
            _write('cfg.yaml', "counting:\n  unit_size: 0\n")
            result = runner.invoke(main, ['count', '-k', '4', '-f', 'in.fa', '--config', 'cfg.yaml'])

            assert result.exit_code == 1
            assert 'Total nucleotides' not in result.output

    def test_config_section_not_a_mapping(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('in.fa', SIMPLE)
            _write('cfg.yaml', "counting: 5\n")
            result = runner.invoke(main, ['count', '-k', '2', '-f', 'in.fa', '--config', 'cfg.yaml'])

            assert result.exit_code == 1
            assert not isinstance(result.exception, AttributeError)
            assert 'Configuration error' in result.output
            assert 'Total nucleotides' not in result.output

    def test_invalid_utf8_reports_error(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            with open('in.fa', 'wb') as f:
                f.write(b'>a\nAC\xffGT\n')
            result = runner.invoke(main, ['count', '-k', '2', '-f', 'in.fa', '-t', '1'])

            assert result.exit_code == 1
            assert 'Error processing file' in result.output

    def test_verbose_flag_accepted(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('in.fa', SIMPLE)
            result = runner.invoke(main, ['-v', 'count', '-k', '4', '-f', 'in.fa', '-t', '1'])

            assert result.exit_code == 0
            assert "Total nucleotides: 8" in result.output


class TestConfigCommands:
    """Tests for the config command group."""

    def test_config_init_command(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(main, ['config', 'init', '--output', 'test_config.yaml'])

            assert result.exit_code == 0
            assert os.path.exists('test_config.yaml')

    def test_config_validate(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(main, ['config', 'init', '-o', 'c.yaml', '-t', 'low-memory'])
            result = runner.invoke(main, ['config', 'validate', 'c.yaml'])

            assert result.exit_code == 0
            assert 'valid' in result.output

    def test_config_validate_failure(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('bad.yaml', "hardware:\n  executor: gpu\n")
            result = runner.invoke(main, ['config', 'validate', 'bad.yaml'])

            assert result.exit_code == 1

    @pytest.mark.parametrize("subcommand", ['validate', 'show'])
    def test_config_section_not_a_mapping(self, subcommand):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _write('bad.yaml', "output:\n  logging: INFO\n")
            result = runner.invoke(main, ['config', subcommand, 'bad.yaml'])

            assert result.exit_code == 1
            assert not isinstance(result.exception, AttributeError)
            assert 'output.logging' in result.output

    def test_config_show(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(main, ['config', 'init', '-o', 'c.yaml'])
            summary = runner.invoke(main, ['config', 'show', 'c.yaml'])
            as_yaml = runner.invoke(main, ['config', 'show', 'c.yaml', '--format', 'yaml'])

            assert summary.exit_code == 0
            assert 'Executor: process' in summary.output
            assert as_yaml.exit_code == 0
            assert 'counting:' in as_yaml.output
