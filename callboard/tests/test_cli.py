"""Tests for the command line interface."""

import json
import unittest

import pytest

from callboard.callboard import create_parser, parse_assignment, run_charts


class TestParser(unittest.TestCase):

    def test_defaults(self):
        args = create_parser().parse_args([])
        self.assertFalse(args.show)
        self.assertEqual(args.set_duration, [])
        self.assertIsNone(args.email)
        self.assertFalse(args.overwrite)

    def test_repeated_assignments(self):
        args = create_parser().parse_args([
            '--set-outcome', 'Customer Hostility=20',
            '--set-outcome', 'Caller Identification=30',
        ])
        self.assertEqual(len(args.set_outcome), 2)

    def test_server_flags(self):
        args = create_parser().parse_args(['--serve', '--port', '9000'])
        self.assertTrue(args.serve)
        self.assertEqual(args.port, 9000)


class TestParseAssignment(unittest.TestCase):

    def test_simple(self):
        self.assertEqual(parse_assignment("1 Mar 2024=250"), ("1 Mar 2024", "250"))

    def test_splits_on_last_equals(self):
        self.assertEqual(parse_assignment("a=b=3"), ("a=b", "3"))

    def test_blank_value_allowed(self):
        self.assertEqual(parse_assignment("Customer Hostility="), ("Customer Hostility", ""))

    def test_missing_equals(self):
        with self.assertRaises(ValueError):
            parse_assignment("Customer Hostility")

    def test_missing_key(self):
        with self.assertRaises(ValueError):
            parse_assignment("=5")


@pytest.fixture
def cli_config(tmp_path):
    return {
        "database_path": str(tmp_path / "analytics.db"),
        "state_path": str(tmp_path / "state.json"),
        "api_url": None,
        "request_timeout": 5.0,
        "server": {"host": "127.0.0.1", "port": 8080},
    }


def parse(*argv):
    return create_parser().parse_args(list(argv))


@pytest.mark.asyncio
class TestRunCharts:

    async def test_show_defaults(self, cli_config, capsys):
        status = await run_charts(cli_config, parse('--no-color'))
        output = capsys.readouterr().out

        assert status == 0
        assert "Jan 24" in output
        assert "Caller Identification is the top driver at 34%." in output

    async def test_save_requires_email(self, cli_config, capsys):
        status = await run_charts(cli_config, parse('--set-duration', '1 Jan 2024=100'))
        assert status == 1
        assert "An email is required" in capsys.readouterr().out

    async def test_save_with_email_remembers_it(self, cli_config, tmp_path, capsys):
        status = await run_charts(cli_config, parse(
            '--set-duration', '1 Jan 2024=100', '--email', 'Me@Example.com'))

        assert status == 0
        assert "Saved call duration data for me@example.com." in capsys.readouterr().out
        state = json.loads((tmp_path / "state.json").read_text())
        assert state["callboard-chart-store"]["identity"] == "me@example.com"

    async def test_invalid_email(self, cli_config, capsys):
        status = await run_charts(cli_config, parse(
            '--set-duration', '1 Jan 2024=100', '--email', 'nope'))
        assert status == 1
        assert "Enter a valid email address" in capsys.readouterr().out

    async def test_unknown_key(self, cli_config, capsys):
        status = await run_charts(cli_config, parse(
            '--set-outcome', 'Nonexistent=5', '--email', 'me@example.com'))
        assert status == 1
        assert "Unknown name 'Nonexistent'" in capsys.readouterr().out

    async def test_overwrite_needs_flag(self, cli_config, capsys):
        first = parse('--set-duration', '1 Jan 2024=100', '--email', 'me@example.com')
        assert await run_charts(cli_config, first) == 0

        second = parse('--set-duration', '1 Jan 2024=200')
        assert await run_charts(cli_config, second) == 1
        assert "Re-run with --overwrite" in capsys.readouterr().out

        third = parse('--set-duration', '1 Jan 2024=200', '--overwrite', '--show', '--no-color')
        assert await run_charts(cli_config, third) == 0
        assert "3m 20s" in capsys.readouterr().out

    async def test_other_chart_saves_without_prompt(self, cli_config):
        first = parse('--set-duration', '1 Jan 2024=100', '--email', 'me@example.com')
        assert await run_charts(cli_config, first) == 0

        second = parse('--set-outcome', 'Customer Hostility=40')
        assert await run_charts(cli_config, second) == 0

    async def test_forget_email(self, cli_config, capsys):
        first = parse('--set-duration', '1 Jan 2024=100', '--email', 'me@example.com')
        await run_charts(cli_config, first)

        status = await run_charts(cli_config, parse('--forget-email', '--set-duration', '1 Jan 2024=5'))
        assert status == 1
        assert "An email is required" in capsys.readouterr().out

    async def test_rebuild_clears_saved_data(self, cli_config, capsys):
        first = parse('--set-duration', '1 Jan 2024=100', '--email', 'me@example.com')
        assert await run_charts(cli_config, first) == 0

        assert await run_charts(cli_config, parse('--rebuild')) == 0
        capsys.readouterr()

        # Saved data is gone, so the next save needs no --overwrite
        again = parse('--set-duration', '1 Jan 2024=200')
        assert await run_charts(cli_config, again) == 0
        assert "Saved call duration data for me@example.com." in capsys.readouterr().out

    async def test_rebuild_refused_with_api_url(self, cli_config, capsys):
        cli_config["api_url"] = "http://127.0.0.1:1"
        assert await run_charts(cli_config, parse('--rebuild')) == 1
        assert "only applies to the local database" in capsys.readouterr().out


if __name__ == '__main__':
    unittest.main()
