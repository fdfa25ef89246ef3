"""
Unit tests for cli module.

Tests argument pass-through, exit statuses and error reporting.
"""

import unittest
from unittest.mock import patch

from click.testing import CliRunner

from prq import __version__
from prq.cli import EXIT_FAILURE, EXIT_INTERRUPTED, main
from prq.core.errors import AuthRequiredError, UsageError

CLEAN_ENV = {"PRQ_DEBUG": None, "GITHUB_REPO": None}


class TestMain(unittest.TestCase):
    """Test the main entry point with the dispatcher mocked."""

    def setUp(self):
        self.runner = CliRunner()
        build_patcher = patch("prq.cli.build_dispatcher")
        transport_patcher = patch("prq.cli.RequestsTransport")
        self.mock_build = build_patcher.start()
        self.mock_transport_cls = transport_patcher.start()
        self.addCleanup(build_patcher.stop)
        self.addCleanup(transport_patcher.stop)
        self.dispatcher = self.mock_build.return_value
        self.dispatcher.dispatch.return_value = 0

    def invoke(self, args):
        return self.runner.invoke(main, args, env=CLEAN_ENV)

    def test_no_arguments_dispatches_empty_argv(self):
        result = self.invoke([])

        self.assertEqual(result.exit_code, 0)
        self.dispatcher.dispatch.assert_called_once_with([])

    def test_arguments_are_passed_through(self):
        result = self.invoke(["comment", "7", "Looks good"])

        self.assertEqual(result.exit_code, 0)
        self.dispatcher.dispatch.assert_called_once_with(["comment", "7", "Looks good"])

    def test_options_after_the_verb_belong_to_the_operation(self):
        self.invoke(["show", "7", "--debug"])

        self.dispatcher.dispatch.assert_called_once_with(["show", "7", "--debug"])

    def test_help_flag_is_an_unknown_verb(self):
        self.dispatcher.dispatch.return_value = 2

        result = self.invoke(["--help"])

        self.assertEqual(result.exit_code, 2)
        self.dispatcher.dispatch.assert_called_once_with(["--help"])

    def test_debug_flag_enables_debug_config(self):
        self.invoke(["--debug", "list"])

        config = self.mock_build.call_args[0][0]
        self.assertTrue(config.debug)
        self.dispatcher.dispatch.assert_called_once_with(["list"])

    def test_prq_error_exits_with_failure(self):
        self.dispatcher.dispatch.side_effect = UsageError("Please specify a pull request number.")

        result = self.invoke(["show"])

        self.assertEqual(result.exit_code, EXIT_FAILURE)
        self.assertIn("Error: Please specify a pull request number.", result.output)

    def test_auth_required_message(self):
        self.dispatcher.dispatch.side_effect = AuthRequiredError()

        result = self.invoke(["close", "7"])

        self.assertEqual(result.exit_code, EXIT_FAILURE)
        self.assertIn("You must login", result.output)

    def test_unexpected_error_exits_with_failure(self):
        self.dispatcher.dispatch.side_effect = RuntimeError("boom")

        result = self.invoke(["list"])

        self.assertEqual(result.exit_code, EXIT_FAILURE)
        self.assertIn("boom", result.output)

    def test_interrupt(self):
        self.dispatcher.dispatch.side_effect = KeyboardInterrupt()

        result = self.invoke(["list"])

        self.assertEqual(result.exit_code, EXIT_INTERRUPTED)

    def test_transport_is_closed(self):
        self.dispatcher.dispatch.side_effect = UsageError("x")

        self.invoke(["show"])

        self.mock_transport_cls.return_value.close.assert_called_once()

    def test_version(self):
        result = self.invoke(["--version"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)
        self.dispatcher.dispatch.assert_not_called()


if __name__ == "__main__":
    unittest.main()
