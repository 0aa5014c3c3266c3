"""
Tests for OfflineSession and the command line entry point
"""

from unittest.mock import Mock, patch

import pytest

from serverless_step_functions_local import __main__ as cli
from serverless_step_functions_local.exceptions import ConfigurationError, EmulatorStartError
from serverless_step_functions_local.framework import Serverless, Service
from serverless_step_functions_local.session import OFFLINE_START_END, OFFLINE_START_INIT, OfflineSession


@pytest.fixture
def session():
    serverless = Serverless(service=Service(custom={"stepFunctionsLocal": {"accountId": "1", "region": "us-east-1"}}))
    with patch("boto3.client"):
        offline_session = OfflineSession(serverless)
    offline_session.plugin.hooks = {OFFLINE_START_INIT: Mock(), OFFLINE_START_END: Mock()}
    return offline_session


class TestOfflineSession:
    """Test OfflineSession.run."""

    def test_plugin_is_registered(self, session):
        assert session.serverless.plugin_manager.plugins == [session.plugin]

    @patch("serverless_step_functions_local.session.prompt")
    def test_runs_hooks_around_wait(self, mock_prompt, session):
        mock_prompt.side_effect = ["status", "quit"]

        session.run()

        session.plugin.hooks[OFFLINE_START_INIT].assert_called_once()
        session.plugin.hooks[OFFLINE_START_END].assert_called_once()
        assert mock_prompt.call_count == 2

    @patch("serverless_step_functions_local.session.prompt")
    def test_eof_ends_session(self, mock_prompt, session):
        mock_prompt.side_effect = EOFError()

        session.run()

        session.plugin.hooks[OFFLINE_START_END].assert_called_once()

    @patch("serverless_step_functions_local.session.prompt")
    def test_startup_failure_still_stops(self, mock_prompt, session):
        session.plugin.hooks[OFFLINE_START_INIT].side_effect = EmulatorStartError("timeout")

        with pytest.raises(EmulatorStartError):
            session.run()

        session.plugin.hooks[OFFLINE_START_END].assert_called_once()
        mock_prompt.assert_not_called()

    @patch("serverless_step_functions_local.session.prompt")
    def test_prints_registered_endpoints(self, mock_prompt, session, capsys):
        mock_prompt.side_effect = ["q"]
        session.plugin.endpoints = {"OFFLINE_STEP_FUNCTIONS_ARN_Order": "arn:order"}

        session.run()

        assert "OFFLINE_STEP_FUNCTIONS_ARN_Order = arn:order" in capsys.readouterr().out


class TestMain:
    """Test the command line entry point."""

    def test_parse_args(self):
        args = cli.parse_args(["--service-path", "svc", "--stage", "qa"])

        assert args.service_path == "svc"
        assert args.stage == "qa"
        assert args.region is None

    @patch("serverless_step_functions_local.__main__.OfflineSession")
    @patch("serverless_step_functions_local.__main__.Serverless")
    def test_success(self, mock_serverless, mock_session):
        assert cli.main(["--service-path", "svc", "--region", "eu-west-1"]) == 0

        mock_serverless.from_service_path.assert_called_once_with("svc", {"region": "eu-west-1"})
        mock_session.return_value.run.assert_called_once()

    @patch("serverless_step_functions_local.__main__.Serverless")
    def test_fatal_error(self, mock_serverless, capsys):
        mock_serverless.from_service_path.side_effect = ConfigurationError("Step Functions Local: missing accountId")

        assert cli.main(["--service-path", "svc"]) == 1
        assert "missing accountId" in capsys.readouterr().out
