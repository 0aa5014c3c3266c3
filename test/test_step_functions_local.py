"""
Tests for StepFunctionsLocal
"""

import io
import subprocess
import tarfile
from unittest.mock import MagicMock, patch

import pytest
import requests

from serverless_step_functions_local.emulator.step_functions_local import JAR_NAME, StepFunctionsLocal
from serverless_step_functions_local.exceptions import (
    EmulatorInstallError,
    EmulatorStartError,
    PortWaitTimeoutError,
)

MODULE = "serverless_step_functions_local.emulator.step_functions_local"


def _make_archive(*names):
    """Build an in-memory tar.gz containing empty files with the given names."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for name in names:
            info = tarfile.TarInfo(name)
            info.size = 0
            archive.addfile(info, io.BytesIO(b""))
    return buffer.getvalue()


def _mock_response(content=b"", error=None):
    response = MagicMock()
    response.__enter__.return_value = response
    response.iter_content.return_value = [content]
    if error:
        response.raise_for_status.side_effect = error
    return response


def _mock_process(output=b""):
    process = MagicMock()
    process.stdout = io.BytesIO(output)
    process.poll.return_value = None
    return process


class TestBuildCommand:
    """Test build_command method."""

    def test_required_arguments(self, tmp_path):
        emulator = StepFunctionsLocal(str(tmp_path))

        command = emulator.build_command(101010101010, "http://localhost:4000")

        assert command == [
            "java", "-jar", JAR_NAME,
            "--account", "101010101010",
            "--lambda-endpoint", "http://localhost:4000",
        ]

    def test_optional_arguments(self, tmp_path):
        """Known options are appended as flags; None values are skipped."""
        emulator = StepFunctionsLocal(str(tmp_path))

        command = emulator.build_command(
            "101010101010",
            "http://localhost:4000",
            region="eu-west-1",
            sqsEndpoint="http://localhost:9324",
            waitTimeScale=0,
            snsEndpoint=None,
        )

        assert command[command.index("--region") + 1] == "eu-west-1"
        assert command[command.index("--sqs-endpoint") + 1] == "http://localhost:9324"
        assert command[command.index("--wait-time-scale") + 1] == "0"
        assert "--sns-endpoint" not in command


class TestInstall:
    """Test install method."""

    @patch(f"{MODULE}.requests.get")
    def test_skips_download_when_installed(self, mock_get, tmp_path):
        (tmp_path / JAR_NAME).write_bytes(b"")
        emulator = StepFunctionsLocal(str(tmp_path))

        assert emulator.install() == tmp_path / JAR_NAME
        mock_get.assert_not_called()

    @patch(f"{MODULE}.requests.get")
    def test_downloads_and_extracts(self, mock_get, tmp_path):
        mock_get.return_value = _mock_response(_make_archive(JAR_NAME, "README.md"))
        install_dir = tmp_path / "sfl"
        emulator = StepFunctionsLocal(str(install_dir), download_url="https://example.test/sfl.tar.gz")

        jar_path = emulator.install()

        assert jar_path.is_file()
        assert (install_dir / "README.md").is_file()
        assert not (install_dir / "StepFunctionsLocal.tar.gz").exists()
        mock_get.assert_called_once_with("https://example.test/sfl.tar.gz", stream=True, timeout=60)

    @patch(f"{MODULE}.requests.get")
    def test_download_failure(self, mock_get, tmp_path):
        mock_get.side_effect = requests.ConnectionError("no network")
        emulator = StepFunctionsLocal(str(tmp_path))

        with pytest.raises(EmulatorInstallError, match="no network"):
            emulator.install()

    @patch(f"{MODULE}.requests.get")
    def test_http_error(self, mock_get, tmp_path):
        mock_get.return_value = _mock_response(error=requests.HTTPError("404 Not Found"))
        emulator = StepFunctionsLocal(str(tmp_path))

        with pytest.raises(EmulatorInstallError, match="404"):
            emulator.install()

    @patch(f"{MODULE}.requests.get")
    def test_archive_without_jar(self, mock_get, tmp_path):
        mock_get.return_value = _mock_response(_make_archive("README.md"))
        emulator = StepFunctionsLocal(str(tmp_path))

        with pytest.raises(EmulatorInstallError, match=JAR_NAME):
            emulator.install()

    @patch(f"{MODULE}.requests.get")
    def test_corrupt_archive(self, mock_get, tmp_path):
        mock_get.return_value = _mock_response(b"not a tarball")
        emulator = StepFunctionsLocal(str(tmp_path))

        with pytest.raises(EmulatorInstallError):
            emulator.install()

    @pytest.mark.skipif(not hasattr(tarfile, "data_filter"), reason="tarfile extraction filters unavailable")
    @patch(f"{MODULE}.requests.get")
    def test_rejects_member_outside_install_dir(self, mock_get, tmp_path):
        mock_get.return_value = _mock_response(_make_archive("../evil.txt", JAR_NAME))
        emulator = StepFunctionsLocal(str(tmp_path / "sfl"))

        with pytest.raises(EmulatorInstallError):
            emulator.install()

        assert not (tmp_path / "evil.txt").exists()


class TestStartStop:
    """Test start and stop methods."""

    @patch(f"{MODULE}.wait_until_used")
    @patch(f"{MODULE}.subprocess.Popen")
    def test_start_launches_and_waits(self, mock_popen, mock_wait, tmp_path, capsys):
        process = _mock_process(b"Starting server on port 8083\n")
        mock_popen.return_value = process
        emulator = StepFunctionsLocal(str(tmp_path))

        result = emulator.start("101010101010", "http://localhost:4000", region="us-east-1")
        emulator._output_thread.join(timeout=1)

        assert result is process
        args, kwargs = mock_popen.call_args
        assert args[0][:3] == ["java", "-jar", JAR_NAME]
        assert kwargs["cwd"] == str(tmp_path)
        mock_wait.assert_called_once_with(8083, interval=0.2, timeout=10.0)
        out = capsys.readouterr().out
        assert "[Serverless Step Functions Local]" in out
        assert "Starting server on port 8083" in out

    @patch(f"{MODULE}.wait_until_used")
    @patch(f"{MODULE}.subprocess.Popen")
    def test_start_is_noop_when_running(self, mock_popen, mock_wait, tmp_path):
        mock_popen.return_value = _mock_process()
        emulator = StepFunctionsLocal(str(tmp_path))

        first = emulator.start("1", "http://localhost:4000")
        second = emulator.start("1", "http://localhost:4000")

        assert first is second
        mock_popen.assert_called_once()

    @patch(f"{MODULE}.wait_until_used")
    @patch(f"{MODULE}.subprocess.Popen")
    def test_start_timeout_stops_process(self, mock_popen, mock_wait, tmp_path):
        process = _mock_process()
        mock_popen.return_value = process
        mock_wait.side_effect = PortWaitTimeoutError("127.0.0.1", 8083, 10.0)
        emulator = StepFunctionsLocal(str(tmp_path))

        with pytest.raises(EmulatorStartError, match="did not start"):
            emulator.start("101010101010", "http://localhost:4000")

        process.terminate.assert_called_once()
        assert emulator.process is None

    @patch(f"{MODULE}.wait_until_used")
    @patch(f"{MODULE}.subprocess.Popen")
    def test_start_without_java(self, mock_popen, mock_wait, tmp_path):
        mock_popen.side_effect = FileNotFoundError("java")
        emulator = StepFunctionsLocal(str(tmp_path))

        with pytest.raises(EmulatorStartError, match="Unable to launch"):
            emulator.start("101010101010", "http://localhost:4000")

        mock_wait.assert_not_called()

    def test_stop_when_not_started(self, tmp_path):
        emulator = StepFunctionsLocal(str(tmp_path))

        emulator.stop()

        assert emulator.process is None

    def test_stop_terminates_process(self, tmp_path):
        emulator = StepFunctionsLocal(str(tmp_path))
        process = _mock_process()
        emulator.process = process

        emulator.stop()

        process.terminate.assert_called_once()
        process.wait.assert_called_once_with(timeout=5.0)
        process.kill.assert_not_called()
        assert emulator.process is None

    def test_stop_kills_after_grace_period(self, tmp_path):
        emulator = StepFunctionsLocal(str(tmp_path))
        process = _mock_process()
        process.wait.side_effect = [subprocess.TimeoutExpired("java", 1.0), 0]
        emulator.process = process

        emulator.stop(grace_period=1.0)

        process.kill.assert_called_once()

    def test_stop_skips_exited_process(self, tmp_path):
        emulator = StepFunctionsLocal(str(tmp_path))
        process = _mock_process()
        process.poll.return_value = 0
        emulator.process = process

        emulator.stop()

        process.terminate.assert_not_called()

    def test_stop_joins_output_thread(self, tmp_path):
        emulator = StepFunctionsLocal(str(tmp_path))
        emulator.process = _mock_process()
        output_thread = MagicMock()
        emulator._output_thread = output_thread

        emulator.stop()

        output_thread.join.assert_called_once_with(timeout=1.0)
        assert emulator._output_thread is None
