"""
Step Functions Local Emulator

Installs, launches and stops the AWS Step Functions Local distribution
(a Java application). The emulator does all of the workflow execution work;
this module only manages its process and waits for its admin port.
"""

import logging
import subprocess
import tarfile
import threading
from pathlib import Path
from typing import Any, List, Optional

import requests
from colorama import Fore, Style

from ..exceptions import EmulatorInstallError, EmulatorStartError, PortWaitTimeoutError
from .port_wait import wait_until_used

logger = logging.getLogger(__name__)

DOWNLOAD_URL = "https://s3.amazonaws.com/stepfunctionslocal/StepFunctionsLocal.tar.gz"
JAR_NAME = "StepFunctionsLocal.jar"
ADMIN_PORT = 8083
OUTPUT_PREFIX = "[Serverless Step Functions Local]"

# Emulator setting name -> Step Functions Local command line flag
CLI_FLAGS = {
    "region": "--region",
    "batchEndpoint": "--batch-endpoint",
    "dynamoDBEndpoint": "--dynamodb-endpoint",
    "ecsEndpoint": "--ecs-endpoint",
    "glueEndpoint": "--glue-endpoint",
    "sageMakerEndpoint": "--sagemaker-endpoint",
    "snsEndpoint": "--sns-endpoint",
    "sqsEndpoint": "--sqs-endpoint",
    "stepFunctionsEndpoint": "--step-functions-endpoint",
    "waitTimeScale": "--wait-time-scale",
}


class StepFunctionsLocal:
    """
    Manages the lifecycle of a Step Functions Local process.

    Attributes:
        path (Path): Directory holding the extracted emulator distribution
        process (subprocess.Popen): Running emulator process, None when stopped
    """

    def __init__(
        self,
        path: str,
        download_url: str = DOWNLOAD_URL,
        port: int = ADMIN_PORT,
        startup_timeout: float = 10.0,
        poll_interval: float = 0.2,
    ):
        self.path = Path(path)
        self.download_url = download_url
        self.port = port
        self.startup_timeout = startup_timeout
        self.poll_interval = poll_interval
        self.process: Optional[subprocess.Popen] = None
        self._output_thread: Optional[threading.Thread] = None

    @property
    def jar_path(self) -> Path:
        return self.path / JAR_NAME

    def is_installed(self) -> bool:
        return self.jar_path.is_file()

    def install(self) -> Path:
        """
        Download and extract Step Functions Local unless it is already installed.

        Returns:
            Path: Location of the emulator jar

        Raises:
            EmulatorInstallError: If the archive cannot be downloaded or extracted
        """
        if self.is_installed():
            logger.debug("Step Functions Local already installed at %s", self.path)
            return self.jar_path

        print(f"{Fore.CYAN}Installing Step Functions Local into {self.path}...{Style.RESET_ALL}")
        archive_path = self.path / "StepFunctionsLocal.tar.gz"
        try:
            self.path.mkdir(parents=True, exist_ok=True)
            with requests.get(self.download_url, stream=True, timeout=60) as response:
                response.raise_for_status()
                with open(archive_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=1024 * 1024):
                        if chunk:
                            f.write(chunk)
            with tarfile.open(archive_path, "r:gz") as archive:
                if hasattr(tarfile, "data_filter"):
                    archive.extractall(self.path, filter="data")
                else:
                    archive.extractall(self.path)
        except (requests.RequestException, tarfile.TarError, OSError) as e:
            raise EmulatorInstallError(f"Failed to install Step Functions Local: {e}") from e
        finally:
            if archive_path.exists():
                archive_path.unlink()

        if not self.is_installed():
            raise EmulatorInstallError(f"{JAR_NAME} not found in {self.path} after extraction")

        print(f"{Fore.GREEN}✓ Step Functions Local installed{Style.RESET_ALL}")
        return self.jar_path

    def build_command(self, account_id: str, lambda_endpoint: str, **options: Any) -> List[str]:
        """
        Build the java command line launching the emulator.

        Args:
            account_id: Account id the emulator reports in generated ARNs
            lambda_endpoint: Endpoint used for Lambda Task states
            **options: Optional settings named as in CLI_FLAGS; None values are skipped

        Returns:
            List[str]: The command, suitable for subprocess.Popen
        """
        command = ["java", "-jar", JAR_NAME, "--account", str(account_id), "--lambda-endpoint", lambda_endpoint]
        for name, flag in CLI_FLAGS.items():
            value = options.get(name)
            if value is not None:
                command.extend([flag, str(value)])
        return command

    def start(self, account_id: str, lambda_endpoint: str, **options: Any) -> subprocess.Popen:
        """
        Launch the emulator and block until its admin port accepts connections.

        Raises:
            EmulatorStartError: If java cannot be launched or the port never opens
        """
        if self.process is not None and self.process.poll() is None:
            return self.process

        command = self.build_command(account_id, lambda_endpoint, **options)
        logger.info("Starting Step Functions Local: %s", " ".join(command))
        try:
            self.process = subprocess.Popen(
                command,
                cwd=str(self.path),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as e:
            raise EmulatorStartError(f"Unable to launch Step Functions Local: {e}") from e

        self._output_thread = threading.Thread(
            target=self._pump_output, args=(self.process.stdout,), daemon=True
        )
        self._output_thread.start()

        # Wait for server to start
        try:
            wait_until_used(self.port, interval=self.poll_interval, timeout=self.startup_timeout)
        except PortWaitTimeoutError as e:
            self.stop()
            raise EmulatorStartError(f"Step Functions Local did not start: {e}") from e

        print(f"{Fore.GREEN}✓ Step Functions Local listening on port {self.port}{Style.RESET_ALL}")
        return self.process

    def _pump_output(self, stream) -> None:
        for line in iter(stream.readline, b""):
            print(f"{Fore.BLUE}{OUTPUT_PREFIX}{Style.RESET_ALL}", line.decode(errors="replace").rstrip())
        stream.close()

    def stop(self, grace_period: float = 5.0) -> None:
        """Terminate the emulator process; does nothing when it is not running."""
        if self.process is None:
            return

        process, self.process = self.process, None
        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=grace_period)
            except subprocess.TimeoutExpired:
                logger.warning("Step Functions Local did not exit in %ss, killing it", grace_period)
                process.kill()
                process.wait()
        if self._output_thread is not None:
            self._output_thread.join(timeout=1.0)
            self._output_thread = None
        print(f"{Fore.YELLOW}Step Functions Local stopped{Style.RESET_ALL}")

