"""
Definition Registrar

Creates every configured state machine on the local emulator through its
Step Functions admin API and exposes the resulting ARNs as environment
variables for tools started afterwards (e.g. serverless-offline handlers).
"""

import json
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, MutableMapping, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from colorama import Fore, Style

from ..exceptions import RegistrationError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://localhost:8083"
ENV_PREFIX = "OFFLINE_STEP_FUNCTIONS_ARN_"


def environment_variable_name(state_machine_arn: str) -> str:
    """
    Name of the environment variable publishing a state machine ARN.

    The suffix is the 7th colon-delimited segment of the ARN, i.e. the state
    machine name in ``arn:aws:states:<region>:<account>:stateMachine:<name>``.
    """
    return f"{ENV_PREFIX}{state_machine_arn.split(':')[6]}"


def dummy_role_arn(account_id: str) -> str:
    return f"arn:aws:iam::{account_id}:role/DummyRole"


class DefinitionRegistrar:
    """
    Registers state machine definitions with Step Functions Local.

    Attributes:
        account_id (str): Account id used for the placeholder execution role
        SFN_client: boto3 Step Functions client bound to the emulator endpoint
    """

    def __init__(self, account_id: str, region: str, endpoint: str = DEFAULT_ENDPOINT):
        self.account_id = str(account_id)
        self.region = region
        self.endpoint = endpoint
        # The emulator does not check credentials, but botocore refuses to sign without any
        self.SFN_client = boto3.client(
            "stepfunctions",
            endpoint_url=endpoint,
            region_name=region,
            aws_access_key_id="offline",
            aws_secret_access_key="offline",
        )

    def create_state_machine(self, name: str, state_machine: Dict[str, Any]) -> str:
        """
        Create a single state machine on the emulator.

        Args:
            name: State machine name
            state_machine: stateMachines entry holding a ``definition`` tree

        Returns:
            str: ARN of the created state machine

        Raises:
            RegistrationError: If the emulator rejects the request
        """
        definition = (state_machine or {}).get("definition")
        try:
            response = self.SFN_client.create_state_machine(
                definition=json.dumps(definition),
                name=name,
                roleArn=dummy_role_arn(self.account_id),
            )
        except (ClientError, BotoCoreError) as e:
            raise RegistrationError(name, str(e)) from e

        state_machine_arn = response["stateMachineArn"]
        logger.info("Created state machine %s: %s", name, state_machine_arn)
        return state_machine_arn

    def create_endpoints(self, state_machines: Dict[str, Any]) -> Dict[str, str]:
        """
        Create all state machines concurrently and collect their ARNs.

        One worker per state machine keeps every creation in flight at once; the first failure
        propagates once every request has finished, and nothing already created is rolled back.

        Args:
            state_machines: State machine name -> stateMachines entry

        Returns:
            Dict[str, str]: Environment variable name -> state machine ARN
        """
        if not state_machines:
            return {}

        with ThreadPoolExecutor(max_workers=len(state_machines)) as executor:
            futures = [
                executor.submit(self.create_state_machine, name, state_machine)
                for name, state_machine in state_machines.items()
            ]
        arns = [future.result() for future in futures]

        endpoints = {environment_variable_name(arn): arn for arn in arns}
        for variable, arn in endpoints.items():
            print(f"{Fore.GREEN}✓ {variable}={arn}{Style.RESET_ALL}")
        return endpoints

    @staticmethod
    def publish_environment(endpoints: Dict[str, str], environ: Optional[MutableMapping[str, str]] = None) -> None:
        """Set environment variables with references to ARNs."""
        if environ is None:
            environ = os.environ
        environ.update(endpoints)
