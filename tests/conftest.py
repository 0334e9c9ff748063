from __future__ import annotations

from typing import Any, Iterable, Optional

import pytest

from app.services.activation_waiter import ActivationWaiter
from app.services.config import LambdaDeployConfig
from app.services.errors import FunctionNotFoundError, RoleAlreadyExistsError, RoleNotFoundError
from app.services.function_deployment_service import FunctionDeploymentService
from app.services.lambda_service import InvocationResponse
from app.services.packager import FunctionArtifact
from app.services.role_resolver import RoleResolver


def role_arn(role_name: str) -> str:
    return f"arn:aws:iam::000000000000:role/{role_name}"


def function_arn(function_name: str) -> str:
    return f"arn:aws:lambda:us-east-1:000000000000:function:{function_name}"


class FakeClock:
    """Monotonic clock whose time only moves when `sleep` is awaited."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeIamService:
    def __init__(self, existing: Iterable[str] = ()) -> None:
        self.roles: dict[str, dict[str, Any]] = {
            name: {"RoleName": name, "Arn": role_arn(name)} for name in existing
        }
        self.get_calls: list[str] = []
        self.create_calls: list[tuple[str, dict[str, Any]]] = []
        self.attach_calls: list[tuple[str, str]] = []
        self.get_error: Optional[Exception] = None
        self.race_on_create = False

    async def get_role(self, role_name: str) -> dict[str, Any]:
        self.get_calls.append(role_name)
        if self.get_error is not None:
            raise self.get_error
        if role_name not in self.roles:
            raise RoleNotFoundError("role not found", operation="get_role", resource_name=role_name)
        return self.roles[role_name]

    async def create_role(self, role_name: str, assume_role_policy: dict[str, Any]) -> dict[str, Any]:
        self.create_calls.append((role_name, assume_role_policy))
        if self.race_on_create:
            # Another creator got there between our lookup and our create.
            self.roles[role_name] = {"RoleName": role_name, "Arn": role_arn(role_name)}
            raise RoleAlreadyExistsError("role exists", operation="create_role", resource_name=role_name)
        role = {"RoleName": role_name, "Arn": role_arn(role_name)}
        self.roles[role_name] = role
        return role

    async def attach_role_policy(self, role_name: str, policy_arn: str) -> None:
        self.attach_calls.append((role_name, policy_arn))


class FakeLambdaService:
    """In-memory compute collaborator with scripted state sequences.

    Once a scripted sequence runs out the last state is repeated.
    """

    def __init__(self) -> None:
        self.functions: dict[str, FunctionArtifact] = {}
        self.create_calls: list[tuple[str, str, FunctionArtifact]] = []
        self.update_calls: list[tuple[str, bytes]] = []
        self.invoke_calls: list[tuple[str, bytes]] = []
        self.delete_calls: list[str] = []
        self.states: list[str] = ["Active"]
        self.update_statuses: list[str] = ["Successful"]
        self.state_polls = 0
        self.status_polls = 0
        self.create_error: Optional[Exception] = None
        self.invoke_response: Optional[InvocationResponse] = None
        self.echo = True

    async def create_function(self, *, function_name: str, role_arn: str, artifact: FunctionArtifact) -> dict[str, Any]:
        self.create_calls.append((function_name, role_arn, artifact))
        if self.create_error is not None:
            raise self.create_error
        self.functions[function_name] = artifact
        return {"FunctionName": function_name, "FunctionArn": function_arn(function_name), "State": "Pending"}

    async def update_function_code(self, *, function_name: str, archive: bytes) -> dict[str, Any]:
        self.update_calls.append((function_name, archive))
        if function_name not in self.functions:
            raise FunctionNotFoundError(
                "function not found", operation="update_function_code", resource_name=function_name
            )
        return {"FunctionName": function_name, "FunctionArn": function_arn(function_name)}

    @staticmethod
    def _next(sequence: list[str], index: int) -> str:
        return sequence[min(index, len(sequence) - 1)]

    async def get_function_state(self, function_name: str) -> str:
        state = self._next(self.states, self.state_polls)
        self.state_polls += 1
        return state

    async def get_last_update_status(self, function_name: str) -> str:
        status = self._next(self.update_statuses, self.status_polls)
        self.status_polls += 1
        return status

    async def get_function_runtime(self, function_name: str) -> str:
        if function_name not in self.functions:
            raise FunctionNotFoundError(
                "function not found", operation="get_function_runtime", resource_name=function_name
            )
        return self.functions[function_name].runtime

    async def invoke(self, *, function_name: str, payload: bytes) -> InvocationResponse:
        self.invoke_calls.append((function_name, payload))
        if self.invoke_response is not None:
            return self.invoke_response
        return InvocationResponse(payload=payload if self.echo else b"", status_code=200)

    async def delete_function(self, *, function_name: str) -> None:
        self.delete_calls.append(function_name)
        if function_name not in self.functions:
            raise FunctionNotFoundError("function not found", operation="delete_function", resource_name=function_name)
        del self.functions[function_name]

    async def list_functions(self) -> list[dict[str, Any]]:
        return [
            {
                "FunctionName": name,
                "FunctionArn": function_arn(name),
                "Runtime": artifact.runtime,
                "Handler": artifact.handler,
                "MemorySize": artifact.memory_size,
                "Timeout": artifact.timeout,
                "Description": artifact.description,
            }
            for name, artifact in self.functions.items()
        ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def iam() -> FakeIamService:
    return FakeIamService()


@pytest.fixture
def lambdas() -> FakeLambdaService:
    return FakeLambdaService()


@pytest.fixture
def deploy_config() -> LambdaDeployConfig:
    return LambdaDeployConfig(activation_wait_seconds=10.0, update_wait_seconds=6.0, poll_interval_seconds=1.0)


@pytest.fixture
def waiter(clock: FakeClock, deploy_config: LambdaDeployConfig) -> ActivationWaiter:
    return ActivationWaiter(
        max_wait_seconds=deploy_config.activation_wait_seconds,
        poll_interval_seconds=deploy_config.poll_interval_seconds,
        clock=clock,
        sleep=clock.sleep,
    )


@pytest.fixture
def deployment_service(
    iam: FakeIamService,
    lambdas: FakeLambdaService,
    deploy_config: LambdaDeployConfig,
    waiter: ActivationWaiter,
) -> FunctionDeploymentService:
    return FunctionDeploymentService(
        lambdas=lambdas,  # type: ignore[arg-type]
        roles=RoleResolver(iam=iam),  # type: ignore[arg-type]
        config=deploy_config,
        waiter=waiter,
    )
