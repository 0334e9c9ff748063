from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from app.services.activation_waiter import ActivationWaiter
from app.services.config import LambdaDeployConfig
from app.services.errors import (
    ActivationTimeoutError,
    DeploymentTimeoutError,
    FunctionServiceError,
    InvalidInputError,
    MalformedResponseError,
    UpdateTimeoutError,
)
from app.services.lambda_service import LambdaService
from app.services.packager import FunctionArtifact, pack_source
from app.services.role_resolver import RoleResolver

logger = logging.getLogger(__name__)

_ACTIVE_STATES = frozenset({"Active"})
_UPDATED_STATES = frozenset({"Successful"})
_FAILED_STATES = frozenset({"Failed"})

_NO_PAYLOAD: Any = object()


@dataclass(frozen=True)
class DeployOptions:
    """Per-deploy settings. `role_name=None` means the configured default role."""

    runtime: str = "python3.12"
    handler: str = "index.handler"
    timeout: int = 10
    memory_size: int = 128
    description: str = "Deployed by lambda-deployer"
    role_name: Optional[str] = None


def _validate_name(name: str) -> None:
    if not name or not name.strip():
        raise InvalidInputError("function name must be provided")


class FunctionDeploymentService:
    """Deploy, update, invoke, list and delete Lambda functions.

    `deploy` and `update` only return an ARN after the activation waiter has seen the
    function reach its terminal success state. A timeout does not roll anything back;
    the function (and a newly created role) stay in place for a later retry.
    """

    def __init__(
        self,
        *,
        lambdas: LambdaService,
        roles: RoleResolver,
        config: LambdaDeployConfig,
        waiter: Optional[ActivationWaiter] = None,
    ) -> None:
        self._lambdas = lambdas
        self._roles = roles
        self._config = config
        self._waiter = waiter or ActivationWaiter(
            max_wait_seconds=config.activation_wait_seconds,
            poll_interval_seconds=config.poll_interval_seconds,
        )

    @staticmethod
    def _build_artifact(code: str, options: DeployOptions) -> FunctionArtifact:
        return FunctionArtifact(
            archive=pack_source(code, runtime=options.runtime),
            runtime=options.runtime,
            handler=options.handler,
            timeout=options.timeout,
            memory_size=options.memory_size,
            description=options.description,
        )

    async def deploy(self, name: str, code: str, options: Optional[DeployOptions] = None) -> str:
        options = options or DeployOptions()
        operation = "deploy"
        try:
            _validate_name(name)
            role_arn = await self._roles.ensure_role(
                options.role_name or self._config.role_name,
                self._config.trust_policy(),
                self._config.managed_policy_arn,
            )
            artifact = self._build_artifact(code, options)

            logger.info("Creating function %s (runtime=%s)", name, artifact.runtime)
            response = await self._lambdas.create_function(function_name=name, role_arn=role_arn, artifact=artifact)

            logger.info("Waiting for function %s to become Active...", name)
            await self._waiter.wait(
                name,
                self._lambdas.get_function_state,
                ready_states=_ACTIVE_STATES,
                failure_states=_FAILED_STATES,
                max_wait_seconds=self._config.activation_wait_seconds,
            )
        except ActivationTimeoutError as exc:
            raise DeploymentTimeoutError(
                f"{exc}; the function may exist but is not confirmed Active",
                operation=operation,
                resource_name=name,
            ) from exc
        except FunctionServiceError as exc:
            raise exc.with_context(operation, name) from exc

        logger.info("Function %s is now Active.", name)
        return response["FunctionArn"]

    async def update(self, name: str, code: str, *, runtime: Optional[str] = None) -> str:
        operation = "update"
        try:
            _validate_name(name)
            if not runtime:
                runtime = await self._lambdas.get_function_runtime(name)
            archive = pack_source(code, runtime=runtime)

            logger.info("Updating code of function %s", name)
            response = await self._lambdas.update_function_code(function_name=name, archive=archive)

            logger.info("Waiting for function %s update to complete...", name)
            await self._waiter.wait(
                name,
                self._lambdas.get_last_update_status,
                ready_states=_UPDATED_STATES,
                failure_states=_FAILED_STATES,
                max_wait_seconds=self._config.update_wait_seconds,
            )
        except ActivationTimeoutError as exc:
            raise UpdateTimeoutError(
                f"{exc}; the new code may be deployed but is not confirmed",
                operation=operation,
                resource_name=name,
            ) from exc
        except FunctionServiceError as exc:
            raise exc.with_context(operation, name) from exc

        logger.info("Function %s update complete.", name)
        return response["FunctionArn"]

    async def invoke(self, name: str, payload: Any = _NO_PAYLOAD) -> Any:
        """Invoke a function with a JSON payload and return its decoded JSON result.

        An omitted payload is sent as ``{}``; an explicit ``None`` is sent as ``null``.
        An empty response body decodes to ``{}``.
        """

        operation = "invoke"
        try:
            _validate_name(name)
            try:
                body = json.dumps({} if payload is _NO_PAYLOAD else payload, allow_nan=False).encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise InvalidInputError(f"payload is not JSON serializable: {exc}") from exc

            response = await self._lambdas.invoke(function_name=name, payload=body)
            if response.function_error:
                logger.warning("Function %s raised %s", name, response.function_error)

            if not response.payload:
                return {}
            try:
                return json.loads(response.payload.decode("utf-8"))
            except (UnicodeDecodeError, ValueError) as exc:
                raise MalformedResponseError(f"response is not valid JSON: {exc}") from exc
        except FunctionServiceError as exc:
            raise exc.with_context(operation, name) from exc

    async def delete(self, name: str) -> None:
        try:
            _validate_name(name)
            await self._lambdas.delete_function(function_name=name)
        except FunctionServiceError as exc:
            raise exc.with_context("delete", name) from exc
        logger.info("Deleted function %s", name)

    async def list_functions(self) -> list[dict[str, Any]]:
        try:
            return await self._lambdas.list_functions()
        except FunctionServiceError as exc:
            raise exc.with_context("list_functions", None) from exc
