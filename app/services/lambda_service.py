from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import aioboto3
from botocore.exceptions import ClientError

from app.services.config import AwsConfig
from app.services.errors import (
    ConflictError,
    FunctionNotFoundError,
    RemoteFailureError,
)
from app.services.packager import FunctionArtifact

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"ResourceNotFoundException"}
_CONFLICT_CODES = {"ResourceConflictException", "ResourceInUseException"}


@dataclass(frozen=True)
class InvocationResponse:
    payload: bytes
    status_code: Optional[int] = None
    function_error: Optional[str] = None


def _remote_error(exc: Exception, *, operation: str, function_name: Optional[str]) -> RemoteFailureError:
    if isinstance(exc, ClientError):
        code = str(exc.response.get("Error", {}).get("Code", ""))
        if code in _NOT_FOUND_CODES:
            return FunctionNotFoundError(str(exc), operation=operation, resource_name=function_name)
        if code in _CONFLICT_CODES:
            return ConflictError(str(exc), operation=operation, resource_name=function_name)
    logger.exception("Lambda %s failed (function=%s)", operation, function_name)
    return RemoteFailureError(str(exc), operation=operation, resource_name=function_name)


async def _read_payload(payload: Any) -> bytes:
    if payload is None:
        return b""
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    # aiobotocore returns a StreamingBody; read() is a coroutine there.
    data = payload.read()
    if hasattr(data, "__await__"):
        data = await data
    return bytes(data or b"")


class LambdaService:
    """Compute collaborator: thin async wrappers over the Lambda control and invoke APIs."""

    def __init__(self, config: AwsConfig, *, session: Optional[Any] = None) -> None:
        self._config = config
        self._session = session or aioboto3.Session()

    def _client(self) -> Any:
        return self._session.client(
            "lambda",
            region_name=self._config.region_name,
            endpoint_url=self._config.endpoint_url,
        )

    async def create_function(self, *, function_name: str, role_arn: str, artifact: FunctionArtifact) -> dict[str, Any]:
        try:
            lambda_client: Any = self._client()
            async with lambda_client as client:
                response = await client.create_function(
                    FunctionName=function_name,
                    Role=role_arn,
                    Runtime=artifact.runtime,
                    Handler=artifact.handler,
                    Code={"ZipFile": artifact.archive},
                    Description=artifact.description,
                    Timeout=artifact.timeout,
                    MemorySize=artifact.memory_size,
                )
            logger.debug("Lambda create_function response: %s", response.get("FunctionArn"))
            return response
        except Exception as exc:
            raise _remote_error(exc, operation="create_function", function_name=function_name) from exc

    async def update_function_code(self, *, function_name: str, archive: bytes) -> dict[str, Any]:
        try:
            lambda_client: Any = self._client()
            async with lambda_client as client:
                response = await client.update_function_code(FunctionName=function_name, ZipFile=archive)
            logger.debug("Lambda update_function_code response: %s", response.get("FunctionArn"))
            return response
        except Exception as exc:
            raise _remote_error(exc, operation="update_function_code", function_name=function_name) from exc

    async def _get_configuration(self, function_name: str, operation: str) -> dict[str, Any]:
        try:
            lambda_client: Any = self._client()
            async with lambda_client as client:
                return await client.get_function_configuration(FunctionName=function_name)
        except Exception as exc:
            raise _remote_error(exc, operation=operation, function_name=function_name) from exc

    async def get_function_state(self, function_name: str) -> str:
        """Return the function's lifecycle ``State`` (Pending, Active, Inactive, Failed)."""

        configuration = await self._get_configuration(function_name, "get_function_state")
        return str(configuration.get("State") or "")

    async def get_last_update_status(self, function_name: str) -> str:
        """Return ``LastUpdateStatus`` (InProgress, Successful, Failed)."""

        configuration = await self._get_configuration(function_name, "get_last_update_status")
        return str(configuration.get("LastUpdateStatus") or "")

    async def get_function_runtime(self, function_name: str) -> str:
        configuration = await self._get_configuration(function_name, "get_function_runtime")
        return str(configuration.get("Runtime") or "")

    async def invoke(self, *, function_name: str, payload: bytes) -> InvocationResponse:
        try:
            lambda_client: Any = self._client()
            async with lambda_client as client:
                response = await client.invoke(FunctionName=function_name, Payload=payload)
                body = await _read_payload(response.get("Payload"))
            return InvocationResponse(
                payload=body,
                status_code=response.get("StatusCode"),
                function_error=response.get("FunctionError"),
            )
        except Exception as exc:
            raise _remote_error(exc, operation="invoke", function_name=function_name) from exc

    async def delete_function(self, *, function_name: str) -> None:
        try:
            lambda_client: Any = self._client()
            async with lambda_client as client:
                await client.delete_function(FunctionName=function_name)
        except Exception as exc:
            raise _remote_error(exc, operation="delete_function", function_name=function_name) from exc

    async def list_functions(self) -> list[dict[str, Any]]:
        functions: list[dict[str, Any]] = []
        try:
            lambda_client: Any = self._client()
            async with lambda_client as client:
                kwargs: dict[str, Any] = {}
                while True:
                    response = await client.list_functions(**kwargs)
                    functions.extend(response.get("Functions") or [])
                    marker = response.get("NextMarker")
                    if not marker:
                        break
                    kwargs["Marker"] = marker
        except Exception as exc:
            raise _remote_error(exc, operation="list_functions", function_name=None) from exc
        return functions
