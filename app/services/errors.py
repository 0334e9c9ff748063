"""Error kinds raised by the function deployment services.

Every error carries the operation that failed and the resource it targeted, so a
caller gets one message of the form ``"<operation>(<resource>) failed: <cause>"``.
"""

from __future__ import annotations

from typing import Optional, TypeVar

_E = TypeVar("_E", bound="FunctionServiceError")


class FunctionServiceError(RuntimeError):
    def __init__(
        self,
        detail: str,
        *,
        operation: Optional[str] = None,
        resource_name: Optional[str] = None,
    ) -> None:
        self.detail = detail
        self.operation = operation
        self.resource_name = resource_name
        super().__init__(self._format())

    def _format(self) -> str:
        if not self.operation:
            return self.detail
        target = self.resource_name if self.resource_name is not None else ""
        return f"{self.operation}({target}) failed: {self.detail}"

    def with_context(self: _E, operation: str, resource_name: Optional[str]) -> _E:
        """Return an error of the same kind that wraps this one under a new operation."""

        return type(self)(str(self), operation=operation, resource_name=resource_name)


class InvalidInputError(FunctionServiceError, ValueError):
    pass


class RemoteFailureError(FunctionServiceError):
    pass


class NotFoundError(RemoteFailureError):
    pass


class RoleNotFoundError(NotFoundError):
    pass


class FunctionNotFoundError(NotFoundError):
    pass


class ConflictError(RemoteFailureError):
    pass


class RoleAlreadyExistsError(ConflictError):
    pass


class ActivationFailedError(RemoteFailureError):
    pass


class ActivationTimeoutError(FunctionServiceError, TimeoutError):
    pass


class DeploymentTimeoutError(ActivationTimeoutError):
    pass


class UpdateTimeoutError(ActivationTimeoutError):
    pass


class MalformedResponseError(FunctionServiceError):
    pass
