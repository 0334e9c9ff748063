from __future__ import annotations

import json
import logging
from typing import Any, Optional

import aioboto3
from botocore.exceptions import ClientError

from app.services.config import AwsConfig
from app.services.errors import RemoteFailureError, RoleAlreadyExistsError, RoleNotFoundError

logger = logging.getLogger(__name__)


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class IamService:
    """Identity collaborator: the few IAM role calls the deployment workflow needs."""

    def __init__(self, config: AwsConfig, *, session: Optional[Any] = None) -> None:
        self._config = config
        self._session = session or aioboto3.Session()

    def _client(self) -> Any:
        return self._session.client(
            "iam",
            region_name=self._config.region_name,
            endpoint_url=self._config.endpoint_url,
        )

    async def get_role(self, role_name: str) -> dict[str, Any]:
        """Return the role description (``Arn``, ``RoleName``, ...).

        Raises:
            RoleNotFoundError: if no role has that name.
            RemoteFailureError: for any other IAM failure.
        """

        try:
            iam_client: Any = self._client()
            async with iam_client as iam:
                response = await iam.get_role(RoleName=role_name)
            return response["Role"]
        except ClientError as exc:
            if _error_code(exc) == "NoSuchEntity":
                raise RoleNotFoundError(str(exc), operation="get_role", resource_name=role_name) from exc
            logger.exception("IAM get_role failed (role=%s)", role_name)
            raise RemoteFailureError(str(exc), operation="get_role", resource_name=role_name) from exc
        except Exception as exc:
            logger.exception("IAM get_role failed (role=%s)", role_name)
            raise RemoteFailureError(str(exc), operation="get_role", resource_name=role_name) from exc

    async def create_role(self, role_name: str, assume_role_policy: dict[str, Any]) -> dict[str, Any]:
        try:
            iam_client: Any = self._client()
            async with iam_client as iam:
                response = await iam.create_role(
                    RoleName=role_name,
                    AssumeRolePolicyDocument=json.dumps(assume_role_policy),
                )
            logger.debug("IAM create_role response: %s", response.get("Role"))
            return response["Role"]
        except ClientError as exc:
            if _error_code(exc) == "EntityAlreadyExists":
                raise RoleAlreadyExistsError(str(exc), operation="create_role", resource_name=role_name) from exc
            logger.exception("IAM create_role failed (role=%s)", role_name)
            raise RemoteFailureError(str(exc), operation="create_role", resource_name=role_name) from exc
        except Exception as exc:
            logger.exception("IAM create_role failed (role=%s)", role_name)
            raise RemoteFailureError(str(exc), operation="create_role", resource_name=role_name) from exc

    async def attach_role_policy(self, role_name: str, policy_arn: str) -> None:
        try:
            iam_client: Any = self._client()
            async with iam_client as iam:
                await iam.attach_role_policy(RoleName=role_name, PolicyArn=policy_arn)
        except Exception as exc:
            logger.exception("IAM attach_role_policy failed (role=%s, policy=%s)", role_name, policy_arn)
            raise RemoteFailureError(str(exc), operation="attach_role_policy", resource_name=role_name) from exc
