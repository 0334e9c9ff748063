from __future__ import annotations

import logging
from typing import Any

from app.services.errors import RoleAlreadyExistsError, RoleNotFoundError
from app.services.iam_service import IamService

logger = logging.getLogger(__name__)


class RoleResolver:
    """Fetch-or-create for the execution role a function runs as.

    The role is a shared, long-lived resource: it is created on first use and never
    deleted here. Only a "not found" lookup leads to creation; every other lookup
    failure propagates unchanged.
    """

    def __init__(self, *, iam: IamService) -> None:
        self._iam = iam

    async def ensure_role(self, role_name: str, trust_policy: dict[str, Any], managed_policy_arn: str) -> str:
        try:
            role = await self._iam.get_role(role_name)
        except RoleNotFoundError:
            return await self._create_role(role_name, trust_policy, managed_policy_arn)

        logger.info("Using existing Lambda role: %s", role["Arn"])
        return role["Arn"]

    async def _create_role(self, role_name: str, trust_policy: dict[str, Any], managed_policy_arn: str) -> str:
        try:
            role = await self._iam.create_role(role_name, trust_policy)
            logger.info("Created new Lambda role: %s", role["Arn"])
        except RoleAlreadyExistsError:
            # A concurrent deploy created it first.
            logger.info("Role %s was created concurrently; reusing it", role_name)
            role = await self._iam.get_role(role_name)

        # Attaching an already attached managed policy is a no-op on IAM.
        await self._iam.attach_role_policy(role_name, managed_policy_arn)
        return role["Arn"]
