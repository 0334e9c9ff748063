from __future__ import annotations

from app.services.config import AwsConfig, LambdaDeployConfig
from app.services.function_deployment_service import FunctionDeploymentService
from app.services.iam_service import IamService
from app.services.lambda_service import LambdaService
from app.services.role_resolver import RoleResolver


def get_iam_service() -> IamService:
    """FastAPI dependency provider for an IamService instance."""

    return IamService(AwsConfig.from_env())


def get_lambda_service() -> LambdaService:
    """FastAPI dependency provider for a LambdaService instance."""

    return LambdaService(AwsConfig.from_env())


def get_role_resolver() -> RoleResolver:
    return RoleResolver(iam=get_iam_service())


def get_function_deployment_service() -> FunctionDeploymentService:
    """Dependency provider wiring the deploy/update/invoke workflow from the environment."""

    return FunctionDeploymentService(
        lambdas=get_lambda_service(),
        roles=get_role_resolver(),
        config=LambdaDeployConfig.from_env(),
    )
