from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class LambdaDeployConfig:
    """Deployment workflow settings: execution role defaults and activation wait budgets."""

    _DEFAULT_ROLE_NAME: ClassVar[str] = "lambda-deployer-role"
    _DEFAULT_MANAGED_POLICY_ARN: ClassVar[str] = (
        "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"
    )
    _DEFAULT_WAIT_SECONDS: ClassVar[float] = 180.0
    _DEFAULT_POLL_INTERVAL_SECONDS: ClassVar[float] = 2.0

    role_name: str = _DEFAULT_ROLE_NAME
    managed_policy_arn: str = _DEFAULT_MANAGED_POLICY_ARN
    trust_service_principal: str = "lambda.amazonaws.com"
    activation_wait_seconds: float = _DEFAULT_WAIT_SECONDS
    update_wait_seconds: float = _DEFAULT_WAIT_SECONDS
    poll_interval_seconds: float = _DEFAULT_POLL_INTERVAL_SECONDS

    def trust_policy(self) -> dict[str, object]:
        return {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"Service": self.trust_service_principal},
                    "Action": "sts:AssumeRole",
                }
            ],
        }

    @staticmethod
    def _positive_float_from_env(name: str, default: float) -> float:
        raw = os.getenv(name)
        if not raw:
            return default
        try:
            value = float(raw)
        except ValueError as exc:
            raise ValueError(f"Invalid {name}; must be a number") from exc
        if value <= 0:
            raise ValueError(f"Invalid {name}; must be positive")
        return value

    @staticmethod
    def from_env() -> "LambdaDeployConfig":
        cls = LambdaDeployConfig
        return LambdaDeployConfig(
            role_name=os.getenv("LAMBDA_ROLE_NAME", "").strip() or cls._DEFAULT_ROLE_NAME,
            managed_policy_arn=os.getenv("LAMBDA_MANAGED_POLICY_ARN", "").strip() or cls._DEFAULT_MANAGED_POLICY_ARN,
            activation_wait_seconds=cls._positive_float_from_env(
                "LAMBDA_ACTIVATION_WAIT_SECONDS", cls._DEFAULT_WAIT_SECONDS
            ),
            update_wait_seconds=cls._positive_float_from_env("LAMBDA_UPDATE_WAIT_SECONDS", cls._DEFAULT_WAIT_SECONDS),
            poll_interval_seconds=cls._positive_float_from_env(
                "LAMBDA_POLL_INTERVAL_SECONDS", cls._DEFAULT_POLL_INTERVAL_SECONDS
            ),
        )
