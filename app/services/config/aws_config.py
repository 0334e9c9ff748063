from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AwsConfig:
    """Client configuration shared by the IAM and Lambda collaborators.

    Passed explicitly to each service at construction time; nothing reads
    process-wide state after `from_env()` has run.
    """

    region_name: Optional[str] = None
    endpoint_url: Optional[str] = None

    @staticmethod
    def from_env() -> "AwsConfig":
        region_name = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION")
        endpoint_url = os.getenv("AWS_ENDPOINT_URL") or None

        return AwsConfig(region_name=region_name, endpoint_url=endpoint_url)
