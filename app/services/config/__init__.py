"""Configuration package (Facade).

Re-exports the public config types so callers import from one stable path:

	from app.services.config import AwsConfig, LambdaDeployConfig
"""

from app.services.config.aws_config import AwsConfig
from app.services.config.lambda_config import LambdaDeployConfig

__all__ = ["AwsConfig", "LambdaDeployConfig"]
