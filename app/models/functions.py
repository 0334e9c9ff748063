from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class DeployFunctionRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Lambda function name")
    code: str = Field(..., min_length=1, description="Plain-text source of the handler file")
    runtime: str = "python3.12"
    handler: str = "index.handler"
    timeout: int = Field(default=10, ge=1, le=900)
    memory_size: int = Field(default=128, ge=128, le=10240)
    description: str = "Deployed by lambda-deployer"
    role_name: Optional[str] = None


class UpdateFunctionCodeRequest(BaseModel):
    code: str = Field(..., min_length=1)
    runtime: Optional[str] = None


class InvokeFunctionRequest(BaseModel):
    payload: Any = Field(default_factory=dict)


class FunctionArnResponse(BaseModel):
    name: str
    arn: str


class InvokeFunctionResponse(BaseModel):
    name: str
    result: Any


class FunctionSummary(BaseModel):
    name: str
    arn: Optional[str] = None
    runtime: Optional[str] = None
    handler: Optional[str] = None
    memory_size: Optional[int] = None
    timeout: Optional[int] = None
    description: Optional[str] = None
    last_modified: Optional[str] = None

    @staticmethod
    def from_lambda_function(obj: dict[str, Any]) -> "FunctionSummary":
        return FunctionSummary(
            name=str(obj.get("FunctionName")),
            arn=obj.get("FunctionArn"),
            runtime=obj.get("Runtime"),
            handler=obj.get("Handler"),
            memory_size=obj.get("MemorySize"),
            timeout=obj.get("Timeout"),
            description=obj.get("Description"),
            last_modified=obj.get("LastModified"),
        )


class FunctionListResponse(BaseModel):
    count: int
    functions: list[FunctionSummary]


class DeleteResponse(BaseModel):
    name: str
    deleted: bool
