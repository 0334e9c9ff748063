from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from app.models.functions import (
    DeleteResponse,
    DeployFunctionRequest,
    FunctionArnResponse,
    FunctionListResponse,
    FunctionSummary,
    InvokeFunctionRequest,
    InvokeFunctionResponse,
    UpdateFunctionCodeRequest,
)
from app.services.dependencies import get_function_deployment_service
from app.services.function_deployment_service import DeployOptions, FunctionDeploymentService

router = APIRouter(prefix="/functions", tags=["functions"])


@router.get("", response_model=FunctionListResponse)
async def list_functions(
    svc: FunctionDeploymentService = Depends(get_function_deployment_service),
) -> FunctionListResponse:
    functions = [FunctionSummary.from_lambda_function(f) for f in await svc.list_functions()]
    return FunctionListResponse(count=len(functions), functions=functions)


@router.post("", response_model=FunctionArnResponse, status_code=201)
async def deploy_function(
    payload: DeployFunctionRequest,
    svc: FunctionDeploymentService = Depends(get_function_deployment_service),
) -> FunctionArnResponse:
    options = DeployOptions(
        runtime=payload.runtime,
        handler=payload.handler,
        timeout=payload.timeout,
        memory_size=payload.memory_size,
        description=payload.description,
        role_name=payload.role_name,
    )
    arn = await svc.deploy(payload.name, payload.code, options)
    return FunctionArnResponse(name=payload.name, arn=arn)


@router.put("/{name}/code", response_model=FunctionArnResponse)
async def update_function_code(
    payload: UpdateFunctionCodeRequest,
    name: str = Path(..., description="Lambda function name"),
    svc: FunctionDeploymentService = Depends(get_function_deployment_service),
) -> FunctionArnResponse:
    arn = await svc.update(name, payload.code, runtime=payload.runtime)
    return FunctionArnResponse(name=name, arn=arn)


@router.post("/{name}/invocations", response_model=InvokeFunctionResponse)
async def invoke_function(
    payload: InvokeFunctionRequest,
    name: str = Path(..., description="Lambda function name"),
    svc: FunctionDeploymentService = Depends(get_function_deployment_service),
) -> InvokeFunctionResponse:
    result = await svc.invoke(name, payload.payload)
    return InvokeFunctionResponse(name=name, result=result)


@router.delete("/{name}", response_model=DeleteResponse)
async def delete_function(
    name: str = Path(..., description="Lambda function name"),
    svc: FunctionDeploymentService = Depends(get_function_deployment_service),
) -> DeleteResponse:
    await svc.delete(name)
    return DeleteResponse(name=name, deleted=True)
