# src/services/gateway/routes.py
from fastapi import APIRouter, Depends, Request

from src.common.constants import GatewayEndpoints
from src.services.gateway.context import CallerContext, RequestTrace
from src.services.gateway.dependencies import authenticate, get_gateway_service, get_request_trace
from src.services.gateway.service import GatewayService

router = APIRouter(tags=["gateway"])


@router.post(GatewayEndpoints.LOGIN)
async def login(
    request: Request,
    trace: RequestTrace = Depends(get_request_trace),
    gateway: GatewayService = Depends(get_gateway_service),
):
    body = await request.body()
    result = await gateway.login(body, request.headers.get("content-type"), trace)
    return result.to_response()


@router.post(GatewayEndpoints.USERS)
async def create_user(
    request: Request,
    caller: CallerContext = Depends(authenticate),
    trace: RequestTrace = Depends(get_request_trace),
    gateway: GatewayService = Depends(get_gateway_service),
):
    body = await request.body()
    result = await gateway.create_user(caller, body, request.headers.get("content-type"), trace)
    return result.to_response()


@router.get(GatewayEndpoints.USER_BY_ID)
async def get_user(
    user_id: str,
    caller: CallerContext = Depends(authenticate),
    trace: RequestTrace = Depends(get_request_trace),
    gateway: GatewayService = Depends(get_gateway_service),
):
    result = await gateway.get_user(caller, user_id, trace)
    return result.to_response()


@router.post(GatewayEndpoints.ORDERS)
async def create_order(
    request: Request,
    caller: CallerContext = Depends(authenticate),
    trace: RequestTrace = Depends(get_request_trace),
    gateway: GatewayService = Depends(get_gateway_service),
):
    body = await request.body()
    result = await gateway.create_order(caller, body, trace)
    return result.to_response()


@router.get(GatewayEndpoints.USER_ORDERS)
async def list_own_orders(
    caller: CallerContext = Depends(authenticate),
    trace: RequestTrace = Depends(get_request_trace),
    gateway: GatewayService = Depends(get_gateway_service),
):
    result = await gateway.list_own_orders(caller, trace)
    return result.to_response()
