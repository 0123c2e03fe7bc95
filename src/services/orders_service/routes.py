# src/services/orders_service/routes.py
from typing import List

from fastapi import APIRouter, Depends, status

from src.common.constants import OrderEndpoints
from src.services.orders_service.dependencies import get_order_service
from src.services.orders_service.service import OrderService
from src.shared.ids import parse_path_id
from src.shared.models.order_dto import CreateOrderRequest, OrderDTO

router = APIRouter(tags=["orders"])


@router.post(OrderEndpoints.CREATE, response_model=OrderDTO, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: CreateOrderRequest,
    service: OrderService = Depends(get_order_service),
):
    return await service.create_order(order_data)


@router.get(OrderEndpoints.LIST_BY_USER, response_model=List[OrderDTO])
async def list_user_orders(
    user_id: str,
    service: OrderService = Depends(get_order_service),
):
    return await service.list_user_orders(parse_path_id(user_id))
