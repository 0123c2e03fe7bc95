# src/services/orders_service/dependencies.py
from fastapi import Request

from src.services.orders_service.service import OrderService


def get_order_service(request: Request) -> OrderService:
    service = getattr(request.app.state, "order_service", None)
    if service is None:
        raise RuntimeError("OrderService не инициализирован")
    return service
