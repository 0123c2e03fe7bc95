# src/shared/models/order_dto.py
"""
Модели заказов.

Внешнее имя поля владельца - userId (camelCase) во всех телах запросов,
ответов и событий. В Python атрибут называется user_id.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from src.common.constants import INT4_MAX


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="userId", gt=0, le=INT4_MAX, strict=True)
    item: str = Field(min_length=1)
    quantity: int = Field(gt=0, le=INT4_MAX, strict=True)


class OrderDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    user_id: int = Field(alias="userId")
    item: str
    quantity: int
