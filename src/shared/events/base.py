# src/shared/events/base.py
"""
Публикация доменных событий "создано" и log-only подписчики.

Публикация - побочный эффект с негарантированной доставкой, а не часть
успеха запроса. Окно рассогласования принимается как свойство системы:
- запись сохранена, а событие ещё не опубликовано (или потеряно)
- событие опубликовано, а ответ клиенту не дошёл
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from src.common.constants import TypeMsg
from src.common.logger import log_info, log_warning
from src.infra.event_bus import DomainEvent, EventBusError, EventHandler

if TYPE_CHECKING:
    from src.infra.event_bus import EventBus


def serialize_entity(entity: BaseModel) -> bytes:
    """JSON сущности в том же виде, в каком её получает клиент."""
    return entity.model_dump_json(by_alias=True).encode("utf-8")


async def publish_created(bus: "EventBus", channel: str, entity: BaseModel) -> bool:
    """
    Публикует созданную сущность в канал.
    Ошибка шины логируется и не пробрасывается.

    Returns:
        True, если сообщение ушло в Redis
    """
    try:
        await bus.publish(channel, serialize_entity(entity))
    except EventBusError as e:
        await log_warning(f"Событие {channel} не опубликовано, запись сохранена: {e}")
        return False
    return True


def make_log_handler(service_name: str) -> EventHandler:
    """Обработчик, который только пишет полученное событие в лог."""

    async def handle(event: DomainEvent) -> None:
        await log_info(
            f"[{service_name}] {event.channel} {event.payload.decode('utf-8', errors='replace')}",
            type_msg=TypeMsg.INFO,
        )

    return handle


async def start_log_subscriber(bus: "EventBus", channel: str, service_name: str) -> bool:
    """
    Подписывает log-only обработчик на канал.
    Сбой подписки не мешает сервису обрабатывать запросы.
    """
    try:
        await bus.subscribe(channel, make_log_handler(service_name))
    except EventBusError as e:
        await log_warning(f"[{service_name}] Не удалось подписаться на {channel}: {e}")
        return False
    return True
