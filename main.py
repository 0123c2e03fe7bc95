#!/usr/bin/env python3
# main.py
"""
Главная точка входа orderflow.
Запускает один из сервисов (auth, users, orders, gateway) или все сразу.
"""

from __future__ import annotations

import asyncio
import signal
import sys

from src.config import settings
from src.common.logger import setup_logging, log_info, log_error
from src.common.constants import ServiceName, TypeMsg


# Глобальный флаг для graceful shutdown
_shutdown_event: asyncio.Event | None = None
_running_tasks: list[asyncio.Task] = []

VALID_MODES = tuple(mode.value for mode in ServiceName)


def setup_signal_handlers() -> None:
    """Настраивает обработчики сигналов для graceful shutdown."""
    global _shutdown_event
    _shutdown_event = asyncio.Event()

    def signal_handler(sig: int) -> None:
        """Обработчик сигналов SIGINT и SIGTERM."""
        if _shutdown_event and not _shutdown_event.is_set():
            print(f"\nПолучен сигнал остановки (sig={sig}), завершаем работу...")
            _shutdown_event.set()
            # Отменяем все запущенные задачи
            for task in _running_tasks:
                if not task.done():
                    task.cancel()

    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))
    except NotImplementedError:
        # Windows не поддерживает add_signal_handler
        signal.signal(signal.SIGINT, lambda s, f: signal_handler(s))
        signal.signal(signal.SIGTERM, lambda s, f: signal_handler(s))


# (app path, host, port) для каждого сервиса
def service_targets() -> dict[str, tuple[str, str, int]]:
    deployment = settings.deployment
    return {
        ServiceName.AUTH.value: (
            "src.services.auth_service.app:app", "0.0.0.0", deployment.AUTH_SERVICE_PORT,
        ),
        ServiceName.USERS.value: (
            "src.services.users_service.app:app", "0.0.0.0", deployment.USERS_SERVICE_PORT,
        ),
        ServiceName.ORDERS.value: (
            "src.services.orders_service.app:app", "0.0.0.0", deployment.ORDERS_SERVICE_PORT,
        ),
        ServiceName.GATEWAY.value: (
            "src.services.gateway.app:app", deployment.GATEWAY_HOST, deployment.GATEWAY_PORT,
        ),
    }


async def run_service(name: str) -> None:
    """Запускает uvicorn сервер одного сервиса."""
    import uvicorn

    app_path, host, port = service_targets()[name]

    await log_info(f"Запуск {name} на {host}:{port}...", type_msg=TypeMsg.INFO)

    config = uvicorn.Config(
        app_path,
        host=host,
        port=port,
        log_level="debug" if settings.system.DEBUG else "info",
    )

    server = uvicorn.Server(config)
    try:
        await server.serve()
    except asyncio.CancelledError:
        await log_info(f"{name}: graceful shutdown", type_msg=TypeMsg.DEBUG)
        await server.shutdown()
        raise


async def main(mode: str | None = None) -> None:
    """
    Главная функция запуска.

    Args:
        mode: Режим запуска (auth_service, users_service, orders_service, gateway, all).
              Если None, берётся COMPONENT_MODE из настроек.
    """
    global _running_tasks

    setup_logging()
    setup_signal_handlers()

    if mode is None:
        mode = settings.system.COMPONENT_MODE

    if mode not in VALID_MODES:
        await log_error(f"Неизвестный режим: {mode}")
        return

    await log_info(
        f"orderflow v{settings.system.VERSION}: запуск в режиме '{mode}'",
        type_msg=TypeMsg.INFO,
    )

    names = list(service_targets()) if mode == ServiceName.ALL.value else [mode]
    _running_tasks = [asyncio.create_task(run_service(name), name=name) for name in names]

    try:
        await asyncio.gather(*_running_tasks, return_exceptions=True)
    except asyncio.CancelledError:
        await log_info("Задача отменена, выполняется graceful shutdown", type_msg=TypeMsg.INFO)
    finally:
        for task in _running_tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*_running_tasks, return_exceptions=True)
        _running_tasks.clear()
        await log_info("Приложение остановлено", type_msg=TypeMsg.INFO)


def print_usage() -> None:
    """Выводит справку по использованию."""
    print("""
orderflow — gateway, auth, users, orders

Использование:
    python main.py [mode]

Режимы:
    auth_service           — Auth Service (:3000)
    users_service          — Users Service (:3001)
    orders_service         — Orders Service (:3002)
    gateway                — Gateway (:3003)
    all                    — Все сервисы в одном процессе

Без аргумента режим берётся из COMPONENT_MODE.
    """)


if __name__ == "__main__":
    mode = None

    if len(sys.argv) > 1:
        arg = sys.argv[1].lower()
        if arg in ("--help", "-h"):
            print_usage()
            sys.exit(0)
        elif arg in VALID_MODES:
            mode = arg
        else:
            print(f"Неизвестный режим: {arg}")
            print_usage()
            sys.exit(1)

    try:
        asyncio.run(main(mode))
    except KeyboardInterrupt:
        pass
