# src/services/__init__.py
"""
Микросервисы приложения.

Архитектура:
- Каждый сервис - независимое FastAPI-приложение
- Общая PostgreSQL (таблицы users и orders)
- Синхронные вызовы по HTTP только через gateway
- Redis Pub/Sub для событий user:created и order:created

Сервисы:
- auth_service: выпуск и проверка токенов
- users_service: создание и получение пользователей
- orders_service: создание заказов и список заказов пользователя
- gateway: единая точка входа, аутентификация и проксирование
"""

__all__: list[str] = []
