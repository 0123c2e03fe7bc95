# src/services/users_service/__init__.py
"""
Users Service: создание и получение пользователей, событие user:created.
"""
