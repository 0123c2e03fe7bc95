# src/services/orders_service/__init__.py
"""
Orders Service: создание заказов и список заказов пользователя, событие order:created.
"""
