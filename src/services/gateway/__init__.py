# src/services/gateway/__init__.py
"""
Gateway: единственная внешняя точка входа.

Защищённые маршруты сначала проверяют токен в Auth Service,
затем проксируют запрос в доменный сервис и ретранслируют ответ.
"""
