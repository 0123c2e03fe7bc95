# src/services/auth_service/__init__.py
"""
Auth Service: выпуск токена по учётным данным и проверка Bearer токена.
"""
