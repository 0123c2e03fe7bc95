import asyncio
import sys
import os

# Add project root to path
sys.path.append(os.getcwd())

from src.config import settings
from src.infra.database import open_database


async def main():
    """Создаёт строку users для демо-учётки auth-сервиса (id из DEMO_USER_ID)."""
    auth = settings.auth

    async with open_database(settings) as db:
        print("Connected to DB")

        query = """
            INSERT INTO users (id, name, email)
            VALUES ($1, $2, NULL)
            ON CONFLICT (id) DO NOTHING
        """
        await db.execute(query, auth.DEMO_USER_ID, auth.DEMO_USERNAME)

        # Сдвигаем последовательность, чтобы следующий INSERT не столкнулся с id демо-учётки
        await db.execute("SELECT setval('users_id_seq', GREATEST((SELECT MAX(id) FROM users), 1))")
        print(f"User {auth.DEMO_USER_ID} created")


if __name__ == "__main__":
    asyncio.run(main())
