#!/usr/bin/env python3
# entrypoint_gateway.py
"""
Точка входа для Gateway.
Порт: 3003
"""

import asyncio
import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

from main import main


if __name__ == "__main__":
    try:
        asyncio.run(main(mode="gateway"))
    except KeyboardInterrupt:
        pass
