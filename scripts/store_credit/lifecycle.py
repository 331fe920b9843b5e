"""Install or uninstall the store credit feature against the configured database.

Install is idempotent: it seeds the ``store_credit_value_per_unit`` custom
field, the "Refund as Store Credits" order-return state and the default
value-per-credit config row. Tables must already exist (run
``alembic upgrade head`` first).

Usage examples:
  # Install
  ENV_FILE=.env python scripts/store_credit/lifecycle.py install

  # Uninstall, keep balances and history
  ENV_FILE=.env python scripts/store_credit/lifecycle.py uninstall --keep-user-data

  # Uninstall and delete all store credit data
  ENV_FILE=.env python scripts/store_credit/lifecycle.py uninstall
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT))


def _load_env_file() -> None:
    env_file = os.environ.get("ENV_FILE", ".env")
    env_path = (PROJECT_ROOT / env_file).resolve()
    if not env_path.exists():
        if os.environ.get("DATABASE_URL"):
            print(f"Env file not found at {env_path}; using existing environment vars.")
            return
        raise FileNotFoundError(f"Env file not found: {env_path}")
    load_dotenv(env_path, override=True)


async def _run(action: str, keep_user_data: bool) -> None:
    from libs.common.logging import configure_logging
    from libs.db.config import AsyncSessionLocal, engine
    from services.store_credit_service.services import lifecycle

    configure_logging()
    try:
        async with AsyncSessionLocal() as session:
            if action == "install":
                await lifecycle.install(session)
            else:
                await lifecycle.uninstall(session, keep_user_data=keep_user_data)
    finally:
        await engine.dispose()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("action", choices=("install", "uninstall"))
    parser.add_argument(
        "--keep-user-data",
        action="store_true",
        help="On uninstall, keep balances, history and custom field relations.",
    )
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    _load_env_file()
    asyncio.run(_run(args.action, args.keep_user_data))
    print(f"Store credit {args.action} complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
