import asyncio
import getpass
import os

from dotenv import load_dotenv

from account_service.core.app_factory import build_container
from account_service.core.config import Settings


async def main() -> None:
    load_dotenv()

    email = os.getenv("ADMIN_EMAIL") or input("Administrator email: ").strip()
    password = os.getenv("ADMIN_PASSWORD") or getpass.getpass("Administrator password: ").strip()
    if not email or not password:
        raise RuntimeError("Set ADMIN_EMAIL and ADMIN_PASSWORD in the environment or answer the prompts.")

    container = build_container(Settings())
    try:
        existing = container.users.find_by_email(email)
        if existing:
            print(f"Account {email} already exists with role {existing.role.value}.")
            return
        user = await container.auth_service.ensure_default_admin(email, password)
        print("Administrator created:", user.id if user else email)
    finally:
        await container.auth_service.aclose()
        container.users.close()


if __name__ == "__main__":
    asyncio.run(main())
