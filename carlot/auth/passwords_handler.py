import asyncio
import logging

import bcrypt

from carlot.core.environment import get_bcrypt_rounds

logger = logging.getLogger(__name__)

# Stored for profiles that can only be reached through impersonation or seeding
UNUSABLE_PASSWORD = "!"


def is_usable_hash(hashed_password: str) -> bool:
    return bool(hashed_password) and hashed_password.startswith("$2")


async def hash_password_async(password: str) -> str:
    # bcrypt is CPU bound; keep it off the event loop
    loop = asyncio.get_running_loop()
    salt = await loop.run_in_executor(None, bcrypt.gensalt, get_bcrypt_rounds())
    hashed_password = await loop.run_in_executor(
        None, bcrypt.hashpw, password.encode('utf-8'), salt
    )
    return hashed_password.decode('utf-8')


async def verify_password_async(password: str, hashed_password: str) -> bool:
    """False for a wrong password and for accounts without a usable hash."""
    if not is_usable_hash(hashed_password):
        return False
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(
            None, bcrypt.checkpw, password.encode('utf-8'), hashed_password.encode('utf-8')
        )
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False
