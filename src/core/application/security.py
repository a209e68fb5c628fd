"""Application-level security dependencies.

Defines auth dependencies without importing infrastructure.
The actual implementations are injected via FastAPI dependency_overrides in main.py.
"""

from typing import NoReturn


def _missing_dependency(name: str) -> NoReturn:
    raise RuntimeError(f"Missing dependency override for {name}")


async def get_current_user_id() -> str:
    """Get the current authenticated user ID.

    This stub is overridden in main.py to use JWT Bearer authentication.
    """
    _missing_dependency("get_current_user_id")


async def get_optional_user_id() -> str | None:
    """Get the caller's user ID when a bearer credential is present."""
    _missing_dependency("get_optional_user_id")
