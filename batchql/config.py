"""Runtime settings read from the environment (and a ``.env`` file if present)."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Union

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def _flag(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    # False, True, or "debug" (SQLAlchemy echo also logs parameters)
    sql_echo: Union[bool, str] = False
    max_depth: int = 5
    seed: bool = True
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> 'Settings':
        if dotenv:
            load_dotenv()
        echo_raw = os.getenv("BATCHQL_SQL_ECHO", "0").strip().lower()
        echo: Union[bool, str] = "debug" if echo_raw == "debug" else _flag(echo_raw)
        try:
            max_depth = int(os.getenv("BATCHQL_MAX_DEPTH", "5"))
            port = int(os.getenv("BATCHQL_PORT", "8000"))
        except ValueError as e:
            raise ValueError(f"BATCHQL_MAX_DEPTH and BATCHQL_PORT must be integers: {e}") from None
        return cls(
            database_url=os.getenv("BATCHQL_DATABASE_URL", DEFAULT_DATABASE_URL),
            sql_echo=echo,
            max_depth=max_depth,
            seed=_flag(os.getenv("BATCHQL_SEED", "1")),
            log_level=os.getenv("BATCHQL_LOG_LEVEL", "INFO").upper(),
            host=os.getenv("BATCHQL_HOST", "127.0.0.1"),
            port=port,
        )


__all__ = ['Settings', 'DEFAULT_DATABASE_URL']
