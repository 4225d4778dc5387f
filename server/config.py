"""
Server settings loaded from the environment.
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class Settings:
    bot_delay_ms: int = 500  # pacing delay before the bot replies
    bot_seed: Optional[int] = None
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def bot_delay_sec(self) -> float:
        return max(self.bot_delay_ms, 0) / 1000.0

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            bot_delay_ms=_env_int("TICTACTOE_BOT_DELAY_MS", 500),
            bot_seed=_env_int("TICTACTOE_BOT_SEED", None),
            log_level=os.environ.get("TICTACTOE_LOG_LEVEL", "INFO").upper(),
            host=os.environ.get("TICTACTOE_HOST", "0.0.0.0"),
            port=_env_int("TICTACTOE_PORT", 8000),
        )


settings = Settings.from_env()
