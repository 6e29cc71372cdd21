from __future__ import annotations
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

DEFAULT_PORT = 3000

def _split(value: str) -> List[str]:
    return [part.strip() for part in value.split(',') if part.strip()]

def _port(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return DEFAULT_PORT

@dataclass(frozen=True)
class Settings:
    dictionary_path: str = 'dictionary.txt'
    cors_origins: List[str] = field(default_factory=lambda: ['*'])
    log_level: str = 'INFO'
    default_game_id: str = 'main'
    host: str = '0.0.0.0'
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            dictionary_path=os.getenv('WORDBOARD_DICTIONARY_PATH', 'dictionary.txt'),
            cors_origins=_split(os.getenv('WORDBOARD_CORS_ORIGINS', '*')) or ['*'],
            log_level=os.getenv('WORDBOARD_LOG_LEVEL', 'INFO').upper(),
            default_game_id=os.getenv('WORDBOARD_DEFAULT_GAME', 'main'),
            host=os.getenv('WORDBOARD_HOST', '0.0.0.0'),
            port=_port(os.getenv('WORDBOARD_PORT', str(DEFAULT_PORT))),
        )

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv()
    return Settings.from_env()
