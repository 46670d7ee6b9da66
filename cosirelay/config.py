import os
from pydantic import BaseModel, Field
from functools import lru_cache

class Settings(BaseModel):
    http_host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    http_port: int = Field(default_factory=lambda: int(os.getenv("PORT") or 8080))
    log_level: str = Field(default_factory=lambda: os.getenv("COSIRELAY_LOG_LEVEL", "DEBUG"))
    log_to_file: bool = Field(default_factory=lambda: os.getenv("COSIRELAY_LOG_TO_FILE", "1") == "1")
    read_timeout: float = 2.0             # сек, одно чтение ответа
    write_timeout: float = 2.0            # сек, одна запись
    read_buffer_size: int = Field(256, ge=256)

@lru_cache
def get_settings() -> Settings:
    return Settings()
