from functools import lru_cache
from typing import List, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # APP
    APP_NAME: str = "MilkShakeMix PDV"
    ENV: str = "development"
    DEBUG: bool = True

    # Banco de documentos (SQLAlchemy)
    DATABASE_URL: str = "sqlite:///./pdv.db"

    # Cloudinary (hospedagem de imagens)
    CLOUDINARY_API_URL: str = "https://api.cloudinary.com/v1_1"
    CLOUDINARY_CLOUD_NAME: str = "dld3mzmbq"
    CLOUDINARY_UPLOAD_PRESET: str = "milkshake_unsigned"
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_TIMEOUT: float = 30.0

    # Cupons (JSON: {"CODIGO": {"type": "percent|value", "value": 10, "label": "..."}})
    COUPONS_FILE: Optional[str] = None

    # CORS (aceita string separada por vírgulas no .env)
    CORS_ORIGINS: Optional[str] = None

    # Caixa: sessões sem uso por mais que isso (segundos) são descartadas
    CHECKOUT_SESSION_TTL: float = 4 * 60 * 60

    # CACHE HTTP
    CACHE_MAX_AGE: int = 15
    CACHE_SWR: int = 60

    # LOGGING
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: Optional[str] = None

    @field_validator("LOG_LEVEL")
    @classmethod
    def _log_level_upper(cls, v: str) -> str:
        return (v or "INFO").upper()

    @property
    def CORS_ORIGINS_LIST(self) -> List[str]:
        v = self.CORS_ORIGINS
        if not v:
            return []
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # ignora chaves extras no .env
    )

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
