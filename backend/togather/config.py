from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
  """Application configuration loaded from environment variables."""

  model_config = SettingsConfigDict(
    env_file='.env',
    env_file_encoding='utf-8',
    case_sensitive=False,
  )

  supabase_url: str = Field(..., validation_alias='SUPABASE_URL')
  supabase_service_key: str = Field(..., validation_alias='SUPABASE_KEY')
  resend_api_key: str = Field(..., validation_alias='RESEND_API_KEY')

  cors_allow_origins: str = Field(
    default='https://localhost:5173',
    validation_alias='CORS_ALLOW_ORIGINS',
  )
  frontend_url: Optional[str] = Field(default=None, validation_alias='FRONTEND_URL')
  port: int = Field(default=3000, validation_alias='PORT')

  storage_bucket: str = Field(default='Uroboros', validation_alias='STORAGE_BUCKET')
  email_from: str = Field(
    default='On behalf of the Archdiocese of Lipa <archdioceseoflipa@togather.app>',
    validation_alias='EMAIL_FROM',
  )
  email_footer: str = Field(
    default='This is an automated message from the Archdiocese of Lipa.',
    validation_alias='EMAIL_FOOTER',
  )
  max_upload_bytes: int = Field(default=10 * 1024 * 1024, validation_alias='MAX_UPLOAD_BYTES')
  log_level: str = Field(default='INFO', validation_alias='LOG_LEVEL')

  @field_validator('log_level', mode='after')
  @classmethod
  def normalize_log_level(cls, v):
    return v.upper()

  @property
  def cors_origins_list(self) -> List[str]:
    origins = [origin.strip() for origin in self.cors_allow_origins.split(',') if origin.strip()]
    if self.frontend_url and self.frontend_url not in origins:
      origins.append(self.frontend_url)
    return origins


@lru_cache()
def get_settings() -> Settings:
  return Settings()
