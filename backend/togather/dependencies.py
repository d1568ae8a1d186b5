from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from supabase import Client, create_client

from .config import Settings, get_settings
from .mailer import Mailer, ResendMailer
from .services.announcements import AnnouncementService
from .storage import AnnouncementStorage

SettingsDep = Annotated[Settings, Depends(get_settings)]


@lru_cache()
def _supabase_client(url: str, key: str) -> Client:
  return create_client(url, key)


@lru_cache()
def _resend_mailer(api_key: str) -> ResendMailer:
  return ResendMailer(api_key)


def get_supabase_client(settings: SettingsDep) -> Client:
  return _supabase_client(settings.supabase_url, settings.supabase_service_key)


SupabaseClientDep = Annotated[Client, Depends(get_supabase_client)]


def get_mailer(settings: SettingsDep) -> Mailer:
  return _resend_mailer(settings.resend_api_key)


MailerDep = Annotated[Mailer, Depends(get_mailer)]


def get_storage(supabase: SupabaseClientDep, settings: SettingsDep) -> AnnouncementStorage:
  return AnnouncementStorage(supabase, settings.storage_bucket)


def get_announcement_service(
  supabase: SupabaseClientDep,
  storage: Annotated[AnnouncementStorage, Depends(get_storage)],
  mailer: MailerDep,
  settings: SettingsDep,
) -> AnnouncementService:
  return AnnouncementService(supabase, storage, mailer, settings)


AnnouncementServiceDep = Annotated[AnnouncementService, Depends(get_announcement_service)]
