"""
Pytest configuration for the announcements backend.

Dummy credentials are set before the application is imported, since
``togather.main`` builds the app (and reads settings) at import time.
"""

import os

os.environ.setdefault('SUPABASE_URL', 'https://dummy-project.supabase.co')
os.environ.setdefault('SUPABASE_KEY', 'dummy-service-key-for-tests')
os.environ.setdefault('RESEND_API_KEY', 're_dummy_key_for_tests')

import pytest
from fastapi.testclient import TestClient

from togather.config import get_settings
from togather.dependencies import get_mailer, get_supabase_client
from togather.main import create_app
from togather.services.announcements import AnnouncementService
from togather.storage import AnnouncementStorage

from .fakes import FakeAuthUser, FakeMailer, FakeSupabase

AUTHOR_TOKEN = 'author-token'
AUTHOR_ID = 'user-author'


@pytest.fixture
def settings():
  return get_settings()


@pytest.fixture
def supabase():
  fake = FakeSupabase()
  fake.auth.tokens[AUTHOR_TOKEN] = FakeAuthUser(AUTHOR_ID, 'author@example.com')
  fake.add_row('users', {'id': AUTHOR_ID, 'name': 'Author', 'email': 'author@example.com', 'email_notifications_enabled': False})
  return fake


@pytest.fixture
def mailer():
  return FakeMailer()


@pytest.fixture
def storage(supabase, settings):
  return AnnouncementStorage(supabase, settings.storage_bucket)


@pytest.fixture
def service(supabase, storage, mailer, settings):
  return AnnouncementService(supabase, storage, mailer, settings)


@pytest.fixture
def client(supabase, mailer):
  app = create_app()
  app.dependency_overrides[get_supabase_client] = lambda: supabase
  app.dependency_overrides[get_mailer] = lambda: mailer
  return TestClient(app)


@pytest.fixture
def auth_headers():
  return {'Authorization': f'Bearer {AUTHOR_TOKEN}'}
