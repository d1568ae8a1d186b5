"""Announcement creation pipeline and email fan-out.

Creation runs in strictly ordered phases: attachments are uploaded, the
``announcement`` row is inserted, its ``announcement_files`` rows are linked,
and finally opted-in users are emailed. Work inside a phase is issued
concurrently. Upload and insert failures abort the request; notification
failures are logged and never reach the caller.

The announcement insert and the file-row inserts are separate PostgREST
statements. If a file row fails after the parent is committed, the
announcement stays visible with fewer attachments than were submitted.
"""

import asyncio
import logging
from typing import List, Optional

from supabase import Client

from ..config import Settings
from ..exceptions import AnnouncementPersistenceError
from ..mailer import Mailer
from ..schemas import AnnouncementCreate, AnnouncementRecord, UploadedFile, Visibility
from ..storage import AnnouncementStorage
from .email_template import render_announcement_email

logger = logging.getLogger(__name__)


class AnnouncementService:
  def __init__(
    self,
    supabase: Client,
    storage: AnnouncementStorage,
    mailer: Mailer,
    settings: Settings,
  ):
    self._supabase = supabase
    self._storage = storage
    self._mailer = mailer
    self._settings = settings

  async def create_announcement(
    self,
    data: AnnouncementCreate,
    user_id: str,
    group_id: Optional[str] = None,
  ) -> AnnouncementRecord:
    """Create an announcement, link its files and notify its audience.

    Returns the inserted announcement row. Raises ``FileUploadError`` or
    ``AnnouncementPersistenceError``; email problems are only logged.
    """
    group_id = group_id or None

    # Uploaded objects are left in the bucket if a sibling upload fails
    uploaded: List[UploadedFile] = []
    if data.files:
      uploaded = list(await asyncio.gather(
        *(self._storage.upload_file(file) for file in data.files)
      ))

    announcement = await self._insert_announcement(data, user_id, group_id)

    if uploaded:
      await asyncio.gather(
        *(self._insert_file(announcement.id, file) for file in uploaded)
      )

    try:
      await self.notify(data.title, data.content, uploaded, group_id)
    except Exception:
      logger.exception('Error sending announcement emails')

    return announcement

  async def _insert_announcement(
    self,
    data: AnnouncementCreate,
    user_id: str,
    group_id: Optional[str],
  ) -> AnnouncementRecord:
    insert_payload = {
      'title': data.title,
      'content': data.content,
      'visibility': Visibility.for_group(group_id).value,
      'group_id': group_id,
      'user_id': user_id,
    }

    try:
      response = await asyncio.to_thread(
        self._supabase.table('announcement').insert(insert_payload).execute
      )
    except Exception as e:
      logger.error('Error inserting announcement: %s', e)
      raise AnnouncementPersistenceError(f'Failed to insert announcement: {e}') from e

    if not response.data:
      logger.error('Announcement insert returned no row')
      raise AnnouncementPersistenceError('Failed to insert announcement: no row returned')

    return AnnouncementRecord.model_validate(response.data[0])

  async def _insert_file(self, announcement_id, file: UploadedFile) -> None:
    row = {'announcement_id': announcement_id, **file.model_dump()}
    try:
      await asyncio.to_thread(
        self._supabase.table('announcement_files').insert(row).execute
      )
    except Exception as e:
      logger.error('Error inserting into announcement_files: %s', e)
      raise AnnouncementPersistenceError(f'Failed to link file {file.name}: {e}') from e

  async def _audience_emails(self, group_id: Optional[str]) -> Optional[List[str]]:
    """Emails of opted-in users, limited to the group's members when given.

    Returns ``None`` when a lookup failed, which ends the fan-out.
    """
    query = (
      self._supabase.table('users')
      .select('email')
      .eq('email_notifications_enabled', True)
    )

    if group_id:
      try:
        members_resp = await asyncio.to_thread(
          self._supabase.table('group_members')
          .select('user_id')
          .eq('group_id', group_id)
          .execute
        )
      except Exception:
        logger.exception('Error fetching group members for group %s', group_id)
        return None

      member_ids = [member['user_id'] for member in members_resp.data or []]
      if not member_ids:
        return []
      query = query.in_('id', member_ids)

    try:
      users_resp = await asyncio.to_thread(query.execute)
    except Exception:
      logger.exception('Error fetching users for email notifications')
      return None

    return [user['email'] for user in users_resp.data or [] if user.get('email')]

  async def notify(
    self,
    title: str,
    content: str,
    files: List[UploadedFile],
    group_id: Optional[str] = None,
  ) -> int:
    """Email the announcement to its audience and return the number sent."""
    emails = await self._audience_emails(group_id)
    if emails is None:
      return 0
    if not emails:
      logger.info('No users to notify')
      return 0

    html = render_announcement_email(
      title,
      content,
      files,
      self._storage.get_public_url,
      self._settings.email_footer,
    )

    results = await asyncio.gather(*(self._send_one(email, title, html) for email in emails))
    sent = sum(1 for ok in results if ok)
    logger.info('Announcement "%s" emailed to %d of %d recipients', title, sent, len(emails))
    return sent

  async def _send_one(self, email: str, subject: str, html: str) -> bool:
    try:
      await asyncio.to_thread(
        self._mailer.send, self._settings.email_from, email, subject, html
      )
    except Exception:
      logger.exception('Failed to send email to %s', email)
      return False
    logger.info('Email sent to %s', email)
    return True
