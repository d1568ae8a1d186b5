import asyncio
import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from pydantic import ValidationError

from ..auth import CurrentUserDep
from ..dependencies import AnnouncementServiceDep, SettingsDep, SupabaseClientDep
from ..responses import error_response, success_response
from ..schemas import AnnouncementCreate, AnnouncementListItem, FileDescriptor, Visibility

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api/announcements', tags=['announcements'])

TitleForm = Annotated[str, Form(min_length=1)]
ContentForm = Annotated[str, Form()]
FilesForm = Annotated[Optional[List[UploadFile]], File()]


async def _decode_files(files: Optional[List[UploadFile]], max_bytes: int) -> List[FileDescriptor]:
  descriptors = []
  for upload in files or []:
    data = await upload.read()
    if len(data) > max_bytes:
      raise HTTPException(
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        f'File {upload.filename} exceeds the {max_bytes} byte limit',
      )
    descriptors.append(FileDescriptor(
      name=upload.filename or 'file',
      mime_type=upload.content_type or 'application/octet-stream',
      data=data,
    ))
  return descriptors


async def _build_payload(title, content, files, settings) -> AnnouncementCreate:
  decoded = await _decode_files(files, settings.max_upload_bytes)
  try:
    return AnnouncementCreate(title=title, content=content, files=decoded)
  except ValidationError as e:
    raise HTTPException(422, e.errors()[0]['msg'])


@router.post('', status_code=status.HTTP_201_CREATED)
async def create_announcement(
  service: AnnouncementServiceDep,
  settings: SettingsDep,
  user: CurrentUserDep,
  title: TitleForm,
  content: ContentForm = '',
  files: FilesForm = None,
  group_id: Annotated[Optional[str], Form(alias='groupId')] = None,
):
  """Create an announcement and email users who enabled notifications."""
  payload = await _build_payload(title, content, files, settings)
  try:
    announcement = await service.create_announcement(payload, user.id, group_id or None)
  except Exception as e:
    logger.exception('Error creating announcement')
    return error_response('Failed to create announcement', error=str(e))

  return success_response(
    announcement,
    status_code=status.HTTP_201_CREATED,
    message='Announcement created successfully',
  )


@router.post('/group/{group_id}', status_code=status.HTTP_201_CREATED)
async def create_group_announcement(
  group_id: str,
  service: AnnouncementServiceDep,
  supabase: SupabaseClientDep,
  settings: SettingsDep,
  user: CurrentUserDep,
  title: TitleForm,
  content: ContentForm = '',
  files: FilesForm = None,
):
  """Create a private announcement for a group the caller belongs to."""
  try:
    membership = await asyncio.to_thread(
      supabase.table('group_members')
      .select('*')
      .eq('user_id', user.id)
      .eq('group_id', group_id)
      .limit(1)
      .execute
    )
    is_member = bool(membership.data)
  except Exception:
    logger.exception('Membership lookup failed for user %s in group %s', user.id, group_id)
    is_member = False

  if not is_member:
    return error_response(
      'You do not have permission to post announcements in this group',
      status_code=status.HTTP_403_FORBIDDEN,
    )

  payload = await _build_payload(title, content, files, settings)
  try:
    announcement = await service.create_announcement(payload, user.id, group_id)
  except Exception as e:
    logger.exception('Error creating group announcement')
    return error_response('Failed to create group announcement', error=str(e))

  return success_response(
    announcement,
    status_code=status.HTTP_201_CREATED,
    message='Group announcement created successfully',
  )


@router.get('')
async def list_announcements(supabase: SupabaseClientDep):
  """List public announcements, newest first, with files and author."""
  try:
    response = await asyncio.to_thread(
      supabase.table('announcement')
      .select('*, announcement_files(*), users:user_id(name, email)')
      .eq('visibility', Visibility.PUBLIC.value)
      .order('created_at', desc=True)
      .execute
    )
    items = [AnnouncementListItem.model_validate(row) for row in response.data or []]
  except Exception as e:
    logger.exception('Error fetching announcements')
    return error_response('Failed to fetch announcements', error=str(e))

  return success_response(items)
