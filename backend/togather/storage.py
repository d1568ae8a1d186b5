"""Supabase Storage wrapper for announcement attachments."""

import asyncio
import logging
import time
from typing import Optional, Tuple

from supabase import Client

from .exceptions import FileUploadError
from .schemas import FileDescriptor, UploadedFile

logger = logging.getLogger(__name__)

ANNOUNCEMENT_PREFIX = 'announcement'
STORED_SUFFIX = '.png'


def build_storage_key(filename: str, timestamp_ms: Optional[int] = None) -> Tuple[str, str]:
  """Return ``(name, path)`` for an uploaded file.

  The name is the text before the first dot of the original filename plus a
  millisecond timestamp. The original extension is dropped and every stored
  path ends in ``.png``, whatever the MIME type; public URLs handed out so far
  depend on that suffix.
  """
  if timestamp_ms is None:
    timestamp_ms = int(time.time() * 1000)
  base = filename.split('.')[0]
  name = f'{base}-{timestamp_ms}'
  return name, f'{ANNOUNCEMENT_PREFIX}/{name}{STORED_SUFFIX}'


class AnnouncementStorage:
  """Uploads attachments into one bucket and derives their public URLs."""

  def __init__(self, supabase: Client, bucket: str):
    self._supabase = supabase
    self.bucket = bucket

  def _bucket(self):
    return self._supabase.storage.from_(self.bucket)

  def upload(self, path: str, data: bytes, content_type: str) -> str:
    response = self._bucket().upload(path, data, {'content-type': content_type})
    # Older storage clients hand back the raw httpx response
    return getattr(response, 'path', None) or path

  def get_public_url(self, path: str) -> str:
    return self._bucket().get_public_url(path)

  async def upload_file(self, file: FileDescriptor) -> UploadedFile:
    name, path = build_storage_key(file.name)
    try:
      stored_path = await asyncio.to_thread(self.upload, path, file.data, file.mime_type)
    except Exception as e:
      raise FileUploadError(f'Error uploading file: {e}') from e

    logger.debug('Uploaded %s (%d bytes) to %s/%s', file.name, file.size, self.bucket, stored_path)
    return UploadedFile(url=stored_path, name=name, type=file.mime_type)
