from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Visibility(str, Enum):
  PUBLIC = 'public'
  PRIVATE = 'private'

  @classmethod
  def for_group(cls, group_id: Optional[str]) -> 'Visibility':
    return cls.PRIVATE if group_id else cls.PUBLIC


@dataclass(frozen=True)
class FileDescriptor:
  """An attachment decoded from a multipart request, held in memory."""

  name: str
  mime_type: str
  data: bytes = field(repr=False)

  @property
  def size(self) -> int:
    return len(self.data)

  @property
  def is_image(self) -> bool:
    return self.mime_type.startswith('image/')


class AnnouncementCreate(BaseModel):
  title: str = Field(..., min_length=1)
  content: str = Field(default='')
  files: List[FileDescriptor] = Field(default_factory=list)

  @field_validator('title')
  @classmethod
  def validate_title(cls, v):
    if not v or not v.strip():
      raise ValueError('Title cannot be empty')
    return v


# Shape of an announcement_files row, minus the parent id
class UploadedFile(BaseModel):
  url: str
  name: str
  type: str

  @property
  def is_image(self) -> bool:
    return self.type.startswith('image/')


class AnnouncementFileRecord(BaseModel):
  model_config = ConfigDict(extra='allow')

  announcement_id: Union[int, str]
  url: Optional[str] = None
  name: Optional[str] = None
  type: Optional[str] = None


class Author(BaseModel):
  name: Optional[str] = None
  email: Optional[str] = None


class AnnouncementRecord(BaseModel):
  model_config = ConfigDict(extra='allow')

  id: Union[int, str]
  title: Optional[str] = None
  content: Optional[str] = None
  visibility: Visibility
  group_id: Optional[Union[int, str]] = None
  user_id: Optional[str] = None
  created_at: Optional[datetime] = None


class AnnouncementListItem(AnnouncementRecord):
  announcement_files: List[AnnouncementFileRecord] = Field(default_factory=list)
  users: Optional[Author] = None
