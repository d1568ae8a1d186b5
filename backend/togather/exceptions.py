class AnnouncementError(Exception):
  """Base error for the announcement pipeline."""


class FileUploadError(AnnouncementError):
  """An attachment could not be stored; creation is aborted."""


class AnnouncementPersistenceError(AnnouncementError):
  """The announcement row or one of its file rows could not be inserted."""
