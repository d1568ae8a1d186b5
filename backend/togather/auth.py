import asyncio
import logging
from typing import Annotated, Any, Dict, Optional

from fastapi import Depends, Header, HTTPException, Request, status
from supabase_auth.errors import AuthError

from .dependencies import SupabaseClientDep

logger = logging.getLogger(__name__)

AUTH_TIMEOUT_SECONDS = 10.0


class AuthenticatedUser:
  def __init__(self, data: Dict[str, Any]):
    self._data = data

  @property
  def id(self) -> str:
    return self._data.get('id', '')


def _bearer_token(authorization: Optional[str]) -> str:
  if not authorization:
    raise HTTPException(status.HTTP_401_UNAUTHORIZED, 'Missing Authorization header')

  if not authorization.lower().startswith('bearer '):
    raise HTTPException(status.HTTP_401_UNAUTHORIZED, 'Invalid authorization scheme')

  token = authorization.split(' ', 1)[1].strip()
  if not token:
    raise HTTPException(status.HTTP_401_UNAUTHORIZED, 'Invalid bearer token')
  return token


async def get_current_user(
  supabase: SupabaseClientDep,
  request: Request,
  authorization: Annotated[str | None, Header(alias='Authorization')] = None,
) -> AuthenticatedUser:
  token = _bearer_token(authorization or request.headers.get('authorization'))

  try:
    # supabase-py is synchronous; keep the event loop free while GoTrue answers
    user_response = await asyncio.wait_for(
      asyncio.to_thread(supabase.auth.get_user, token),
      timeout=AUTH_TIMEOUT_SECONDS,
    )
  except asyncio.TimeoutError:
    logger.warning('Auth timeout: get_user did not answer within %.0fs', AUTH_TIMEOUT_SECONDS)
    raise HTTPException(status.HTTP_408_REQUEST_TIMEOUT, 'Authentication request timed out. Please try again.')
  except AuthError as auth_error:
    logger.info('Rejected token: %s', auth_error)
    raise HTTPException(status.HTTP_401_UNAUTHORIZED, 'Invalid or expired token')

  user = getattr(user_response, 'user', None)
  if not user:
    raise HTTPException(status.HTTP_401_UNAUTHORIZED, 'Invalid or expired token')

  return AuthenticatedUser(user.model_dump())


CurrentUserDep = Annotated[AuthenticatedUser, Depends(get_current_user)]
