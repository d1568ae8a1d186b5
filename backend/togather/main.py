import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .logging_config import configure_logging
from .responses import error_response
from .routers import announcements

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
  settings = get_settings()
  configure_logging(settings.log_level)

  app = FastAPI(
    title='Togather Announcements API',
    version='1.0.0',
    description='Publishes announcements and emails them to subscribed members.',
  )

  app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
    allow_headers=['Content-Type', 'Authorization'],
    expose_headers=['Access-Control-Allow-Origin'],
  )

  @app.exception_handler(StarletteHTTPException)
  async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(str(exc.detail), status_code=exc.status_code)

  @app.exception_handler(RequestValidationError)
  async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
      {
        'field': ' -> '.join(str(loc) for loc in error['loc']),
        'message': error['msg'],
        'type': error['type'],
      }
      for error in exc.errors()
    ]
    logger.info('Request validation failed on %s: %s', request.url.path, errors)
    return error_response(
      'Validation error. Please check your input data.',
      status_code=422,
      detail=errors,
    )

  @app.exception_handler(Exception)
  async def general_exception_handler(request: Request, exc: Exception):
    logger.exception('Unhandled exception on %s %s', request.method, request.url.path)
    return error_response(
      'Internal server error',
      status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
      error=str(exc),
    )

  app.include_router(announcements.router)

  @app.get('/healthz', tags=['system'])
  async def healthcheck():
    return {'status': 'ok'}

  return app


app = create_app()
