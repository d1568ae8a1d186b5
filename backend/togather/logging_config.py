"""Console logging setup shared by the API process and scripts."""

import logging.config


def configure_logging(level: str = 'INFO') -> None:
  logging.config.dictConfig({
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
      'standard': {
        'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
      },
    },
    'handlers': {
      'console': {
        'class': 'logging.StreamHandler',
        'formatter': 'standard',
        'level': level,
      },
    },
    'root': {
      'handlers': ['console'],
      'level': level,
    },
    'loggers': {
      # supabase's HTTP layer logs every request at INFO
      'httpx': {'level': 'WARNING'},
    },
  })
