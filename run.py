"""Run the taskboard application server."""
import logging
import logging.config

from taskboard.config import Config
from taskboard.main import run_app


def logging_config(config: Config) -> dict:
    """dictConfig for the console, plus a file handler if one is configured"""
    handlers = {
        'console': {
            'level': config.log_level,
            'formatter': 'standard',
            'class': 'logging.StreamHandler',
        },
    }
    if config.log_file:
        handlers['file'] = {
            'level': config.log_level,
            'formatter': 'standard',
            'class': 'logging.FileHandler',
            'filename': config.log_file,
            'mode': 'a',
        }

    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
        },
        'handlers': handlers,
        'loggers': {
            '': {  # root logger
                'handlers': list(handlers),
                'level': config.log_level,
                'propagate': True
            },
            'taskboard': {
                'handlers': list(handlers),
                'level': config.log_level,
                'propagate': False
            },
        }
    }


logger = logging.getLogger(__name__)

if __name__ == "__main__":
    config = Config.from_env()
    logging.config.dictConfig(logging_config(config))
    logger.info("Starting taskboard")
    run_app(config)
    logger.info("Application shutdown complete")
