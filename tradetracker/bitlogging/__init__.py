import logging
import os
from logging.config import dictConfig
from pathlib import Path
from typing import Iterable

import yaml

from tradetracker.settings import LOG_CONFIG_FILE, EnvVars

from .adapters import BitLoggerAdapter
from .filters import SecretRedactingFilter
from .formatters import BaseFormatter, JSONFormatter


LOG_DIR = Path().resolve()/'logs'


def configure(debug: bool = False, secrets: Iterable[str] = ()):
    """Loads the YAML logging config and installs a redacting filter on every handler so the
    given secrets never reach a log sink.
    """
    config_file = Path(os.environ.get(EnvVars.LOG_CONFIG) or LOG_CONFIG_FILE)
    with config_file.open('rt') as f:
        config = yaml.safe_load(f.read())

    file_handler = config.get('handlers', {}).get('file')
    if file_handler is not None:
        LOG_DIR.mkdir(exist_ok=True)
        file_handler['filename'] = str(LOG_DIR/'all.log')
    if debug:
        config.setdefault('root', {})['level'] = 'DEBUG'
    dictConfig(config)

    redactor = SecretRedactingFilter(secrets)
    for handler in logging.getLogger().handlers:
        handler.addFilter(redactor)

    # Request lines are logged by the server itself
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)


def getLogger(name: str):
    return BitLoggerAdapter(logging.getLogger(name))
