"""Flask configuration."""
import secrets
import os

#################### General config for app ####################
SECRET_KEY = os.environ.get('SECRET_KEY', secrets.token_urlsafe(16))
"""Sets the `Flask` secret key. Not used by the panel itself."""

APPLICATION_ROOT = os.environ.get('APPLICATION_ROOT', '/')

REPLACED_PATH_HEADER = os.environ.get('REPLACED_PATH_HEADER',
                                      'X-Replaced-Path')
"""Header in which an upstream proxy passes the original request path.

Only consulted when present and non-empty; used to build redirect targets
that are valid from the outside when the proxy rewrote the path."""


#################### Directory service (Mentix) ####################
MENTIX_URL = os.environ.get('MENTIX_URL')
"""Base URL of the directory service. Required."""

MENTIX_DATA_ENDPOINT = os.environ.get('MENTIX_DATA_ENDPOINT', '/ops')
"""Endpoint returning the operators and their sites as JSON."""

MENTIX_TIMEOUT = float(os.environ.get('MENTIX_TIMEOUT', '10'))
"""Timeout in seconds for every request to the directory service."""


#################### Security ####################
CREDENTIALS_PASSPHRASE = os.environ.get('CREDENTIALS_PASSPHRASE')
"""Passphrase used to decrypt the test client credentials of sites. Required."""


#################### Logging ####################
LOGLEVEL = int(os.environ.get('LOGLEVEL', 20))
"""Level of the package's loggers, applied when the app is created."""

LOGFILE = os.environ.get('LOGFILE')
"""If set, log records are appended to this file instead of stderr."""
