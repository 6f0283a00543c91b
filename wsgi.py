"""Web Server Gateway Interface entry-point."""

import os

from siteaccounts.factory import create_web_app

__flask_app__ = None


def application(environ, start_response):    # type: ignore
    """WSGI application."""
    for key, value in environ.items():
        # In some deployment scenarios (e.g. uWSGI on k8s), uWSGI will pass in
        # the hostname as part of the request environ. We want to keep
        # ``SERVER_NAME`` explicitly configured.
        if key == 'SERVER_NAME':
            continue
        if isinstance(value, str):
            os.environ[key] = value

    global __flask_app__
    if __flask_app__ is None:
        __flask_app__ = create_web_app()
    return __flask_app__(environ, start_response)
