"""
Attaches the visitor's session to the request.

Sessions are managed upstream: the session layer resolves the session
cookie and places a :class:`.domain.Session` in the WSGI request environ
under the ``session`` key. This extension moves it onto the request as
``request.auth``, so that routes and controllers don't need to know about the
environ.
"""

from typing import Optional, Union

from flask import Flask, request

from .. import domain, logging

logger = logging.getLogger(__name__)

ENVIRON_KEY = 'session'


class Sessions(object):
    """
    Attaches session information to the request.

    Intended for use in a Flask application factory:

    .. code-block:: python

       app = Flask('siteaccounts')
       Sessions(app)

    """

    def __init__(self, app: Optional[Flask] = None) -> None:
        """Initialize ``app``, if given."""
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Attach :meth:`.load_session` to the Flask app."""
        self.app = app
        self.app.before_request(self.load_session)

    def load_session(self) -> None:
        """
        Get the session passed by the session layer and attach it.

        If the session layer passed an exception, it is raised here, within
        the request context, so that it is handled like any other error.
        Without a session, the visitor is anonymous.
        """
        session: Optional[Union[domain.Session, Exception]] = \
            request.environ.get(ENVIRON_KEY)

        if isinstance(session, Exception):
            logger.debug('Session layer passed an exception: %s', session)
            raise session

        if session is None:
            session = domain.Session()
        request.auth = session  # type: ignore
