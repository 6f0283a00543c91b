"""
Queries the directory service (Mentix) for operators and their sites.

The directory exposes a single data endpoint that returns every known
operator along with its sites, for example:

.. code-block:: json

   [{"ID": "cern", "Name": "CERN",
     "Sites": [{"ID": "cernbox", "Name": "CERNBox",
                "FullName": "CERNBox (CERN)"}]}]

All three lookups used by the panel are answered from that document.
"""
import json
from functools import wraps
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import requests
from flask import current_app, g

from .. import logging
from ..domain import OperatorInformation
from .exceptions import DirectoryUnavailable, OperatorNotFound, SiteNotFound

logger = logging.getLogger(__name__)


def _has_id(entry: Any) -> bool:
    return isinstance(entry, dict) and isinstance(entry.get('ID'), str)


def _clean_operator(entry: Any) -> Optional[Dict[str, Any]]:
    """Drop an operator, or its sites, that lack a proper ID."""
    if not _has_id(entry):
        logger.debug('Skipping malformed operator entry: %r', entry)
        return None
    sites = entry.get('Sites')
    if not isinstance(sites, list):
        sites = []
    clean_sites = []
    for site in sites:
        if _has_id(site):
            clean_sites.append(site)
        else:
            logger.debug('Skipping malformed site of %s: %r', entry['ID'],
                         site)
    return dict(entry, Sites=clean_sites)


class DirectoryServiceSession(object):
    """An HTTP session with the directory service, for one request context."""

    def __init__(self, url: str, endpoint: str, timeout: float = 10) -> None:
        """Create a new HTTP session."""
        self.data_url = urljoin(url.rstrip('/') + '/', endpoint.lstrip('/'))
        self.timeout = timeout
        self._session = requests.Session()
        self._adapter = requests.adapters.HTTPAdapter(max_retries=0)
        self._session.mount('http://', self._adapter)
        self._session.mount('https://', self._adapter)
        logger.debug('New DirectoryServiceSession for %s', self.data_url)

    def status(self) -> bool:
        """Check the availability of the directory service."""
        try:
            response = self._session.head(self.data_url, timeout=self.timeout)
        except requests.exceptions.RequestException:
            return False
        return bool(response.ok)

    def _get_operators(self) -> List[Dict[str, Any]]:
        try:
            response = self._session.get(self.data_url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.debug('Directory request failed: %s', e)
            raise DirectoryUnavailable(
                f'unable to reach the directory at {self.data_url}'
            ) from e
        if not response.ok:
            logger.debug('Directory responded with status %i',
                         response.status_code)
            raise DirectoryUnavailable(
                f'directory responded with status {response.status_code}'
            )
        try:
            data = response.json()
        except (json.decoder.JSONDecodeError, ValueError) as e:
            logger.debug('Directory response could not be decoded')
            raise DirectoryUnavailable('could not read the directory') from e
        if not isinstance(data, list):
            raise DirectoryUnavailable('unexpected directory data')
        return [op for op in (_clean_operator(entry) for entry in data)
                if op is not None]

    def list_operators(self) -> List[OperatorInformation]:
        """
        Get all operators known to the directory.

        Returns
        -------
        list of :class:`.OperatorInformation`

        Raises
        ------
        :class:`.DirectoryUnavailable`

        """
        return [OperatorInformation(id=op['ID'],
                                    name=str(op.get('Name') or ''))
                for op in self._get_operators()]

    def list_operator_sites(self, operator_id: str) -> List[str]:
        """
        Get the IDs of the sites run by an operator.

        The operator ID is compared case-insensitively.

        Raises
        ------
        :class:`.DirectoryUnavailable`
        :class:`.OperatorNotFound`

        """
        wanted = operator_id.casefold()
        for op in self._get_operators():
            if op['ID'].casefold() == wanted:
                return [site['ID'] for site in op['Sites']]
        raise OperatorNotFound(f'no operator with ID {operator_id} found')

    def get_site_name(self, site_id: str, full_name: bool = True) -> str:
        """
        Get the display name of a site.

        Parameters
        ----------
        site_id : str
            Compared case-insensitively.
        full_name : bool
            Prefer the full name of the site over its short name.

        Raises
        ------
        :class:`.DirectoryUnavailable`
        :class:`.SiteNotFound`

        """
        wanted = site_id.casefold()
        for op in self._get_operators():
            for site in op['Sites']:
                if site['ID'].casefold() != wanted:
                    continue
                if full_name and site.get('FullName'):
                    return str(site['FullName'])
                return str(site.get('Name') or '')
        raise SiteNotFound(f'no site with ID {site_id} found')


def init_app(app: Any) -> None:
    """Set required configuration defaults for the application."""
    app.config.setdefault('MENTIX_DATA_ENDPOINT', '/ops')
    app.config.setdefault('MENTIX_TIMEOUT', 10)


def get_session(app: Optional[Any] = None) -> DirectoryServiceSession:
    """Create a new directory session from the application config."""
    config = (app or current_app).config
    return DirectoryServiceSession(config['MENTIX_URL'],
                                   config['MENTIX_DATA_ENDPOINT'],
                                   config['MENTIX_TIMEOUT'])


def current_session() -> DirectoryServiceSession:
    """Get the directory session for this request context."""
    if 'directory' not in g:
        g.directory = get_session()
    return g.directory  # type: ignore


# We don't want to have to maintain two identical docstrings.
@wraps(DirectoryServiceSession.list_operators)
def list_operators() -> List[OperatorInformation]:
    """Wrapper for :meth:`DirectoryServiceSession.list_operators`."""
    return current_session().list_operators()


@wraps(DirectoryServiceSession.list_operator_sites)
def list_operator_sites(operator_id: str) -> List[str]:
    """Wrapper for :meth:`DirectoryServiceSession.list_operator_sites`."""
    return current_session().list_operator_sites(operator_id)


@wraps(DirectoryServiceSession.get_site_name)
def get_site_name(site_id: str, full_name: bool = True) -> str:
    """Wrapper for :meth:`DirectoryServiceSession.get_site_name`."""
    return current_session().get_site_name(site_id, full_name)


@wraps(DirectoryServiceSession.status)
def status() -> bool:
    """Wrapper for :meth:`DirectoryServiceSession.status`."""
    return current_session().status()
