"""
Assembles the data a page of the panel is rendered with.

Every render queries the directory service afresh: for the operators it
knows, and, when a user is logged in, for the sites of the user's operator.
The operator record attached to the session is never modified. Instead, a
copy is made for the request, the test client credentials of its sites are
decrypted on that copy, and sites that the directory knows but the record
does not yet have are added to it as empty placeholders.
"""

import re
from typing import Dict, List, Mapping

from werkzeug.datastructures import MultiDict

from .. import logging
from ..domain import TITLES, Operator, PageContext, Session, Site, \
    SiteConfiguration
from ..services import credentials, directory
from ..services.exceptions import CredentialsError, DirectoryError

logger = logging.getLogger(__name__)

_WORD_START = re.compile(r'(^|[^\w])(\w)')


class PanelDataError(RuntimeError):
    """The data for a page could not be assembled."""


def title_case(name: str) -> str:
    """Upper-case the first letter of each word, leaving the rest as is."""
    return _WORD_START.sub(lambda m: m.group(1) + m.group(2).upper(), name)


def flatten_params(params: Mapping) -> Dict[str, str]:
    """
    Reduce request parameters to one value per (title-cased) name.

    If a name occurs more than once, the first value seen is kept.
    """
    if isinstance(params, MultiDict):
        items = params.items(multi=True)
    else:
        items = params.items()
    flat: Dict[str, str] = {}
    for key, value in items:
        flat.setdefault(title_case(key), value)
    return flat


def fetch_available_sites(operator: Operator) -> Dict[str, str]:
    """
    Get the sites the directory knows for ``operator``.

    Returns
    -------
    dict
        Site ID to display name. If the name of a site can't be retrieved,
        its ID is used instead.

    Raises
    ------
    :class:`.DirectoryError`
        If the site IDs can't be retrieved.

    """
    sites: Dict[str, str] = {}
    for site_id in directory.list_operator_sites(operator.id):
        try:
            sites[site_id] = directory.get_site_name(site_id, full_name=True)
        except DirectoryError as e:
            logger.debug('No name for site %s: %s', site_id, e)
            sites[site_id] = site_id
    return sites


def decrypt_site_credentials(site: Site, passphrase: str) -> bool:
    """
    Replace the encrypted test client credentials of ``site`` in place.

    Returns False, leaving the site as it was, if they can't be decrypted.
    """
    creds = site.config.test_client_credentials
    try:
        client_id, secret = credentials.get_credentials(creds, passphrase)
    except CredentialsError as e:
        logger.debug('Cannot decrypt credentials of site %s: %s', site.id, e)
        return False
    creds.id = client_id
    creds.secret = secret
    return True


def reconcile_sites(operator: Operator, site_ids: List[str]) -> None:
    """Add a placeholder to ``operator`` for each site ID it doesn't have."""
    known = {site.id.casefold() for site in operator.sites}
    for site_id in site_ids:
        if site_id.casefold() in known:
            continue
        operator.sites.append(Site(id=site_id, config=SiteConfiguration()))
        known.add(site_id.casefold())


def clone_user_operator(operator: Operator, sites: Mapping[str, str],
                        passphrase: str) -> Operator:
    """
    Make the per-request copy of the user's operator.

    Credentials of its sites are decrypted where possible, and the sites in
    ``sites`` that it doesn't have yet are added as placeholders.
    """
    clone = operator.clone(erase_credentials=False)
    for site in clone.sites:
        decrypt_site_credentials(site, passphrase)
    reconcile_sites(clone, list(sites))
    return clone


def assemble(params: Mapping, session: Session,
             passphrase: str) -> PageContext:
    """
    Build the context of a page.

    Parameters
    ----------
    params : Mapping
        Query parameters of the request.
    session : :class:`.Session`
    passphrase : str
        Passphrase of the test client credentials.

    Returns
    -------
    :class:`.PageContext`

    Raises
    ------
    :class:`PanelDataError`
        If the operators, or the sites of the user's operator, can't be
        retrieved from the directory.

    """
    flat_params = flatten_params(params)

    try:
        operators = directory.list_operators()
    except DirectoryError as e:
        raise PanelDataError('unable to query available operators') from e

    user = session.logged_in_user
    if user is None:
        return PageContext(operator=None, account=None, params=flat_params,
                           operators=operators, sites={},
                           titles=list(TITLES))

    try:
        sites = fetch_available_sites(user.operator)
    except DirectoryError as e:
        raise PanelDataError('unable to query available sites') from e

    return PageContext(
        operator=clone_user_operator(user.operator, sites, passphrase),
        account=user.account,
        params=flat_params,
        operators=operators,
        sites=sites,
        titles=list(TITLES)
    )
