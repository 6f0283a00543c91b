"""
Controller for the pages of the account panel.

A request names the page it wants in the ``path`` query parameter. The
controller resolves that name, checks whether the visitor may see the page,
and either sends them elsewhere or assembles the data for the page.
"""

from http import HTTPStatus
from typing import Any, Dict, Mapping, Optional, Tuple

from .. import logging
from ..access import decide
from ..domain import Session
from ..pages import TemplateRegistry
from ..redirects import compute_redirect
from .assembly import assemble

logger = logging.getLogger(__name__)

ResponseData = Tuple[Dict[str, Any], int, Dict[str, str]]


def show_page(requested: Optional[str], params: Mapping, session: Session,
              request_uri: str, replaced_path: Optional[str],
              passphrase: str) -> ResponseData:
    """
    Provide a page of the panel.

    Parameters
    ----------
    requested : str or None
        The requested page name.
    params : Mapping
        Query parameters of the request.
    session : :class:`.Session`
    request_uri : str
        Path and query of the current request.
    replaced_path : str or None
        Original path of the request, if an upstream proxy rewrote it.
    passphrase : str
        Passphrase of the test client credentials.

    Returns
    -------
    dict
        ``page``, and the ``context`` to render it with unless redirecting.
    int
        Status code: 200, or 302 (Found) to redirect.
    dict
        Headers to add to the response.

    Raises
    ------
    :class:`.assembly.PanelDataError`
        If the data of the page can't be assembled.

    """
    page = TemplateRegistry.resolve(requested)
    user = session.logged_in_user
    sites_access = bool(user and user.account.data.sites_access)
    decision = decide(user is not None, sites_access, page)

    if decision.is_redirect:
        location = compute_redirect(request_uri, replaced_path,
                                    decision.redirect_to)
        logger.debug('Redirecting from %s to %s', page.value, location)
        return {'page': decision.redirect_to}, HTTPStatus.FOUND, \
            {'Location': location}

    logger.debug('Request for page %s', page.value)
    context = assemble(params, session, passphrase)
    return {'page': page, 'context': context}, HTTPStatus.OK, {}
