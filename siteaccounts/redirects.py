"""Builds the URLs the panel redirects visitors to."""

from typing import List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .pages import PageName

PAGE_PARAM = 'path'
"""Query parameter that selects the page of the panel."""


def compute_redirect(request_uri: str, replaced_path: Optional[str],
                     target: PageName) -> str:
    """
    Get the URL that shows ``target`` instead of the requested page.

    If an upstream proxy rewrote the request path, it passes the original
    one in ``replaced_path``; the redirect has to point there, since the
    rewritten path is not reachable from the outside. Otherwise the request
    URI is used as is.

    The query of the original request is kept, except for the page
    parameter, which is replaced by ``target``. Parameters are ordered by
    name so that the same inputs always give the same URL.

    Parameters
    ----------
    request_uri : str
        The URI of the current request, path and query.
    replaced_path : str or None
        Value of the header carrying the original path, if any.
    target : :class:`.PageName`

    Returns
    -------
    str

    """
    request_parts = urlsplit(request_uri)
    if replaced_path:
        base = urlsplit(replaced_path)
        query = base.query or request_parts.query
    else:
        base = request_parts
        query = request_parts.query

    params: List[Tuple[str, str]] = [
        (key, value) for key, value in parse_qsl(query, keep_blank_values=True)
        if key != PAGE_PARAM
    ]
    params.append((PAGE_PARAM, target.value))
    params.sort(key=lambda param: param[0])
    return urlunsplit((base.scheme, base.netloc, base.path,
                       urlencode(params), ''))
