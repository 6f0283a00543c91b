"""Provides Flask integration for the external user interface."""

from http import HTTPStatus
from urllib.parse import quote

from flask import Blueprint, Response, current_app, make_response, redirect, \
    render_template, request
from werkzeug.exceptions import InternalServerError

from .. import logging
from ..controllers import panel
from ..controllers.assembly import PanelDataError
from ..pages import TemplateRegistry
from ..redirects import PAGE_PARAM
from ..services import directory

logger = logging.getLogger(__name__)
blueprint = Blueprint('ui', __name__, url_prefix='')

TEMPLATES_KEY = 'page_templates'
"""Key of the :class:`.TemplateRegistry` in ``app.extensions``."""


def get_templates() -> TemplateRegistry:
    """Get the template registry of the current application."""
    registry: TemplateRegistry = current_app.extensions[TEMPLATES_KEY]
    return registry


def get_request_uri() -> str:
    """
    Get the URI of the current request as the client sent it.

    The raw URI is used when the server provides it; otherwise it is rebuilt
    from the decoded path, which is quoted again so that characters like
    ``?`` in a mount prefix stay part of the path. Some servers leave the
    query out of the raw URI, in which case it is added back.
    """
    raw_uri = request.environ.get('REQUEST_URI') \
        or request.environ.get('RAW_URI')
    if raw_uri:
        uri = str(raw_uri)
    else:
        uri = quote(request.script_root + request.path)
    if '?' not in uri and request.query_string:
        uri += '?' + request.query_string.decode('latin-1')
    return uri


@blueprint.after_request
def apply_response_headers(response: Response) -> Response:
    """Prevent UI redress attacks."""
    response.headers['Content-Security-Policy'] = "frame-ancestors 'none'"
    response.headers['X-Frame-Options'] = 'DENY'
    return response


@blueprint.route('/', methods=['GET'])
def account_panel() -> Response:
    """Show the page requested in the ``path`` parameter."""
    header = current_app.config['REPLACED_PATH_HEADER']
    request_uri = get_request_uri()
    try:
        data, code, headers = panel.show_page(
            request.args.get(PAGE_PARAM),
            request.args,
            request.auth,   # type: ignore
            request_uri,
            request.headers.get(header),
            current_app.config['CREDENTIALS_PASSPHRASE']
        )
    except PanelDataError as e:
        logger.error('Cannot assemble page data: %s (%s)', e, e.__cause__)
        raise InternalServerError('Cannot show the page') from e

    if code == HTTPStatus.FOUND:
        return make_response(redirect(headers['Location'], code=code))

    page = data['page']
    content = render_template(get_templates().template_for(page),
                              page=page.value, **data['context']._asdict())
    return make_response(content, code, headers)


@blueprint.route('/status', methods=['GET'])
def status() -> Response:
    """Get if the app is running and the directory is reachable."""
    if not directory.status():
        return make_response("Directory unavailable",
                             HTTPStatus.SERVICE_UNAVAILABLE)
    return make_response("OK")
