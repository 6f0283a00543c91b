"""Application factory for the site accounts panel."""

from flask import Flask

from siteaccounts import filters, logging
from siteaccounts.pages import PageName, TemplateRegistry
from siteaccounts.routes import ui
from siteaccounts.services import directory
from siteaccounts.services.sessions import Sessions

REQUIRED_CONFIG = ('MENTIX_URL', 'CREDENTIALS_PASSPHRASE')

TEMPLATES = {
    PageName.LOGIN: 'siteaccounts/login.html',
    PageName.MANAGE: 'siteaccounts/manage.html',
    PageName.SETTINGS: 'siteaccounts/settings.html',
    PageName.EDIT: 'siteaccounts/edit.html',
    PageName.SITES: 'siteaccounts/sites.html',
    PageName.CONTACT: 'siteaccounts/contact.html',
    PageName.REGISTRATION: 'siteaccounts/register.html',
}


class ConfigurationError(RuntimeError):
    """The application is missing required configuration."""


def check_configuration(app: Flask) -> None:
    """Make sure that all required settings have a value."""
    missing = [key for key in REQUIRED_CONFIG if not app.config.get(key)]
    if missing:
        raise ConfigurationError(f'missing configuration: {", ".join(missing)}')


def register_templates() -> TemplateRegistry:
    """Create the registry holding the template of each page."""
    registry = TemplateRegistry()
    for page, template in TEMPLATES.items():
        registry.register(page, template)
    registry.verify()
    return registry


def create_web_app() -> Flask:
    """Initialize and configure the site accounts application."""
    app = Flask('siteaccounts')
    app.config.from_pyfile('config.py')
    check_configuration(app)
    logging.init_app(app)

    directory.init_app(app)
    Sessions(app)  # Attaches the visitor's session as request.auth.

    app.extensions[ui.TEMPLATES_KEY] = register_templates()
    app.register_blueprint(ui.blueprint)

    app.jinja_env.filters['site_name'] = filters.site_name
    return app
