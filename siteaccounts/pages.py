"""Page variants of the panel and the registry of their templates."""

from enum import Enum
from typing import Any, Dict, Optional

from . import logging

logger = logging.getLogger(__name__)


class PageName(Enum):
    """The pages the panel can render; values are used in the ``path`` param."""

    LOGIN = 'login'
    MANAGE = 'manage'
    SETTINGS = 'settings'
    EDIT = 'edit'
    SITES = 'sites'
    CONTACT = 'contact'
    REGISTRATION = 'register'


DEFAULT_PAGE = PageName.LOGIN


class TemplateRegistrationError(RuntimeError):
    """A page template could not be registered or looked up."""


class TemplateRegistry(object):
    """
    Holds the template registered for each :class:`.PageName`.

    Registration happens once, when the application is created; an invalid
    or duplicate registration is a startup failure. After that, the registry
    is only read.
    """

    def __init__(self) -> None:
        """Create an empty registry."""
        self._templates: Dict[PageName, str] = {}

    def register(self, name: PageName, template: Optional[str]) -> None:
        """
        Register the template used to render page ``name``.

        Raises
        ------
        :class:`TemplateRegistrationError`
            If ``name`` is not a :class:`.PageName`, is already registered,
            or ``template`` is empty.

        """
        if not isinstance(name, PageName):
            raise TemplateRegistrationError(f'unknown page: {name!r}')
        if name in self._templates:
            raise TemplateRegistrationError(
                f'a template for {name.value} is already registered'
            )
        if not template:
            raise TemplateRegistrationError(
                f'no template provided for {name.value}'
            )
        logger.debug('Registered template %s for page %s', template,
                     name.value)
        self._templates[name] = template

    def verify(self) -> None:
        """Make sure that every page has a template."""
        missing = [page.value for page in PageName
                   if page not in self._templates]
        if missing:
            raise TemplateRegistrationError(
                f'no templates registered for: {", ".join(missing)}'
            )

    def template_for(self, page: PageName) -> str:
        """Get the template registered for ``page``."""
        try:
            return self._templates[page]
        except KeyError as e:
            raise TemplateRegistrationError(
                f'no template registered for {page.value}'
            ) from e

    @staticmethod
    def resolve(requested: Any) -> PageName:
        """
        Get the page for a requested page name.

        Anything that is not one of the known pages, including a missing
        value, resolves to the login page.
        """
        if isinstance(requested, PageName):
            return requested
        if isinstance(requested, str):
            for page in PageName:
                if page.value == requested:
                    return page
        return DEFAULT_PAGE
