"""
Decides whether a visitor may see a page of the panel.

The decision only depends on whether someone is logged in, whether their
account has access to the sites page, and the requested page. It is
expressed as an ordered table of rules; the first rule that matches wins,
and if none matches the page is shown.

===========================  ==========  ============  ===========
Pages                        Logged in   Sites access  Outcome
===========================  ==========  ============  ===========
sites                        yes         no            -> manage
login, register              yes         any           -> manage
manage, settings, edit,      no          any           -> login
sites, contact
===========================  ==========  ============  ===========
"""

from typing import FrozenSet, NamedTuple, Optional, Tuple

from .pages import PageName


class Decision(NamedTuple):
    """Outcome of an access decision."""

    redirect_to: Optional[PageName] = None
    """Page to send the visitor to instead; None to show the requested page."""

    @property
    def is_redirect(self) -> bool:
        """Whether the visitor must be redirected."""
        return self.redirect_to is not None


CONTINUE = Decision()


def redirect_to(page: PageName) -> Decision:
    """Make a decision that redirects to ``page``."""
    return Decision(redirect_to=page)


class Rule(NamedTuple):
    """A row of the access table."""

    pages: FrozenSet[PageName]
    logged_in: bool
    sites_access: Optional[bool]
    """Required value of the sites access flag; None matches either value."""

    target: PageName

    def matches(self, logged_in: bool, sites_access: bool,
                page: PageName) -> bool:
        """Check whether this rule applies to a request."""
        return page in self.pages \
            and logged_in == self.logged_in \
            and (self.sites_access is None
                 or sites_access == self.sites_access)


PROTECTED_PAGES = frozenset({PageName.MANAGE, PageName.SETTINGS,
                             PageName.EDIT, PageName.SITES,
                             PageName.CONTACT})
"""Pages that require a logged in user."""

ANONYMOUS_PAGES = frozenset({PageName.LOGIN, PageName.REGISTRATION})
"""Pages that make no sense for a logged in user."""

RULES: Tuple[Rule, ...] = (
    Rule(frozenset({PageName.SITES}), logged_in=True, sites_access=False,
         target=PageName.MANAGE),
    Rule(ANONYMOUS_PAGES, logged_in=True, sites_access=None,
         target=PageName.MANAGE),
    Rule(PROTECTED_PAGES, logged_in=False, sites_access=None,
         target=PageName.LOGIN),
)
"""The access table, in order of precedence."""


def decide(logged_in: bool, sites_access_allowed: bool,
           page: PageName) -> Decision:
    """
    Decide whether ``page`` may be shown.

    Parameters
    ----------
    logged_in : bool
        Whether the session carries a logged in user.
    sites_access_allowed : bool
        Whether the user's account has access to the sites page. Ignored for
        anonymous visitors.
    page : :class:`.PageName`

    Returns
    -------
    :class:`.Decision`
        Either :data:`CONTINUE` or a redirect to another page.

    """
    for rule in RULES:
        if rule.matches(logged_in, sites_access_allowed, page):
            return redirect_to(rule.target)
    return CONTINUE
