"""Defines the core data structures for the site accounts panel."""

import copy
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional


@dataclass
class TestClientCredentials:
    """Test client credentials of a site, stored encrypted."""

    __test__ = False    # Not a test case, despite the name.

    id: str = ''
    """Encrypted client ID."""

    secret: str = ''
    """Encrypted client secret."""

    def clear(self) -> None:
        """Erase both the ID and the secret."""
        self.id = ''
        self.secret = ''


@dataclass
class SiteConfiguration:
    """Operator-provided configuration of a site."""

    test_client_credentials: TestClientCredentials = \
        field(default_factory=TestClientCredentials)


@dataclass
class Site:
    """A deployment unit run by an :class:`.Operator`."""

    id: str
    config: SiteConfiguration = field(default_factory=SiteConfiguration)


@dataclass
class Operator:
    """An organization registered with the directory, owning sites."""

    id: str
    sites: List[Site] = field(default_factory=list)

    def clone(self, erase_credentials: bool = False) -> 'Operator':
        """
        Create a deep copy of this operator.

        The copy shares no mutable state with the original, so it can be
        modified freely for a single request.

        Parameters
        ----------
        erase_credentials : bool
            If True, the test client credentials of all sites are blanked in
            the copy.

        Returns
        -------
        :class:`.Operator`

        """
        clone = copy.deepcopy(self)
        if erase_credentials:
            for site in clone.sites:
                site.config.test_client_credentials.clear()
        return clone


@dataclass
class AccountData:
    """Capability flags of an account."""

    sites_access: bool = False
    """Whether the account may configure the sites of its operator."""


@dataclass
class Account:
    """An account of a member of an operator."""

    email: str
    operator: str = ''
    title: str = ''
    first_name: str = ''
    last_name: str = ''
    role: str = ''
    phone_number: str = ''
    data: AccountData = field(default_factory=AccountData)

    @property
    def full_name(self) -> str:
        """Title, first and last name of the account holder."""
        return ' '.join(part for part in
                        (self.title, self.first_name, self.last_name) if part)


class User(NamedTuple):
    """A logged in user: an account and the operator it belongs to."""

    account: Account
    operator: Operator


class Session(NamedTuple):
    """The visitor's session, as resolved by the session layer."""

    session_id: Optional[str] = None
    user: Optional[User] = None

    @property
    def logged_in_user(self) -> Optional[User]:
        """The logged in user, or None for anonymous visitors."""
        return self.user


class OperatorInformation(NamedTuple):
    """Minimal information about an operator known to the directory."""

    id: str
    name: str


TITLES = ['Mr', 'Mrs', 'Ms', 'Prof', 'Dr']
"""Honorific titles offered by the account forms."""


class PageContext(NamedTuple):
    """Everything a page of the panel is rendered with."""

    operator: Optional[Operator]
    """Per-request copy of the user's operator; None for anonymous visitors."""

    account: Optional[Account]
    params: Dict[str, str]
    operators: List[OperatorInformation]
    sites: Dict[str, str]
    """Site ID to display name, for the sites of the user's operator."""

    titles: List[str]
