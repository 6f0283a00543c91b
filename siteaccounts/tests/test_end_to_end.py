"""End-to-end tests, via requests to the user interface."""

import os
from typing import Any
from unittest import TestCase, mock
from urllib.parse import parse_qs, urlsplit

import requests
from flask import render_template

from siteaccounts import domain
from siteaccounts.factory import ConfigurationError, create_web_app
from siteaccounts.routes import ui
from siteaccounts.services import credentials

PASSPHRASE = 'foopassphrase'
ENVIRON = {
    'MENTIX_URL': 'http://mentix.example.com',
    'MENTIX_DATA_ENDPOINT': '/ops',
    'CREDENTIALS_PASSPHRASE': PASSPHRASE,
}
OPERATORS = [
    {'ID': 'cern', 'Name': 'CERN', 'Sites': [
        {'ID': 'CERNBox', 'Name': 'CERNBox', 'FullName': 'CERNBox (CERN)'},
        {'ID': 'SWAN', 'Name': 'SWAN', 'FullName': 'SWAN (CERN)'},
    ]},
    {'ID': 'surf', 'Name': 'SURF', 'Sites': []},
]


def mock_directory(mock_session: Any, data: Any = OPERATORS,
                   ok: bool = True) -> Any:
    """Make the directory service respond with ``data``."""
    mock_response = mock.MagicMock(status_code=200 if ok else 503, ok=ok,
                                   json=mock.MagicMock(return_value=data))
    instance = mock.MagicMock()
    instance.get.return_value = mock_response
    mock_session.return_value = instance
    return instance


def make_session(sites_access: bool) -> domain.Session:
    cernbox = domain.Site(id='cernbox')
    credentials.set_credentials(cernbox.config.test_client_credentials,
                                'cernbox-client', 'cernbox-secret',
                                PASSPHRASE)
    account = domain.Account(
        email='jane@example.com', operator='cern', title='Dr',
        first_name='Jane', last_name='Doe',
        data=domain.AccountData(sites_access=sites_access)
    )
    operator = domain.Operator(id='cern', sites=[cernbox])
    return domain.Session(session_id='abc', user=domain.User(account, operator))


class TestCreateApp(TestCase):
    """The application refuses to start without required configuration."""

    def test_missing_configuration(self):
        """The directory URL and credentials passphrase are required."""
        environ = {k: v for k, v in ENVIRON.items() if k != 'MENTIX_URL'}
        with mock.patch.dict(os.environ, environ, clear=True):
            with self.assertRaises(ConfigurationError):
                create_web_app()


class TestPanelRoutes(TestCase):
    """Requests for pages of the panel."""

    def setUp(self):
        with mock.patch.dict(os.environ, ENVIRON):
            self.app = create_web_app()
        self.app.config['PROPAGATE_EXCEPTIONS'] = False
        self.client = self.app.test_client()

    def get(self, query: str, session: Any = None, **kwargs: Any) -> Any:
        environ_base = {'session': session} if session else {}
        return self.client.get(f'/?{query}', environ_base=environ_base,
                               **kwargs)

    @mock.patch('siteaccounts.services.directory.requests.Session')
    def test_anonymous_sites(self, mock_session: Any) -> None:
        """Anonymous visitors asking for the sites are sent to log in."""
        response = self.get('path=sites&lang=en&foo=bar')
        self.assertEqual(response.status_code, 302)
        location = urlsplit(response.headers['Location'])
        self.assertEqual(location.path, '/')
        self.assertEqual(parse_qs(location.query),
                         {'path': ['login'], 'lang': ['en'], 'foo': ['bar']})
        mock_session.return_value.get.assert_not_called()

    @mock.patch('siteaccounts.services.directory.requests.Session')
    def test_anonymous_login(self, mock_session: Any) -> None:
        """Anonymous visitors see the login page."""
        mock_directory(mock_session)
        response = self.get('path=login&email=jane@example.com')
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'id="login-form"', response.data)
        self.assertIn(b'value="jane@example.com"', response.data)
        self.assertEqual(response.headers['X-Frame-Options'], 'DENY')

    @mock.patch('siteaccounts.services.directory.requests.Session')
    def test_unknown_page(self, mock_session: Any) -> None:
        """Unknown pages show the login page."""
        mock_directory(mock_session)
        response = self.get('path=admin')
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'id="login-form"', response.data)

    @mock.patch('siteaccounts.services.directory.requests.Session')
    def test_registration(self, mock_session: Any) -> None:
        """The registration page lists the operators and titles."""
        mock_directory(mock_session)
        response = self.get('path=register')
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'<option value="surf">SURF</option>', response.data)
        self.assertIn(b'<option value="Prof">Prof</option>', response.data)

    @mock.patch('siteaccounts.services.directory.requests.Session')
    def test_logged_in_login(self, mock_session: Any) -> None:
        """Logged in users asking to log in go to their account."""
        response = self.get('path=login', make_session(False))
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.headers['Location'], '/?path=manage')

    @mock.patch('siteaccounts.services.directory.requests.Session')
    def test_replaced_path(self, mock_session: Any) -> None:
        """Redirects go to the path the proxy received."""
        response = self.get('path=edit&lang=en',
                            headers={'X-Replaced-Path': '/iop/account'})
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.headers['Location'],
                         '/iop/account?lang=en&path=login')

    @mock.patch('siteaccounts.services.directory.requests.Session')
    def test_no_sites_access(self, mock_session: Any) -> None:
        """Users without sites access can't see the sites page."""
        response = self.get('path=sites', make_session(False))
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.headers['Location'], '/?path=manage')

    @mock.patch('siteaccounts.routes.ui.render_template',
                wraps=render_template)
    @mock.patch('siteaccounts.services.directory.requests.Session')
    def test_sites(self, mock_session: Any, mock_render: Any) -> None:
        """Users with sites access see their sites, directory ones added."""
        mock_directory(mock_session)
        session = make_session(True)
        response = self.get('path=sites', session)
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'CERNBox (CERN)', response.data)
        self.assertIn(b'cernbox-client', response.data)
        self.assertIn(b'SWAN (CERN)', response.data)

        (template,), context = mock_render.call_args
        self.assertEqual(template, 'siteaccounts/sites.html')
        self.assertEqual(context['page'], 'sites')
        self.assertEqual(context['sites'], {'CERNBox': 'CERNBox (CERN)',
                                            'SWAN': 'SWAN (CERN)'})
        self.assertEqual([site.id for site in context['operator'].sites],
                         ['cernbox', 'SWAN'])
        self.assertEqual(context['operator'].sites[1].config,
                         domain.SiteConfiguration())
        self.assertIs(context['account'], session.user.account)
        self.assertEqual(context['params'], {'Path': 'sites'})
        self.assertEqual(context['titles'], ['Mr', 'Mrs', 'Ms', 'Prof', 'Dr'])
        self.assertEqual(len(session.user.operator.sites), 1,
                         "The session's operator is not modified")
        self.assertNotEqual(
            session.user.operator.sites[0].config.test_client_credentials.id,
            'cernbox-client'
        )

    @mock.patch('siteaccounts.routes.ui.render_template',
                wraps=render_template)
    @mock.patch('siteaccounts.services.directory.requests.Session')
    def test_sites_malformed_entries(self, mock_session: Any,
                                     mock_render: Any) -> None:
        """Broken entries elsewhere in the directory don't hide site names."""
        data = [
            {'ID': 'surf', 'Name': 'SURF',
             'Sites': [{'ID': None}, 'junk', {'Name': 'Nameless'}]},
            {'Name': 'No ID'},
            None,
        ] + OPERATORS
        mock_directory(mock_session, data=data)
        response = self.get('path=sites', make_session(True))
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'CERNBox (CERN)', response.data)

        _, context = mock_render.call_args
        self.assertEqual(context['sites'], {'CERNBox': 'CERNBox (CERN)',
                                            'SWAN': 'SWAN (CERN)'})
        self.assertEqual([op.id for op in context['operators']],
                         ['surf', 'cern', 'surf'])

    @mock.patch('siteaccounts.services.directory.requests.Session')
    def test_directory_unavailable(self, mock_session: Any) -> None:
        """If the directory is down, the page fails."""
        mock_directory(mock_session, ok=False)
        response = self.get('path=login')
        self.assertEqual(response.status_code, 500)

    @mock.patch('siteaccounts.services.directory.requests.Session')
    def test_status(self, mock_session: Any) -> None:
        """The status endpoint reports whether the directory is reachable."""
        mock_session.return_value.head.return_value = \
            mock.MagicMock(status_code=200, ok=True)
        response = self.client.get('/status')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, b'OK')

    @mock.patch('siteaccounts.services.directory.requests.Session')
    def test_status_directory_down(self, mock_session: Any) -> None:
        """The status endpoint fails while the directory is down."""
        mock_session.return_value.head.return_value = \
            mock.MagicMock(status_code=503, ok=False)
        response = self.client.get('/status')
        self.assertEqual(response.status_code, 503)

    @mock.patch('siteaccounts.services.directory.requests.Session')
    def test_status_directory_unreachable(self, mock_session: Any) -> None:
        """Connection errors count as the directory being down."""
        mock_session.return_value.head.side_effect = \
            requests.exceptions.ConnectionError('nope')
        response = self.client.get('/status')
        self.assertEqual(response.status_code, 503)


class TestRequestURI(TestCase):
    """The request URI used for redirects is the one the client sent."""

    def setUp(self):
        with mock.patch.dict(os.environ, ENVIRON):
            self.app = create_web_app()

    def test_raw_uri(self):
        """A raw URI provided by the server is used as it is."""
        with self.app.test_request_context(
                '/?path=edit',
                environ_overrides={'REQUEST_URI': '/pre%3Ffix/?path=edit'}):
            self.assertEqual(ui.get_request_uri(), '/pre%3Ffix/?path=edit')

    def test_raw_uri_without_query(self):
        """The query is added when the server leaves it out of the URI."""
        with self.app.test_request_context(
                '/?path=edit',
                environ_overrides={'REQUEST_URI': '', 'RAW_URI': '/a%23b/'}):
            self.assertEqual(ui.get_request_uri(), '/a%23b/?path=edit')

    def test_quoted_fallback(self):
        """Without a raw URI, a decoded mount prefix is quoted again."""
        with self.app.test_request_context(
                '/?path=edit',
                environ_overrides={'REQUEST_URI': '', 'RAW_URI': '',
                                   'SCRIPT_NAME': '/pre?fix'}):
            self.assertEqual(ui.get_request_uri(), '/pre%3Ffix/?path=edit')

    @mock.patch('siteaccounts.services.directory.requests.Session')
    def test_redirect_keeps_mount_prefix(self, mock_session: Any) -> None:
        """Redirects don't split a mount prefix at an encoded ``?``."""
        client = self.app.test_client()
        response = client.get('/?path=edit&lang=en', environ_overrides={
            'SCRIPT_NAME': '/pre?fix',
            'REQUEST_URI': '/pre%3Ffix/?path=edit&lang=en',
        })
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.headers['Location'],
                         '/pre%3Ffix/?lang=en&path=login')
