# -*- coding: utf-8 -*-
# vim:fenc=utf-8
#
"""
haproxyctl.client
~~~~~~~~~~~~~~~~~

This module provides the configuration of a connection to the statistics page
of HAProxy and a client which fetches statistics and sends actions over it.

A configuration is built out of a URL and a list of options, which are
applied in order:

    config = HAProxyConfig.new('http://lb1:8080/haproxy',
                               with_auth_string('admin:secret'),
                               with_stats_path(';csv'))
    client = HAProxyClient(config)
    for stat in client.stats().servers():
        print(stat.backend_name, stat.frontend_name, stat.status)
"""
import logging
from urllib.parse import urljoin, urlsplit, parse_qs

import requests

from haproxyctl.models import format_action
from haproxyctl.stats import decode_statistics

log = logging.getLogger('root')  # pylint: disable=I0011,C0103

DEFAULT_STATS_PATH = ';csv;norefresh'


class ConfigurationError(ValueError):
    """Raised when a configuration can't be built"""


def with_stats_path(path):
    """Set the path of the CSV statistics, relative to the URL"""
    def option(config):
        config.stats_path = path

    return option


def with_auth_info(username, password):
    """Set credentials for HTTP Basic authentication"""
    def option(config):
        config.username = username
        config.password = password

    return option


def with_auth_string(auth):
    """
    Set credentials for HTTP Basic authentication from a 'user:pass' string.

    Everything after the first colon is the password.
    """
    def option(config):
        config.set_credentials_from_auth_string(auth)

    return option


def with_http_client(client):
    """Use a pre-built requests.Session object"""
    def option(config):
        config.client = client

    return option


def _no_redirect_target(resp):  # pylint: disable=unused-argument
    """Replaces requests.Session.get_redirect_target so nothing is followed"""
    return None


class HAProxyConfig():
    """
    Configuration for talking to HAProxy over HTTP.

    Use HAProxyConfig.new() to build one, it is not meant to be changed
    afterwards.

    Arguments:
        url (str): The URL of the statistics page, it ends with a slash
    """
    def __init__(self, url):
        self.url = url
        self.stats_path = DEFAULT_STATS_PATH
        self.username = ''
        self.password = ''
        self.client = None
        self._setup_done = False

    @classmethod
    def new(cls, url, *options):
        """
        Build a configuration.

        Arguments:
            url (str): The URL of the statistics page of HAProxy
            options (callable): Options to apply, in the given order

        Raises:
            ConfigurationError if the URL or an option is invalid

        Returns:
            A HAProxyConfig object
        """
        try:
            parts = urlsplit(url)
        except ValueError as exc:
            raise ConfigurationError("invalid URL '{u}': {e}"
                                     .format(u=url, e=exc)) from exc
        if not parts.scheme or not parts.netloc:
            raise ConfigurationError("invalid URL '{u}': scheme and host are "
                                     "required".format(u=url))

        config = cls(url.rstrip('/') + '/')
        for option in options:
            option(config)
        config.setup_client()
        log.debug('configuration for %s is ready', config.url)

        return config

    def set_credentials_from_auth_string(self, auth):
        """
        Set username and password from a 'user:pass' string.

        Raises:
            ConfigurationError if there isn't a colon in auth
        """
        username, separator, password = auth.partition(':')
        if not separator:
            raise ConfigurationError("invalid auth string, expected "
                                     "'username:password'")
        self.username = username
        self.password = password

    def setup_client(self):
        """
        Prepare the HTTP session, only the first call has an effect.

        The session never follows redirects, the response HAProxy sends is
        the one callers get. Other settings of an injected session are kept.
        """
        if self._setup_done:
            return

        if self.client is None:
            self.client = requests.Session()
        self.client.get_redirect_target = _no_redirect_target
        if self.username or self.password:
            self.client.auth = (self.username, self.password)
        self._setup_done = True

    @property
    def stats_url(self):
        """The URL of the CSV statistics"""
        return urljoin(self.url, self.stats_path.lstrip('/'))

    def __repr__(self):
        return ('HAProxyConfig(url={!r}, stats_path={!r}, username={!r})'
                .format(self.url, self.stats_path, self.username))


class HAProxyClient():
    """
    Fetch statistics from and send actions to HAProxy.

    Arguments:
        config (HAProxyConfig): Where and how to connect
        timeout (float): Timeout in seconds for HTTP requests, None to wait
            forever
    """
    def __init__(self, config, timeout=None):
        self.config = config
        self.timeout = timeout

    def stats(self):
        """
        Fetch and decode statistics.

        Raises:
            requests.HTTPError if HAProxy doesn't respond with 2xx
            requests.RequestException on network failures
            haproxyctl.models.DecodeError if the payload can't be decoded

        Returns:
            A Statistics object
        """
        url = self.config.stats_url
        log.debug('fetching statistics from %s', url)
        response = self.config.client.get(url,
                                          timeout=self.timeout,
                                          allow_redirects=False)
        if not 200 <= response.status_code < 300:
            raise requests.HTTPError('{c} response from {u}'
                                     .format(c=response.status_code, u=url),
                                     response=response)

        return decode_statistics(response.text)

    def send_action(self, action, entry_type, backend, server=''):
        """
        Send an action to the admin interface.

        HAProxy answers with a redirect carrying the result of the action,
        the response is returned as it is, see action_result().

        Arguments:
            action (Action or str): The action or its token
            entry_type (EntryType or int): The type of the entry
            backend (str): The name of the proxy
            server (str): The name of the server

        Raises:
            requests.RequestException on network failures

        Returns:
            A requests.Response object
        """
        command = format_action(action, entry_type, backend, server)
        log.info('sending %s for %s/%s (%s) to %s',
                 command.token,
                 command.backend,
                 command.server,
                 command.entry_type.name,
                 self.config.url)

        return self.config.client.post(self.config.url,
                                       data=command.payload(),
                                       timeout=self.timeout,
                                       allow_redirects=False)


def action_result(response):
    """
    Extract the result of an action from the response of HAProxy.

    HAProxy redirects to the statistics page with ';st=<RESULT>' appended,
    where RESULT is one of DONE, PART, ERRP, EXCD, DENY, NONE or UNKN.

    Arguments:
        response (obj): A requests.Response object

    Returns:
        The result as a string or None if the response doesn't carry one
    """
    location = response.headers.get('Location', '')
    for parameter in location.split(';'):
        values = parse_qs(parameter).get('st')
        if values:
            return values[0]

    return None
