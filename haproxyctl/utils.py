# -*- coding: utf-8 -*-
# vim:fenc=utf-8
#
"""
haproxyctl.utils
~~~~~~~~~~~~~~~~

This module provides functions and constants for handling the configuration
of haproxyctl.
"""
import logging
import configparser

from haproxyctl.client import (HAProxyConfig, with_stats_path,
                               with_auth_info, with_auth_string)

log = logging.getLogger('root')  # pylint: disable=I0011,C0103

OPTIONS_TYPE = {
    'haproxy': {
        'loglevel': 'get',
        'url': 'get',
        'stats-path': 'get',
        'username': 'get',
        'password': 'get',
        'auth': 'get',
        'timeout': 'getfloat',
    },
}


def configuration_check(config, section):
    """
    Validate options of a section against OPTIONS_TYPE.

    Arguments:
        config (obj): A configparser object which holds our configuration.
        section (str): Section name

    Raises:
        ValueError on the first invalid option found

    Returns:
        None if all checks are successful.
    """
    if not config.has_section(section):
        raise ValueError("invalid configuration, section:'{s}' is missing"
                         .format(s=section))
    loglevel = config[section]['loglevel']
    if not isinstance(getattr(logging, loglevel.upper(), None), int):
        raise ValueError("invalid configuration, section:'{s}' option:'{o}' "
                         "error: invalid loglevel '{l}'"
                         .format(s=section,
                                 o='loglevel',
                                 l=loglevel))

    for option, getter in OPTIONS_TYPE[section].items():
        try:
            getattr(config, getter)(section, option)
        except (configparser.Error, ValueError) as exc:
            # Messages of ConfigParser don't always name the option
            if 'section' not in str(exc):
                raise ValueError("invalid configuration, section:'{s}' "
                                 "option:'{p}' error:{e}"
                                 .format(s=section,
                                         p=option,
                                         e=str(exc)))
            else:
                raise ValueError("invalid configuration, error:{e}"
                                 .format(e=str(exc)))

    timeout = config.getfloat(section, 'timeout')
    if timeout < 0:
        raise ValueError("invalid configuration, section:'{s}' option:'{o}' "
                         "error: timeout can't be negative"
                         .format(s=section, o='timeout'))


def build_config(config, section='haproxy'):
    """
    Build a HAProxyConfig out of the configuration.

    Credentials set with 'auth' take precedence over 'username' and
    'password'.

    Arguments:
        config (obj): A configParser object which holds configuration.
        section (str): Section name

    Raises:
        haproxyctl.client.ConfigurationError if the URL or the credentials
        are invalid

    Returns:
        A HAProxyConfig object
    """
    options = [with_stats_path(config.get(section, 'stats-path'))]
    username = config.get(section, 'username')
    password = config.get(section, 'password')
    if username or password:
        options.append(with_auth_info(username, password))
    auth = config.get(section, 'auth')
    if auth:
        options.append(with_auth_string(auth))

    log.debug('building configuration for %s', config.get(section, 'url'))

    return HAProxyConfig.new(config.get(section, 'url'), *options)


def get_timeout(config, section='haproxy'):
    """Return the timeout for HTTP requests, zero means wait forever"""
    timeout = config.getfloat(section, 'timeout')
    if timeout == 0:
        return None

    return timeout
