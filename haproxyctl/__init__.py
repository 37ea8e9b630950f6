# -*- coding: utf-8 -*-
# vim:fenc=utf-8
#
"""
A client for the statistics page and the admin interface of HAProxy.
"""
__title__ = 'haproxyctl'
__author__ = 'Pavlos Parissis'
__license__ = 'Apache 2.0'
__version__ = '0.1.0'
__copyright__ = 'Copyright 2016 Pavlos Parissis <pavlos.parissis@gmail.com'

DEFAULT_OPTIONS = {
    'DEFAULT': {
        'timeout': '5',
        'loglevel': 'info',
    },
    'haproxy': {
        'url': 'http://127.0.0.1:8080/haproxy',
        'stats-path': ';csv;norefresh',
        'username': '',
        'password': '',
        'auth': '',
    },
}
