# -*- coding: utf-8 -*-
# vim:fenc=utf-8
# pylint: disable=too-many-branches
#
"""Fetch statistics from and send actions to HAProxy over HTTP

Usage:
    haproxyctl [-f <file>] [-u <url>] [-a <auth>] stats [-t <type>] [--csv]
    haproxyctl [-f <file>] [-u <url>] [-a <auth>] action <action> <backend> [<server>] [-t <type>]
    haproxyctl [-f <file>] (-p | -P)

Options:
    -f, --file <file>  configuration file with settings
                       [default: /etc/haproxyctl.conf]
    -u, --url <url>    URL of the statistics page, overrides the one set in
                       the configuration file
    -a, --auth <auth>  credentials in the form of user:pass, override the
                       ones set in the configuration file
    -t, --type <type>  type of the entry: frontend, backend, server or socket
    --csv              print statistics in CSV format
    -p, --print        show default settings
    -P, --print-conf   show configuration
    -h, --help         show this screen
    -v, --version      show version

Actions:
    ready, drain, maint, dhlth, ehlth, hrunn, hnolb, hdown, dagent, eagent,
    arunn, adown, shutdown
"""
import sys
import logging
import copy
from configparser import ConfigParser, ExtendedInterpolation, ParsingError
from docopt import docopt
import requests

from haproxyctl import __version__ as VERSION
from haproxyctl import DEFAULT_OPTIONS
from haproxyctl.client import HAProxyClient, action_result
from haproxyctl.models import EntryType
from haproxyctl.utils import configuration_check, build_config, get_timeout

LOG_FORMAT = ('%(asctime)s [%(process)d] [%(funcName)-20s] '
              '%(levelname)-8s %(message)s')
logging.basicConfig(format=LOG_FORMAT)
log = logging.getLogger('root')  # pylint: disable=I0011,C0103


def print_config(config):
    """Print the settings of a ConfigParser like object in INI format"""
    for section in sorted(config):
        print("[{}]".format(section))
        for key, value in sorted(config[section].items()):
            print("{k} = {v}".format(k=key, v=value))
        print()


def parse_entry_type(name):
    """
    Convert the name of an entry type, as given in command line.

    Raises:
        ValueError if name isn't a known type
    """
    try:
        return EntryType[name.upper()]
    except KeyError:
        raise ValueError("invalid type '{t}', valid types are: {v}"
                         .format(t=name,
                                 v=', '.join(t.name.lower()
                                             for t in EntryType)))


def show_stats(client, entry_type=None, as_csv=False):
    """
    Print statistics, one line per entry.

    Arguments:
        client (obj): A HAProxyClient object
        entry_type (EntryType): Print only entries of this type
        as_csv (bool): Print in CSV format
    """
    statistics = client.stats()
    if entry_type is not None:
        statistics = statistics.by_type(entry_type)

    if as_csv:
        statistics.to_dataframe().to_csv(sys.stdout, index=False)
        return

    for stat in statistics:
        print("{p} {n} {t} {s} {c} {l}".format(p=stat.backend_name,
                                              n=stat.frontend_name,
                                              t=stat.type.name.lower(),
                                              s=stat.status or '-',
                                              c=stat.sessions_current,
                                              l=stat.status_last_changed))


def run_action(client, action, backend, server, entry_type=None):
    """
    Send an action and print the outcome.

    Returns:
        True if HAProxy reports that the action was performed
    """
    if entry_type is None:
        entry_type = EntryType.SERVER if server else EntryType.BACKEND
    response = client.send_action(action, entry_type, backend, server or '')
    result = action_result(response)
    print("{c} {r}".format(c=response.status_code, r=result or '-'))
    log.debug('HAProxy responded with %s', response.headers)

    return result == 'DONE'


def main(argv=None):
    """Parse CLI arguments and launch main program"""
    args = docopt(__doc__, argv=argv, version=VERSION)

    config = ConfigParser(interpolation=ExtendedInterpolation())
    # Set defaults for all sections
    config.read_dict(copy.copy(DEFAULT_OPTIONS))
    # NOTE: ConfigParser doesn't warn if the file doesn't exist, in this case
    # defaults are used.
    try:
        config.read(args['--file'])
    except ParsingError as exc:
        sys.exit(str(exc))

    if args['--url']:
        config['haproxy']['url'] = args['--url']
    if args['--auth']:
        config['haproxy']['auth'] = args['--auth']

    if args['--print']:
        print_config(DEFAULT_OPTIONS)
        sys.exit(0)
    if args['--print-conf']:
        print_config(config)
        sys.exit(0)

    try:
        configuration_check(config, 'haproxy')
    except ValueError as exc:
        sys.exit(str(exc))

    loglevel = (config.get('haproxy', 'loglevel')
                .upper())  # pylint: disable=no-member
    log.setLevel(getattr(logging, loglevel, None))

    try:
        entry_type = None
        if args['--type']:
            entry_type = parse_entry_type(args['--type'])
        client = HAProxyClient(build_config(config),
                               timeout=get_timeout(config))
        if args['stats']:
            show_stats(client, entry_type, args['--csv'])
            succeeded = True
        else:
            succeeded = run_action(client,
                                   args['<action>'],
                                   args['<backend>'],
                                   args['<server>'],
                                   entry_type)
    except (ValueError, requests.RequestException) as exc:
        # ValueError covers ConfigurationError and DecodeError as well
        sys.exit(str(exc))

    sys.exit(0 if succeeded else 1)

# This is the standard boilerplate that calls the main() function.
if __name__ == '__main__':
    main()
