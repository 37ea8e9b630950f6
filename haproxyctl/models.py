# -*- coding: utf-8 -*-
# vim:fenc=utf-8
#
"""
haproxyctl.models
~~~~~~~~~~~~~~~~~

This module provides the vocabulary shared by the statistics decoder and the
admin interface: entry types, actions, durations and the functions which
decode a single CSV cell into a typed value.
"""
import enum
import re
import datetime
from collections import namedtuple

NANOSECOND = 1
MICROSECOND = 1000 * NANOSECOND
MILLISECOND = 1000 * MICROSECOND
SECOND = 1000 * MILLISECOND

_UINT = re.compile(r'[0-9]+')
_SECONDS = re.compile(r'(?P<sign>[-+]?)(?P<whole>[0-9]*)(?:\.(?P<frac>[0-9]*))?')


class DecodeError(ValueError):
    """
    Raised when statistics can't be decoded.

    Arguments:
        message (str): What went wrong
        line (int): The line number in the payload, when known
        column (str): The column name, when known
    """
    def __init__(self, message, line=None, column=None):
        self.message = message
        self.line = line
        self.column = column

        super().__init__(str(self))

    def __str__(self):
        location = []
        if self.line is not None:
            location.append('line {}'.format(self.line))
        if self.column is not None:
            location.append("column '{}'".format(self.column))
        if location:
            return '{}: {}'.format(', '.join(location), self.message)

        return self.message


class EntryType(enum.IntEnum):
    """The type of an entry in the statistics, as found in 'type' column"""
    FRONTEND = 0
    BACKEND = 1
    SERVER = 2
    SOCKET = 3


class Action(enum.Enum):
    """Actions accepted by the admin interface of HAProxy"""
    SET_STATE_TO_READY = 'ready'
    SET_STATE_TO_DRAIN = 'drain'
    SET_STATE_TO_MAINT = 'maint'
    HEALTH_DISABLE_CHECKS = 'dhlth'
    HEALTH_ENABLE_CHECKS = 'ehlth'
    HEALTH_FORCE_UP = 'hrunn'
    HEALTH_FORCE_NOLB = 'hnolb'
    HEALTH_FORCE_DOWN = 'hdown'
    AGENT_DISABLE_CHECKS = 'dagent'
    AGENT_ENABLE_CHECKS = 'eagent'
    AGENT_FORCE_UP = 'arunn'
    AGENT_FORCE_DOWN = 'adown'
    KILL_SESSIONS = 'shutdown'

    @classmethod
    def from_token(cls, token):
        """
        Look up an action by its token or by its member name.

        Arguments:
            token (str): Either the token sent to HAProxy, e.g. 'drain', or
                the name of the member, e.g. 'SET_STATE_TO_DRAIN'.

        Raises:
            ValueError if token doesn't name an action

        Returns:
            An Action
        """
        if isinstance(token, cls):
            return token
        normalized = token.strip()
        try:
            return cls(normalized.lower())
        except ValueError:
            pass
        try:
            return cls[normalized.upper().replace('-', '_')]
        except KeyError:
            raise ValueError("unknown action '{}', valid actions are: {}"
                             .format(token,
                                     ', '.join(a.value for a in cls)))

    def __str__(self):
        return self.value


class Duration():
    """
    Elapsed time as reported by HAProxy.

    HAProxy reports durations in seconds, we keep them in nanoseconds.
    Note that to_csv() encodes nanoseconds while from_csv() decodes seconds,
    use to_seconds_csv() for an encoding which from_csv() accepts back.

    Arguments:
        nanoseconds (int): Length of the duration
    """
    __slots__ = ('nanoseconds',)

    def __init__(self, nanoseconds=0):
        self.nanoseconds = int(nanoseconds)

    @classmethod
    def from_csv(cls, cell):
        """
        Build a Duration from the content of a CSV cell.

        Arguments:
            cell (str): Number of seconds, an empty string means zero.

        Raises:
            DecodeError if cell isn't a number

        Returns:
            A Duration
        """
        if cell == '':
            return cls()
        match = _SECONDS.fullmatch(cell)
        if (match is None
                or not (match.group('whole') or match.group('frac'))):
            raise DecodeError("invalid duration '{}'".format(cell))
        whole = int(match.group('whole') or 0)
        frac = (match.group('frac') or '')[:9].ljust(9, '0')
        nanoseconds = whole * SECOND + int(frac)
        if match.group('sign') == '-':
            nanoseconds = -nanoseconds

        return cls(nanoseconds)

    @classmethod
    def from_seconds(cls, seconds):
        """Build a Duration out of whole seconds"""
        return cls(int(seconds) * SECOND)

    def to_csv(self):
        """Encode the duration as a number of nanoseconds"""
        return '{}'.format(self.nanoseconds)

    def to_seconds_csv(self):
        """Encode the duration as a number of whole seconds"""
        return '{}'.format(int(self.seconds))

    @property
    def seconds(self):
        """Length of the duration in seconds, as a float"""
        return self.nanoseconds / SECOND

    def as_timedelta(self):
        """Return a datetime.timedelta object"""
        return datetime.timedelta(microseconds=self.nanoseconds // MICROSECOND)

    def __str__(self):
        # Renders like Go's time.Duration, e.g. 1h2m3s, 1.5s, 300ms
        if self.nanoseconds == 0:
            return '0s'
        sign = '-' if self.nanoseconds < 0 else ''
        value = abs(self.nanoseconds)

        if value < MICROSECOND:
            return '{}{}ns'.format(sign, value)
        if value < MILLISECOND:
            whole, frac = _split_fraction(value, 3)
            return '{}{}{}µs'.format(sign, whole, frac)
        if value < SECOND:
            whole, frac = _split_fraction(value, 6)
            return '{}{}{}ms'.format(sign, whole, frac)

        seconds, frac = _split_fraction(value, 9)
        text = '{}{}s'.format(seconds % 60, frac)
        minutes = seconds // 60
        if minutes:
            text = '{}m{}'.format(minutes % 60, text)
            hours = minutes // 60
            if hours:
                text = '{}h{}'.format(hours, text)

        return sign + text

    def __repr__(self):
        return 'Duration({!r})'.format(str(self))

    def __eq__(self, other):
        if not isinstance(other, Duration):
            return NotImplemented
        return self.nanoseconds == other.nanoseconds

    def __hash__(self):
        return hash(self.nanoseconds)

    def __bool__(self):
        return self.nanoseconds != 0


def _split_fraction(value, precision):
    """
    Split an integer into its whole part and a decimal fraction.

    Trailing zeros are dropped from the fraction and so is the decimal point
    when nothing remains of it.

    Arguments:
        value (int): The value to split
        precision (int): Number of digits in the fraction

    Returns:
        A tuple of the whole part (int) and the fraction (str)
    """
    whole, frac = divmod(value, 10 ** precision)
    digits = '{:0{p}d}'.format(frac, p=precision).rstrip('0')

    return whole, '.' + digits if digits else ''


def decode_str(cell):
    """Return the cell as it is"""
    return cell


def decode_uint(cell):
    """
    Decode an unsigned integer.

    Raises:
        DecodeError if cell isn't an unsigned integer
    """
    if cell == '':
        return 0
    if _UINT.fullmatch(cell) is None:
        raise DecodeError("invalid unsigned integer '{}'".format(cell))

    return int(cell)


def decode_duration(cell):
    """Decode a number of seconds to a Duration"""
    return Duration.from_csv(cell)


def decode_entry_type(cell):
    """
    Decode the ordinal found in 'type' column.

    Raises:
        DecodeError if cell isn't a known ordinal
    """
    if cell == '':
        return EntryType.FRONTEND
    try:
        if _UINT.fullmatch(cell) is None:
            raise ValueError(cell)
        return EntryType(int(cell))
    except ValueError:
        raise DecodeError("invalid entry type '{}', expected one of {}"
                          .format(cell,
                                  ', '.join(str(int(t)) for t in EntryType)))


class ActionCommand(namedtuple('ActionCommand',
                               ['action', 'entry_type', 'backend', 'server'])):
    """
    An action addressed to an entry of HAProxy.

    Attributes:
        action (Action): The action to perform
        entry_type (EntryType): The type of the entry
        backend (str): The name of the proxy
        server (str): The name of the server, empty for proxy wide actions
    """
    __slots__ = ()

    @property
    def token(self):
        """The string HAProxy expects for the action"""
        return self.action.value

    @property
    def address(self):
        """A tuple of entry type, proxy name and server name"""
        return self.entry_type, self.backend, self.server

    def payload(self):
        """Build the form fields of the POST request to the admin interface"""
        return {'s': self.server, 'action': self.token, 'b': self.backend}


def format_action(action, entry_type, backend, server=''):
    """
    Build the command for an action on an entry.

    No check is performed on whether the action makes sense for the type of
    the entry, HAProxy rejects those by itself.

    Arguments:
        action (Action or str): The action or its token
        entry_type (EntryType or int): The type of the entry
        backend (str): The name of the proxy
        server (str): The name of the server

    Raises:
        ValueError for an unknown action or entry type

    Returns:
        An ActionCommand
    """
    return ActionCommand(action=Action.from_token(action),
                         entry_type=EntryType(entry_type),
                         backend=backend,
                         server=server or '')
