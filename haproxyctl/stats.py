# -*- coding: utf-8 -*-
# vim:fenc=utf-8
# pylint: disable=no-member
"""
haproxyctl.stats
~~~~~~~~~~~~~~~~

This module decodes the CSV statistics of HAProxy into Statistic objects.

Decoding is driven by the header of the payload: columns are matched by name
against STAT_FIELDS, unknown columns are ignored and fields without a column
keep their zero value.
"""
import csv
import io
import logging
from collections import OrderedDict

import pandas

from haproxyctl.metrics import (STAT_FIELDS, COLUMN_ATTRIBUTES,
                                DURATION_COLUMNS, FRONTEND_METRICS,
                                BACKEND_METRICS, SERVER_METRICS,
                                SOCKET_METRICS)
from haproxyctl.models import DecodeError, EntryType

log = logging.getLogger('root')  # pylint: disable=I0011,C0103

METRICS_PER_TYPE = {
    EntryType.FRONTEND: FRONTEND_METRICS,
    EntryType.BACKEND: BACKEND_METRICS,
    EntryType.SERVER: SERVER_METRICS,
    EntryType.SOCKET: SOCKET_METRICS,
}


class Statistic():
    """
    Statistics of a single entry, a frontend, a backend, a server or a socket.

    Attributes are listed in haproxyctl.metrics.STAT_FIELDS. Keyword arguments
    override the zero value of the matching attribute.
    """
    __slots__ = tuple(field.attribute for field in STAT_FIELDS)

    def __init__(self, **kwargs):
        for field in STAT_FIELDS:
            setattr(self, field.attribute, field.decode(''))
        for attribute, value in kwargs.items():
            if attribute not in self.__slots__:
                raise TypeError("unknown statistic '{}'".format(attribute))
            setattr(self, attribute, value)

    @property
    def is_up(self):
        """True if the entry accepts traffic"""
        return self.status.startswith('UP') or self.status == 'OPEN'

    def as_dict(self):
        """Return attributes as an ordered dictionary"""
        return OrderedDict((field.attribute, getattr(self, field.attribute))
                           for field in STAT_FIELDS)

    def metrics(self):
        """
        Return the metrics relevant for the type of the entry.

        Durations are converted to seconds.

        Returns:
            A dictionary keyed by metric name, the column name in HAProxy.
        """
        _metrics = {}
        for name in METRICS_PER_TYPE[self.type]:
            value = getattr(self, COLUMN_ATTRIBUTES[name])
            if name in DURATION_COLUMNS:
                value = int(value.seconds)
            _metrics[name] = value

        return _metrics

    def __eq__(self, other):
        if not isinstance(other, Statistic):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self):
        return ('Statistic(backend_name={!r}, frontend_name={!r}, type={})'
                .format(self.backend_name, self.frontend_name, self.type.name))


class Statistics(list):
    """A list of Statistic objects in the order HAProxy reports them"""

    def by_type(self, entry_type):
        """Return statistics of entries of a type"""
        return Statistics(x for x in self if x.type == entry_type)

    def frontends(self):
        """Return statistics of frontends"""
        return self.by_type(EntryType.FRONTEND)

    def backends(self):
        """Return statistics of backends"""
        return self.by_type(EntryType.BACKEND)

    def servers(self):
        """Return statistics of servers"""
        return self.by_type(EntryType.SERVER)

    def sockets(self):
        """Return statistics of listening sockets"""
        return self.by_type(EntryType.SOCKET)

    def find(self, backend, name):
        """
        Find the first entry for a proxy and service name.

        Arguments:
            backend (str): Name of the proxy
            name (str): Name of the service, e.g. a server name or BACKEND

        Returns:
            A Statistic object or None
        """
        for stat in self:
            if stat.backend_name == backend and stat.frontend_name == name:
                return stat

        return None

    def group_by_backend(self):
        """
        Group servers under the backend they belong to.

        Servers are keyed by their proxy name. Backends appear in the order
        of their first row and servers keep their order within a backend.
        Backends without servers are included.

        Returns:
            An OrderedDict of backend name to Statistics of servers
        """
        groups = OrderedDict()
        for stat in self:
            if stat.type == EntryType.SERVER:
                groups.setdefault(stat.backend_name, Statistics()).append(stat)
            elif stat.type == EntryType.BACKEND:
                groups.setdefault(stat.backend_name, Statistics())

        return groups

    def to_dataframe(self):
        """
        Build a pandas data frame, one row per entry.

        Durations are converted to seconds and entry types to their names.
        """
        columns = [field.attribute for field in STAT_FIELDS]
        records = []
        for stat in self:
            record = stat.as_dict()
            for column in DURATION_COLUMNS:
                attribute = COLUMN_ATTRIBUTES[column]
                record[attribute] = record[attribute].seconds
            record['type'] = record['type'].name
            records.append(record)

        return pandas.DataFrame.from_records(records, columns=columns)


def decode_statistics(payload):
    """
    Decode CSV statistics of HAProxy.

    Arguments:
        payload (str or bytes): The output of 'show stat' or of the ';csv'
            page of the statistics, the first line is the header.

    Raises:
        DecodeError if the payload can't be decoded, nothing is returned for
        the rows which were decoded before the failure.

    Returns:
        A Statistics object
    """
    if isinstance(payload, bytes):
        try:
            payload = payload.decode('utf-8')
        except UnicodeDecodeError as exc:
            raise DecodeError('invalid UTF-8: {}'.format(exc)) from exc

    reader = csv.reader(io.StringIO(payload), strict=True)
    rows = []
    try:
        for row in reader:
            if row:
                rows.append((reader.line_num, row))
    except csv.Error as exc:
        raise DecodeError('malformed CSV: {}'.format(exc),
                          line=reader.line_num) from exc

    statistics = Statistics()
    if not rows:
        log.debug('received empty statistics')
        return statistics

    _, header = rows.pop(0)
    index = {}
    for position, column in enumerate(header):
        index.setdefault(column, position)
    known = [(index[field.column], field) for field in STAT_FIELDS
             if field.column in index]
    log.debug('header has %s columns, %s of them are known',
              len(header), len(known))

    for line, row in rows:
        if len(row) != len(header):
            raise DecodeError('expected {} fields, found {}'
                              .format(len(header), len(row)),
                              line=line)
        stat = Statistic()
        for position, field in known:
            try:
                value = field.decode(row[position])
            except DecodeError as exc:
                raise DecodeError(exc.message,
                                  line=line,
                                  column=field.column) from exc
            setattr(stat, field.attribute, value)
        statistics.append(stat)

    log.debug('decoded statistics for %s entries', len(statistics))

    return statistics
