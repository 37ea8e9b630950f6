"""Shared fixtures for haproxyctl tests."""

import pytest
import requests

from haproxyctl.metrics import STAT_FIELDS

HEADER = [field.column for field in STAT_FIELDS]

FRONTEND = {
    '# pxname': 'http-in', 'svname': 'FRONTEND', 'scur': '12', 'smax': '80',
    'slim': '2000', 'stot': '15320', 'bin': '1048576', 'bout': '8388608',
    'dreq': '3', 'ereq': '1', 'status': 'OPEN', 'pid': '1', 'iid': '2',
    'sid': '0', 'type': '0', 'rate': '4', 'rate_lim': '0', 'rate_max': '55',
    'hrsp_2xx': '15001', 'hrsp_4xx': '300', 'hrsp_5xx': '19',
    'req_rate': '4', 'req_rate_max': '60', 'req_tot': '15320',
    'mode': 'http', 'conn_rate': '4', 'conn_rate_max': '50',
    'conn_tot': '15320',
}

SERVER_1 = {
    '# pxname': 'web1', 'svname': 'srv1', 'qcur': '0', 'qmax': '2',
    'scur': '3', 'smax': '20', 'stot': '7000', 'bin': '524288',
    'bout': '4194304', 'econ': '1', 'eresp': '0', 'wretr': '2',
    'status': 'UP', 'weight': '1', 'act': '1', 'bck': '0', 'chkfail': '4',
    'chkdown': '1', 'lastchg': '3723', 'downtime': '12', 'pid': '1',
    'iid': '3', 'sid': '1', 'lbtot': '7000', 'type': '2', 'rate': '2',
    'rate_max': '30', 'check_status': 'L7OK', 'check_code': '200',
    'check_duration': '2', 'hrsp_2xx': '6900', 'hrsp_4xx': '100',
    'lastsess': '1', 'last_chk': 'HTTP status check returned code <200>',
    'qtime': '0', 'ctime': '1', 'rtime': '15', 'ttime': '120',
    'check_desc': 'Layer7 check passed', 'check_rise': '2',
    'check_fall': '3', 'check_health': '4', 'agent_rise': '0',
    'addr': '10.0.0.11:8080', 'cookie': 'srv1', 'mode': 'http',
}

SERVER_2 = {
    '# pxname': 'web1', 'svname': 'srv2', 'scur': '0', 'stot': '6900',
    'status': 'DRAIN', 'weight': '0', 'act': '1', 'lastchg': '60',
    'pid': '1', 'iid': '3', 'sid': '2', 'type': '2',
    'check_status': 'L4CON', 'addr': '10.0.0.12:8080', 'mode': 'http',
}

BACKEND = {
    '# pxname': 'web1', 'svname': 'BACKEND', 'scur': '3', 'smax': '25',
    'slim': '200', 'stot': '13900', 'status': 'UP', 'weight': '1',
    'act': '2', 'bck': '0', 'chkdown': '1', 'lastchg': '86400',
    'downtime': '0', 'pid': '1', 'iid': '3', 'sid': '0', 'lbtot': '13900',
    'type': '1', 'lastsess': '1', 'mode': 'http', 'algo': 'roundrobin',
}

ADMIN_BACKEND = {
    '# pxname': 'admin', 'svname': 'BACKEND', 'status': 'UP', 'pid': '1',
    'iid': '4', 'type': '1', 'mode': 'http', 'algo': 'roundrobin',
}


def _csv_line(values):
    # HAProxy ends every line with a comma
    return ','.join(values) + ','


def build_payload(rows, header=HEADER):
    """Build CSV statistics the way HAProxy emits them"""
    lines = [_csv_line(header)]
    for row in rows:
        lines.append(_csv_line(row.get(column, '') for column in header))

    return '\n'.join(lines) + '\n\n'


@pytest.fixture
def make_payload():
    return build_payload


@pytest.fixture
def rows():
    return [FRONTEND, SERVER_1, SERVER_2, BACKEND, ADMIN_BACKEND]


@pytest.fixture
def payload(rows):
    return build_payload(rows)


class FakeAdapter(requests.adapters.BaseAdapter):
    """A transport adapter which replays canned responses."""

    def __init__(self, *responses):
        super().__init__()
        self.responses = list(responses)
        self.requests = []

    def send(self, request, **kwargs):
        self.requests.append(request)
        status, headers, body = self.responses.pop(0)
        response = requests.Response()
        response.status_code = status
        response.headers.update(headers)
        response._content = body.encode('utf-8')
        response._content_consumed = True
        response.encoding = 'utf-8'
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


@pytest.fixture
def fake_session():
    """Return a factory of (session, adapter) pairs."""

    def _factory(*responses):
        adapter = FakeAdapter(*responses)
        session = requests.Session()
        session.mount('http://', adapter)
        session.mount('https://', adapter)
        return session, adapter

    return _factory
