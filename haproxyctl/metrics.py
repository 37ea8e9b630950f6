"""
haproxyctl.metrics
~~~~~~~~~~~~~~~~~~

This module provides the schema of HAProxy statistics and constants for
grouping metric names per frontend, backend and server. Metric names are the
field names contained in the header of the CSV statistics.
"""
from collections import namedtuple

from haproxyctl.models import (decode_str, decode_uint, decode_duration,
                               decode_entry_type)

StatField = namedtuple('StatField', ['column', 'attribute', 'decode'])

# Order follows the order HAProxy uses in the header of 'show stat'.
STAT_FIELDS = [
    StatField('# pxname', 'backend_name', decode_str),
    StatField('svname', 'frontend_name', decode_str),
    StatField('qcur', 'queue_current', decode_uint),
    StatField('qmax', 'queue_max', decode_uint),
    StatField('scur', 'sessions_current', decode_uint),
    StatField('smax', 'sessions_max', decode_uint),
    StatField('slim', 'session_limit', decode_uint),
    StatField('stot', 'sessions_total', decode_uint),
    StatField('bin', 'bytes_in', decode_uint),
    StatField('bout', 'bytes_out', decode_uint),
    StatField('dreq', 'denied_requests', decode_uint),
    StatField('dresp', 'denied_responses', decode_uint),
    StatField('ereq', 'errors_requests', decode_uint),
    StatField('econ', 'errors_connections', decode_uint),
    StatField('eresp', 'errors_responses', decode_uint),
    StatField('wretr', 'warnings_retries', decode_uint),
    StatField('wredis', 'warnings_dispatches', decode_uint),
    StatField('status', 'status', decode_str),
    StatField('weight', 'weight', decode_uint),
    StatField('act', 'is_active', decode_uint),
    StatField('bck', 'is_backup', decode_uint),
    StatField('chkfail', 'check_failed', decode_uint),
    StatField('chkdown', 'check_downed', decode_uint),
    StatField('lastchg', 'status_last_changed', decode_duration),
    StatField('downtime', 'downtime', decode_duration),
    StatField('qlimit', 'queue_limit', decode_uint),
    StatField('pid', 'process_id', decode_uint),
    StatField('iid', 'proxy_id', decode_uint),
    StatField('sid', 'service_id', decode_uint),
    StatField('throttle', 'throttle', decode_uint),
    StatField('lbtot', 'lb_total', decode_uint),
    StatField('tracked', 'tracked', decode_uint),
    StatField('type', 'type', decode_entry_type),
    StatField('rate', 'rate', decode_uint),
    StatField('rate_lim', 'rate_limit', decode_uint),
    StatField('rate_max', 'rate_max', decode_uint),
    StatField('check_status', 'check_status', decode_str),
    StatField('check_code', 'check_code', decode_str),
    StatField('check_duration', 'check_duration', decode_uint),
    StatField('hrsp_1xx', 'http_response_1xx', decode_uint),
    StatField('hrsp_2xx', 'http_response_2xx', decode_uint),
    StatField('hrsp_3xx', 'http_response_3xx', decode_uint),
    StatField('hrsp_4xx', 'http_response_4xx', decode_uint),
    StatField('hrsp_5xx', 'http_response_5xx', decode_uint),
    StatField('hrsp_other', 'http_response_other', decode_uint),
    StatField('hanafail', 'check_failed_details', decode_uint),
    StatField('req_rate', 'request_rate', decode_uint),
    StatField('req_rate_max', 'request_rate_max', decode_uint),
    StatField('req_tot', 'request_total', decode_uint),
    StatField('cli_abrt', 'aborted_by_client', decode_uint),
    StatField('srv_abrt', 'aborted_by_server', decode_uint),
    StatField('comp_in', 'compressed_bytes_in', decode_uint),
    StatField('comp_out', 'compressed_bytes_out', decode_uint),
    StatField('comp_byp', 'compressed_bytes_bypassed', decode_uint),
    StatField('comp_rsp', 'compressed_responses', decode_uint),
    StatField('lastsess', 'last_session', decode_duration),
    StatField('last_chk', 'last_check', decode_str),
    StatField('last_agt', 'last_agent_check', decode_str),
    StatField('qtime', 'avg_queue_time', decode_uint),
    StatField('ctime', 'avg_connect_time', decode_uint),
    StatField('rtime', 'avg_response_time', decode_uint),
    StatField('ttime', 'avg_total_time', decode_uint),
    # agent_status holds a check result such as L7OK, not a number
    StatField('agent_status', 'agent_status', decode_str),
    StatField('agent_code', 'agent_code', decode_uint),
    StatField('agent_duration', 'agent_duration', decode_uint),
    StatField('check_desc', 'check_desc', decode_str),
    StatField('agent_desc', 'agent_desc', decode_str),
    StatField('check_rise', 'check_rise', decode_uint),
    StatField('check_fall', 'check_fall', decode_uint),
    StatField('check_health', 'check_health', decode_uint),
    StatField('agent_rise', 'agent_rise', decode_uint),
    StatField('agent_fall', 'agent_fall', decode_uint),
    StatField('agent_health', 'agent_health', decode_uint),
    StatField('addr', 'address', decode_str),
    StatField('cookie', 'cookie', decode_str),
    StatField('mode', 'mode', decode_str),
    StatField('algo', 'lb_algorithm', decode_str),
    StatField('conn_rate', 'conn_rate', decode_uint),
    StatField('conn_rate_max', 'conn_rate_max', decode_uint),
    StatField('conn_tot', 'conn_total', decode_uint),
    StatField('intercepted', 'intercepted', decode_uint),
    StatField('dcon', 'denied_connections', decode_uint),
    StatField('dses', 'denied_sessions', decode_uint),
    StatField('wrew', 'warnings_rewrites', decode_uint),
    StatField('connect', 'connect', decode_uint),
    StatField('reuse', 'reuse', decode_uint),
    StatField('cache_lookups', 'cache_lookups', decode_uint),
    StatField('cache_hits', 'cache_hits', decode_uint),
    StatField('srv_icur', 'idle_conn_available', decode_uint),
    StatField('srv_ilim', 'idle_conn_limit', decode_uint),
    StatField('qtime_max', 'queue_time_max', decode_uint),
    StatField('ctime_max', 'connect_time_max', decode_uint),
    StatField('rtime_max', 'response_time_max', decode_uint),
    StatField('ttime_max', 'total_time_max', decode_uint),
    StatField('eint', 'internal_errors', decode_uint),
    StatField('idle_conn_cur', 'idle_conn_current', decode_uint),
    StatField('safe_conn_cur', 'safe_conn_current', decode_uint),
    StatField('used_conn_cur', 'used_conn_current', decode_uint),
    StatField('need_conn_est', 'need_conn_estimate', decode_uint),
]

COLUMN_ATTRIBUTES = {field.column: field.attribute for field in STAT_FIELDS}

DURATION_COLUMNS = ['lastchg', 'downtime', 'lastsess']

COMMON = [
    'bin',
    'bout',
    'dresp',
    'hrsp_1xx',
    'hrsp_2xx',
    'hrsp_3xx',
    'hrsp_4xx',
    'hrsp_5xx',
    'hrsp_other',
    'rate',
    'rate_max',
    'scur',
    'smax',
    'stot'
]

SERVER_METRICS = [
    'chkfail',
    'cli_abrt',
    'econ',
    'eresp',
    'lbtot',
    'qcur',
    'qmax',
    'qtime',
    'rtime',
    'srv_abrt',
    'throttle',
    'ttime',
    'weight',
    'wredis',
    'wretr'
] + COMMON

BACKEND_METRICS = [
    'act',
    'bck',
    'chkdown',
    'cli_abrt',
    'comp_byp',
    'comp_in',
    'comp_out',
    'comp_rsp',
    'ctime',
    'downtime',
    'dreq',
    'econ',
    'eresp',
    'lbtot',
    'qcur',
    'qmax',
    'qtime',
    'rtime',
    'slim',
    'srv_abrt',
    'ttime',
    'weight',
    'wredis',
    'wretr',
] + COMMON

FRONTEND_METRICS = [
    'comp_byp',
    'comp_in',
    'comp_out',
    'comp_rsp',
    'dreq',
    'ereq',
    'rate_lim',
    'req_rate',
    'req_rate_max',
    'req_tot',
    'slim'
] + COMMON

SOCKET_METRICS = [
    'bin',
    'bout',
    'dreq',
    'dresp',
    'ereq',
    'scur',
    'slim',
    'smax',
    'stot',
]
