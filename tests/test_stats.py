"""Tests for decoding of CSV statistics."""

import random

import pytest

from haproxyctl.metrics import STAT_FIELDS
from haproxyctl.models import DecodeError, Duration, EntryType
from haproxyctl.stats import Statistic, Statistics, decode_statistics

from conftest import HEADER, SERVER_1


# ============================================================================
# Tests: decode_statistics
# ============================================================================


class TestDecodeStatistics:
    """Tests for the header driven decoder."""

    def test_rows_keep_source_order(self, payload):
        statistics = decode_statistics(payload)

        assert isinstance(statistics, Statistics)
        assert [(s.backend_name, s.frontend_name) for s in statistics] == [
            ("http-in", "FRONTEND"),
            ("web1", "srv1"),
            ("web1", "srv2"),
            ("web1", "BACKEND"),
            ("admin", "BACKEND"),
        ]

    def test_fields_of_a_server(self, payload):
        server = decode_statistics(payload)[1]

        assert server.type is EntryType.SERVER
        assert server.sessions_current == 3
        assert server.sessions_total == 7000
        assert server.bytes_out == 4194304
        assert server.status == "UP"
        assert server.status_last_changed == Duration.from_seconds(3723)
        assert str(server.status_last_changed) == "1h2m3s"
        assert server.downtime == Duration.from_seconds(12)
        assert server.last_session == Duration.from_seconds(1)
        assert server.check_status == "L7OK"
        assert server.check_code == "200"
        assert server.last_check == "HTTP status check returned code <200>"
        assert server.avg_total_time == 120
        assert server.address == "10.0.0.11:8080"
        assert server.cookie == "srv1"

    def test_empty_cells_are_zero_values(self, payload):
        server = decode_statistics(payload)[2]

        assert server.queue_current == 0
        assert server.bytes_in == 0
        assert server.last_check == ""
        assert server.last_session == Duration()
        assert str(server.downtime) == "0s"

    def test_accepts_bytes(self, payload):
        assert decode_statistics(payload.encode("utf-8")) == decode_statistics(payload)

    def test_invalid_utf8_bytes(self):
        with pytest.raises(DecodeError, match="invalid UTF-8"):
            decode_statistics(b"# pxname,svname\nweb\xff1,srv1\n")

    def test_empty_payload(self):
        assert decode_statistics("") == Statistics()

    def test_header_only(self, make_payload):
        assert decode_statistics(make_payload([])) == Statistics()

    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_column_order_does_not_matter(self, rows, make_payload, seed):
        header = list(HEADER)
        random.Random(seed).shuffle(header)

        shuffled = decode_statistics(make_payload(rows, header=header))

        assert shuffled == decode_statistics(make_payload(rows))

    def test_reversed_columns(self, rows, make_payload):
        reversed_payload = make_payload(rows, header=list(reversed(HEADER)))

        assert decode_statistics(reversed_payload) == decode_statistics(make_payload(rows))

    def test_unknown_column_is_ignored(self, rows, make_payload):
        header = HEADER + ["future_field"]
        extended = [dict(row, future_field="42") for row in rows]

        statistics = decode_statistics(make_payload(extended, header=header))

        assert statistics == decode_statistics(make_payload(rows))

    def test_missing_columns_keep_zero_values(self):
        payload = "# pxname,svname,type,scur\nweb1,srv1,2,5\n"

        stat = decode_statistics(payload)[0]

        assert stat.backend_name == "web1"
        assert stat.type is EntryType.SERVER
        assert stat.sessions_current == 5
        assert stat.bytes_in == 0
        assert stat.status == ""
        assert stat.status_last_changed == Duration()

    def test_pxname_column_is_matched_literally(self):
        statistics = decode_statistics("pxname,svname\nweb1,srv1\n")

        assert statistics[0].backend_name == ""
        assert statistics[0].frontend_name == "srv1"

    def test_columns_are_case_sensitive(self):
        statistics = decode_statistics("# pxname,SCUR\nweb1,5\n")

        assert statistics[0].sessions_current == 0

    @pytest.mark.parametrize(
        "cell,expected",
        [
            ("0", EntryType.FRONTEND),
            ("1", EntryType.BACKEND),
            ("2", EntryType.SERVER),
            ("3", EntryType.SOCKET),
        ],
    )
    def test_type_column(self, cell, expected):
        statistics = decode_statistics("# pxname,type\nweb1,{}\n".format(cell))

        assert statistics[0].type is expected

    def test_type_out_of_range_fails_whole_decode(self):
        payload = "# pxname,svname,type\nweb1,srv1,2\nweb1,BACKEND,4\n"

        with pytest.raises(DecodeError) as exc_info:
            decode_statistics(payload)

        assert exc_info.value.line == 3
        assert exc_info.value.column == "type"

    def test_invalid_duration(self):
        with pytest.raises(DecodeError, match="lastchg"):
            decode_statistics("# pxname,lastchg\nweb1,soon\n")

    def test_invalid_counter(self):
        with pytest.raises(DecodeError, match="scur"):
            decode_statistics("# pxname,scur\nweb1,-3\n")

    def test_short_row_fails(self, rows, make_payload):
        lines = make_payload(rows).splitlines()
        lines[2] = lines[2].rsplit(",", 1)[0]

        with pytest.raises(DecodeError, match="expected") as exc_info:
            decode_statistics("\n".join(lines))

        assert exc_info.value.line == 3

    def test_long_row_fails(self):
        with pytest.raises(DecodeError):
            decode_statistics("# pxname,svname\nweb1,srv1,extra\n")

    def test_unterminated_quote_fails(self):
        with pytest.raises(DecodeError, match="malformed CSV"):
            decode_statistics('# pxname,svname\nweb1,"srv1\n')

    def test_quoted_cells(self):
        statistics = decode_statistics('# pxname,svname,last_chk\nweb1,srv1,"timeout, no response"\n')

        assert statistics[0].last_check == "timeout, no response"


# ============================================================================
# Tests: Statistic and Statistics
# ============================================================================


class TestStatistic:
    """Tests for single entries."""

    def test_zero_values(self):
        stat = Statistic()

        assert stat.backend_name == ""
        assert stat.sessions_total == 0
        assert stat.type is EntryType.FRONTEND
        assert stat.downtime == Duration()

    def test_keyword_arguments(self):
        stat = Statistic(backend_name="web1", sessions_current=3)

        assert stat.backend_name == "web1"
        assert stat.sessions_current == 3

    def test_unknown_keyword_raises(self):
        with pytest.raises(TypeError):
            Statistic(no_such_field=1)

    def test_as_dict_follows_schema_order(self):
        assert list(Statistic().as_dict()) == [field.attribute for field in STAT_FIELDS]

    @pytest.mark.parametrize(
        "status,expected",
        [("UP", True), ("UP 1/3", True), ("OPEN", True), ("DOWN", False), ("MAINT", False), ("DRAIN", False)],
    )
    def test_is_up(self, status, expected):
        assert Statistic(status=status).is_up is expected

    def test_metrics_of_a_server(self, payload):
        metrics = decode_statistics(payload)[1].metrics()

        assert metrics["scur"] == 3
        assert metrics["chkfail"] == 4
        assert "req_tot" not in metrics

    def test_metrics_of_a_backend_convert_durations(self, payload):
        metrics = decode_statistics(payload)[3].metrics()

        assert metrics["downtime"] == 0
        assert metrics["act"] == 2

    def test_metrics_of_a_frontend(self, payload):
        metrics = decode_statistics(payload)[0].metrics()

        assert metrics["req_tot"] == 15320
        assert "lbtot" not in metrics


class TestStatistics:
    """Tests for collections of entries."""

    def test_filters_by_type(self, payload):
        statistics = decode_statistics(payload)

        assert [s.frontend_name for s in statistics.frontends()] == ["FRONTEND"]
        assert [s.frontend_name for s in statistics.servers()] == ["srv1", "srv2"]
        assert [s.backend_name for s in statistics.backends()] == ["web1", "admin"]
        assert statistics.sockets() == Statistics()
        assert isinstance(statistics.servers(), Statistics)

    def test_find(self, payload):
        statistics = decode_statistics(payload)

        assert statistics.find("web1", "srv2").status == "DRAIN"
        assert statistics.find("web1", "srv3") is None

    def test_group_by_backend(self, payload):
        groups = decode_statistics(payload).group_by_backend()

        assert list(groups) == ["web1", "admin"]
        assert [s.frontend_name for s in groups["web1"]] == ["srv1", "srv2"]
        assert groups["admin"] == Statistics()

    def test_group_by_backend_keys_servers_by_proxy_name(self):
        statistics = Statistics(
            [
                Statistic(backend_name="web1", frontend_name="srv1", type=EntryType.SERVER),
                Statistic(backend_name="web1", frontend_name="BACKEND", type=EntryType.BACKEND),
                Statistic(backend_name="api", frontend_name="srv9", type=EntryType.SERVER),
                Statistic(backend_name="web1", frontend_name="srv2", type=EntryType.SERVER),
            ]
        )

        groups = statistics.group_by_backend()

        assert list(groups) == ["web1", "api"]
        assert [s.frontend_name for s in groups["web1"]] == ["srv1", "srv2"]

    def test_to_dataframe(self, payload):
        frame = decode_statistics(payload).to_dataframe()

        assert len(frame) == 5
        assert list(frame.columns) == [field.attribute for field in STAT_FIELDS]
        assert list(frame["type"]) == ["FRONTEND", "SERVER", "SERVER", "BACKEND", "BACKEND"]
        assert frame.loc[1, "status_last_changed"] == 3723.0
        assert frame.loc[1, "frontend_name"] == SERVER_1["svname"]
