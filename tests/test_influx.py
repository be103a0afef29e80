import base64
import math
from dataclasses import dataclass

import pytest

from wattmon.influx import InfluxTag, InfluxV1Uploader


@dataclass
class FakeScript:
    name: str
    units: str
    value: float
    precision: int = 2

    def run(self, old_record, new_record, elapsed_hours):
        return self.value


@dataclass
class FakeRecord:
    unix_time: int


@pytest.fixture
def uploader():
    return InfluxV1Uploader(
        "meter",
        [FakeScript("mains", "Watts", 1.5), FakeScript("heater", "Volts", 2.25)],
    )


def test_var_str_substitutes_all_variables(uploader):
    script = FakeScript("mains", "Watts", 0.0)
    assert uploader.var_str("$device.$name.$units", script) == "meter.mains.Watts"


def test_var_str_leaves_other_text(uploader):
    script = FakeScript("mains", "Watts", 0.0)
    assert uploader.var_str("$other value", script) == "$other value"


def test_configure_defaults(uploader):
    uploader.configure({"database": "energy"})
    assert uploader.measurement == "$name"
    assert uploader.field_key == "value"
    assert uploader.stop is False
    assert uploader.tags == []
    assert uploader.static_key_set is True


def test_configure_tags_and_static_key(uploader):
    uploader.configure(
        {"tagset": [{"key": "device", "value": "$device"}, {"key": "ct", "value": "$name"}]}
    )
    assert uploader.tags == [InfluxTag("device", "$device"), InfluxTag("ct", "$name")]
    assert uploader.static_key_set is False


def test_configure_sorts_scripts_by_measurement(uploader):
    uploader.configure({"measurement": "$name"})
    names = [script.name for script in uploader.scripts]
    assert names == sorted(names)


def test_configure_adds_default_port(uploader):
    uploader.configure({"url": "http://localhost"})
    assert uploader.url.endswith(":8086")


def test_configure_keeps_given_port(uploader):
    uploader.configure({"url": "http://localhost:9999"})
    assert uploader.url == "http://localhost:9999"


def test_query_params_with_tags(uploader):
    uploader.configure(
        {
            "database": "energy",
            "retp": "week",
            "tagset": [{"key": "device", "value": "$device"}, {"key": "ct", "value": "$name"}],
        }
    )
    script = FakeScript("mains", "Watts", 0.0)
    body = uploader.query_params(script)
    assert body == (
        "db=energy&epoch=s&rp=week&q= SELECT LAST(value) FROM mains "
        " WHERE device='meter' AND ct='mains'"
    )


def test_query_params_without_retention(uploader):
    uploader.configure({"database": "energy"})
    body = uploader.query_params(FakeScript("mains", "Watts", 0.0))
    assert "&rp=" not in body
    assert body.startswith("db=energy&epoch=s&q= SELECT LAST(value) FROM mains")


def test_parse_last_time(uploader):
    text = (
        '{"results":[{"series":[{"columns":["time","last"],'
        '"values":[[1600000000,12.5]]}]}]}'
    )
    assert uploader.parse_last_time(text) == 1600000000


@pytest.mark.parametrize("text", ["not json", '{"results":[{}]}', '{"results":[]}'])
def test_parse_last_time_missing(uploader, text):
    assert uploader.parse_last_time(text) is None


def test_build_payload_one_line_per_measurement(uploader):
    uploader.configure({"measurement": "$name"})
    payload = uploader.build_payload(FakeRecord(1000), FakeRecord(1005), 0.001)
    lines = payload.splitlines()
    assert len(lines) == 2
    assert all(line.endswith(" 1000") for line in lines)
    assert lines[0].startswith("heater value=")
    assert lines[1].startswith("mains value=")


def test_build_payload_static_key_merges_fields():
    scripts = [FakeScript("a", "Watts", 1.0, 1), FakeScript("b", "Watts", 2.0, 1)]
    uploader = InfluxV1Uploader("meter", scripts)
    uploader.configure({"measurement": "$units", "fieldkey": "$name"})
    payload = uploader.build_payload(FakeRecord(60), FakeRecord(120), 0.01)
    assert payload == "Watts a=1.0,b=2.0 60\n"


def test_build_payload_skips_nan():
    scripts = [FakeScript("a", "Watts", math.nan), FakeScript("b", "Watts", 3.0, 0)]
    uploader = InfluxV1Uploader("meter", scripts)
    uploader.configure({})
    payload = uploader.build_payload(FakeRecord(60), FakeRecord(120), 0.01)
    assert payload.splitlines() == ["b value=3 60"]


def test_build_payload_includes_tags():
    uploader = InfluxV1Uploader("meter", [FakeScript("a", "Watts", 1.0, 0)])
    uploader.configure({"tagset": [{"key": "device", "value": "$device"}]})
    payload = uploader.build_payload(FakeRecord(60), FakeRecord(120), 0.01)
    assert payload.startswith("a,device=meter value=1")


def test_write_endpoint(uploader):
    uploader.configure({"database": "energy", "retp": "week"})
    assert uploader.write_endpoint() == "/write?precision=s&db=energy&rp=week"


def test_auth_header_round_trip(uploader):
    password = "password"
    uploader.configure({"user": "user", "pwd": password})
    header = uploader.auth_header()
    scheme, encoded = header.split(" ")
    assert scheme == "Basic"
    assert base64.b64decode(encoded).decode() == "user:password"


def test_auth_header_absent_without_password(uploader):
    uploader.configure({"user": "user"})
    assert uploader.auth_header() is None