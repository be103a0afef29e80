"""Request and payload building for posting output values to InfluxDB 1.x."""

from __future__ import annotations

import base64
import json
import math
import re
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence
from urllib.parse import urlsplit, urlunsplit

DEFAULT_PORT = 8086
_VARIABLE = re.compile(r"\$(device|name|units)")


class Script(Protocol):
    """An output whose value is computed from two log records."""

    name: str
    units: str
    precision: int

    def run(self, old_record: Any, new_record: Any, elapsed_hours: float) -> float:
        ...


class Record(Protocol):
    """A data log record keyed by Unix time."""

    unix_time: int


@dataclass
class InfluxTag:
    """One tag key with a value template that may contain variables."""

    key: str
    value: str


class InfluxV1Uploader:
    """Holds InfluxDB 1.x settings and builds its queries and line-protocol posts."""

    def __init__(self, device_name: str, scripts: Sequence[Script] = ()):
        self.device_name = device_name
        self.scripts: list[Script] = list(scripts)
        self.database: Optional[str] = None
        self.user: Optional[str] = None
        self.pwd: Optional[str] = None
        self.retention: Optional[str] = None
        self.measurement = "$name"
        self.field_key = "value"
        self.stop = False
        self.tags: list[InfluxTag] = []
        self.static_key_set = False
        self.url: Optional[str] = None

    def configure(self, config: dict) -> bool:
        """Apply a configuration object; outputs are sorted by measurement."""
        self.database = config.get("database")
        self.user = config.get("user")
        self.pwd = config.get("pwd")
        self.retention = config.get("retp")
        self.measurement = config.get("measurement") or "$name"
        self.field_key = config.get("fieldkey") or "value"
        self.stop = bool(config.get("stop", False))

        self.tags = []
        self.static_key_set = True
        for entry in config.get("tagset") or []:
            tag = InfluxTag(key=entry.get("key") or "", value=entry.get("value") or "")
            if "$units" in tag.value or "$name" in tag.value:
                self.static_key_set = False
            self.tags.append(tag)

        self.scripts.sort(key=lambda script: self.var_str(self.measurement, script))

        url = config.get("url")
        if url:
            parts = urlsplit(url if "//" in url else "//" + url)
            if parts.port is None:
                parts = parts._replace(netloc=f"{parts.netloc}:{DEFAULT_PORT}")
            url = urlunsplit(parts)
            if url.startswith("//"):
                url = url[2:]
        self.url = url
        return True

    def var_str(self, template: str, script: Script) -> str:
        """Substitute $device, $name and $units in ``template``."""
        values = {
            "device": self.device_name,
            "name": script.name,
            "units": script.units,
        }
        return _VARIABLE.sub(lambda match: values[match.group(1)], template)

    def query_params(self, script: Script) -> str:
        """Form body of the query for the last time this output was sent."""
        body = f"db={self.database}&epoch=s"
        if self.retention:
            body += f"&rp={self.retention}"
        body += (
            f"&q= SELECT LAST({self.var_str(self.field_key, script)})"
            f" FROM {self.var_str(self.measurement, script)} "
        )
        for index, tag in enumerate(self.tags):
            keyword = "WHERE" if index == 0 else "AND"
            body += f" {keyword} {tag.key}='{self.var_str(tag.value, script)}'"
        return body

    def parse_last_time(self, response_text: str) -> Optional[int]:
        """Return the time column of a LAST query result, or None if absent."""
        try:
            results = json.loads(response_text)
            series = results["results"][0]["series"][0]
            columns = series["columns"]
            values = series["values"][0]
        except (json.JSONDecodeError, KeyError, IndexError, TypeError):
            return None
        for column, value in zip(columns, values):
            if column == "time":
                try:
                    return int(value)
                except (TypeError, ValueError):
                    return None
        return None

    def build_payload(self, old_record: Record, new_record: Record, elapsed_hours: float) -> str:
        """Line-protocol text for one interval, timestamped with the old record."""
        parts: list[str] = []
        last_measurement = ""
        this_measurement = ""
        for script in self.scripts:
            value = script.run(old_record, new_record, elapsed_hours)
            if not math.isnan(value):
                this_measurement = self.var_str(self.measurement, script)
                field = self.var_str(self.field_key, script)
                formatted = f"{value:.{script.precision}f}"
                if self.static_key_set and this_measurement == last_measurement:
                    parts.append(f",{field}={formatted}")
                else:
                    if last_measurement:
                        parts.append(f" {old_record.unix_time}\n")
                    parts.append(this_measurement)
                    for tag in self.tags:
                        parts.append(f",{tag.key}={self.var_str(tag.value, script)}")
                    parts.append(f" {field}={formatted}")
            last_measurement = this_measurement
        parts.append(f" {old_record.unix_time}\n")
        return "".join(parts)

    def write_endpoint(self) -> str:
        """Path and query string of the write request."""
        endpoint = f"/write?precision=s&db={self.database}"
        if self.retention:
            endpoint += f"&rp={self.retention}"
        return endpoint

    def auth_header(self) -> Optional[str]:
        """Basic Authorization value when both user and password are set."""
        if not (self.user and self.pwd):
            return None
        encoded = base64.b64encode(f"{self.user}:{self.pwd}".encode("utf-8"))
        return "Basic " + encoded.decode("ascii")