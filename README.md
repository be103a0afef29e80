# wattmon

Pure-Python building blocks for an electric power monitor: web
authentication, request bookkeeping, a message log, saved graph
definitions, InfluxDB 1.x payloads, and the arithmetic that turns sampled
AC cycles into volts, amps and watts. The package has no dependencies
outside the standard library.

## Installation

    pip install .

For running the tests:

    pip install ".[test]"
    pytest

## Modules

- `wattmon.auth`: HTTP Digest authentication. `DigestAuthenticator` issues
  challenges (`challenge`, `new_session`), checks `Authorization` headers
  against an `AuthLevel` (`authenticate`), tracks `AuthSession` objects whose
  nonce count must increase and which are dropped after ten minutes unused
  (`get_session`, `purge_sessions`, `session_count`). Password digests are set
  with `set_passwords` and can be saved to and loaded from a file
  (`save_passwords`, `load_passwords`). Helpers: `extract_param`, `calc_h1`.
- `wattmon.httpslots`: `RequestSlots`, a fixed number of concurrent request
  reservations. `reserve` returns a time-based token (or `None` when full or
  locked), `release` frees it, and `expired` lists the ids of requests held
  too long (15 minutes by default).
- `wattmon.messagelog`: `MessageLog` buffers message text, prefixes each
  message with an optional timestamp (and a restart banner before the first),
  echoes it to a binary stream and appends it to a file.
- `wattmon.graphs`: `GraphStore` saves graph definitions as JSON text files
  named by a hash of the graph name (`create`), removes them (`delete`) and
  lists them (`get_all` for graphs with a `"start"` entry, `get_all_plus` for
  name/id pairs of the others).
- `wattmon.influx`: `InfluxV1Uploader` takes a configuration dict
  (`configure`), substitutes `$device`, `$name` and `$units` (`var_str`),
  builds the "last value" query body (`query_params`) and reads its answer
  (`parse_last_time`), builds line-protocol text for one interval
  (`build_payload`), and gives the write endpoint and Basic authorization
  value (`write_endpoint`, `auth_header`). Tags are `InfluxTag` objects.
- `wattmon.power`: `power_from_samples` returns a `PowerReading` (Vrms, Irms,
  watts, VA, reversed flag, `power_factor`) with fractional phase correction;
  `phase_steps` splits a phase correction into sample steps; `voltage_rms`
  handles voltage-only sampling.
- `wattmon.adc`: `decode_adc`, `adjust_offset`, `check_sample_quality`,
  `aref_volts`, `phase_difference` and `format_samples` (a text dump of
  sample pairs).
- `wattmon.leds`: `LedCycle` steps through a blink pattern of `R`, `G` and
  dark half-seconds.
- `wattmon.datalog`: `select_log` picks the current or history log for a
  keyed read; `gap_start` decides where logging resumes after a gap.
- `wattmon.history`: `align_up` and `fill_keys` compute history-log keys.

## Example

    from wattmon.auth import AuthLevel, DigestAuthenticator
    from wattmon.power import power_from_samples

    password = "password"
    auth = DigestAuthenticator("powermon", clock=lambda: 1_700_000_000)
    auth.set_passwords(password, None)
    value = auth.challenge("192.0.2.10")   # for the WWW-Authenticate header
    auth.authenticate(AuthLevel.NONE, "GET", None)   # True

    reading = power_from_samples([100, -100], [10, -10], 1.0, 1.0)
    reading.watts   # 1000.0

## What it does not do

The package contains no web server, no network client and no command-line
program: it builds header values, query bodies and payloads but does not
send them. It does not read an ADC or any other hardware; the sampling
functions work on sample values you supply. The data logs themselves are
not stored here: `wattmon.datalog` and `wattmon.history` only work with the
keys and extents of logs that you provide.