"""Power monitor building blocks: digest auth, request slots, message log, graphs, InfluxDB payloads and power computations."""

__version__ = "0.1.0"