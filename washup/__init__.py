"""Options, credentials files, host environment and summary for bringing up NATS and a wasmCloud host."""

__version__ = "0.1.0"