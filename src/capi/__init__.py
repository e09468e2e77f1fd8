"""capi: command-line client for the Cloud Foundry V3 and UAA APIs."""

__version__ = "0.1.0"
