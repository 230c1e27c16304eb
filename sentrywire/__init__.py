"""Command parsing, access control, dispatch, wire framing and configuration for the Sentry authorization engine."""

__version__ = "1.6.0"