"""Service bootstrap helpers: metrics and reporting, configuration-backed secrets, startup timing, log bridging and listening."""

__version__ = "0.1.0"