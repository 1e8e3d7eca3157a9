"""tlnt - Telnet server with per-session line editing and command history."""

__version__ = "0.1.0"
