"""Building blocks for a proxy server: JSON parsing, address utilities, host rules, DNS resolution and obfuscation helpers."""

__version__ = "0.1.0"