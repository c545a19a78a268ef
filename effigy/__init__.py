"""Task runner front end: command parsing, project root resolution, help panels and JSON envelopes."""

__version__ = "0.1.0"