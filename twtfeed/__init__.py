"""twtfeed: a twtxt timeline client."""

__version__ = "0.3.0"
