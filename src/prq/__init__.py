"""prq - query and update GitHub pull requests from a local checkout."""

__version__ = "0.1.0"
