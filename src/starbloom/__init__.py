"""Starbloom — social networking API server.

Users sign up, authenticate with opaque bearer tokens, publish posts,
comment, like, and follow each other.
"""

__version__ = "1.0.0"
