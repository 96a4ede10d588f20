"""Database collaborators.

This module runs queries and table population through SQLAlchemy and
exposes the session handle that owns snapshots and assertions.
"""
