"""Row, data source, and data set models.

This package holds the in-memory values compared by the assertion engine.
Nothing here talks to a database.
"""
