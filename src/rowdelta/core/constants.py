"""Core constants used across rowdelta modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

ENV_PREFIX = "ROWDELTA_"
DEFAULT_BATCH_SIZE = 1000
DEFAULT_STALE_SNAPSHOT_POLICY = "keep"
SUPPORTED_STALE_SNAPSHOT_POLICIES = ("keep", "discard")
TABLE_SOURCE_KIND = "table"
QUERY_SOURCE_KIND = "query"
OLD_DATA_LABEL = "old data"
NEW_DATA_LABEL = "new data"
STATE_DATA_LABEL = "data"
TRUE_ENV_VALUES = ("1", "true", "yes", "on")
FALSE_ENV_VALUES = ("0", "false", "no", "off")
