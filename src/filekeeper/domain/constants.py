from __future__ import annotations

"""
Domain Constants.

Centralizes the enumerated string values accepted by the public API
(naming policies, log naming modes, deletion modes) together with the
naming templates shared by the resolver and the collaborators.
"""

import re
from typing import Pattern, Tuple

APP_VERSION = "1.0.0"
CURRENT_CONFIG_VERSION = "1.0.0"

# -----------------------------------------------------------------------------
# NAMING POLICIES
# -----------------------------------------------------------------------------
POLICY_PRESERVE = "preserve"
POLICY_OVERWRITE = "overwrite"
POLICY_UNIQUE = "unique"
NAMING_POLICIES: Tuple[str, ...] = (POLICY_PRESERVE, POLICY_OVERWRITE, POLICY_UNIQUE)

UNIQUE_SUFFIX_TEMPLATE = "{stem}_{index}{ext}"

# -----------------------------------------------------------------------------
# LOG NAMING
# -----------------------------------------------------------------------------
LOG_MODE_DATE = "date"
LOG_MODE_INCREMENT = "increment"
LOG_NAMING_MODES: Tuple[str, ...] = (LOG_MODE_DATE, LOG_MODE_INCREMENT)

LOG_FILE_TEMPLATE = "log_{suffix}.txt"
LOG_INDEX_PATTERN: Pattern[str] = re.compile(r"^log_(\d+)\.txt$")

# -----------------------------------------------------------------------------
# TREE DELETION
# -----------------------------------------------------------------------------
DELETE_PRESERVE = "preserve"
DELETE_FORCE = "force"
DELETE_MODES: Tuple[str, ...] = (DELETE_PRESERVE, DELETE_FORCE)

# Tokens of the legacy wildcard deletion dialect
WILDCARD_TOKEN = "*"
PARENT_TOKEN = ".."
LEGACY_TOKENS: Tuple[str, ...] = (WILDCARD_TOKEN, PARENT_TOKEN)

# -----------------------------------------------------------------------------
# TEMPORARY FILES
# -----------------------------------------------------------------------------
DEFAULT_TEMP_PREFIX = "temp_"
