"""
IdeaFlow Backend — Custom Column Types
========================================

What:  `JSONPathList`, the column type behind every `files` column.
How:   Stored as TEXT holding a JSON array of path strings. Lists are encoded
       on the way in and decoded on the way out, so ORM attributes are always
       `list[str]` and a raw JSON string never reaches an API response.

Read rules:
    NULL / ""            → []
    '["/uploads/1.png"]' → ["/uploads/1.png"]
    unparseable / not a list → [] (logged as a warning)
"""

import json
import logging
from typing import Any, List, Optional

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

logger = logging.getLogger(__name__)


def encode_paths(paths: Optional[List[str]]) -> str:
    return json.dumps([str(p) for p in (paths or [])])


def decode_paths(raw: Any) -> List[str]:
    if raw is None or raw == "":
        return []
    if isinstance(raw, list):
        return [str(p) for p in raw]
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Could not parse stored file list: %r", raw)
        return []
    if not isinstance(value, list):
        logger.warning("Stored file list is not a JSON array: %r", raw)
        return []
    return [str(p) for p in value]


class JSONPathList(TypeDecorator):
    """TEXT column holding a JSON-encoded list of file paths."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return encode_paths(value)

    def process_result_value(self, value, dialect):
        return decode_paths(value)
