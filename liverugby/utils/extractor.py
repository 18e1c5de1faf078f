"""
Safe field extraction for loosely-typed upstream documents.

API-Sports payloads and Firestore documents are nested dictionaries whose
optional fields may be missing, null, or carry an unexpected type. The
helpers here never raise; a type mismatch reads as "absent".
"""

from typing import Any, Dict, Iterable, List, Optional


class SafeFieldExtractor:
    """Helper class for safe field extraction from raw documents."""

    @staticmethod
    def get_int(data: Any, key: str) -> Optional[int]:
        """Integer at ``key``; booleans and other types read as absent."""
        if not isinstance(data, dict):
            return None
        value = data.get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value

    @staticmethod
    def get_str(data: Any, key: str) -> Optional[str]:
        if not isinstance(data, dict):
            return None
        value = data.get(key)
        return value if isinstance(value, str) else None

    @staticmethod
    def get_dict(data: Any, key: str) -> Optional[Dict[str, Any]]:
        if not isinstance(data, dict):
            return None
        value = data.get(key)
        return value if isinstance(value, dict) else None

    @staticmethod
    def get_list(data: Any, key: str) -> Optional[List[Any]]:
        if not isinstance(data, dict):
            return None
        value = data.get(key)
        return value if isinstance(value, list) else None

    @classmethod
    def first_int(cls, data: Any, keys: Iterable[str]) -> Optional[int]:
        """First integer found under any of the alternate key spellings."""
        for key in keys:
            value = cls.get_int(data, key)
            if value is not None:
                return value
        return None
