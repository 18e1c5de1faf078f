"""Common type definitions and aliases for LiveRugby.

Usage:
    from liverugby.core.types import MatchID, JSONDict

    def parse(raw: JSONDict, match_id: MatchID) -> Match:
        ...
"""

from typing import Any, Callable, Dict, List, Optional, Tuple, Union


# =============================================================================
# Basic Type Aliases
# =============================================================================

MatchID = int  # API-Sports game id
TeamID = int
LeagueID = int
UserID = str  # Firebase Auth uid
DeviceToken = str  # FCM registration token
DateStr = str  # YYYY-MM-DD

JSONDict = Dict[str, Any]
JSONList = List[Any]
Headers = Dict[str, str]
QueryParams = Dict[str, Union[str, int]]

# (field path, operator, value) as understood by the document store
QueryFilter = Tuple[str, str, Any]

DocumentCallback = Callable[[Optional[JSONDict]], None]
QueryCallback = Callable[[List[JSONDict]], None]
ErrorCallback = Callable[[Exception], None]
