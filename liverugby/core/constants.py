"""Project-wide constants for LiveRugby.

Categories:
- Date and Time Formats
- HTTP Status Codes
- Match Statuses
- Match Event Types
- Notification Event Types
- Firestore Collections
- Push Relay Limits
"""


# =============================================================================
# Date and Time Formats
# =============================================================================

DATE_FORMAT_DISPLAY = "%Y-%m-%d"  # 2024-12-18, key of matches/{date}
DATE_FORMAT_ISO = "%Y-%m-%dT%H:%M:%S"
DEFAULT_TIMEZONE = "Europe/Paris"


# =============================================================================
# HTTP Status Codes (Common)
# =============================================================================

class HttpStatus:
    """HTTP status codes commonly encountered."""
    OK = 200
    NO_CONTENT = 204
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    RATE_LIMITED = 429
    INTERNAL_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504


# =============================================================================
# Match Statuses (API-Sports short codes)
# =============================================================================

class MatchStatus:
    """Short status codes reported for a rugby game."""
    NOT_STARTED = "NS"
    FIRST_HALF = "1H"
    HALF_TIME = "HT"
    SECOND_HALF = "2H"
    EXTRA_TIME = "ET"
    BREAK_TIME = "BT"
    PENALTIES = "P"
    FULL_TIME = "FT"
    AFTER_EXTRA_TIME = "AET"
    POSTPONED = "PST"
    CANCELLED = "CANC"
    INTERRUPTED = "INTR"
    ABANDONED = "ABD"
    AWARDED = "AWD"
    FINISHED = "FIN"
    LIVE = "LIVE"

    IN_PLAY_STATUSES = (FIRST_HALF, SECOND_HALF, EXTRA_TIME, LIVE)

    COMPLETED_STATUSES = (FULL_TIME, AFTER_EXTRA_TIME, FINISHED, AWARDED)

    PENDING_STATUSES = (NOT_STARTED,)

    CANCELLED_STATUSES = (POSTPONED, CANCELLED, ABANDONED, INTERRUPTED)

    # Substrings of long-form statuses, checked when no short code matches
    LIVE_MARKERS = ("Live", "En cours", "1st Half", "2nd Half", "Half Time")
    FINISHED_MARKERS = ("Finished", "Terminé", "Full Time", "FT")
    UPCOMING_MARKERS = ("Not Started", "NS", "À venir", "Scheduled")

    # Raw texts canonicalized to FULL_TIME by the normalizer
    FULL_TIME_MARKERS = ("FINISHED", "FULL TIME")
    FULL_TIME_EXACT = ("TERMINÉ",)

    LABELS = {
        FIRST_HALF: "1ère mi-temps",
        HALF_TIME: "Mi-temps",
        SECOND_HALF: "2ème mi-temps",
        FULL_TIME: "Terminé",
        LIVE: "En direct",
    }

    # Compact texts used by the home-screen widget
    WIDGET_LABELS = {
        NOT_STARTED: "À venir",
        FIRST_HALF: "1ère MT",
        HALF_TIME: "Mi-temps",
        SECOND_HALF: "2ème MT",
        FULL_TIME: "Terminé",
        FINISHED: "Terminé",
        POSTPONED: "Reporté",
        CANCELLED: "Annulé",
        ABANDONED: "Abandonné",
        AFTER_EXTRA_TIME: "Prolongations",
        EXTRA_TIME: "Prol.",
        PENALTIES: "Tirs au but",
    }
    WIDGET_LIVE_STATUSES = (FIRST_HALF, SECOND_HALF, EXTRA_TIME)


# =============================================================================
# Match Event Types (feed events)
# =============================================================================

class MatchEventType:
    """Known in-game event types. The feed may send others."""
    TRY = "try"
    CONVERSION = "conversion"
    PENALTY = "penalty"
    YELLOW_CARD = "yellowcard"
    RED_CARD = "redcard"
    SUBSTITUTION = "substitution"

    DEFAULT_EMOJI = "📌"
    EMOJIS = {
        TRY: "⭐",
        CONVERSION: "✅",
        PENALTY: "🎯",
        YELLOW_CARD: "🟨",
        RED_CARD: "🟥",
        SUBSTITUTION: "🔄",
    }

    # Formatted with the player name
    DESCRIPTIONS = {
        TRY: "Essai de {player}",
        CONVERSION: "Transformation réussie par {player}",
        PENALTY: "Pénalité réussie par {player}",
        YELLOW_CARD: "Carton jaune pour {player}",
        RED_CARD: "Carton rouge pour {player}",
        SUBSTITUTION: "Remplacement: {player}",
    }
    UNKNOWN_PLAYER = "Inconnu"


# =============================================================================
# Notification Event Types (state transitions)
# =============================================================================

class NotificationEvent:
    """Transitions detected between two observed states of a match."""
    MATCH_STARTING = "match_starting"
    MATCH_STARTED = "match_started"
    SCORE_UPDATE = "score_update"
    HALFTIME = "halftime"
    MATCH_ENDED = "match_ended"
    FAVORITE_TEAM_PLAYING = "favorite_team_playing"

    DEFAULT_SUBSCRIPTION = (MATCH_STARTING, MATCH_STARTED, SCORE_UPDATE, MATCH_ENDED)

    # Short text shown on the Live Activity for the most relevant transition
    RECENT_EVENT_TEXT = (
        (SCORE_UPDATE, "Essai marqué!"),
        (MATCH_STARTED, "Match commencé"),
        (HALFTIME, "Mi-temps"),
    )


# =============================================================================
# Firestore Collections
# =============================================================================

class Collections:
    """Document store collection names."""
    LIVE_MATCHES = "liveMatches"
    LIVE_EVENTS = "liveEvents"
    MATCHES = "matches"
    LEAGUES = "leagues"
    USERS = "users"
    FAVORITES = "favorites"
    FCM_TOKENS = "fcmTokens"
    MATCH_SUBSCRIPTIONS = "matchSubscriptions"
    ACTIVITY_PUSH_TOKENS = "activityPushTokens"


# =============================================================================
# Push Relay
# =============================================================================

MULTICAST_TOKEN_LIMIT = 500

INVALID_TOKEN_CODES = (
    "messaging/invalid-registration-token",
    "messaging/registration-token-not-registered",
)

VALID_PLATFORMS = ("ios", "android")

ACTIVITY_DISMISSAL_SECONDS = 3600


# =============================================================================
# Listener
# =============================================================================

RECENT_EVENTS_LIMIT = 10
TODAY_MATCHES_KEY = "todayMatches"
