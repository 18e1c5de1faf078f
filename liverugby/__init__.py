"""LiveRugby - live rugby scores backend core.

Normalizes API-Sports rugby payloads and Firestore documents, listens to
live matches, fans updates out to Live Activities, the home-screen widget
and the push relay, and serves the callable functions of the app.
"""

__version__ = "1.0.0"
