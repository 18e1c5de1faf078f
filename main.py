"""
Cloud Functions entry points.

Each callable is deployed as its own HTTP function; the entry point name
is the callable name used by the apps. Scheduled jobs are HTTP functions
triggered by Cloud Scheduler.

Deploy example:
    gcloud functions deploy getTodayMatches --runtime python312 \
        --trigger-http --entry-point getTodayMatches --region europe-west1
"""
from functools import lru_cache

import functions_framework

from liverugby.api import handle_callable
from liverugby.app import App, build_app
from liverugby.config import load_config
from liverugby.core.exceptions import FunctionError, LiveRugbyError
from liverugby.utils import configure_from_config, get_logger

logger = get_logger()


@lru_cache(maxsize=1)
def get_app() -> App:
    """App of this function instance, built on first request."""
    config = load_config()
    for error in config.validate(require_api_key=True):
        logger.warning(f"Configuration error: {error}")
    configure_from_config(config)
    return build_app(config)


def _callable(name: str, request):
    return handle_callable(request, get_app().functions.callables()[name])


def _scheduled(name: str, job):
    try:
        result = job()
    except LiveRugbyError as e:
        logger.error(f"{name} failed: {e}")
        return {"status": "error", "error": e.message}, 500
    logger.info(f"{name} done: {result}")
    return {"status": "success", "result": result}, 200


# ---------------------------------------------------------------------------
# Callables
# ---------------------------------------------------------------------------

@functions_framework.http
def getTodayMatches(request):
    return _callable('getTodayMatches', request)


@functions_framework.http
def getLeagueMatches(request):
    return _callable('getLeagueMatches', request)


@functions_framework.http
def getTeamMatches(request):
    return _callable('getTeamMatches', request)


@functions_framework.http
def getLeagueTeams(request):
    return _callable('getLeagueTeams', request)


@functions_framework.http
def getLeagueStandings(request):
    return _callable('getLeagueStandings', request)


@functions_framework.http
def searchTeams(request):
    return _callable('searchTeams', request)


@functions_framework.http
def getMatchDetails(request):
    return _callable('getMatchDetails', request)


@functions_framework.http
def registerFCMToken(request):
    return _callable('registerFCMToken', request)


@functions_framework.http
def unregisterFCMToken(request):
    return _callable('unregisterFCMToken', request)


@functions_framework.http
def subscribeToMatch(request):
    return _callable('subscribeToMatch', request)


@functions_framework.http
def unsubscribeFromMatch(request):
    return _callable('unsubscribeFromMatch', request)


@functions_framework.http
def addFavoriteTeam(request):
    return _callable('addFavoriteTeam', request)


@functions_framework.http
def registerActivityPushToken(request):
    return _callable('registerActivityPushToken', request)


@functions_framework.http
def unregisterActivityPushToken(request):
    return _callable('unregisterActivityPushToken', request)


# ---------------------------------------------------------------------------
# Webhook and scheduled jobs
# ---------------------------------------------------------------------------

@functions_framework.http
def rugbyWebhook(request):
    """Feed events pushed by the data provider, stored for the live listeners."""
    event = request.get_json(silent=True)
    try:
        get_app().functions.receive_webhook(request.headers.get('x-api-key'), event)
    except FunctionError as e:
        if e.code == 'unauthenticated':
            return 'Unauthorized', 401
        logger.warning(f"Webhook rejected: {e.message}")
        return 'Bad Request', 400
    except LiveRugbyError as e:
        logger.error(f"Webhook error: {e}")
        return 'Error', 500
    return 'OK', 200


@functions_framework.http
def updateMatchesDaily(request):
    return _scheduled('updateMatchesDaily', get_app().functions.update_matches_daily)


@functions_framework.http
def monitorLiveMatches(request):
    return _scheduled('monitorLiveMatches', get_app().functions.monitor_live_matches)


@functions_framework.http
def notifyFavoriteTeamsMatches(request):
    return _scheduled('notifyFavoriteTeamsMatches', get_app().functions.notify_favorite_teams_matches)
