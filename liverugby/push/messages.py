"""Human-readable notification texts built from canonical match records."""

from typing import Optional

from ..core.constants import NotificationEvent
from ..models import Match, NotificationPayload, TeamRef
from ..models.match import UNKNOWN_NAME
from .events import MatchTransition

HOME_FALLBACK = "Équipe domicile"
AWAY_FALLBACK = "Équipe extérieure"

# Subscriber notifications use the shorter fallbacks
HOME_SHORT_FALLBACK = "Équipe 1"
AWAY_SHORT_FALLBACK = "Équipe 2"


def team_display_name(team: TeamRef, fallback: str) -> str:
    if not team.name or team.name == UNKNOWN_NAME:
        return fallback
    return team.name


def _league_logo(match: Match) -> Optional[str]:
    return match.league.logo if match.league else None


def _names(match: Match, home_fallback: str = HOME_FALLBACK, away_fallback: str = AWAY_FALLBACK):
    return (
        team_display_name(match.home_team, home_fallback),
        team_display_name(match.away_team, away_fallback),
    )


def create_match_start_notification(match: Match) -> NotificationPayload:
    home, away = _names(match)
    return NotificationPayload(
        title="🏉 Match en cours",
        body=f"{home} vs {away} vient de commencer !",
        image_url=_league_logo(match),
    )


def create_score_update_notification(match: Match) -> NotificationPayload:
    home, away = _names(match)
    return NotificationPayload(
        title="🎯 Mise à jour du score",
        body=f"{home} {match.home_score or 0} - {match.away_score or 0} {away}",
        image_url=_league_logo(match),
    )


def create_match_end_notification(match: Match) -> NotificationPayload:
    home, away = _names(match)
    home_score, away_score = match.home_score or 0, match.away_score or 0
    score_line = f"{home} {home_score} - {away_score} {away}"
    if home_score == away_score:
        body = f"{score_line}. Match nul !"
    else:
        winner = home if home_score > away_score else away
        body = f"{score_line}. Victoire de {winner} !"
    return NotificationPayload(title="🏆 Match terminé", body=body, image_url=_league_logo(match))


def build_event_notification(event: MatchTransition, match: Match) -> NotificationPayload:
    """Title and body sent to the subscribers of a match for one transition."""
    home, away = _names(match, HOME_SHORT_FALLBACK, AWAY_SHORT_FALLBACK)
    home_score = event.data.get('homeScore', match.home_score)
    away_score = event.data.get('awayScore', match.away_score)
    score_line = f"{home} {home_score} - {away_score} {away}"

    if event.type == NotificationEvent.MATCH_STARTING:
        title = "🏉 Match bientôt !"
        body = f"{home} vs {away} commence dans {event.data.get('minutesUntilStart')} minutes"
    elif event.type == NotificationEvent.MATCH_STARTED:
        title = "🏉 Match en cours !"
        body = f"{home} vs {away} a commencé"
    elif event.type == NotificationEvent.SCORE_UPDATE:
        title = "🎯 Score mis à jour !"
        body = score_line
    elif event.type == NotificationEvent.HALFTIME:
        title = "⏸️ Mi-temps"
        body = score_line
    elif event.type == NotificationEvent.MATCH_ENDED:
        title = "🏁 Match terminé !"
        body = score_line
    else:
        title = "🏉 LiveRugby"
        body = "Nouvelle mise à jour"

    return NotificationPayload(title=title, body=body)


def create_favorite_teams_notification(matches) -> NotificationPayload:
    """Daily digest for users whose favorite teams play today."""
    if len(matches) == 1:
        home, away = _names(matches[0])
        body = f"{home} vs {away}"
    else:
        body = f"{len(matches)} matchs de vos équipes favorites aujourd'hui"
    return NotificationPayload(title="⭐ Vos équipes favorites jouent aujourd'hui !", body=body)
