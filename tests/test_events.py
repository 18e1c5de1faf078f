"""Tests for transition detection and notification texts."""

from datetime import datetime, timedelta, timezone

import pytest

from liverugby.core.constants import NotificationEvent
from liverugby.models import LeagueRef, Match, TeamRef
from liverugby.push import (
    MatchTransition,
    build_event_notification,
    create_favorite_teams_notification,
    create_match_end_notification,
    create_match_start_notification,
    create_score_update_notification,
    detect_match_events,
    recent_event_text,
)

KICKOFF = datetime(2025, 3, 1, 20, 5, tzinfo=timezone.utc)


def make_match(status="NS", home=None, away=None, **kwargs):
    return Match(
        id=49925,
        timestamp=int(KICKOFF.timestamp()),
        status=status,
        home_team=TeamRef(id=107, name="Toulouse"),
        away_team=TeamRef(id=95, name="La Rochelle"),
        home_score=home,
        away_score=away,
        **kwargs
    )


def types(events):
    return [e.type for e in events]


class TestDetectMatchEvents:
    """Tests for detect_match_events."""

    @pytest.mark.parametrize('minutes_before,expected', [
        (31, False),
        (30, True),
        (27, True),
        (25.5, True),
        (25, False),
        (10, False),
    ])
    def test_starting_window(self, minutes_before, expected):
        now = KICKOFF - timedelta(minutes=minutes_before)
        events = detect_match_events(None, make_match(), now)
        assert (NotificationEvent.MATCH_STARTING in types(events)) is expected

    def test_starting_reports_minutes(self):
        events = detect_match_events(None, make_match(), KICKOFF - timedelta(minutes=28))
        assert events[0].data == {'minutesUntilStart': 28}

    def test_starting_needs_no_previous_state(self):
        previous = make_match()
        events = detect_match_events(previous, make_match(), KICKOFF - timedelta(minutes=28))
        assert events == []

    @pytest.mark.parametrize('status', ['LIVE', '1H'])
    def test_started(self, status):
        events = detect_match_events(make_match(), make_match(status, 0, 0), KICKOFF)
        assert types(events) == [NotificationEvent.MATCH_STARTED]

    def test_started_fires_once(self):
        events = detect_match_events(make_match('1H', 0, 0), make_match('LIVE', 0, 0), KICKOFF)
        assert events == []

    def test_score_update(self):
        events = detect_match_events(make_match('1H', 0, 0), make_match('1H', 7, 0), KICKOFF)
        assert types(events) == [NotificationEvent.SCORE_UPDATE]
        assert events[0].data['homeScore'] == 7
        assert events[0].data['previousHomeScore'] == 0

    def test_score_needs_previous(self):
        events = detect_match_events(None, make_match('2H', 7, 3), KICKOFF)
        assert NotificationEvent.SCORE_UPDATE not in types(events)

    def test_missing_score_equals_zero(self):
        """A stored 0 and an API score not yet sent are the same state"""
        events = detect_match_events(make_match('NS', 0, 0), make_match('NS'), KICKOFF)
        assert events == []

    def test_halftime(self):
        events = detect_match_events(make_match('1H', 10, 3), make_match('HT', 10, 3), KICKOFF)
        assert types(events) == [NotificationEvent.HALFTIME]
        assert events[0].data == {'homeScore': 10, 'awayScore': 3}

    @pytest.mark.parametrize('home,away,winner', [
        (24, 10, 'home'),
        (9, 12, 'away'),
        (15, 15, 'draw'),
    ])
    def test_match_ended(self, home, away, winner):
        events = detect_match_events(make_match('2H', home, away), make_match('FT', home, away), KICKOFF)
        assert types(events) == [NotificationEvent.MATCH_ENDED]
        assert events[0].data['winner'] == winner

    def test_simultaneous_transitions(self):
        events = detect_match_events(make_match('2H', 20, 20), make_match('FT', 23, 20), KICKOFF)
        assert types(events) == [NotificationEvent.SCORE_UPDATE, NotificationEvent.MATCH_ENDED]

    def test_finished_long_status_uses_short_code(self):
        current = make_match('Finished', 3, 0, status_short='FT')
        events = detect_match_events(make_match('2H', 3, 0), current, KICKOFF)
        assert types(events) == [NotificationEvent.MATCH_ENDED]


class TestRecentEventText:

    def test_priority(self):
        events = [
            MatchTransition(NotificationEvent.HALFTIME),
            MatchTransition(NotificationEvent.SCORE_UPDATE),
        ]
        assert recent_event_text(events) == "Essai marqué!"

    def test_started(self):
        assert recent_event_text([MatchTransition(NotificationEvent.MATCH_STARTED)]) == "Match commencé"

    def test_none(self):
        assert recent_event_text([MatchTransition(NotificationEvent.MATCH_ENDED)]) is None
        assert recent_event_text([]) is None


class TestNotificationTexts:
    """Tests for the French notification texts."""

    def test_start_with_league_logo(self):
        match = make_match('1H', 0, 0, league=LeagueRef(id=16, name="Top 14", logo="https://cdn/16.png"))
        payload = create_match_start_notification(match)
        assert payload.title == "🏉 Match en cours"
        assert payload.body == "Toulouse vs La Rochelle vient de commencer !"
        assert payload.image_url == "https://cdn/16.png"

    def test_fallback_team_names(self):
        match = Match(id=1, status='1H', home_score=3, away_score=0)
        payload = create_score_update_notification(match)
        assert payload.body == "Équipe domicile 3 - 0 Équipe extérieure"
        assert payload.image_url is None

    def test_score_update_without_scores(self):
        assert create_score_update_notification(make_match('1H')).body == "Toulouse 0 - 0 La Rochelle"

    def test_end_winner(self):
        payload = create_match_end_notification(make_match('FT', 12, 30))
        assert payload.title == "🏆 Match terminé"
        assert payload.body == "Toulouse 12 - 30 La Rochelle. Victoire de La Rochelle !"

    def test_end_draw(self):
        payload = create_match_end_notification(make_match('FT', 20, 20))
        assert payload.body == "Toulouse 20 - 20 La Rochelle. Match nul !"

    @pytest.mark.parametrize('event,title', [
        (MatchTransition(NotificationEvent.MATCH_STARTING, {'minutesUntilStart': 30}), "🏉 Match bientôt !"),
        (MatchTransition(NotificationEvent.MATCH_STARTED), "🏉 Match en cours !"),
        (MatchTransition(NotificationEvent.SCORE_UPDATE, {'homeScore': 7, 'awayScore': 0}), "🎯 Score mis à jour !"),
        (MatchTransition(NotificationEvent.HALFTIME, {'homeScore': 7, 'awayScore': 0}), "⏸️ Mi-temps"),
        (MatchTransition(NotificationEvent.MATCH_ENDED, {'homeScore': 7, 'awayScore': 0}), "🏁 Match terminé !"),
        (MatchTransition("unknown"), "🏉 LiveRugby"),
    ])
    def test_event_titles(self, event, title):
        assert build_event_notification(event, make_match('1H', 7, 0)).title == title

    def test_event_bodies(self):
        match = make_match('1H', 7, 0)
        starting = MatchTransition(NotificationEvent.MATCH_STARTING, {'minutesUntilStart': 30})
        assert build_event_notification(starting, match).body == "Toulouse vs La Rochelle commence dans 30 minutes"
        score = MatchTransition(NotificationEvent.SCORE_UPDATE, {'homeScore': 7, 'awayScore': 0})
        assert build_event_notification(score, match).body == "Toulouse 7 - 0 La Rochelle"

    def test_event_short_fallbacks(self):
        payload = build_event_notification(MatchTransition(NotificationEvent.MATCH_STARTED), Match(id=1))
        assert payload.body == "Équipe 1 vs Équipe 2 a commencé"

    def test_favorite_digest(self):
        one = create_favorite_teams_notification([make_match()])
        assert one.body == "Toulouse vs La Rochelle"
        many = create_favorite_teams_notification([make_match(), make_match()])
        assert many.body == "2 matchs de vos équipes favorites aujourd'hui"
