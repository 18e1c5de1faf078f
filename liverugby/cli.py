"""Command-line interface for LiveRugby.

PURPOSE: Inspect rugby data and run the live-match services from a shell.
"""
import argparse
import sys
import threading
from datetime import datetime

from . import __version__
from .api import RugbyApiClient
from .app import build_app
from .config import load_config
from .core.constants import DATE_FORMAT_DISPLAY
from .core.exceptions import LiveRugbyError
from .dispatch import LiveMatchUpdated, MatchEventReceived
from .models import League, RugbyLeague
from .processors import (
    extract_standings,
    parse_match,
    parse_matches,
    parse_standings,
    standings_to_dataframe,
)
from .utils import configure_from_config
from .utils.date_utils import today_display
from .widget import WidgetDataService


def validate_date(date_str: str) -> bool:
    """Validate date format (YYYY-MM-DD)."""
    try:
        datetime.strptime(date_str, DATE_FORMAT_DISPLAY)
        return True
    except ValueError:
        return False


def format_match(match) -> str:
    league = f" [{match.league.name}]" if match.league else ""
    return (
        f"{match.id:>8}  {match.time or '--:--'}  {match.status_code:<4} "
        f"{match.home_team.name} {match.score_text} {match.away_team.name}{league}"
    )


def cmd_today(args, config) -> int:
    date = args.date or today_display(config.api.timezone)
    with RugbyApiClient(config) as client:
        matches = parse_matches(client.games_by_date(date))
    print(f"{len(matches)} matches on {date}")
    for match in matches:
        print(format_match(match))
    return 0


def cmd_standings(args, config) -> int:
    with RugbyApiClient(config) as client:
        rows = client.standings(args.league, args.season)
    standings = parse_standings(extract_standings({'response': rows}))
    if not standings:
        print("No standings available")
        return 1
    print(standings_to_dataframe(standings).to_string(index=False))
    return 0


def cmd_match(args, config) -> int:
    with RugbyApiClient(config) as client:
        raw = client.game(args.match_id)
    if raw is None:
        print(f"Match {args.match_id} not found")
        return 1
    match = parse_match(raw)
    print(format_match(match))
    if match.venue:
        print(f"Venue: {match.venue}{', ' + match.city if match.city else ''}")
    for event in match.events:
        print(f"  {event.emoji} {event.description}")
    return 0


def cmd_leagues(args, config) -> int:
    for league in RugbyLeague:
        info = League.known(league)
        print(f"{info.id:>4}  {info.name:<28} {info.short_name:<12} {info.country}")
    return 0


def cmd_listen(args, config) -> int:
    app = build_app(config, widget_team_id=args.team, relay_updates=args.relay)
    app.bus.subscribe(LiveMatchUpdated, lambda m: print(format_match(m.match)))
    app.bus.subscribe(
        MatchEventReceived,
        lambda m: print(f"{m.match_id:>8}  event: {m.event_type} ({m.source})"),
    )

    with app:
        for match_id in args.match_ids:
            app.listener.start_listening(match_id)
        if args.today:
            app.listener.listen_to_today_matches()
        print("Listening... press Ctrl+C to stop")
        try:
            threading.Event().wait()
        except KeyboardInterrupt:
            print("\nStopping listeners")
    return 0


def cmd_monitor(args, config) -> int:
    with build_app(config) as app:
        if args.favorites:
            notified = app.functions.notify_favorite_teams_matches()
            print(f"{notified} users notified")
        else:
            checked = app.functions.monitor_live_matches()
            print(f"{checked} matches checked")
    return 0


def cmd_widget(args, config) -> int:
    date = args.date or today_display(config.api.timezone)
    with build_app(config) as app:
        service = WidgetDataService(
            app.store,
            config.listener.matches_collection,
            config.widget.lookahead_days,
        )
        data = service.fetch_match_for_team(args.team_id, date)
        if data is None:
            print(f"No match found for team {args.team_id}")
            return 1
        app.widget_store.save_snapshot(data.model_dump(mode='json'))
    print(f"{data.home_team.name} vs {data.away_team.name} ({data.display_status})")
    print(f"Snapshot saved to {app.widget_store.path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='liverugby',
        description='LiveRugby - live rugby scores backend',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Today's matches from the API
  liverugby today

  # Known league ids
  liverugby leagues

  # Top 14 table
  liverugby standings 16 --season 2024

  # Follow two live matches
  liverugby listen 49925 49926

  # One monitoring pass (scheduled job)
  liverugby monitor

  # Widget snapshot for Stade Toulousain
  liverugby widget 107
        """
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default=None,
        help='Logging level (overrides LOG_LEVEL)'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    today = subparsers.add_parser('today', help="List the matches of a day")
    today.add_argument('--date', type=str, default=None, help='Date in YYYY-MM-DD format')
    today.set_defaults(func=cmd_today, needs_api=True)

    standings = subparsers.add_parser('standings', help="Print a league table")
    standings.add_argument('league', type=int, help='League id (Top 14 = 16)')
    standings.add_argument('--season', type=int, default=None)
    standings.set_defaults(func=cmd_standings, needs_api=True)

    match = subparsers.add_parser('match', help="Show one match")
    match.add_argument('match_id', type=int)
    match.set_defaults(func=cmd_match, needs_api=True)

    leagues = subparsers.add_parser('leagues', help="List the known league ids")
    leagues.set_defaults(func=cmd_leagues, needs_api=False)

    listen = subparsers.add_parser('listen', help="Follow live matches from Firestore")
    listen.add_argument('match_ids', type=int, nargs='*')
    listen.add_argument('--today', action='store_true', help="Also follow today's match list")
    listen.add_argument('--team', type=int, default=None, help='Widget team id')
    listen.add_argument('--relay', action='store_true', help='Push transitions to subscribers')
    listen.set_defaults(func=cmd_listen, needs_api=False)

    monitor = subparsers.add_parser('monitor', help="Run one live-match monitoring pass")
    monitor.add_argument('--favorites', action='store_true',
                         help="Notify users whose favorite teams play today")
    monitor.set_defaults(func=cmd_monitor, needs_api=True)

    widget = subparsers.add_parser('widget', help="Refresh the widget snapshot for a team")
    widget.add_argument('team_id', type=int)
    widget.add_argument('--date', type=str, default=None, help='Date in YYYY-MM-DD format')
    widget.set_defaults(func=cmd_widget, needs_api=False)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, 'date', None) and not validate_date(args.date):
        print(f"Error: Invalid date format '{args.date}'. Use YYYY-MM-DD format (e.g., 2025-01-01)")
        sys.exit(1)
    if args.command == 'listen' and not args.match_ids and not args.today:
        parser.error("listen needs at least one match id or --today")

    config = load_config()
    if args.log_level:
        config.logging.level = args.log_level

    errors = config.validate(require_api_key=args.needs_api)
    if errors:
        for error in errors:
            print(f"Configuration error: {error}", file=sys.stderr)
        sys.exit(1)

    logger = configure_from_config(config)

    try:
        sys.exit(args.func(args, config))
    except KeyboardInterrupt:
        print("\n\nInterrupted by user. Exiting...")
        sys.exit(130)
    except LiveRugbyError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
