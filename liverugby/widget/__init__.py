"""
Widget package - home-screen widget match selection and snapshot.
"""
from .snapshot import (
    JsonWidgetSnapshotStore,
    WidgetDataService,
    build_widget_data,
    find_best_match,
    team_matches,
)

__all__ = [
    'JsonWidgetSnapshotStore', 'WidgetDataService', 'build_widget_data',
    'find_best_match', 'team_matches',
]
