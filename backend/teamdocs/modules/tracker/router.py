"""Tracker module router aggregation."""
from teamdocs.routers import assignments, team_members

ROUTERS = [
    assignments.router,
    team_members.router,
]
