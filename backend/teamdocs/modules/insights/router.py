"""Activity log and analytics router aggregation."""
from teamdocs.routers import activity, analytics

ROUTERS = [
    activity.router,
    analytics.router,
]
