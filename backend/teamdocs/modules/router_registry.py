"""Central router registry for module-oriented composition."""
from __future__ import annotations

from fastapi import FastAPI

from teamdocs.modules.insights.router import ROUTERS as INSIGHTS_ROUTERS
from teamdocs.modules.tracker.router import ROUTERS as TRACKER_ROUTERS

ALL_ROUTERS = TRACKER_ROUTERS + INSIGHTS_ROUTERS


def include_all_routers(app: FastAPI) -> None:
    for router in ALL_ROUTERS:
        app.include_router(router)
