from prometheus_fastapi_instrumentator import Instrumentator

from livetimers.core.config import settings
from livetimers.core.logging import configure_logging
from . import app as live_app

configure_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)
app = live_app
instrumentator = Instrumentator()
# Instrumentation adds middleware, which must happen before the app starts.
instrumentator.instrument(app)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


@app.on_event("startup")
async def _metrics() -> None:
    instrumentator.expose(app, include_in_schema=False)
