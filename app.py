import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import get_settings
from errors import EventsError, PersistenceFailure
from logic import (
    create_event_logic,
    create_profile_logic,
    get_events_for_profile_logic,
    list_profiles_logic,
    update_event_logic,
)
from models import EventIn, EventUpdate, ProfileIn
from store import DB_FILE, PROFILES_FILE, JsonCollection, append_trail

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(title="Profiles & Events API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_methods=["*"],
    allow_headers=["*"],
)

profiles = JsonCollection(PROFILES_FILE)
events = JsonCollection(DB_FILE)


@app.exception_handler(EventsError)
async def events_error_handler(request: Request, exc: EventsError) -> JSONResponse:
    if isinstance(exc, PersistenceFailure):
        logger.error("persistence failure on %s %s: %s", request.method, request.url.path, exc.message, exc_info=exc)
    else:
        logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    body = {"error": exc.message}
    append_trail({"method": request.method, "endpoint": request.url.path}, body, exc.status_code, request.url.path)
    return JSONResponse(status_code=exc.status_code, content=body)


@app.post("/profiles", status_code=201)
def create_profile(profile: ProfileIn):
    data = create_profile_logic(profile, profiles)
    append_trail({"endpoint": "/profiles", "body": profile.model_dump()}, data, 201, "/profiles")
    return data


@app.get("/profiles", response_model=List[dict])
def list_profiles():
    data = list_profiles_logic(profiles)
    append_trail({"endpoint": "/profiles", "action": "list"}, {"count": len(data)}, 200, "/profiles")
    return data


@app.post("/events", status_code=201)
def create_event(event: EventIn):
    data = create_event_logic(event, events, profiles)
    append_trail({"endpoint": "/events", "body": event.model_dump()}, data, 201, "/events")
    return data


@app.get("/events/{profile_id}", response_model=List[dict])
def get_events_for_profile(
    profile_id: str,
    timezone: Optional[str] = Query(None, description="Display timezone override"),
    event_timezone: Optional[str] = Query(None, alias="eventTimezone", description="Only events stored in this timezone"),
):
    data = get_events_for_profile_logic(
        profile_id,
        events,
        profiles,
        display_timezone=timezone,
        event_timezone=event_timezone,
    )
    endpoint = f"/events/{profile_id}"
    append_trail(
        {"endpoint": endpoint, "timezone": timezone, "eventTimezone": event_timezone},
        {"count": len(data)},
        200,
        endpoint,
    )
    return data


@app.put("/events/{event_id}")
def update_event(event_id: str, changes: EventUpdate) -> Dict[str, Any]:
    result = update_event_logic(event_id, changes, events, profiles)
    endpoint = f"/events/{event_id}"
    append_trail({"endpoint": endpoint, "body": changes.model_dump(by_alias=True, exclude_unset=True)}, result, 200, endpoint)
    return result


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("app:app", host=settings.host, port=settings.port, reload=False)
