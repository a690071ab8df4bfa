import copy
import logging
import uuid
from typing import Any, Dict, List, Optional

from errors import InvalidRange, NotFound
from models import EventIn, EventUpdate, ProfileIn
from store import JsonCollection, now_iso
from timezones import (
    civil_to_instant,
    normalize_to_minute,
    parse_instant,
    to_iso,
    to_zoned_display,
    validate_timezone,
)

logger = logging.getLogger(__name__)

MESSAGE_SEPARATOR = ", "
START_MESSAGE = "Start date/time updated"
END_MESSAGE = "End date/time updated"


def profiles_message(names: List[str]) -> str:
    return f"Profiles changed to: {', '.join(names)}"


def timezone_message(zone_name: str) -> str:
    return f"Timezone updated to {zone_name}"


def create_profile_logic(profile: ProfileIn, profiles: JsonCollection) -> Dict[str, Any]:
    now_ts = now_iso()
    data = {
        "id": str(uuid.uuid4()),
        "name": profile.name,
        "timezone": validate_timezone(profile.timezone),
        "createdAt": now_ts,
        "updatedAt": now_ts,
    }
    profiles.insert(data)
    logger.info("profile %s created", data["id"])
    return data


def list_profiles_logic(profiles: JsonCollection) -> List[Dict[str, Any]]:
    return profiles.all()


def resolve_profiles(profile_ids: List[str], profiles: JsonCollection) -> List[Dict[str, Any]]:
    """
    Look up profile records for the given ids, dropping duplicates but keeping
    first-seen order. Unknown ids raise NotFound.
    """
    resolved = []
    seen = set()
    for pid in profile_ids:
        if pid in seen:
            continue
        p = profiles.get(pid)
        if p is None:
            raise NotFound(f"Profile {pid} not found")
        seen.add(pid)
        resolved.append(p)
    return resolved


def profile_names(profile_ids: List[str], profiles: JsonCollection) -> List[str]:
    names = []
    for pid in profile_ids:
        p = profiles.get(pid)
        names.append(p["name"] if p else pid)
    return names


def create_event_logic(event: EventIn, events: JsonCollection, profiles: JsonCollection) -> Dict[str, Any]:
    zone_name = validate_timezone(event.timezone)
    start = civil_to_instant(event.start, zone_name)
    end = civil_to_instant(event.end, zone_name)
    if end < start:
        raise InvalidRange("End time cannot be before start time.")

    members = resolve_profiles(event.profiles, profiles)
    now_ts = now_iso()
    data = {
        "id": str(uuid.uuid4()),
        "profiles": [p["id"] for p in members],
        "timezone": zone_name,
        "start": to_iso(start),
        "end": to_iso(end),
        "createdAt": now_ts,
        "updatedAt": now_ts,
        "updateLogs": [],
    }
    events.insert(data)
    logger.info("event %s created for %d profile(s)", data["id"], len(members))
    return data


def update_event_logic(
    event_id: str,
    changes: EventUpdate,
    events: JsonCollection,
    profiles: JsonCollection,
) -> Dict[str, Any]:
    """
    Diff an incoming update against the stored event and apply only real changes.

    Start/end strings are read as wall-clock time in the new timezone when one is
    sent, otherwise in the event's current timezone, and compared to the stored
    instants at minute precision. All changes from one call go into a single
    audit entry. If nothing changed, nothing is written and updatedAt stays put.
    The start <= end check done at creation is not repeated here.

    Raises NotFound for an unknown event, and also when any id in the new
    profiles list or the updatedBy id does not resolve to a stored profile.
    """
    current = events.get(event_id)
    if current is None:
        raise NotFound("Event not found")

    provided = changes.provided()
    new_timezone = provided.get("timezone")
    if new_timezone is not None:
        validate_timezone(new_timezone)
    effective_timezone = new_timezone or current["timezone"]

    updated_by = provided.get("updated_by")
    if updated_by is not None and profiles.get(updated_by) is None:
        raise NotFound(f"Profile {updated_by} not found")

    event = copy.deepcopy(current)
    messages: List[str] = []
    previous_values: Dict[str, Any] = {}
    updated_values: Dict[str, Any] = {}

    if "profiles" in provided:
        members = resolve_profiles(provided["profiles"], profiles)
        old_ids = sorted(set(event["profiles"]))
        new_ids = sorted(p["id"] for p in members)
        if old_ids != new_ids:
            previous_values["profiles"] = profile_names(event["profiles"], profiles)
            updated_values["profiles"] = [p["name"] for p in members]
            messages.append(profiles_message(updated_values["profiles"]))
            event["profiles"] = [p["id"] for p in members]

    for field, message in (("start", START_MESSAGE), ("end", END_MESSAGE)):
        if field not in provided:
            continue
        new_instant = civil_to_instant(provided[field], effective_timezone)
        old_instant = parse_instant(event[field])
        if normalize_to_minute(new_instant) != normalize_to_minute(old_instant):
            previous_values[field] = event[field]
            updated_values[field] = to_iso(new_instant)
            messages.append(message)
            event[field] = updated_values[field]

    if new_timezone is not None and new_timezone != event["timezone"]:
        previous_values["timezone"] = event["timezone"]
        updated_values["timezone"] = new_timezone
        messages.append(timezone_message(new_timezone))
        event["timezone"] = new_timezone

    if not messages:
        logger.info("event %s update had no changes", event_id)
        return {"updated": False, "messages": [], "log": None}

    now_ts = now_iso()
    log = {
        "updatedBy": updated_by,
        "message": MESSAGE_SEPARATOR.join(messages),
        "previousValues": previous_values,
        "updatedValues": updated_values,
        "updatedAt": now_ts,
    }
    event["updatedAt"] = now_ts
    event["updateLogs"].append(log)
    events.replace(event)
    logger.info("event %s updated: %s", event_id, log["message"])
    return {"updated": True, "messages": messages, "log": log}


def project_event(
    event: Dict[str, Any],
    display_timezone: str,
    profile_timezone: str,
    profiles: JsonCollection,
) -> Dict[str, Any]:
    def show(value: str, zone_name: str) -> str:
        return to_zoned_display(parse_instant(value), zone_name)

    members = []
    for pid in event.get("profiles", []):
        p = profiles.get(pid)
        if p is not None:
            members.append({"id": p["id"], "name": p["name"]})

    return {
        "id": event["id"],
        "profiles": members,
        "timezone": event["timezone"],
        "start": show(event["start"], display_timezone),
        "end": show(event["end"], display_timezone),
        "createdAt": show(event["createdAt"], display_timezone),
        "updatedAt": show(event["updatedAt"], display_timezone),
        # audit timestamps always use the profile's own zone, even with an override
        "updateLogs": [
            {
                "updatedBy": log.get("updatedBy"),
                "message": log.get("message"),
                "updatedAt": show(log["updatedAt"], profile_timezone),
            }
            for log in event.get("updateLogs", [])
        ],
    }


def get_events_for_profile_logic(
    profile_id: str,
    events: JsonCollection,
    profiles: JsonCollection,
    display_timezone: Optional[str] = None,
    event_timezone: Optional[str] = None,
) -> List[Dict[str, Any]]:
    profile = profiles.get(profile_id)
    if profile is None:
        raise NotFound("Profile not found")

    profile_timezone = profile.get("timezone") or "UTC"
    zone_name = validate_timezone(display_timezone or profile_timezone)

    matched = [
        e for e in events.all()
        if profile_id in e.get("profiles", [])
        and (not event_timezone or e.get("timezone") == event_timezone)
    ]
    return [project_event(e, zone_name, profile_timezone, profiles) for e in matched]
