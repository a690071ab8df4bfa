import json
import os

import httpx

BASE_URL = os.environ.get("BASE_URL", "http://127.0.0.1:5000")


def run_flow():
    val = []

    alice = {"name": "Alice", "timezone": "America/New_York"}
    r = httpx.post(f"{BASE_URL}/profiles", json=alice)
    val.append({"request": {"endpoint": "/profiles", "body": alice}, "response": r.json()})
    profile_id = r.json()["id"]

    event = {"profiles": [profile_id], "timezone": "America/New_York", "start": "2024-01-01T09:00", "end": "2024-01-01T10:00"}
    r = httpx.post(f"{BASE_URL}/events", json=event)
    val.append({"request": {"endpoint": "/events", "body": event}, "response": r.json()})
    event_id = r.json()["id"]

    changes = {"end": "2024-01-01T11:00", "timezone": "America/Chicago", "updatedBy": profile_id}
    r = httpx.put(f"{BASE_URL}/events/{event_id}", json=changes)
    val.append({"request": {"endpoint": f"/events/{event_id}", "body": changes}, "response": r.json()})

    r = httpx.get(f"{BASE_URL}/events/{profile_id}", params={"timezone": "Asia/Tokyo"})
    val.append({"request": f"/events/{profile_id}?timezone=Asia/Tokyo", "response": r.json()})

    with open("validation-output.json", "w") as f:
        json.dump(val, f, indent=2)


if __name__ == "__main__":
    run_flow()
    print("Validation complete. See validation-output.json")
