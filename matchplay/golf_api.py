import logging
import os
from typing import Any

import requests

logger = logging.getLogger(__name__)

API_BASE = "https://api.golfcourseapi.com/v1"


class GolfApiError(Exception):
    pass


def _get(path: str, api_key: str, timeout: int, params: dict | None = None) -> Any:
    key = api_key or os.getenv("GOLF_API_KEY", "")
    if not key:
        raise GolfApiError("Missing Golf Course API key.")
    try:
        response = requests.get(
            f"{API_BASE}{path}",
            params=params,
            headers={"Authorization": f"Key {key}"},
            timeout=timeout,
        )
    except requests.RequestException as exc:
        logger.warning("Golf Course API request to %s failed: %s", path, exc)
        raise GolfApiError(f"Golf Course API unreachable: {exc}") from exc
    if response.status_code != 200:
        raise GolfApiError(f"Golf Course API {path} returned {response.status_code}: {response.text}")
    return response.json()


def search_courses(query: str, api_key: str) -> list[dict[str, Any]]:
    """Return ``id``/``club_name``/``course_name`` summaries for a free-text search."""
    query = (query or "").strip()
    if not query:
        return []
    payload = _get("/search", api_key, timeout=15, params={"search_query": query})
    courses = payload.get("courses") if isinstance(payload, dict) else None
    return [
        {
            "id": course.get("id"),
            "club_name": course.get("club_name"),
            "course_name": course.get("course_name"),
        }
        for course in courses or []
        if isinstance(course, dict)
    ]


def fetch_course(course_id: int, api_key: str) -> dict[str, Any]:
    payload = _get(f"/courses/{course_id}", api_key, timeout=20)
    course = payload.get("course") if isinstance(payload, dict) else None
    if not isinstance(course, dict) or "id" not in course:
        raise GolfApiError(f"Course {course_id} came back without course data")
    return course
