"""
Courses Module

Course listing and course-wide announcements.
"""

import logging
from typing import Any, Dict, List, Optional

from .client import get_canvas_client, CanvasClient, encode_segment

logger = logging.getLogger("canvas_bridge.courses")


def list_courses(
    params: Optional[Dict[str, Any]] = None,
    client: Optional[CanvasClient] = None
) -> List[Dict[str, Any]]:
    """
    List courses for the current user.

    Args:
        params: Canvas query parameters (e.g. enrollment_state, state[], include[])
        client: Optional CanvasClient instance

    Returns:
        List of course dicts as returned by Canvas
    """
    canvas = client or get_canvas_client()
    courses = canvas.fetch_all_pages("/api/v1/courses", params)
    logger.info(f"Listed {len(courses)} courses")
    return courses


def post_announcement(
    course_id: str,
    data: Dict[str, Any],
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """
    Post an announcement to a course.

    Args:
        course_id: Canvas course ID
        data: Discussion topic fields (title, message, is_announcement, ...)
        client: Optional CanvasClient instance

    Returns:
        The created discussion topic
    """
    canvas = client or get_canvas_client()
    result = canvas.post(f"/api/v1/courses/{encode_segment(course_id)}/discussion_topics", data)
    logger.info(f"Posted announcement in course {course_id}")
    return result
