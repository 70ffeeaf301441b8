"""
Assignments Module

Operations for Canvas assignments and assignment groups.
"""

import logging
from typing import Any, Dict, List, Optional

from .anonymizer import anonymize_assignments
from .client import get_canvas_client, CanvasClient, encode_segment
from .options import AccessOptions, resolve

logger = logging.getLogger("canvas_bridge.assignments")


def _course_path(course_id: str) -> str:
    return f"/api/v1/courses/{encode_segment(course_id)}"


def list_assignments(
    course_id: str,
    params: Optional[Dict[str, Any]] = None,
    options: Optional[AccessOptions] = None,
    client: Optional[CanvasClient] = None
) -> List[Dict[str, Any]]:
    """
    List all assignments in a course.

    Assignments fetched with ``include[]=submission`` embed the caller's or a
    student's submission, so the result is anonymized unless
    ``options.anonymous`` is False.

    Args:
        course_id: Canvas course ID
        params: Canvas query parameters
        options: Access options (default: anonymous)
        client: Optional CanvasClient instance

    Returns:
        List of assignment dicts
    """
    canvas = client or get_canvas_client()
    data = canvas.fetch_all_pages(f"{_course_path(course_id)}/assignments", params)
    logger.info(f"Listed {len(data)} assignments for course {course_id}")
    return resolve(options).apply(data, anonymize_assignments)


def get_assignment(
    course_id: str,
    assignment_id: str,
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """Get a single assignment."""
    canvas = client or get_canvas_client()
    return canvas.get(f"{_course_path(course_id)}/assignments/{encode_segment(assignment_id)}")


def create_assignment(
    course_id: str,
    data: Dict[str, Any],
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """
    Create an assignment.

    Args:
        course_id: Canvas course ID
        data: Request body, normally ``{"assignment": {...}}``
        client: Optional CanvasClient instance
    """
    canvas = client or get_canvas_client()
    result = canvas.post(f"{_course_path(course_id)}/assignments", data)
    logger.info(f"Created assignment in course {course_id}")
    return result


def update_assignment(
    course_id: str,
    assignment_id: str,
    data: Dict[str, Any],
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """Update an assignment with a ``{"assignment": {...}}`` body."""
    canvas = client or get_canvas_client()
    result = canvas.put(
        f"{_course_path(course_id)}/assignments/{encode_segment(assignment_id)}",
        data,
    )
    logger.info(f"Updated assignment {assignment_id} in course {course_id}")
    return result


def list_assignment_groups(
    course_id: str,
    params: Optional[Dict[str, Any]] = None,
    client: Optional[CanvasClient] = None
) -> List[Dict[str, Any]]:
    """List assignment groups in a course."""
    canvas = client or get_canvas_client()
    groups = canvas.fetch_all_pages(f"{_course_path(course_id)}/assignment_groups", params)
    logger.info(f"Listed {len(groups)} assignment groups for course {course_id}")
    return groups


def create_assignment_group(
    course_id: str,
    data: Dict[str, Any],
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """Create an assignment group (name, position, group_weight, ...)."""
    canvas = client or get_canvas_client()
    result = canvas.post(f"{_course_path(course_id)}/assignment_groups", data)
    logger.info(f"Created assignment group in course {course_id}")
    return result
