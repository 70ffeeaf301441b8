"""
Rubrics Module

Rubric listing, per-assignment rubric data and rubric assessments.
"""

import logging
from typing import Any, Dict, List, Optional

from .anonymizer import anonymize_submissions
from .client import get_canvas_client, CanvasClient, encode_segment
from .options import AccessOptions, resolve

logger = logging.getLogger("canvas_bridge.rubrics")


def _assignment_path(course_id: str, assignment_id: str) -> str:
    return f"/api/v1/courses/{encode_segment(course_id)}/assignments/{encode_segment(assignment_id)}"


def list_rubrics(
    course_id: str,
    params: Optional[Dict[str, Any]] = None,
    client: Optional[CanvasClient] = None
) -> List[Dict[str, Any]]:
    """List rubrics defined in a course."""
    canvas = client or get_canvas_client()
    rubrics = canvas.fetch_all_pages(f"/api/v1/courses/{encode_segment(course_id)}/rubrics", params)
    logger.info(f"Listed {len(rubrics)} rubrics for course {course_id}")
    return rubrics


def get_rubric_statistics(
    course_id: str,
    assignment_id: str,
    params: Optional[Dict[str, Any]] = None,
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """
    Get an assignment together with its rubric and rubric settings.

    Args:
        course_id: Canvas course ID
        assignment_id: Canvas assignment ID
        params: Canvas query parameters (e.g. include[])
        client: Optional CanvasClient instance

    Returns:
        The assignment dict; its ``rubric`` and ``rubric_settings`` keys
        carry the rubric data when one is attached
    """
    canvas = client or get_canvas_client()
    return canvas.get(_assignment_path(course_id, assignment_id), params)


def list_rubric_assessments(
    course_id: str,
    assignment_id: str,
    params: Optional[Dict[str, Any]] = None,
    options: Optional[AccessOptions] = None,
    client: Optional[CanvasClient] = None
) -> List[Dict[str, Any]]:
    """
    List submissions for an assignment with their rubric assessments.

    Args:
        course_id: Canvas course ID
        assignment_id: Canvas assignment ID
        params: Canvas query parameters, normally include[]=rubric_assessment
        options: Access options (default: anonymous)
        client: Optional CanvasClient instance
    """
    canvas = client or get_canvas_client()
    data = canvas.fetch_all_pages(f"{_assignment_path(course_id, assignment_id)}/submissions", params)
    logger.info(f"Listed {len(data)} rubric assessments for assignment {assignment_id}")
    return resolve(options).apply(data, anonymize_submissions)


def attach_rubric_to_assignment(
    course_id: str,
    assignment_id: str,
    rubric_id: str,
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """Attach an existing rubric to an assignment."""
    canvas = client or get_canvas_client()
    result = canvas.put(_assignment_path(course_id, assignment_id), query={"rubric_id": rubric_id})
    logger.info(f"Attached rubric {rubric_id} to assignment {assignment_id}")
    return result
