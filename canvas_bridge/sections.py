"""
Sections Module

Course sections and section-scoped submissions.
"""

import logging
from typing import Any, Dict, List, Optional

from .anonymizer import anonymize_submissions
from .client import get_canvas_client, CanvasClient, encode_segment
from .options import AccessOptions, resolve

logger = logging.getLogger("canvas_bridge.sections")


def list_sections(
    course_id: str,
    params: Optional[Dict[str, Any]] = None,
    client: Optional[CanvasClient] = None
) -> List[Dict[str, Any]]:
    """List sections of a course."""
    canvas = client or get_canvas_client()
    sections = canvas.fetch_all_pages(f"/api/v1/courses/{encode_segment(course_id)}/sections", params)
    logger.info(f"Listed {len(sections)} sections for course {course_id}")
    return sections


def get_section(
    course_id: str,
    section_id: str,
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """Get a single section."""
    canvas = client or get_canvas_client()
    return canvas.get(f"/api/v1/courses/{encode_segment(course_id)}/sections/{encode_segment(section_id)}")


def list_section_submissions(
    section_id: str,
    assignment_id: str,
    params: Optional[Dict[str, Any]] = None,
    options: Optional[AccessOptions] = None,
    client: Optional[CanvasClient] = None
) -> List[Dict[str, Any]]:
    """
    List submissions for an assignment, limited to one section.

    Args:
        section_id: Canvas section ID
        assignment_id: Canvas assignment ID
        params: Canvas query parameters
        options: Access options (default: anonymous)
        client: Optional CanvasClient instance
    """
    canvas = client or get_canvas_client()
    path = (
        f"/api/v1/sections/{encode_segment(section_id)}"
        f"/assignments/{encode_segment(assignment_id)}/submissions"
    )
    data = canvas.fetch_all_pages(path, params)
    logger.info(f"Listed {len(data)} submissions for section {section_id}")
    return resolve(options).apply(data, anonymize_submissions)
