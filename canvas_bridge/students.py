"""
Students Module
"""

import logging
from typing import Any, Dict, List, Optional

from .anonymizer import anonymize_users
from .client import get_canvas_client, CanvasClient, encode_segment
from .options import AccessOptions, resolve

logger = logging.getLogger("canvas_bridge.students")


def list_students(
    course_id: str,
    params: Optional[Dict[str, Any]] = None,
    options: Optional[AccessOptions] = None,
    client: Optional[CanvasClient] = None
) -> List[Dict[str, Any]]:
    """
    List users in a course, anonymized unless ``options.anonymous`` is False.

    Args:
        course_id: Canvas course ID
        params: Canvas query parameters (e.g. enrollment_type[]=student)
        options: Access options (default: anonymous)
        client: Optional CanvasClient instance
    """
    canvas = client or get_canvas_client()
    data = canvas.fetch_all_pages(f"/api/v1/courses/{encode_segment(course_id)}/users", params)
    logger.info(f"Listed {len(data)} users for course {course_id}")
    return resolve(options).apply(data, anonymize_users)
