"""
Modules Module

Read and publish operations for Canvas course modules.
"""

import logging
from typing import Any, Dict, List, Optional

from .client import get_canvas_client, CanvasClient, encode_segment

logger = logging.getLogger("canvas_bridge.modules")


def _module_path(course_id: str, module_id: Optional[str] = None) -> str:
    path = f"/api/v1/courses/{encode_segment(course_id)}/modules"
    if module_id is not None:
        path += f"/{encode_segment(module_id)}"
    return path


def list_modules(
    course_id: str,
    params: Optional[Dict[str, Any]] = None,
    client: Optional[CanvasClient] = None
) -> List[Dict[str, Any]]:
    """
    List modules in a course.

    Args:
        course_id: Canvas course ID
        params: Canvas query parameters (e.g. include[]=items, search_term)
        client: Optional CanvasClient instance
    """
    canvas = client or get_canvas_client()
    modules = canvas.fetch_all_pages(_module_path(course_id), params)
    logger.info(f"Listed {len(modules)} modules for course {course_id}")
    return modules


def list_module_items(
    course_id: str,
    module_id: str,
    params: Optional[Dict[str, Any]] = None,
    client: Optional[CanvasClient] = None
) -> List[Dict[str, Any]]:
    """List the items of one module."""
    canvas = client or get_canvas_client()
    items = canvas.fetch_all_pages(f"{_module_path(course_id, module_id)}/items", params)
    logger.info(f"Listed {len(items)} items for module {module_id}")
    return items


def get_module(
    course_id: str,
    module_id: str,
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """Get a single module."""
    canvas = client or get_canvas_client()
    return canvas.get(_module_path(course_id, module_id))


def update_module_publish(
    course_id: str,
    module_id: str,
    data: Dict[str, Any],
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """
    Update a module, typically ``{"module": {"published": true}}``.

    Args:
        course_id: Canvas course ID
        module_id: Canvas module ID
        data: Request body
        client: Optional CanvasClient instance
    """
    canvas = client or get_canvas_client()
    result = canvas.put(_module_path(course_id, module_id), data)
    logger.info(f"Updated module {module_id} in course {course_id}")
    return result
