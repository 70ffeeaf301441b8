"""
Wiki Pages Module

Operations for Canvas wiki pages and their revision history.

Page URLs are slugs chosen by Canvas or the caller and may contain
characters such as '/', so they are always percent-encoded in paths.
"""

import logging
from typing import Any, Dict, List, Optional

from .client import get_canvas_client, CanvasClient, encode_segment

logger = logging.getLogger("canvas_bridge.pages")


def _pages_path(course_id: str) -> str:
    return f"/api/v1/courses/{encode_segment(course_id)}/pages"


def page_path(course_id: str, page_url: str) -> str:
    """Path of a single page, with the page URL encoded as one segment."""
    return f"{_pages_path(course_id)}/{encode_segment(page_url)}"


def list_pages(
    course_id: str,
    params: Optional[Dict[str, Any]] = None,
    client: Optional[CanvasClient] = None
) -> List[Dict[str, Any]]:
    """
    List all wiki pages in a course.

    Args:
        course_id: Canvas course ID
        params: Canvas query parameters (sort, order, search_term, published)
        client: Optional CanvasClient instance

    Returns:
        List of page metadata dicts (no bodies)
    """
    canvas = client or get_canvas_client()
    pages = canvas.fetch_all_pages(_pages_path(course_id), params)
    logger.info(f"Listed {len(pages)} pages for course {course_id}")
    return pages


def get_page(
    course_id: str,
    page_url: str,
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """
    Get a wiki page by URL.

    Args:
        course_id: Canvas course ID
        page_url: Page URL slug (e.g., 'syllabus' or 'week-1-notes')
        client: Optional CanvasClient instance

    Returns:
        Page dict including its HTML body
    """
    canvas = client or get_canvas_client()
    return canvas.get(page_path(course_id, page_url))


def list_page_revisions(
    course_id: str,
    page_url: str,
    client: Optional[CanvasClient] = None
) -> List[Dict[str, Any]]:
    """List the revision history of a page."""
    canvas = client or get_canvas_client()
    revisions = canvas.fetch_all_pages(f"{page_path(course_id, page_url)}/revisions")
    logger.info(f"Listed {len(revisions)} revisions for page {page_url}")
    return revisions


def revert_page_revision(
    course_id: str,
    page_url: str,
    revision_id: str,
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """Revert a page to an earlier revision."""
    canvas = client or get_canvas_client()
    result = canvas.post(
        f"{page_path(course_id, page_url)}/revisions/{encode_segment(revision_id)}/revert"
    )
    logger.info(f"Reverted page {page_url} to revision {revision_id}")
    return result


def update_or_create_page(
    course_id: str,
    page_url: str,
    data: Dict[str, Any],
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """
    Update a page, creating it if Canvas has no page at that URL.

    Args:
        course_id: Canvas course ID
        page_url: Page URL slug
        data: Request body, normally ``{"wiki_page": {...}}``
        client: Optional CanvasClient instance
    """
    canvas = client or get_canvas_client()
    result = canvas.put(page_path(course_id, page_url), data)
    logger.info(f"Saved page {page_url} in course {course_id}")
    return result


def delete_page(
    course_id: str,
    page_url: str,
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """Delete a wiki page. Returns the deleted page."""
    canvas = client or get_canvas_client()
    result = canvas.delete(page_path(course_id, page_url))
    logger.info(f"Deleted page {page_url} from course {course_id}")
    return result
