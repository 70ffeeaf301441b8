"""
Submissions Module

Listing, grading and commenting on assignment submissions.
"""

import logging
from typing import Any, Dict, List, Optional

from .anonymizer import anonymize_submissions
from .client import get_canvas_client, CanvasClient, encode_segment
from .options import AccessOptions, resolve

logger = logging.getLogger("canvas_bridge.submissions")


def _submissions_path(course_id: str, assignment_id: str) -> str:
    return (
        f"/api/v1/courses/{encode_segment(course_id)}"
        f"/assignments/{encode_segment(assignment_id)}/submissions"
    )


def build_grade_payload(
    posted_grade: Optional[str] = None,
    score: Optional[float] = None,
    rubric_assessment: Any = None,
    comment: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build a grading request body from the fields that were supplied.

    Fields left as None are not included at all.
    """
    payload: Dict[str, Any] = {}
    if posted_grade is not None:
        payload["posted_grade"] = posted_grade
    if score is not None:
        payload["score"] = score
    if rubric_assessment is not None:
        payload["rubric_assessment"] = rubric_assessment
    if comment is not None:
        payload["comment"] = {"text_comment": comment}
    return payload


def list_assignment_submissions(
    course_id: str,
    assignment_id: str,
    params: Optional[Dict[str, Any]] = None,
    options: Optional[AccessOptions] = None,
    client: Optional[CanvasClient] = None
) -> List[Dict[str, Any]]:
    """
    List every student's submission for an assignment.

    NOTE: Student identities are anonymized by default. Pass
    ``AccessOptions(anonymous=False)`` only when the data stays local.

    Args:
        course_id: Canvas course ID
        assignment_id: Canvas assignment ID
        params: Canvas query parameters (e.g. include[]=submission_comments)
        options: Access options (default: anonymous)
        client: Optional CanvasClient instance

    Returns:
        List of submission dicts
    """
    canvas = client or get_canvas_client()
    data = canvas.fetch_all_pages(_submissions_path(course_id, assignment_id), params)
    logger.info(f"Listed {len(data)} submissions for assignment {assignment_id}")
    return resolve(options).apply(data, anonymize_submissions)


def grade_submission(
    course_id: str,
    assignment_id: str,
    user_id: str,
    data: Dict[str, Any],
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """
    Write a grade, score, rubric assessment or comment for one student.

    Args:
        course_id: Canvas course ID
        assignment_id: Canvas assignment ID
        user_id: Student user ID
        data: Request body, see ``build_grade_payload``
        client: Optional CanvasClient instance
    """
    canvas = client or get_canvas_client()
    result = canvas.put(f"{_submissions_path(course_id, assignment_id)}/{encode_segment(user_id)}", data)
    logger.info(f"Graded submission of user {user_id} for assignment {assignment_id}")
    return result


def post_submission_comment(
    course_id: str,
    assignment_id: str,
    user_id: str,
    comment: str,
    client: Optional[CanvasClient] = None
) -> Dict[str, Any]:
    """Add a text comment to a student's submission."""
    canvas = client or get_canvas_client()
    path = f"{_submissions_path(course_id, assignment_id)}/{encode_segment(user_id)}/comments"
    result = canvas.put(path, {"comment": {"text_comment": comment}})
    logger.info(f"Commented on submission of user {user_id} for assignment {assignment_id}")
    return result
