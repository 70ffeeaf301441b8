"""
Tool Bindings

Host-facing tools: each declares its arguments as a pydantic model, calls one
domain operation and renders the result as text. Failures are re-raised as
ToolInvocationError with a message naming the action that failed.
"""

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field

from . import assignments, courses, modules, pages, rubrics, sections, students, submissions
from .client import get_canvas_client
from .exceptions import ToolInvocationError
from .options import AccessOptions
from .registry import Handler, ToolRegistry

logger = logging.getLogger("canvas_bridge.tools")


@contextmanager
def tool_errors(action: str) -> Iterator[None]:
    """Re-raise any failure inside the block as 'Failed to <action>: <reason>'."""
    try:
        yield
    except Exception as e:
        error = ToolInvocationError(action, e)
        logger.error(str(error))
        raise error from e


def _json(result: Any) -> str:
    return json.dumps(result, indent=2)


def _access(anonymous: bool) -> AccessOptions:
    return AccessOptions(anonymous=anonymous, policy=get_canvas_client().policy)


def format_courses(course_list: List[Dict[str, Any]]) -> str:
    """Render available courses as 'Course: <name> (<term>)' blocks."""
    blocks = []
    for course in course_list:
        if course.get("workflow_state") != "available":
            continue
        term = course.get("term")
        term_info = f" ({term['name']})" if term and term.get("name") else ""
        blocks.append(
            f"Course: {course.get('name')}{term_info}\n"
            f"ID: {course.get('id')}\n"
            f"Code: {course.get('course_code')}\n"
            f"---"
        )
    if not blocks:
        return "No active courses found."
    return "Available Courses:\n\n" + "\n".join(blocks)


# =============================================================================
# Argument schemas
# =============================================================================

class ToolArgs(BaseModel):
    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)


class CourseArgs(ToolArgs):
    course_id: str = Field(description="The ID of the course")


class AssignmentArgs(CourseArgs):
    assignment_id: str = Field(description="The ID of the assignment")


class ModuleArgs(CourseArgs):
    module_id: str = Field(description="The ID of the module")


class PageArgs(CourseArgs):
    page_url: str = Field(description="The URL slug of the page (e.g. 'syllabus')")


class SectionArgs(CourseArgs):
    section_id: str = Field(description="The ID of the section")


class SubmissionArgs(AssignmentArgs):
    user_id: str = Field(description="The ID of the student/user")


ANONYMOUS_DESCRIPTION = "Whether to anonymize student names and emails (default: true for privacy)"


class AnonymousCourseArgs(CourseArgs):
    anonymous: bool = Field(default=True, description=ANONYMOUS_DESCRIPTION)


class AnonymousAssignmentArgs(AssignmentArgs):
    anonymous: bool = Field(default=True, description=ANONYMOUS_DESCRIPTION)


class ListCoursesArgs(ToolArgs):
    pass


class AnnouncementArgs(CourseArgs):
    title: str = Field(description="The title of the announcement")
    message: str = Field(description="The content of the announcement (HTML allowed)")


class ListAssignmentsArgs(AnonymousCourseArgs):
    search_term: Optional[str] = Field(default=None, description="Only assignments whose name contains this text")
    bucket: Optional[str] = Field(
        default=None,
        description="One of past, overdue, undated, ungraded, unsubmitted, upcoming, future",
    )


class AssignmentFields(ToolArgs):
    description: Optional[str] = Field(default=None, description="Assignment description (HTML)")
    points_possible: Optional[float] = Field(default=None, description="Maximum points")
    due_at: Optional[str] = Field(default=None, description="Due date, ISO 8601")
    submission_types: Optional[List[str]] = Field(
        default=None, description="e.g. online_text_entry, online_upload, none"
    )
    assignment_group_id: Optional[str] = Field(default=None, description="Assignment group to place it in")
    published: Optional[bool] = Field(default=None, description="Whether the assignment is published")

    def assignment_body(self, *extra: str) -> Dict[str, Any]:
        fields = ["description", "points_possible", "due_at", "submission_types",
                  "assignment_group_id", "published", *extra]
        return {"assignment": {name: getattr(self, name) for name in fields}}


class CreateAssignmentArgs(AssignmentFields, CourseArgs):
    name: str = Field(description="Assignment name")


class UpdateAssignmentArgs(AssignmentFields, AssignmentArgs):
    name: Optional[str] = Field(default=None, description="New assignment name")


class CreateAssignmentGroupArgs(CourseArgs):
    name: str = Field(description="Group name")
    group_weight: Optional[float] = Field(default=None, description="Weight in percent, when groups are weighted")
    position: Optional[int] = Field(default=None, description="Position among the course's groups")


class SearchCourseArgs(CourseArgs):
    search_term: Optional[str] = Field(default=None, description="Only items whose title contains this text")


class PublishModuleArgs(ModuleArgs):
    published: bool = Field(default=True, description="Publish (true) or unpublish (false) the module")


class RevertPageArgs(PageArgs):
    revision_id: str = Field(description="The revision to restore")


class SavePageArgs(PageArgs):
    title: Optional[str] = Field(default=None, description="Page title")
    body: Optional[str] = Field(default=None, description="Page body (HTML)")
    published: Optional[bool] = Field(default=None, description="Whether the page is published")


class AttachRubricArgs(AssignmentArgs):
    rubric_id: str = Field(description="The ID of the rubric")


class SectionSubmissionsArgs(ToolArgs):
    section_id: str = Field(description="The ID of the section")
    assignment_id: str = Field(description="The ID of the assignment")
    anonymous: bool = Field(default=True, description=ANONYMOUS_DESCRIPTION)


class GradeSubmissionArgs(SubmissionArgs):
    posted_grade: Optional[str] = Field(default=None, description="Grade as Canvas accepts it (points, %, letter)")
    score: Optional[Union[int, float]] = Field(default=None, description="Numeric score")
    rubric_assessment: Optional[Any] = Field(default=None, description="Rubric points keyed by criterion ID")
    comment: Optional[str] = Field(default=None, description="Comment to attach")


class SubmissionCommentArgs(SubmissionArgs):
    comment: str = Field(description="The comment text to post")


# =============================================================================
# Course Tools
# =============================================================================

def list_courses_tool(args: ListCoursesArgs) -> str:
    with tool_errors("fetch courses"):
        result = courses.list_courses({
            "enrollment_state": "active",
            "state[]": ["available"],
            "per_page": 100,
            "include[]": ["term"],
        })
        return format_courses(result)


def post_announcement_tool(args: AnnouncementArgs) -> str:
    with tool_errors("post announcement"):
        courses.post_announcement(args.course_id, {
            "title": args.title,
            "message": args.message,
            "is_announcement": True,
        })
        return f'Successfully posted announcement "{args.title}" to course {args.course_id}'


# =============================================================================
# Assignment Tools
# =============================================================================

def list_assignments_tool(args: ListAssignmentsArgs) -> str:
    with tool_errors("fetch assignments"):
        result = assignments.list_assignments(
            args.course_id,
            {"search_term": args.search_term, "bucket": args.bucket},
            options=_access(args.anonymous),
        )
        return _json(result)


def get_assignment_tool(args: AssignmentArgs) -> str:
    with tool_errors("fetch assignment"):
        return _json(assignments.get_assignment(args.course_id, args.assignment_id))


def create_assignment_tool(args: CreateAssignmentArgs) -> str:
    with tool_errors("create assignment"):
        result = assignments.create_assignment(args.course_id, args.assignment_body("name"))
        return _json(result)


def update_assignment_tool(args: UpdateAssignmentArgs) -> str:
    with tool_errors("update assignment"):
        result = assignments.update_assignment(
            args.course_id, args.assignment_id, args.assignment_body("name")
        )
        return _json(result)


def list_assignment_groups_tool(args: CourseArgs) -> str:
    with tool_errors("fetch assignment groups"):
        return _json(assignments.list_assignment_groups(args.course_id))


def create_assignment_group_tool(args: CreateAssignmentGroupArgs) -> str:
    with tool_errors("create assignment group"):
        result = assignments.create_assignment_group(args.course_id, {
            "name": args.name,
            "group_weight": args.group_weight,
            "position": args.position,
        })
        return _json(result)


# =============================================================================
# Module Tools
# =============================================================================

def list_modules_tool(args: SearchCourseArgs) -> str:
    with tool_errors("fetch modules"):
        return _json(modules.list_modules(args.course_id, {"search_term": args.search_term}))


def list_module_items_tool(args: ModuleArgs) -> str:
    with tool_errors("fetch module items"):
        return _json(modules.list_module_items(args.course_id, args.module_id))


def get_module_tool(args: ModuleArgs) -> str:
    with tool_errors("fetch module"):
        return _json(modules.get_module(args.course_id, args.module_id))


def publish_module_tool(args: PublishModuleArgs) -> str:
    with tool_errors("update module"):
        result = modules.update_module_publish(
            args.course_id, args.module_id, {"module": {"published": args.published}}
        )
        return _json(result)


# =============================================================================
# Page Tools
# =============================================================================

def list_pages_tool(args: SearchCourseArgs) -> str:
    with tool_errors("fetch pages"):
        return _json(pages.list_pages(args.course_id, {"search_term": args.search_term}))


def get_page_tool(args: PageArgs) -> str:
    with tool_errors("fetch page"):
        return _json(pages.get_page(args.course_id, args.page_url))


def list_page_revisions_tool(args: PageArgs) -> str:
    with tool_errors("fetch page revisions"):
        return _json(pages.list_page_revisions(args.course_id, args.page_url))


def revert_page_revision_tool(args: RevertPageArgs) -> str:
    with tool_errors("revert page"):
        return _json(pages.revert_page_revision(args.course_id, args.page_url, args.revision_id))


def update_or_create_page_tool(args: SavePageArgs) -> str:
    with tool_errors("save page"):
        result = pages.update_or_create_page(args.course_id, args.page_url, {
            "wiki_page": {"title": args.title, "body": args.body, "published": args.published},
        })
        return _json(result)


def delete_page_tool(args: PageArgs) -> str:
    with tool_errors("delete page"):
        pages.delete_page(args.course_id, args.page_url)
        return _json({"success": True, "deleted": args.page_url})


# =============================================================================
# Rubric Tools
# =============================================================================

def list_rubrics_tool(args: CourseArgs) -> str:
    with tool_errors("fetch rubrics"):
        return _json(rubrics.list_rubrics(args.course_id))


def get_rubric_statistics_tool(args: AssignmentArgs) -> str:
    with tool_errors("fetch rubric statistics"):
        assignment = rubrics.get_rubric_statistics(
            args.course_id, args.assignment_id, {"include[]": ["score_statistics"]}
        ) or {}
        return _json({
            "assignment_id": assignment.get("id"),
            "name": assignment.get("name"),
            "rubric": assignment.get("rubric"),
            "rubric_settings": assignment.get("rubric_settings"),
            "score_statistics": assignment.get("score_statistics"),
        })


def list_rubric_assessments_tool(args: AnonymousAssignmentArgs) -> str:
    with tool_errors("fetch rubric assessments"):
        result = rubrics.list_rubric_assessments(
            args.course_id,
            args.assignment_id,
            {"include[]": ["rubric_assessment"]},
            options=_access(args.anonymous),
        )
        return _json(result)


def attach_rubric_tool(args: AttachRubricArgs) -> str:
    with tool_errors("attach rubric"):
        result = rubrics.attach_rubric_to_assignment(args.course_id, args.assignment_id, args.rubric_id)
        return _json(result)


# =============================================================================
# Student and Section Tools
# =============================================================================

def list_students_tool(args: AnonymousCourseArgs) -> str:
    with tool_errors("fetch students"):
        result = students.list_students(
            args.course_id,
            {"enrollment_type[]": ["student"]},
            options=_access(args.anonymous),
        )
        return _json(result)


def list_sections_tool(args: CourseArgs) -> str:
    with tool_errors("fetch sections"):
        return _json(sections.list_sections(args.course_id))


def get_section_tool(args: SectionArgs) -> str:
    with tool_errors("fetch section"):
        return _json(sections.get_section(args.course_id, args.section_id))


def list_section_submissions_tool(args: SectionSubmissionsArgs) -> str:
    with tool_errors("fetch section submissions"):
        result = sections.list_section_submissions(
            args.section_id, args.assignment_id, options=_access(args.anonymous)
        )
        return _json(result)


# =============================================================================
# Submission Tools
# =============================================================================

def list_assignment_submissions_tool(args: AnonymousAssignmentArgs) -> str:
    with tool_errors("fetch assignment submissions"):
        result = submissions.list_assignment_submissions(
            args.course_id, args.assignment_id, options=_access(args.anonymous)
        )
        return _json(result)


def grade_submission_tool(args: GradeSubmissionArgs) -> str:
    with tool_errors("grade submission"):
        payload = submissions.build_grade_payload(
            posted_grade=args.posted_grade,
            score=args.score,
            rubric_assessment=args.rubric_assessment,
            comment=args.comment,
        )
        result = submissions.grade_submission(args.course_id, args.assignment_id, args.user_id, payload)
        return _json(result)


def post_submission_comment_tool(args: SubmissionCommentArgs) -> str:
    with tool_errors("post submission comment"):
        result = submissions.post_submission_comment(
            args.course_id, args.assignment_id, args.user_id, args.comment
        )
        return _json(result)


# =============================================================================
# Registration
# =============================================================================

ToolEntry = Tuple[str, str, Type[BaseModel], Handler]

COURSE_TOOLS: List[ToolEntry] = [
    ("list-courses", "List all active courses for the authenticated user", ListCoursesArgs, list_courses_tool),
    ("post-announcement", "Post an announcement to a specific course", AnnouncementArgs, post_announcement_tool),
]

ASSIGNMENT_TOOLS: List[ToolEntry] = [
    ("list-assignments", "List assignments in a course.", ListAssignmentsArgs, list_assignments_tool),
    ("get-assignment", "Get one assignment's details.", AssignmentArgs, get_assignment_tool),
    ("create-assignment", "Create a new assignment in a course.", CreateAssignmentArgs, create_assignment_tool),
    ("update-assignment", "Change fields of an existing assignment.", UpdateAssignmentArgs, update_assignment_tool),
    ("list-assignment-groups", "List assignment groups in a course.", CourseArgs, list_assignment_groups_tool),
    ("create-assignment-group", "Create an assignment group.", CreateAssignmentGroupArgs,
     create_assignment_group_tool),
]

MODULE_TOOLS: List[ToolEntry] = [
    ("list-modules", "List modules in a course.", SearchCourseArgs, list_modules_tool),
    ("list-module-items", "List the items inside a module.", ModuleArgs, list_module_items_tool),
    ("get-module", "Get one module's details.", ModuleArgs, get_module_tool),
    ("publish-module", "Publish or unpublish a module.", PublishModuleArgs, publish_module_tool),
]

PAGE_TOOLS: List[ToolEntry] = [
    ("list-pages", "List wiki pages in a course.", SearchCourseArgs, list_pages_tool),
    ("get-page", "Get a wiki page including its body.", PageArgs, get_page_tool),
    ("list-page-revisions", "List the revision history of a wiki page.", PageArgs, list_page_revisions_tool),
    ("revert-page-revision", "Restore a wiki page to an earlier revision.", RevertPageArgs,
     revert_page_revision_tool),
    ("update-or-create-page", "Update a wiki page, creating it if it does not exist.", SavePageArgs,
     update_or_create_page_tool),
    ("delete-page", "Delete a wiki page.", PageArgs, delete_page_tool),
]

RUBRIC_TOOLS: List[ToolEntry] = [
    ("list-rubrics", "List rubrics defined in a course.", CourseArgs, list_rubrics_tool),
    ("get-rubric-statistics", "Get an assignment's rubric and score statistics.", AssignmentArgs,
     get_rubric_statistics_tool),
    ("list-rubric-assessments", "Fetch rubric assessments for every submission of an assignment.",
     AnonymousAssignmentArgs, list_rubric_assessments_tool),
    ("attach-rubric", "Attach an existing rubric to an assignment.", AttachRubricArgs, attach_rubric_tool),
]

ROSTER_TOOLS: List[ToolEntry] = [
    ("list-students", "List students enrolled in a course.", AnonymousCourseArgs, list_students_tool),
    ("list-sections", "List sections of a course.", CourseArgs, list_sections_tool),
    ("get-section", "Get one section's details.", SectionArgs, get_section_tool),
    ("list-section-submissions", "Fetch submissions for an assignment within one section.",
     SectionSubmissionsArgs, list_section_submissions_tool),
]

SUBMISSION_TOOLS: List[ToolEntry] = [
    ("list-assignment-submissions", "Fetch every student's submission status & comments for an assignment.",
     AnonymousAssignmentArgs, list_assignment_submissions_tool),
    ("grade-submission", "Write back a score, grade, rubric points, or comment for a student's submission.",
     GradeSubmissionArgs, grade_submission_tool),
    ("post-submission-comment", "Attach targeted feedback as a comment on a student's submission.",
     SubmissionCommentArgs, post_submission_comment_tool),
]

ALL_TOOLS: List[ToolEntry] = (
    COURSE_TOOLS + ASSIGNMENT_TOOLS + MODULE_TOOLS + PAGE_TOOLS
    + RUBRIC_TOOLS + ROSTER_TOOLS + SUBMISSION_TOOLS
)


def register_tools(registry: ToolRegistry, entries: List[ToolEntry]) -> None:
    for name, description, schema, handler in entries:
        registry.register(name, description, schema, handler)


def register_all_tools(registry: ToolRegistry) -> None:
    """Register every Canvas tool with ``registry``."""
    register_tools(registry, ALL_TOOLS)
    logger.info(f"Registered {len(ALL_TOOLS)} Canvas tools")
