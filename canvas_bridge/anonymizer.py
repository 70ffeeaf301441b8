"""
Data Anonymizer

Strips or masks student identity fields on Canvas records before they are
handed to an AI host. Every function returns new records and leaves its input
untouched; applying a function twice gives the same result as applying it once.

Student ids are kept so that grading tools can still address a submission;
names are replaced with a pseudonym derived from the id.
"""

import hashlib
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

USER = "user"
SUBMISSION = "submission"
ASSIGNMENT = "assignment"
COMMENT = "comment"

ANONYMOUS_NAME = "Anonymous Student"


@dataclass(frozen=True)
class ShapeRule:
    """Identity fields of one record shape."""

    strip: FrozenSet[str] = frozenset()
    mask: FrozenSet[str] = frozenset()
    # Field the pseudonym for masked fields is derived from
    id_field: str = "id"


DEFAULT_RULES: Dict[str, ShapeRule] = {
    USER: ShapeRule(
        strip=frozenset({
            "email", "login_id", "sis_user_id", "sis_import_id",
            "integration_id", "avatar_url", "avatar_image_url", "pronouns", "bio",
            "lti_user_id", "last_login",
        }),
        mask=frozenset({"name", "sortable_name", "short_name", "display_name"}),
    ),
    SUBMISSION: ShapeRule(id_field="user_id"),
    ASSIGNMENT: ShapeRule(),
    COMMENT: ShapeRule(
        strip=frozenset({"avatar_path"}),
        mask=frozenset({"author_name"}),
        id_field="author_id",
    ),
}


@dataclass(frozen=True)
class AnonymizationPolicy:
    """
    Which fields count as identity for each record shape.

    Policies are immutable; ``extend`` returns a new policy with extra
    fields for one shape.
    """

    rules: Mapping[str, ShapeRule] = field(default_factory=lambda: dict(DEFAULT_RULES))

    def rule(self, shape: str) -> ShapeRule:
        return self.rules.get(shape, ShapeRule())

    def extend(
        self,
        shape: str,
        strip: Iterable[str] = (),
        mask: Iterable[str] = (),
    ) -> "AnonymizationPolicy":
        """
        Return a copy of this policy with more identity fields for a shape.

        Args:
            shape: Record shape ('user', 'submission', 'assignment', 'comment')
            strip: Fields to remove
            mask: Fields to replace with the pseudonym

        Raises:
            ValueError: If the shape's id field is listed; the pseudonym is
                derived from it and must survive a second pass
        """
        current = self.rule(shape)
        strip, mask = frozenset(strip), frozenset(mask)
        if current.id_field in strip | mask:
            raise ValueError(
                f"Cannot strip or mask '{current.id_field}' on '{shape}' records: "
                f"it identifies the record for pseudonyms"
            )
        rules = dict(self.rules)
        rules[shape] = replace(
            current,
            strip=current.strip | strip,
            mask=current.mask | mask,
        )
        return AnonymizationPolicy(rules=rules)


DEFAULT_POLICY = AnonymizationPolicy()


def pseudonym(identifier: Any) -> str:
    """Stable display name for a user id."""
    if identifier is None or identifier == "":
        return ANONYMOUS_NAME
    digest = hashlib.sha256(str(identifier).encode("utf-8")).hexdigest()
    return f"Student {digest[:8]}"


def _scrub(record: Mapping[str, Any], rule: ShapeRule) -> Dict[str, Any]:
    """Copy a record without stripped fields and with masked fields replaced."""
    name = pseudonym(record.get(rule.id_field))
    result = {}
    for key, value in record.items():
        if key in rule.strip:
            continue
        if key in rule.mask and value is not None:
            value = name
        result[key] = value
    return result


def _anonymize_user(user: Any, policy: AnonymizationPolicy) -> Any:
    if not isinstance(user, Mapping):
        return user
    return _scrub(user, policy.rule(USER))


def _anonymize_comment(comment: Any, policy: AnonymizationPolicy) -> Any:
    if not isinstance(comment, Mapping):
        return comment
    result = _scrub(comment, policy.rule(COMMENT))
    if "author" in result:
        result["author"] = _anonymize_user(result["author"], policy)
    return result


def _anonymize_submission(submission: Any, policy: AnonymizationPolicy) -> Any:
    if not isinstance(submission, Mapping):
        return submission
    result = _scrub(submission, policy.rule(SUBMISSION))
    if "user" in result:
        result["user"] = _anonymize_user(result["user"], policy)
    comments = result.get("submission_comments")
    if isinstance(comments, list):
        result["submission_comments"] = [_anonymize_comment(c, policy) for c in comments]
    return result


def _anonymize_assignment(assignment: Any, policy: AnonymizationPolicy) -> Any:
    if not isinstance(assignment, Mapping):
        return assignment
    result = _scrub(assignment, policy.rule(ASSIGNMENT))
    if "submission" in result:
        result["submission"] = _anonymize_submission(result["submission"], policy)
    return result


def anonymize_users(
    users: Sequence[Any],
    policy: Optional[AnonymizationPolicy] = None,
) -> List[Any]:
    """
    Anonymize user records (e.g. a course roster).

    Args:
        users: User dicts as returned by /courses/:id/users
        policy: Identity fields to remove or mask (default: DEFAULT_POLICY)

    Returns:
        New list of the same length and order
    """
    policy = policy or DEFAULT_POLICY
    return [_anonymize_user(user, policy) for user in users]


def anonymize_submissions(
    submissions: Sequence[Any],
    policy: Optional[AnonymizationPolicy] = None,
) -> List[Any]:
    """
    Anonymize submission records, including embedded users and comment authors.

    Args:
        submissions: Submission dicts as returned by .../submissions
        policy: Identity fields to remove or mask (default: DEFAULT_POLICY)

    Returns:
        New list of the same length and order
    """
    policy = policy or DEFAULT_POLICY
    return [_anonymize_submission(submission, policy) for submission in submissions]


def anonymize_assignments(
    assignments: Sequence[Any],
    policy: Optional[AnonymizationPolicy] = None,
) -> List[Any]:
    """Anonymize assignment records and any submission embedded in them."""
    policy = policy or DEFAULT_POLICY
    return [_anonymize_assignment(assignment, policy) for assignment in assignments]
