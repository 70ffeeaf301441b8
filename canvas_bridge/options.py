"""
Per-call access options.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from .anonymizer import DEFAULT_POLICY, AnonymizationPolicy


@dataclass(frozen=True)
class AccessOptions:
    """
    Options passed to operations whose records identify students.

    Attributes:
        anonymous: Anonymize identity fields before returning (default: True)
        policy: Which fields count as identity
    """

    anonymous: bool = True
    policy: AnonymizationPolicy = DEFAULT_POLICY

    def apply(
        self,
        records: Sequence[Any],
        anonymizer: Callable[[Sequence[Any], Optional[AnonymizationPolicy]], Any],
    ) -> Any:
        """Run ``anonymizer`` over ``records`` when anonymous, else pass them through."""
        if not self.anonymous:
            return records
        return anonymizer(records, self.policy)


DEFAULT_ACCESS = AccessOptions()


def resolve(options: Optional[AccessOptions]) -> AccessOptions:
    """Return ``options`` or the default (anonymous) options."""
    return options if options is not None else DEFAULT_ACCESS
