"""Duplicate submission guard.

Two states: armed (nothing recorded) and guarded (fingerprint of the last
successful generation recorded). Only a successful generation moves the guard
to guarded; selecting another template or clearing the result re-arms it.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass

from backend.app.workflow.errors import DuplicateSubmission


def fingerprint(values: Mapping[str, str]) -> str:
    """Canonical serialization of a submission's field values."""
    return json.dumps(dict(values), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class DuplicateGuard:
    """Immutable guard value held by the session state."""

    recorded: str | None = None

    @property
    def armed(self) -> bool:
        return self.recorded is None

    @property
    def guarded(self) -> bool:
        return self.recorded is not None

    def matches(self, values: Mapping[str, str]) -> bool:
        """True if `values` equals the recorded submission."""
        return self.recorded is not None and self.recorded == fingerprint(values)

    def check(self, values: Mapping[str, str]) -> None:
        """Reject a resubmission of the recorded input.

        Raises:
            DuplicateSubmission: If guarded and the fingerprints match
        """
        if self.matches(values):
            raise DuplicateSubmission()

    def record(self, values: Mapping[str, str]) -> "DuplicateGuard":
        """Guard against `values` (called on generation success)."""
        return DuplicateGuard(recorded=fingerprint(values))

    def rearm(self) -> "DuplicateGuard":
        """Forget the recorded submission."""
        return DuplicateGuard()
