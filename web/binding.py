"""
web/binding.py -- Form binding results.

BindingResult collects one error message per form field while submitted data
is bound to a model. An empty result means the binding succeeded. Entries are
only ever added or overwritten, never removed.

bind() is the usual entry point: it validates a mapping (e.g. await
request.form()) into a pydantic model and returns the instance together with
the result.

    user, result = bind(SignupForm, await request.form())
    if not result.valid:
        return templates.render(422, "signup.html", V(errors=result))
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)


class BindingResult(dict[str, str]):
    """Validation errors keyed by field name."""

    @property
    def valid(self) -> bool:
        """True when no field failed."""
        return len(self) == 0

    def fail(self, field: str, message: str) -> None:
        """Record an error for field, replacing any earlier one."""
        self[field] = message

    def include(self, other: Mapping[str, str]) -> None:
        """Copy every error of other into this result."""
        for field, message in other.items():
            self.fail(field, message)

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> "BindingResult":
        """Convert pydantic errors into field messages.

        Nested locations are joined with dots ("address.zip"). Model-level
        errors have an empty location and are stored under "". The first
        message reported for a field is kept.
        """
        result = cls()
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"])
            result.setdefault(field, error["msg"])
        return result


def bind(model: type[M], data: Mapping[str, Any]) -> tuple[Optional[M], BindingResult]:
    """Validate data into model. Returns (instance, empty result) or (None, errors)."""
    try:
        return model.model_validate(dict(data)), BindingResult()
    except ValidationError as exc:
        return None, BindingResult.from_validation_error(exc)
