from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ErrorCode = Literal["missing", "invalid", "out_of_range", "below_minimum", "above_maximum"]


@dataclass(frozen=True)
class FieldError:
    field: str
    code: ErrorCode
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "code": self.code, "message": self.message}


class InputValidationError(ValueError):
    """
    Raised by the convenience entrypoints when a deal cannot be analyzed.

    Carries every field problem at once so callers can render them together.
    """

    def __init__(self, errors: tuple[FieldError, ...] | list[FieldError]) -> None:
        self.errors = tuple(errors)
        summary = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(summary or "invalid deal inputs")
