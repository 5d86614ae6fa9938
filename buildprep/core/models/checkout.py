"""
Checkout models — the outcome of resolving a symbolic version to a git ref.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

RefType = Literal["tag", "branch"]
RefStep = Literal["fetch", "checkout"]


class RefAttempt(BaseModel):
    """One failed resolution attempt: which ref, which strategy, which step."""

    ref: str
    ref_type: RefType
    step: RefStep
    output: str = ""

    def describe(self) -> str:
        line = f"  · {self.ref} {self.ref_type} {self.step}"
        if self.output:
            line += f"\n    {self.output}"
        return line


class CheckoutOutcome(BaseModel):
    """Result of a reference resolution run.

    On success ``ref``/``ref_type`` name the winner; ``attempts`` still
    holds every failure that happened before it.  On failure
    ``attempts`` lists every (ref, strategy, step) that was tried.
    """

    ok: bool
    skipped: bool = False
    reason: str = ""
    ref: str | None = None
    ref_type: RefType | None = None
    attempts: list[RefAttempt] = Field(default_factory=list)

    def describe_attempts(self) -> str:
        return "\n".join(a.describe() for a in self.attempts)
