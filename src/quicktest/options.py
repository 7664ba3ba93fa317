"""Options consumed by a single test run."""

from typing import Optional

from pydantic import BaseModel, Field


class RunOptions(BaseModel):
    """Options produced by the command line and consumed by the engine."""

    seed: Optional[int] = Field(default=None, description="Random seed, reserved for ordering extensions")
    verbose: bool = Field(default=False, description="Show every result and skip details")
    filter: Optional[str] = Field(default=None, description="Method name or /regex/ to run")
    orig_args: list[str] = Field(default_factory=list, description="Arguments as given on the command line")
    no_skip_message: bool = Field(default=False, description="Suppress the skipped tests hint")

    @property
    def args(self) -> str:
        """Arguments echoed in the summary header."""
        return " ".join(self.orig_args)
