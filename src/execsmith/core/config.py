"""Configuration models used by the fragment execution pipeline.

ExecConfig

`enable_key` (`str`)
: Front matter key that must be set to the boolean `true` for fragments in a
  document to run. Any other value, including the string `"true"`, leaves the
  document untouched.

`marker_classes` (`tuple[str, ...]`)
: Classes identifying executable code elements. A `<pre>`/`<code>` pair or an
  inline `<code>` carrying any of these classes is treated as a fragment.

`filename` (`str`)
: Pseudo file name attached to compiled fragments, visible in tracebacks and
  compiler messages.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_ENABLE_KEY = "python-elements"
DEFAULT_MARKER_CLASSES = ("python", "language-python")


class ExecConfig(BaseModel):
    """Settings shared by the document controller and the fragment executor."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    enable_key: str = Field(default=DEFAULT_ENABLE_KEY, description="Front matter switch")
    marker_classes: tuple[str, ...] = Field(
        default=DEFAULT_MARKER_CLASSES, description="Classes marking executable code"
    )
    filename: str = Field(default="<fragment>", description="Name given to compiled code")

    @field_validator("enable_key")
    @classmethod
    def _check_enable_key(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("The enable key cannot be empty.")
        return stripped

    @field_validator("marker_classes", mode="before")
    @classmethod
    def _coerce_marker_classes(cls, value: object) -> tuple[str, ...]:
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise ValueError("Marker classes must be a string or a sequence of strings.")
        classes: list[str] = []
        for entry in value:
            candidate = str(entry).strip()
            if not candidate:
                raise ValueError("Marker classes cannot contain empty entries.")
            if candidate not in classes:
                classes.append(candidate)
        if not classes:
            raise ValueError("At least one marker class is required.")
        return tuple(classes)


__all__ = ["DEFAULT_ENABLE_KEY", "DEFAULT_MARKER_CLASSES", "ExecConfig"]
