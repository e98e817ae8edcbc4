"""
Mapping configuration models with Pydantic validation.

A mapping binds MIDI messages (note, cc, system) to player actions.
Keys are checked at load time so a typo in a note name fails on
startup instead of silently never firing.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from midiplay_router import SYSTEM_TYPES, note_value, resolve_cc_index

Action = Literal["play", "pause", "stop", "seek", "volume", "mute", "progress", "quit"]


class BindingConfig(BaseModel):
    """
    One MIDI message -> player action binding.

    Example:
        >>> binding = BindingConfig(
        ...     type="note",
        ...     key="C4",
        ...     action="play",
        ...     file="intro.mp4"
        ... )
        >>> binding.resolved_key
        60
    """

    type: Literal["note", "cc", "system"] = Field(..., description="Message category")
    key: int | str | None = Field(
        default=None,
        description="Note number/name, CC index/alias, system message name; null matches any note/cc",
    )
    action: Action = Field(..., description="Player action to run")
    file: str | None = Field(default=None, description="Media file (play only)")
    args: list[Any] = Field(default_factory=list, description="Extra command arguments")

    @model_validator(mode="after")
    def validate_binding(self) -> "BindingConfig":
        """Check the key against the message type and required fields"""
        if self.action == "play" and not self.file:
            raise ValueError("'play' binding needs a 'file'")
        if self.type == "system":
            if not isinstance(self.key, str) or self.key.lower() not in SYSTEM_TYPES:
                raise ValueError(
                    f"System binding key must be one of {sorted(SYSTEM_TYPES)}: {self.key!r}"
                )
        else:
            # Raises ValueError for bad names / ranges
            self.resolved_key
        return self

    @property
    def resolved_key(self) -> int | str | None:
        """Key as the message handler stores it"""
        if self.key is None:
            return None
        if self.type == "note":
            if isinstance(self.key, str):
                return note_value(self.key)
            if not 0 <= self.key <= 127:
                raise ValueError(f"Note out of range: {self.key}")
            return self.key
        if self.type == "cc":
            return resolve_cc_index(self.key)
        return str(self.key).lower()


class MappingConfig(BaseModel):
    """
    A complete mapping file.

    Example:
        >>> config = MappingConfig(
        ...     channel=0,
        ...     bindings=[BindingConfig(type="system", key="stop", action="stop")]
        ... )
    """

    channel: Annotated[int, Field(ge=0, le=15)] | None = Field(
        default=None,
        description="Only route channel messages on this channel (0-15)",
    )
    flags: str | None = Field(default=None, description="Extra MPlayer flags")
    bindings: list[BindingConfig] = Field(default_factory=list)

    @field_validator("flags")
    @classmethod
    def validate_flags(cls, v: str | None) -> str | None:
        """Treat blank flags as none"""
        if v is not None and not v.strip():
            return None
        return v
