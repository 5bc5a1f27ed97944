"""Configuration models.

Contexts describe where focus data is persisted: a local SQLite vault or a
remote document-store API.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from focuskeeper.models.focus.goals import DEFAULT_DAILY_TARGET


class APIConfig(BaseModel):
    """API configuration."""

    timeout: int = Field(default=30)
    retry: int = Field(default=3)


class FocusConfig(BaseModel):
    """Focus timer behaviour."""

    default_daily_target: int = Field(default=DEFAULT_DAILY_TARGET, ge=0)
    tick_interval_seconds: float = Field(default=1.0, gt=0)
    catch_up_on_load: bool = Field(
        default=True,
        description="Replay wall-clock time missed while no timer was running",
    )
    bell: bool = Field(default=True, description="Ring the terminal bell on completion")
    stats_window_days: int = Field(default=30, ge=1)


class Context(BaseModel):
    """Context configuration for a storage backend.

    Represents either a local SQLite vault or remote API endpoint.
    """

    name: str = Field(..., description="Unique context name")
    type: Literal["local", "remote"] = Field(..., description="Context type")
    source: str = Field(..., description="Database path or API URL")
    user_id: str = Field(default="local-user", description="Owner id of stored records")
    description: str = Field(default="", description="Human-readable description")

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        """Reject empty sources."""
        if not v or not v.strip():
            raise ValueError("source cannot be empty")
        return v.strip()


class AppConfig(BaseModel):
    """Main FocusKeeper configuration"""

    current_context_name: str = Field(
        default="default", description="Active context name"
    )
    contexts: list[Context] = Field(
        default_factory=list, description="Available contexts"
    )

    api: APIConfig = Field(default_factory=APIConfig)
    focus: FocusConfig = Field(default_factory=FocusConfig)

    def get_context(self, name: str) -> Context:
        """Get context by name."""
        for ctx in self.contexts:
            if ctx.name == name:
                return ctx
        raise ValueError(f"Context '{name}' not found")

    def get_current_context(self) -> Context:
        """Get the currently active context."""
        return self.get_context(self.current_context_name)

    def add_context(self, context: Context):
        """Add a new context.

        Raises:
            ValueError: If context with the same name already exists
        """
        existing = [ctx for ctx in self.contexts if ctx.name == context.name]
        if existing:
            raise ValueError(
                f"Context '{context.name}' already exists."
                " Use a different name or remove the existing context first."
            )
        self.contexts.append(context)
