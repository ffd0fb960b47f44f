from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from graphwire.lock_mode import LockMode


class ContextSettings(BaseSettings):
    """Configure how an ``ExecutionContext`` discovers and resolves components.

    Values are read from ``GRAPHWIRE_*`` environment variables. List fields
    take JSON, for example ``GRAPHWIRE_PACKAGES='["app.plugins", "app.core"]'``.
    Arguments passed to ``ExecutionContext.create`` override these values.

    Examples:
        .. code-block:: python

            settings = ContextSettings(packages=["app"], lock_mode=LockMode.NONE)
            context = ExecutionContext.create(settings=settings)

    """

    model_config = SettingsConfigDict(env_prefix="GRAPHWIRE_", extra="ignore")

    packages: list[str] = Field(default_factory=list)
    """Packages walked by the default package scanner."""

    exclude_prefixes: list[str] = Field(default_factory=list)
    """Dotted module-name prefixes the package scanner skips."""

    lock_mode: LockMode = LockMode.THREAD
    """Locking strategy for setup and resolution."""

    transcript_function_name: str = "create"
    """Name of the function generated by ``emit_transcript_for``."""
