"""
Build session model.

A session is the state of one user's wizard run: project settings, the
ingested source, the permission profile and the icon. Sessions are immutable;
every stage returns a new snapshot.
"""

from __future__ import annotations

import uuid
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..core.exceptions import StageTransitionError
from .project import IconAsset, PermissionProfile, ProjectConfig, ProjectSource


class Stage(IntEnum):
    """Wizard stages, in order."""

    UPLOAD = 0
    ANALYZE = 1
    DESIGN = 2
    BUILD = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()


def _new_session_id() -> str:
    return uuid.uuid4().hex[:8]


class BuildSession(BaseModel):
    """Immutable snapshot of a build session."""

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(default_factory=_new_session_id)
    stage: Stage = Field(default=Stage.UPLOAD)
    config: ProjectConfig = Field(default_factory=ProjectConfig)
    source: ProjectSource | None = Field(default=None)
    permissions: PermissionProfile | None = Field(default=None)
    permissions_defaulted: bool = Field(default=False, description="Profile is the fallback")
    icon: IconAsset | None = Field(default=None)
    icon_defaulted: bool = Field(default=False, description="Icon is the placeholder")
    warnings: tuple[str, ...] = Field(default=())

    def missing_for(self, stage: Stage) -> str | None:
        """Describe what entering ``stage`` still needs, or None if allowed."""
        if stage >= Stage.ANALYZE and self.source is None:
            return "no source has been uploaded"
        if stage >= Stage.ANALYZE and self.permissions is None:
            return "permissions have not been analyzed"
        return None

    def can_enter(self, stage: Stage) -> bool:
        return self.missing_for(stage) is None

    def _update(self, **changes: Any) -> BuildSession:
        return self.model_copy(update=changes)

    def require(self, stage: Stage) -> None:
        """Raise if the session lacks the data ``stage`` needs.

        Raises:
            StageTransitionError: If entering ``stage`` is not allowed yet.
        """
        reason = self.missing_for(stage)
        if reason is not None:
            raise StageTransitionError(
                message=reason,
                stage=self.stage.label,
                target_stage=stage.label,
                session_id=self.session_id,
            )

    def go_to(self, stage: Stage) -> BuildSession:
        """Move to ``stage``, which must be enterable."""
        self.require(stage)
        return self._update(stage=stage)

    def advance(self) -> BuildSession:
        if self.stage == Stage.BUILD:
            raise StageTransitionError(
                message="already at the last stage",
                stage=self.stage.label,
                target_stage=self.stage.label,
                session_id=self.session_id,
            )
        return self.go_to(Stage(self.stage + 1))

    def back(self) -> BuildSession:
        if self.stage == Stage.UPLOAD:
            raise StageTransitionError(
                message="already at the first stage",
                stage=self.stage.label,
                target_stage=self.stage.label,
                session_id=self.session_id,
            )
        return self._update(stage=Stage(self.stage - 1))

    def with_config(self, **changes: Any) -> BuildSession:
        """Replace project settings; the result is validated again."""
        config = ProjectConfig.model_validate({**self.config.model_dump(), **changes})
        return self._update(config=config)

    def with_source(self, source: ProjectSource, warnings: list[str] | None = None) -> BuildSession:
        """Replace the source wholesale.

        Results derived from the previous source are dropped and the session
        returns to the upload stage.
        """
        return self._update(
            source=source,
            permissions=None,
            permissions_defaulted=False,
            stage=Stage.UPLOAD,
            warnings=tuple(warnings or ()),
        )

    def with_permissions(self, permissions: PermissionProfile, defaulted: bool = False) -> BuildSession:
        return self._update(permissions=permissions, permissions_defaulted=defaulted)

    def with_icon(self, icon: IconAsset, defaulted: bool = False) -> BuildSession:
        """Replace only the icon; permissions stay valid."""
        return self._update(icon=icon, icon_defaulted=defaulted)
