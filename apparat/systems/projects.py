"""
Ministry projects.

A project is a ministry action that runs for several turns. It snapshots its
success chance when it starts, advances through planning, implementation,
execution and completion, and lands its outcome on the completion turn.
Finished projects leave the board.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..state.event_bus import EventType
from ..state.schema import MinistryDepartment, Project, ProjectPhase
from ..state.schemas import ActionResult, ActionStatus

if TYPE_CHECKING:
    from ..catalog.models import ActionDefinition
    from .engine import ActionEngine

logger = logging.getLogger(__name__)

CORRUPTED_PROJECT = "Project data corrupted"

# Progress ratio at which each phase begins
PHASE_THRESHOLDS: list[tuple[float, ProjectPhase]] = [
    (0.75, ProjectPhase.COMPLETION),
    (0.5, ProjectPhase.EXECUTION),
    (0.25, ProjectPhase.IMPLEMENTATION),
]


def phase_for_progress(progress: int, duration: int) -> ProjectPhase:
    ratio = progress / max(1, duration)
    for threshold, phase in PHASE_THRESHOLDS:
        if ratio >= threshold:
            return phase
    return ProjectPhase.PLANNING


class ProjectBoard:
    """The world's active ministry projects, driven through the ministry engine."""

    def __init__(self, engine: "ActionEngine"):
        self.engine = engine

    @property
    def world(self):
        return self.engine.world

    def active(self) -> list[Project]:
        return [p for p in self.world.projects if not p.is_finished]

    def start(
        self,
        action: "ActionDefinition",
        initiator: str,
        target: str | None,
        success_chance: int,
    ) -> Project:
        turn = self.world.turn
        project = Project(
            action_id=action.id,
            name=action.name,
            department=action.department or MinistryDepartment.GENERAL_OFFICE,
            target=target,
            initiated_turn=turn,
            completion_turn=turn + action.execution_turns,
            success_chance=success_chance,
            initiator=initiator,
        )
        self.world.projects.append(project)

        logger.info(f"Project started: {project.name} (due turn {project.completion_turn})")
        self.engine.bus.emit(
            EventType.PROJECT_STARTED,
            world_id=self.world.id,
            turn=turn,
            project_id=project.id,
            action_id=action.id,
            completion_turn=project.completion_turn,
        )
        return project

    def advance(self, turn: int) -> list[ActionResult]:
        """Move every active project to this turn; land the ones that are due."""
        results = []
        for project in self.active():
            project.progress = max(project.progress, min(project.duration, turn - project.initiated_turn))
            if turn < project.completion_turn:
                project.phase = phase_for_progress(project.progress, project.duration)
                continue
            results.append(self._complete(project, turn))

        self.world.projects = [p for p in self.world.projects if not p.is_finished]
        return results

    def _complete(self, project: Project, turn: int) -> ActionResult:
        action = self.engine.catalog.get(project.action_id)
        if action is None:
            logger.warning(f"Project {project.id} names unknown action '{project.action_id}'")
            project.phase = ProjectPhase.FAILED
            self.engine.bus.emit(
                EventType.STATE_CORRUPTED,
                world_id=self.world.id,
                turn=turn,
                domain="ministry",
                record_id=project.id,
                action_id=project.action_id,
            )
            return ActionResult(
                status=ActionStatus.RESOLVED,
                domain=self.engine.domain,
                action_id=project.action_id,
                actor_id=project.initiator,
                target_id=project.target,
                turn=turn,
                succeeded=False,
                record_id=project.id,
                reason=CORRUPTED_PROJECT,
                description=CORRUPTED_PROJECT,
            )

        result = self.engine.land(action, project.initiator, project.target, project.success_chance)
        result.record_id = project.id
        project.phase = ProjectPhase.COMPLETED if result.succeeded else ProjectPhase.FAILED

        logger.info(f"Project {project.name} {project.phase.value}")
        self.engine.bus.emit(
            EventType.PROJECT_COMPLETED,
            world_id=self.world.id,
            turn=turn,
            project_id=project.id,
            action_id=project.action_id,
            succeeded=result.succeeded,
            narrative_key=result.narrative_key,
        )
        return result
