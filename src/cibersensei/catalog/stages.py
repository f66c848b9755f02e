"""Stage catalog and stage-boundary rules.

Stages group contiguous mission levels and are capped by an ascension test
level that must be passed before the next stage opens. Ranges never overlap
and the list is ordered.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Stage:
    title: str
    min_level: int
    max_level: int
    test_level: int
    style: str

    def contains(self, level: int) -> bool:
        """True for ordinary levels of the stage and its ascension test."""
        return self.min_level <= level <= self.max_level or level == self.test_level


STAGES: tuple[Stage, ...] = (
    Stage("Fundamentos (Básico)", 1, 8, 9, "basico"),
    Stage("Amenazas (Intermedio)", 10, 17, 18, "intermedio"),
    Stage("Defensa (Difícil)", 19, 26, 27, "dificil"),
    Stage("Hacking Ético (Experto)", 28, 35, 36, "experto"),
    Stage("Ciberseguridad Total (Master)", 37, 44, 45, "master"),
)


def stages_in_order() -> list[Stage]:
    """All stages, lowest levels first."""
    return list(STAGES)


def stage_for(level: int) -> Stage | None:
    """Stage owning `level`, or None when the level is outside the catalog."""
    for stage in STAGES:
        if stage.contains(level):
            return stage
    return None


def next_stage(stage: Stage) -> Stage | None:
    """Stage that follows `stage`, or None for the last one."""
    index = STAGES.index(stage)
    if index + 1 < len(STAGES):
        return STAGES[index + 1]
    return None


def next_target_level(level: int) -> int:
    """Level to present after `level` once no same-level missions remain.

    - last ordinary level of a stage -> that stage's ascension test
    - ascension test -> first level of the next stage
    - anything else -> level + 1
    """
    for stage in STAGES:
        if level == stage.max_level:
            return stage.test_level
        if level == stage.test_level:
            following = next_stage(stage)
            if following is not None:
                return following.min_level
            break
    return level + 1
