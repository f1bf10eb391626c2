"""
Stage definitions for Menagerie Grid.

Stages are loaded from data/stages.json. A run plays them in ascending
stage_id order; the first stage resets the deck, later ones keep it.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from menagerie.types import Score, StageId
from menagerie.models import StageDef
from menagerie.cards import parse_card_type

logger = logging.getLogger(__name__)

STAGES_JSON_PATH = Path(__file__).parent / "data" / "stages.json"


def _parse_stage_def(stage_data: dict[str, Any]) -> StageDef:
    """Parse a stage dictionary into a StageDef object."""
    schedule = tuple(
        tuple(parse_card_type(name) for name in turn_unlocks)
        for turn_unlocks in stage_data.get("unlock_schedule", [])
    )

    return StageDef(
        stage_id=StageId(stage_data["stage_id"]),
        end_turn=int(stage_data["end_turn"]),
        target_score=Score(stage_data["target_score"]),
        first_draw=int(stage_data.get("first_draw", 4)),
        second_draw=int(stage_data.get("second_draw", 2)),
        last_draw=int(stage_data.get("last_draw", 1)),
        exclude_previous_turn_types=bool(stage_data.get("exclude_previous_turn_types", True)),
        unlock_schedule=schedule,
    )


def load_stage_defs(path: Path = STAGES_JSON_PATH) -> tuple[StageDef, ...]:
    """Load all stage definitions from a JSON file, sorted by stage id."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    stages = tuple(_parse_stage_def(stage_data) for stage_data in data["stages"])
    return tuple(sorted(stages, key=lambda s: s.stage_id))


ALL_STAGES: tuple[StageDef, ...] = load_stage_defs()


class StageCatalog:
    """Ordered collection of stages."""

    def __init__(self, stages: tuple[StageDef, ...] | None = None) -> None:
        source = ALL_STAGES if stages is None else stages
        self._stages: tuple[StageDef, ...] = tuple(sorted(source, key=lambda s: s.stage_id))

    def __len__(self) -> int:
        return len(self._stages)

    def __iter__(self):
        return iter(self._stages)

    def get_stage(self, stage_id: int) -> StageDef | None:
        for stage in self._stages:
            if stage.stage_id == stage_id:
                return stage
        return None

    def first_stage(self) -> StageDef | None:
        return self._stages[0] if self._stages else None

    def is_first(self, stage: StageDef) -> bool:
        first = self.first_stage()
        return first is not None and first.stage_id == stage.stage_id

    def next_stage(self, stage_id: int) -> StageDef | None:
        """The stage after stage_id, or None when stage_id is the last one."""
        for stage in self._stages:
            if stage.stage_id > stage_id:
                return stage
        return None


def reload_stages() -> None:
    """Reload stage definitions from the JSON file."""
    global ALL_STAGES

    ALL_STAGES = load_stage_defs()
    logger.info("Reloaded %d stages", len(ALL_STAGES))
