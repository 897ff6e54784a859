"""Runner for superset blocks (several exercises per round)."""
from __future__ import annotations

import re
from typing import Any, Dict, List

from workout_session_api.errors import InvalidIntentError
from workout_session_api.models import ExerciseLog, SetRecord, SupersetBlock
from workout_session_api.utils import reps_as_int, to_float
from .base import BlockRunner, RestPeriodMixin
from . import register_runner

_NUMBERING = re.compile(r"^\d+\.\s*")
_SUPERSET_WORD = re.compile(r"Superset\s*", re.IGNORECASE)
_PARENS = re.compile(r"[()]")


def display_name(name: str) -> str:
    """'2. Superset (Bench + Row)' -> 'Bench + Row'"""
    return _PARENS.sub("", _SUPERSET_WORD.sub("", _NUMBERING.sub("", name)))


class SupersetRunner(RestPeriodMixin, BlockRunner):
    """A round is complete when every exercise has that round checked.

    Completing a round other than the last one starts the rest countdown.
    Unchecking never starts a rest and cancels a running one.
    """

    ACTIONS = {
        "toggle_set": "toggle_set",
        "set_weight": "set_weight",
        **RestPeriodMixin.REST_ACTIONS,
    }

    block: SupersetBlock

    def __init__(self, block: SupersetBlock, context, on_finish):
        super().__init__(block, context, on_finish)
        rounds = block.sets
        self.done: List[List[bool]] = [[False] * rounds for _ in block.exercises]
        self.weights: List[List[str]] = [[""] * rounds for _ in block.exercises]
        self.rest = self._make_countdown()

    @staticmethod
    def block_type() -> str:
        return "superset"

    @property
    def rounds(self) -> int:
        return self.block.sets

    @property
    def total_cells(self) -> int:
        return len(self.block.exercises) * self.rounds

    @property
    def completed_cells(self) -> int:
        return sum(sum(row) for row in self.done)

    @property
    def can_complete(self) -> bool:
        return self.completed_cells == self.total_cells

    def timers(self):
        return [self.rest]

    def round_done(self, round_index: int) -> bool:
        return all(row[round_index] for row in self.done)

    def toggle_set(self, exercise: int, round_index: int) -> None:
        self._check_cell(exercise, round_index)
        if self.done[exercise][round_index]:
            self.done[exercise][round_index] = False
            self.rest.skip()
            return
        self.done[exercise][round_index] = True
        if self.round_done(round_index) and round_index < self.rounds - 1:
            self.rest.start(self.context.superset_rest_seconds)

    def set_weight(self, exercise: int, round_index: int, weight: str) -> None:
        self._check_cell(exercise, round_index)
        self.weights[exercise][round_index] = "" if weight is None else str(weight)

    def build_payload(self) -> List[ExerciseLog]:
        payload = []
        for ex_idx, exercise in enumerate(self.block.exercises):
            reps = reps_as_int(exercise.reps)
            sets = [
                SetRecord(weight=to_float(self.weights[ex_idx][r]), reps=reps)
                for r in range(self.rounds)
                if self.done[ex_idx][r]
            ]
            payload.append(ExerciseLog(name=exercise.name, sets=sets))
        return payload

    def view(self) -> Dict[str, Any]:
        data = self._base_view()
        exercises = self.block.exercises
        data.update({
            "display_name": display_name(self.block.name),
            "header": f"{self.rounds} Rounds × {len(exercises)} Exercises",
            "tips": list(self.block.tips),
            "rounds": [
                {
                    "index": r,
                    "done": self.round_done(r),
                    "cells": [
                        {
                            "exercise": e,
                            "name": ex.name,
                            "reps": ex.reps,
                            "weight": self.weights[e][r],
                            "done": self.done[e][r],
                            "catalog_item": self.context.catalog_item(ex.name),
                        }
                        for e, ex in enumerate(exercises)
                    ],
                }
                for r in range(self.rounds)
            ],
            "completed_sets": self.completed_cells,
            "total_sets": self.total_cells,
            "progress": round(self.completed_cells / self.total_cells * 100) if self.total_cells else 100,
            "status": "Complete Superset →" if self.can_complete
            else f"{self.completed_cells}/{self.total_cells} Sets Done",
            "rest": self._rest_view(),
        })
        return data

    def _check_cell(self, exercise: int, round_index: int) -> None:
        if not isinstance(exercise, int) or not 0 <= exercise < len(self.block.exercises):
            raise InvalidIntentError(f"Exercise {exercise} does not exist on {self.block.name}")
        if not isinstance(round_index, int) or not 0 <= round_index < self.rounds:
            raise InvalidIntentError(f"Round {round_index} does not exist on {self.block.name}")


register_runner(SupersetRunner)
