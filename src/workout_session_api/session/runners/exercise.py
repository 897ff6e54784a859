"""Runner for straight-set exercise blocks."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from workout_session_api.errors import InvalidIntentError
from workout_session_api.models import ExerciseBlock, ExerciseLog, SetRecord
from workout_session_api.utils import reps_as_int, to_float
from .base import BlockRunner, RestPeriodMixin
from . import register_runner

logger = logging.getLogger(__name__)


class ExerciseRunner(RestPeriodMixin, BlockRunner):
    """Sets are toggled individually; finishing any set but the last starts a rest."""

    ACTIONS = {
        "toggle_set": "toggle_set",
        "set_weight": "set_weight",
        **RestPeriodMixin.REST_ACTIONS,
    }

    block: ExerciseBlock

    def __init__(self, block: ExerciseBlock, context, on_finish):
        super().__init__(block, context, on_finish)
        self.done: List[bool] = [False] * block.sets
        self.weights: List[str] = [""] * block.sets
        self.rest = self._make_countdown()

    @staticmethod
    def block_type() -> str:
        return "exercise"

    @property
    def rest_seconds(self) -> int:
        if self.block.rest_seconds:
            return self.block.rest_seconds
        return self.context.default_rest_seconds

    @property
    def completed_count(self) -> int:
        return sum(self.done)

    @property
    def can_complete(self) -> bool:
        return all(self.done)

    def timers(self):
        return [self.rest]

    def toggle_set(self, index: int) -> None:
        self._check_index(index)
        if self.done[index]:
            self.done[index] = False
            self.rest.skip()
            return
        self.done[index] = True
        if index < self.block.sets - 1:
            self.rest.start(self.rest_seconds)

    def set_weight(self, index: int, weight: str) -> None:
        self._check_index(index)
        self.weights[index] = "" if weight is None else str(weight)

    def reps_label(self, index: int) -> Optional[Union[int, str]]:
        reps_list = self.block.reps_list
        if reps_list and index < len(reps_list) and reps_list[index]:
            return reps_list[index]
        reps = self.block.reps_per_set
        if isinstance(reps, int) or (isinstance(reps, str) and "/" not in reps):
            return reps
        return None

    def resolved_reps(self, index: int) -> int:
        reps_list = self.block.reps_list
        if reps_list and index < len(reps_list):
            return reps_as_int(reps_list[index])
        return reps_as_int(self.block.reps_per_set)

    def build_payload(self) -> List[ExerciseLog]:
        sets = [
            SetRecord(weight=to_float(self.weights[i]), reps=self.resolved_reps(i))
            for i, done in enumerate(self.done)
            if done
        ]
        return [ExerciseLog(name=self.block.name, sets=sets)]

    def view(self) -> Dict[str, Any]:
        data = self._base_view()
        catalog_item = self.context.catalog_item(self.block.name)
        data.update({
            "header": f"{self.block.sets} Sets × {self.block.reps_per_set} Reps • {self.rest_seconds}s Rest",
            "tips": list(self.block.tips),
            "sets": [
                {
                    "index": i,
                    "reps": self.reps_label(i),
                    "weight": self.weights[i],
                    "done": self.done[i],
                }
                for i in range(self.block.sets)
            ],
            "completed_sets": self.completed_count,
            "progress": round(self.completed_count / self.block.sets * 100),
            "status": "Complete Block →" if self.can_complete
            else f"{self.completed_count}/{self.block.sets} Sets Done",
            "rest": self._rest_view(),
            "catalog_item": catalog_item,
        })
        return data

    def _check_index(self, index: int) -> None:
        if not isinstance(index, int) or not 0 <= index < self.block.sets:
            raise InvalidIntentError(f"Set {index} does not exist on {self.block.name}")


register_runner(ExerciseRunner)
