"""Runner for self-paced checklist blocks."""
from __future__ import annotations

from typing import Any, Dict, Set

from workout_session_api.errors import InvalidIntentError
from workout_session_api.models import ChecklistBlock
from .base import BlockRunner
from . import register_runner


class ChecklistRunner(BlockRunner):
    """Completion and skip are always available; checks are informational.

    An item with details is a disclosure: tapping it expands or collapses the
    details and it never shows a checkbox.
    """

    ACTIONS = {
        "toggle_item": "toggle_item",
        "toggle_expand": "toggle_expand",
    }

    block: ChecklistBlock

    def __init__(self, block: ChecklistBlock, context, on_finish):
        super().__init__(block, context, on_finish)
        self.checked: Set[int] = set()
        self.expanded: Set[int] = set()

    @staticmethod
    def block_type() -> str:
        return "checklist"

    def toggle_item(self, index: int) -> None:
        item = self._item(index)
        if item.is_disclosure:
            self._flip(self.expanded, index)
        else:
            self._flip(self.checked, index)

    def toggle_expand(self, index: int) -> None:
        if not self._item(index).is_disclosure:
            raise InvalidIntentError(f"Item {index} has no details to expand")
        self._flip(self.expanded, index)

    def footer_label(self) -> str:
        index = self.context.block_index
        if index == 0:
            return "Start Workout ->"
        if self.context.total_blocks and index == self.context.total_blocks - 1:
            return "Finish Workout ->"
        return "Complete Block ->"

    def view(self) -> Dict[str, Any]:
        data = self._base_view()
        items = []
        for i, item in enumerate(self.block.items):
            row: Dict[str, Any] = {"index": i, "kind": item.kind, "text": item.text}
            if not item.is_label:
                row["disclosure"] = item.is_disclosure
                if item.is_disclosure:
                    row["expanded"] = i in self.expanded
                    row["details"] = list(item.details) if i in self.expanded else []
                else:
                    row["checked"] = i in self.checked
            items.append(row)
        data.update({
            "items": items,
            "checked_count": len(self.checked),
            "footer": self.footer_label(),
        })
        return data

    def _item(self, index: int):
        if not isinstance(index, int) or not 0 <= index < len(self.block.items):
            raise InvalidIntentError(f"Item {index} does not exist on {self.block.name}")
        item = self.block.items[index]
        if item.is_label:
            raise InvalidIntentError(f"Item {index} is a {item.kind}, not a checklist item")
        return item

    @staticmethod
    def _flip(values: Set[int], index: int) -> None:
        if index in values:
            values.discard(index)
        else:
            values.add(index)


register_runner(ChecklistRunner)
