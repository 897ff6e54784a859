"""Hub projection: named sections derived from the flat block list.

Membership is by label equality, so a label that appears in two separate runs
of blocks is still one section. Nothing here mutates session state.
"""
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, List, Sequence

MAX_EXERCISE_DETAILS = 5
MAX_INTERVAL_DETAILS = 6


@dataclass
class Section:
    index: int
    name: str
    indices: List[int] = field(default_factory=list)
    done: bool = False

    @property
    def first_index(self) -> int:
        return self.indices[0]

    @property
    def count(self) -> int:
        return len(self.indices)

    def entry_index(self, done_indices: AbstractSet[int]) -> int:
        """First member not yet done, or the first member when all are done."""
        for i in self.indices:
            if i not in done_indices:
                return i
        return self.first_index


def distinct_section_names(blocks: Sequence) -> List[str]:
    names: List[str] = []
    for block in blocks:
        if block.section_name not in names:
            names.append(block.section_name)
    return names


def build_sections(blocks: Sequence, done_indices: AbstractSet[int]) -> List[Section]:
    by_name: Dict[str, Section] = {}
    for i, block in enumerate(blocks):
        name = block.section_name
        if name not in by_name:
            by_name[name] = Section(index=len(by_name), name=name)
        by_name[name].indices.append(i)
    sections = list(by_name.values())
    for section in sections:
        section.done = all(i in done_indices for i in section.indices)
    return sections


def block_details(block) -> dict:
    """Up to five exercise/item names or six countdown labels for the hub."""
    if block.type == "superset":
        names = [e.name for e in block.exercises]
        limit = MAX_EXERCISE_DETAILS
    elif block.type == "checklist":
        names = [item.text for item in block.items if not item.is_label and item.text]
        limit = MAX_EXERCISE_DETAILS
    elif block.type == "timed":
        # cards are not listed but still count toward "more"
        names = [iv.label() for iv in block.intervals if iv.is_countdown]
        return {
            "items": names[:MAX_INTERVAL_DETAILS],
            "more": len(block.intervals) > MAX_INTERVAL_DETAILS,
        }
    else:
        names = []
        limit = MAX_EXERCISE_DETAILS
    return {"items": names[:limit], "more": len(names) > limit}


def summarize_sections(
    blocks: Sequence,
    completed: AbstractSet[int],
    skipped: AbstractSet[int],
) -> List[dict]:
    done = set(completed) | set(skipped)
    summaries = []
    for section in build_sections(blocks, done):
        summaries.append({
            "index": section.index,
            "name": section.name,
            "first_index": section.first_index,
            "count": section.count,
            "indices": list(section.indices),
            "done": section.done,
            "action": "Revisit Section" if section.done else "Begin Section",
            "blocks": [
                {
                    "index": i,
                    "name": blocks[i].name or blocks[i].type,
                    "type": blocks[i].type,
                    "completed": i in completed,
                    "skipped": i in skipped,
                    "details": block_details(blocks[i]),
                }
                for i in section.indices
            ],
        })
    return summaries
