"""Block runner registry: one runner class per block type."""
from typing import Callable, Dict, Type, get_args

from workout_session_api.models import BlockOutcome, BlockType
from .base import BlockRunner, RunnerContext, RestPeriodMixin

_RUNNER_REGISTRY: Dict[str, Type[BlockRunner]] = {}


def register_runner(runner_class: Type[BlockRunner]) -> None:
    """Register a runner class for its block type.

    Raises:
        ValueError: If a runner is already registered for this block type.
    """
    name = runner_class.block_type()
    if name in _RUNNER_REGISTRY:
        raise ValueError(f"Runner already registered for block type '{name}'")
    _RUNNER_REGISTRY[name] = runner_class


def get_runner_class(block_type: str) -> Type[BlockRunner]:
    """Look up the runner class for a block type.

    Raises:
        KeyError: If no runner is registered for the block type.
    """
    return _RUNNER_REGISTRY[block_type]


def create_runner(
    block,
    context: RunnerContext,
    on_finish: Callable[[BlockOutcome], None],
) -> BlockRunner:
    return get_runner_class(block.type)(block, context, on_finish)


__all__ = [
    "register_runner",
    "get_runner_class",
    "create_runner",
    "BlockRunner",
    "RunnerContext",
    "RestPeriodMixin",
]

# Auto-load runners (triggers self-registration)
from . import exercise  # noqa: E402,F401
from . import checklist  # noqa: E402,F401
from . import superset  # noqa: E402,F401
from . import timed  # noqa: E402,F401

_missing = set(get_args(BlockType)) - set(_RUNNER_REGISTRY)
if _missing:
    raise RuntimeError(f"No runner registered for block types: {sorted(_missing)}")
