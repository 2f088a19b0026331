"""
Post-commit side-effect dispatcher.

Use cases collect notification, email and messaging calls while their
transaction is open and hand the collection back to the caller after commit.
The API layer schedules `run` on FastAPI's BackgroundTasks so the response is
sent first; background jobs and tests call `run` directly.

Failures are logged and swallowed: committed state is never affected.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple

from core.exceptions import SideEffectError

logger = logging.getLogger(__name__)


@dataclass
class _Effect:
    description: str
    func: Callable[..., Any]
    args: Tuple[Any, ...]
    kwargs: Dict[str, Any]


@dataclass
class PostCommitEffects:
    """Ordered, best-effort list of calls to make after a transaction commits."""

    effects: List[_Effect] = field(default_factory=list)

    def add(self, description: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self.effects.append(_Effect(description, func, args, kwargs))

    def __len__(self) -> int:
        return len(self.effects)

    @property
    def descriptions(self) -> List[str]:
        return [effect.description for effect in self.effects]

    def run(self) -> int:
        """
        Execute every collected call in order.

        Returns:
            Number of calls that completed without raising
        """
        succeeded = 0
        for effect in self.effects:
            try:
                effect.func(*effect.args, **effect.kwargs)
                succeeded += 1
            except SideEffectError as e:
                logger.warning(f"Side effect '{effect.description}' failed: {e}")
            except Exception as e:
                logger.exception(f"Unexpected error in side effect '{effect.description}': {e}")
        if succeeded < len(self.effects):
            logger.info(f"Post-commit side effects: {succeeded}/{len(self.effects)} succeeded")
        return succeeded
