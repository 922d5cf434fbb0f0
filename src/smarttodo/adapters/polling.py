"""Change subscription by polling a store snapshot."""

import logging
import time
from typing import Callable, Iterator

from smarttodo.core.tasks import Task

logger = logging.getLogger(__name__)


def poll_snapshots(
    fetch: Callable[[], list[Task]],
    interval: float,
    max_polls: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Iterator[list[Task]]:
    """
    Yield the fetched task list first, then again whenever it changes.

    Store errors propagate to the consumer; polling stops there.
    """
    previous: list[Task] | None = None
    polls = 0
    while max_polls is None or polls < max_polls:
        if polls:
            sleep(interval)
        polls += 1
        snapshot = fetch()
        if snapshot != previous:
            logger.debug(f"Task snapshot changed ({len(snapshot)} tasks)")
            previous = snapshot
            yield snapshot
