"""Short-circuiting runner for ordered fallback strategies."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, TypeVar

logger = logging.getLogger(__name__)

I = TypeVar("I")
O = TypeVar("O")

Strategy = Callable[[I], Optional[O]]


def first_success(strategies: Iterable[Strategy], value: I) -> Optional[O]:
    """Try each strategy in order and return the first non-None result.

    Strategies signal failure by returning None; later strategies are not
    invoked once one succeeds.
    """
    for strategy in strategies:
        name = getattr(strategy, "__name__", repr(strategy))
        result = strategy(value)
        if result is not None:
            logger.debug("Strategy %s succeeded", name)
            return result
        logger.debug("Strategy %s did not produce a result", name)
    return None
