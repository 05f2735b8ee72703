from __future__ import annotations

import logging
import time
import typing

import vpcrecon
import vpcrecon.errors

logger = logging.getLogger(__name__)

T = typing.TypeVar("T")


def intervals(cfg: vpcrecon.WaitConfig) -> typing.Iterator[float]:
    """Yield successive sleep intervals, growing by ``cfg.backoff`` up to ``cfg.max_interval_seconds``."""
    interval = cfg.interval_seconds
    while True:
        yield interval
        interval = min(interval * cfg.backoff, cfg.max_interval_seconds)


def poll_until(
    probe: typing.Callable[[], T | None],
    cfg: vpcrecon.WaitConfig,
    *,
    operation: str,
    resource_id: str | None = None,
    sleep: typing.Callable[[float], None] | None = None,
    clock: typing.Callable[[], float] | None = None,
) -> T:
    """
    Call ``probe`` until it returns something other than None, sleeping between attempts.

    The wait is bounded by ``cfg.timeout_seconds``; the final sleep is clipped so the
    deadline is never overshot. Exceptions raised by ``probe`` propagate unchanged.
    :param probe: returns the awaited value once ready, None otherwise
    :param cfg: timeout and backoff settings
    :param operation: name of the wait, used in the timeout error
    :param resource_id: the resource being waited on, used in the timeout error
    :return: the first non-None value returned by ``probe``
    """
    sleep = sleep or time.sleep
    clock = clock or time.monotonic

    deadline = clock() + cfg.timeout_seconds
    attempts = 0

    for interval in intervals(cfg):
        attempts += 1
        result = probe()
        if result is not None:
            return result

        remaining = deadline - clock()
        if remaining <= 0:
            break

        logger.debug("%s: %r not ready after %d attempt(s), sleeping %.1fs", operation, resource_id, attempts, interval)
        sleep(min(interval, remaining))

    msg = f"timed out after {cfg.timeout_seconds}s ({attempts} attempts) waiting for {resource_id!r}"
    raise vpcrecon.errors.provider_failure(msg, operation=operation, resource_id=resource_id)
