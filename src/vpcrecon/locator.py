from __future__ import annotations

import logging
import typing

import vpcrecon
import vpcrecon.errors

logger = logging.getLogger(__name__)

T = typing.TypeVar("T")


class Describe(typing.Protocol[T]):
    def __call__(
        self,
        ids: list[str] | None = None,
        filters: list[vpcrecon.EC2Filter] | None = None,
    ) -> list[T]: ...


def locate(
    kind: vpcrecon.ResourceKind,
    describe: Describe[T],
    explicit_id: str | None,
    filters: list[vpcrecon.EC2Filter],
    describe_candidate: typing.Callable[[T], str] = repr,
) -> T:
    """
    Find the single resource of ``kind`` matching an explicit id or an ownership query.

    When ``explicit_id`` is set the resource is described by id and ``filters`` are
    ignored; otherwise ``filters`` (typically derived from the cluster ownership tag)
    select the candidates.
    :raises ReconcileError: NOT_FOUND when nothing matches, CONFLICT when more than one
    resource matches. A conflict is never resolved here; the candidates are carried on
    the error for a human to clean up.
    """
    if explicit_id:
        matches = describe(ids=[explicit_id])
        query = f"id {explicit_id!r}"
    else:
        matches = describe(filters=filters)
        query = f"filters {filters!r}"

    if len(matches) == 0:
        msg = f"could not find {kind} with {query}"
        raise vpcrecon.errors.not_found(msg, resource_id=explicit_id or None)

    if len(matches) > 1:
        listing = ", ".join(describe_candidate(m) for m in matches)
        msg = f"found more than one {kind} with {query}, please clean up the extras: {listing}"
        raise vpcrecon.errors.conflict(msg, matches)

    logger.debug("Located %s with %s", kind, query)
    return matches[0]


def locate_optional(
    kind: vpcrecon.ResourceKind,
    describe: Describe[T],
    explicit_id: str | None,
    filters: list[vpcrecon.EC2Filter],
    describe_candidate: typing.Callable[[T], str] = repr,
) -> T | None:
    """Like ``locate`` but maps NOT_FOUND to None; conflicts and provider failures still raise."""
    try:
        return locate(kind, describe, explicit_id, filters, describe_candidate)
    except vpcrecon.errors.ReconcileError as err:
        match err.kind:
            case vpcrecon.errors.ErrorKind.NOT_FOUND:
                return None
            case _:
                raise
