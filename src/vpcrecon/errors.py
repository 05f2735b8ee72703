from __future__ import annotations

import enum
import typing


class ErrorKind(enum.StrEnum):
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    PRECONDITION_MISSING = "PreconditionMissing"
    PROVIDER_CALL_FAILURE = "ProviderCallFailure"


class ReconcileError(Exception):
    """A reconciliation failure tagged with its kind.

    Callers branch on ``err.kind`` rather than on the exception type:

        try:
            vpc = locate(...)
        except ReconcileError as err:
            match err.kind:
                case ErrorKind.NOT_FOUND:
                    vpc = create(...)
                case _:
                    raise

    ``operation`` and ``resource_id`` describe the provider call that failed,
    ``candidates`` holds the ambiguous matches of a conflict.
    """

    kind: ErrorKind
    message: str
    operation: str | None
    resource_id: str | None
    candidates: tuple[typing.Any, ...]

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        operation: str | None = None,
        resource_id: str | None = None,
        candidates: typing.Iterable[typing.Any] = (),
    ):
        self.kind = kind
        self.message = message
        self.operation = operation
        self.resource_id = resource_id
        self.candidates = tuple(candidates)

        super().__init__(str(self))

    def __str__(self) -> str:
        s = self.message
        if self.__cause__ is not None:
            s = f"{s}: {self.__cause__}"

        return s

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(kind={self.kind!s}, message={self.message!r}, "
            f"operation={self.operation!r}, resource_id={self.resource_id!r})"
        )


def not_found(message: str, *, resource_id: str | None = None) -> ReconcileError:
    return ReconcileError(ErrorKind.NOT_FOUND, message, resource_id=resource_id)


def conflict(message: str, candidates: typing.Iterable[typing.Any]) -> ReconcileError:
    return ReconcileError(ErrorKind.CONFLICT, message, candidates=candidates)


def precondition_missing(message: str, *, resource_id: str | None = None) -> ReconcileError:
    return ReconcileError(ErrorKind.PRECONDITION_MISSING, message, resource_id=resource_id)


def provider_failure(message: str, *, operation: str, resource_id: str | None = None) -> ReconcileError:
    return ReconcileError(
        ErrorKind.PROVIDER_CALL_FAILURE,
        message,
        operation=operation,
        resource_id=resource_id,
    )
