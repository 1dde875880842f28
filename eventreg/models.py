from dataclasses import dataclass, field
from typing import Callable, Hashable, List, Tuple
from enum import Enum, auto


class DuplicatePolicy(Enum):
    ACCUMULATE = auto()     # multimap: handlers pile up per key
    REPLACE = auto()        # map: last subscribe wins


class ErrorPolicy(Enum):
    ISOLATE = auto()        # log, continue, report
    COLLECT = auto()        # continue, then raise PublishError
    PROPAGATE = auto()      # first exception escapes publish()


Handler = Callable[..., None]


def coerce_policy(value, enum_cls):
    """Accept an enum member or its name ("accumulate", "ISOLATE", ...)."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls[str(value).strip().upper()]
    except KeyError:
        choices = ", ".join(m.name for m in enum_cls)
        raise ValueError(f"unknown {enum_cls.__name__}: {value!r} (expected one of {choices})")


def handler_name(fn) -> str:
    name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None)
    if name is None:
        name = type(fn).__qualname__
    return name


@dataclass
class HandlerFailure:
    key: Hashable
    index: int                  # position of the handler in the snapshot
    handler: Handler
    error: Exception

    @property
    def handler_name(self) -> str:
        return handler_name(self.handler)


@dataclass
class DispatchReport:
    """Outcome of a single publish() call."""
    key: Hashable
    matched: int = 0            # handlers in the snapshot
    delivered: int = 0          # handlers that returned normally
    failures: List[HandlerFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def __bool__(self) -> bool:
        return self.matched > 0


class PublishError(Exception):
    """Raised under ErrorPolicy.COLLECT after the full fan-out completes."""

    def __init__(self, report: DispatchReport) -> None:
        self.report = report
        self.failures: Tuple[HandlerFailure, ...] = tuple(report.failures)
        names = ", ".join(f.handler_name for f in self.failures)
        super().__init__(
            f"{len(self.failures)} of {report.matched} handler(s) failed "
            f"for key {report.key!r}: {names}"
        )
