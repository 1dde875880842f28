# A small pub/sub registry to keep producers and consumers decoupled.
from __future__ import annotations
from typing import Dict, Hashable, List, Optional, Tuple
import copy
import logging
import threading

import config
from .io import DispatchLog
from .models import (
    DispatchReport,
    DuplicatePolicy,
    ErrorPolicy,
    Handler,
    HandlerFailure,
    PublishError,
    coerce_policy,
    handler_name,
)
from .monitor import DispatchMonitor, DispatchStats

logger = logging.getLogger(__name__)


class EventRegistry:
    """
    Maps a key to the ordered list of handlers registered for it.

    Handlers are called as ``handler(key, *args, **kwargs)`` on the thread
    that calls publish(), in registration order.

    Contract:
      - publish() snapshots the key's handlers before calling any of them.
        A handler may subscribe/unsubscribe on the same registry; the change
        only shows up in later publish() calls.
      - Arguments are shared by every handler of one emission unless
        ``copy_args`` is set, in which case each handler gets a deep copy.
        With shared arguments handlers must not mutate them.
      - Handler exceptions follow ``error_policy`` (see ErrorPolicy).
        BaseExceptions that are not Exceptions always propagate.
      - Structure reads and writes are serialized by an RLock. Handlers run
        outside the lock.
    """

    def __init__(
        self,
        duplicate_policy: DuplicatePolicy | str | None = None,
        error_policy: ErrorPolicy | str | None = None,
        copy_args: Optional[bool] = None,
        arity: Optional[int] = None,
        log_path: Optional[str] = None,
    ) -> None:
        defaults = config.get_registry_defaults()
        if duplicate_policy is None:
            duplicate_policy = defaults["duplicate_policy"]
        if error_policy is None:
            error_policy = defaults["error_policy"]
        if copy_args is None:
            copy_args = defaults["copy_args"]
        if log_path is None:
            log_path = defaults["log_path"]
        if arity is not None and arity < 0:
            raise ValueError(f"arity must be >= 0, got {arity}")

        self.duplicate_policy = coerce_policy(duplicate_policy, DuplicatePolicy)
        self.error_policy = coerce_policy(error_policy, ErrorPolicy)
        self.copy_args = bool(copy_args)
        self.arity = arity

        self._subs: Dict[Hashable, List[Handler]] = {}
        self._lock = threading.RLock()
        self._seq = 0

        self.monitor = DispatchMonitor()
        self.log: DispatchLog | None = DispatchLog(log_path) if log_path else None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def subscribe(self, key: Hashable, handler: Handler) -> Handler:
        if not callable(handler):
            raise TypeError(f"handler for key {key!r} must be callable, got {type(handler).__name__}")

        with self._lock:
            if self.duplicate_policy is DuplicatePolicy.REPLACE:
                dropped = len(self._subs.get(key, ()))
                self._subs[key] = [handler]
                if dropped:
                    logger.debug("subscribe %r: replaced %d handler(s)", key, dropped)
            else:
                self._subs.setdefault(key, []).append(handler)
            count = len(self._subs[key])

        logger.debug("subscribe %r: %s (%d registered)", key, handler_name(handler), count)
        return handler

    def unsubscribe(self, key: Hashable) -> int:
        """Drop every handler for ``key``; returns how many were dropped."""
        with self._lock:
            dropped = self._subs.pop(key, None)

        if not dropped:
            return 0
        logger.debug("unsubscribe %r: dropped %d handler(s)", key, len(dropped))
        return len(dropped)

    # short names
    on = subscribe
    off = unsubscribe

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def publish(self, key: Hashable, *args, **kwargs) -> DispatchReport:
        if self.arity is not None and len(args) != self.arity:
            raise TypeError(
                f"publish {key!r}: expected {self.arity} argument(s), got {len(args)}"
            )

        with self._lock:
            snapshot: Tuple[Handler, ...] = tuple(self._subs.get(key, ()))
            seq = self._seq
            self._seq += 1

        report = DispatchReport(key=key, matched=len(snapshot))
        if not snapshot:
            logger.debug("publish %r: no handlers", key)
            self.monitor.observe(report)
            return report

        try:
            for index, fn in enumerate(snapshot):
                call_args, call_kwargs = self._delivery_args(args, kwargs)
                try:
                    fn(key, *call_args, **call_kwargs)
                except Exception as exc:
                    failure = HandlerFailure(key=key, index=index, handler=fn, error=exc)
                    report.failures.append(failure)
                    self._trace(seq, key, fn, exc)
                    if self.error_policy is ErrorPolicy.PROPAGATE:
                        raise
                    logger.exception(
                        "handler %s failed for key %r (%d of %d)",
                        failure.handler_name, key, index + 1, len(snapshot),
                    )
                    continue
                report.delivered += 1
                self._trace(seq, key, fn)
        finally:
            self.monitor.observe(report)

        if report.failures and self.error_policy is ErrorPolicy.COLLECT:
            raise PublishError(report)
        return report

    emit = publish

    def _delivery_args(self, args, kwargs):
        if not self.copy_args:
            return args, kwargs
        return copy.deepcopy(args), copy.deepcopy(kwargs)

    def _trace(self, seq: int, key, fn, error: Exception | None = None) -> None:
        if self.log is not None:
            self.log.write(seq, key, handler_name(fn), error)

    # ------------------------------------------------------------------
    # Introspection / teardown
    # ------------------------------------------------------------------
    def handlers(self, key: Hashable) -> Tuple[Handler, ...]:
        with self._lock:
            return tuple(self._subs.get(key, ()))

    def keys(self) -> List[Hashable]:
        with self._lock:
            return list(self._subs)

    def stats(self) -> DispatchStats:
        return self.monitor.summary()

    def clear(self) -> None:
        """Drop all handlers without calling them."""
        with self._lock:
            self._subs.clear()

    def close(self) -> None:
        self.clear()
        if self.log is not None:
            self.log.close()

    def __contains__(self, key) -> bool:
        with self._lock:
            return key in self._subs

    def __len__(self) -> int:
        with self._lock:
            return sum(len(fns) for fns in self._subs.values())

    def __enter__(self) -> "EventRegistry":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
