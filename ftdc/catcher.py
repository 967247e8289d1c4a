"""Thread-safe collection of errors for continue-on-error operations."""

from __future__ import annotations

import threading
from typing import Callable, Iterable, Optional


class CatcherError(Exception):
    """An error created by a Catcher, or the combined error it resolves to."""


class Catcher:
    """Collects errors from many operations and reports them together."""

    def __init__(self) -> None:
        self._errors: list[BaseException] = []
        self._lock = threading.Lock()

    def add(self, err: Optional[BaseException]) -> None:
        """Record ``err`` unless it is None."""
        if err is None:
            return
        with self._lock:
            self._errors.append(err)

    def add_when(self, cond: bool, err: Optional[BaseException]) -> None:
        if cond:
            self.add(err)

    def extend(self, errs: Optional[Iterable[Optional[BaseException]]]) -> None:
        """Record every error in ``errs`` that is not None."""
        if not errs:
            return
        kept = [err for err in errs if err is not None]
        with self._lock:
            self._errors.extend(kept)

    def extend_when(
        self, cond: bool, errs: Optional[Iterable[Optional[BaseException]]]
    ) -> None:
        if cond:
            self.extend(errs)

    def __len__(self) -> int:
        with self._lock:
            return len(self._errors)

    def has_errors(self) -> bool:
        return len(self) > 0

    def __str__(self) -> str:
        with self._lock:
            return "\n".join(str(err) for err in self._errors)

    def resolve(self) -> None:
        """Raise a CatcherError holding every recorded message, if any."""
        if not self.has_errors():
            return
        raise CatcherError(str(self))

    def errors(self) -> list[BaseException]:
        """Return a copy of the recorded errors."""
        with self._lock:
            return list(self._errors)

    def new(self, message: str) -> None:
        """Record a new error with ``message``; empty messages are ignored."""
        if not message:
            return
        self.add(CatcherError(message))

    def new_when(self, cond: bool, message: str) -> None:
        if cond:
            self.new(message)

    def errorf(self, form: str, *args: object) -> None:
        """Record an error formatted with ``%`` from ``form`` and ``args``."""
        if not form:
            return
        if not args:
            self.new(form)
            return
        self.add(CatcherError(form % args))

    def errorf_when(self, cond: bool, form: str, *args: object) -> None:
        if cond:
            self.errorf(form, *args)

    def wrap(self, err: Optional[BaseException], message: str) -> None:
        """Record ``err`` annotated with ``message``; None is ignored."""
        if err is None:
            return
        text = f"{message}: {err}" if message else str(err)
        wrapped = CatcherError(text)
        wrapped.__cause__ = err
        self.add(wrapped)

    def wrapf(self, err: Optional[BaseException], form: str, *args: object) -> None:
        if err is None:
            return
        self.wrap(err, form % args if args else form)

    def check(self, fn: Callable[[], Optional[BaseException]]) -> None:
        """Call ``fn`` and record the error it raises or returns."""
        try:
            result = fn()
        except Exception as exc:  # noqa: BLE001 - collecting is the point
            self.add(exc)
            return
        if isinstance(result, BaseException):
            self.add(result)

    def check_when(self, cond: bool, fn: Callable[[], Optional[BaseException]]) -> None:
        if cond:
            self.check(fn)