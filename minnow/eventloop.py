"""Waits for events on file descriptors and runs the matching callbacks."""

from __future__ import annotations

import errno as errno_codes
import os
import select
import socket
import sys
import weakref
from enum import Enum
from typing import Callable, Union

from minnow.errors import UnixError
from minnow.file_descriptor import FileDescriptor

Callback = Callable[[], None]
Interest = Callable[[], bool]

_ERROR_EVENTS = select.POLLERR | select.POLLNVAL
_ALWAYS_REPORTED = select.POLLERR | select.POLLHUP | select.POLLNVAL
_BUSY_WAIT_LIMIT = 128


def _always() -> bool:
    return True


def _nothing() -> None:
    return None


class Direction(Enum):
    """Whether a rule waits for its descriptor to be readable or writable."""

    IN = "in"
    OUT = "out"


class Result(Enum):
    """The outcome of one call to EventLoop.wait_next_event."""

    SUCCESS = "success"  # at least one rule was served
    TIMEOUT = "timeout"  # no rule was served before the timeout
    EXIT = "exit"  # nothing is left to wait for


class _BasicRule:
    def __init__(self, category_id: int, interest: Interest, callback: Callback) -> None:
        self.category_id = category_id
        self.interest = interest
        self.callback = callback
        self.cancel_requested = False


class _FDRule(_BasicRule):
    def __init__(
        self,
        category_id: int,
        interest: Interest,
        callback: Callback,
        fd: FileDescriptor,
        direction: Direction,
        on_cancel: Callback,
        on_error: Callback,
    ) -> None:
        super().__init__(category_id, interest, callback)
        self.fd = fd
        self.direction = direction
        self.on_cancel = on_cancel
        self.on_error = on_error

    def service_count(self) -> int:
        """How many times the descriptor has been read or written, per the direction."""
        return self.fd.read_count if self.direction is Direction.IN else self.fd.write_count


class RuleHandle:
    """A handle that can cancel a rule without keeping it alive."""

    def __init__(self, rule: _BasicRule) -> None:
        self._rule = weakref.ref(rule)

    def cancel(self) -> None:
        """Ask the loop to drop the rule; its cancel callback is not called."""
        rule = self._rule()
        if rule is not None:
            rule.cancel_requested = True


class EventLoop:
    """Serves rules: plain ones whenever interested, descriptor ones when the descriptor is ready."""

    MAX_CATEGORIES = 64

    def __init__(self) -> None:
        self._categories: list[str] = []
        self._fd_rules: list[_FDRule] = []
        self._non_fd_rules: list[_BasicRule] = []

    def add_category(self, name: str) -> int:
        """Register a category name; return its id."""
        if len(self._categories) >= self.MAX_CATEGORIES:
            raise RuntimeError("maximum categories reached")
        self._categories.append(name)
        return len(self._categories) - 1

    def _category_id(self, category: Union[int, str]) -> int:
        if isinstance(category, str):
            return self.add_category(category)
        if not 0 <= category < len(self._categories):
            raise IndexError("bad category_id")
        return category

    def add_rule(
        self,
        category: Union[int, str],
        callback: Callback,
        interest: Interest = _always,
    ) -> RuleHandle:
        """Add a rule that runs `callback` while `interest()` is true.

        `category` is a category id, or a name for a new category.
        """
        rule = _BasicRule(self._category_id(category), interest, callback)
        self._non_fd_rules.append(rule)
        return RuleHandle(rule)

    def add_fd_rule(
        self,
        category: Union[int, str],
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Interest = _always,
        cancel: Callback = _nothing,
        error: Callback = _nothing,
    ) -> RuleHandle:
        """Add a rule that runs `callback` when `fd` is readable (IN) or writable (OUT)."""
        category_id = self._category_id(category)
        rule = _FDRule(category_id, interest, callback, fd.duplicate(), direction, cancel, error)
        self._fd_rules.append(rule)
        return RuleHandle(rule)

    @staticmethod
    def _drop(rules: list, rule: _BasicRule) -> None:
        if rule in rules:
            rules.remove(rule)

    def _report_poll_error(self, rule: _FDRule) -> None:
        name = self._categories[rule.category_id]
        try:
            sock = socket.socket(fileno=rule.fd.fd_num)
        except OSError as exc:
            if exc.errno == errno_codes.ENOTSOCK:
                print(f'error on polled file descriptor for rule "{name}"', file=sys.stderr)
                return
            raise UnixError("getsockopt", exc.errno or 0) from exc
        try:
            socket_error = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        except OSError as exc:
            raise UnixError("getsockopt", exc.errno or 0) from exc
        finally:
            sock.detach()
        if socket_error:
            print(
                f'error on polled socket for rule "{name}": {os.strerror(socket_error)}',
                file=sys.stderr,
            )

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Serve at most one rule, waiting up to `timeout_ms` (forever if negative)."""
        for rule in list(self._non_fd_rules):
            if rule.cancel_requested:
                self._drop(self._non_fd_rules, rule)
                continue
            fired = False
            iterations = 0
            while rule.interest():
                if iterations >= _BUSY_WAIT_LIMIT:
                    raise RuntimeError(
                        f'EventLoop: busy wait detected: rule "{self._categories[rule.category_id]}"'
                        f" is still interested after {iterations + 1} iterations"
                    )
                iterations += 1
                fired = True
                rule.callback()
            if fired:
                return Result.SUCCESS

        polled: list[tuple[_FDRule, int]] = []
        something_to_poll = False
        for rule in list(self._fd_rules):
            if rule.cancel_requested:
                self._drop(self._fd_rules, rule)
                continue
            if rule.direction is Direction.IN and rule.fd.eof:
                rule.on_cancel()
                self._drop(self._fd_rules, rule)
                continue
            if rule.fd.closed:
                rule.on_cancel()
                self._drop(self._fd_rules, rule)
                continue
            if rule.interest():
                events = select.POLLIN if rule.direction is Direction.IN else select.POLLOUT
                something_to_poll = True
            else:
                events = 0  # still watched, for errors
            polled.append((rule, events))

        if not something_to_poll:
            return Result.EXIT

        masks: dict[int, int] = {}
        for rule, events in polled:
            masks[rule.fd.fd_num] = masks.get(rule.fd.fd_num, 0) | events
        poller = select.poll()
        for fd_num, mask in masks.items():
            poller.register(fd_num, mask)
        try:
            ready = poller.poll(timeout_ms)
        except OSError as exc:
            raise UnixError("poll", exc.errno or 0) from exc
        if not ready:
            return Result.TIMEOUT
        revents_by_fd = dict(ready)

        for rule, events in polled:
            revents = revents_by_fd.get(rule.fd.fd_num, 0) & (events | _ALWAYS_REPORTED)

            if revents & _ERROR_EVENTS:
                self._report_poll_error(rule)
                rule.on_error()
                rule.on_cancel()
                self._drop(self._fd_rules, rule)
                continue

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and ((events and not poll_ready) or rule.direction is Direction.OUT):
                # a hangup with nothing to do: this descriptor is finished
                rule.on_cancel()
                self._drop(self._fd_rules, rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and not rule.fd.closed and rule.interest():
                    raise RuntimeError(
                        f'EventLoop: busy wait detected: rule "{self._categories[rule.category_id]}"'
                        " did not read/write fd and is still interested"
                    )
                return Result.SUCCESS

        return Result.SUCCESS