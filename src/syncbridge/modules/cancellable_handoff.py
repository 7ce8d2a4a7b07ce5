import asyncio
import logging
import math
import threading
from asyncio import AbstractEventLoop, Future
from threading import Condition, Lock
from typing import Optional

from ..internal.wakeup import register_loop_future, wake_loop_futures
from .handoff_state import HandoffResolvedError, HandoffState


logger = logging.getLogger('syncbridge')


class CancellableBlockingHandoff[T]:
  """
  A thread-safe, one-shot transfer of a single value from a producer to a
  consumer, which can be cancelled or time out.

  The handoff starts pending and is resolved by whichever of `write()`,
  `cancel()` or the timeout comes first. Resolution is final: a write arriving
  after a cancellation or a timeout is ignored, which lets a producer that
  cannot be interrupted finish its work harmlessly in the background.

  Reading returns `None` for both cancellation and timeout. Use `read_state()`
  to tell them apart. For a simpler, non-cancellable version see
  `BlockingHandoff`.

  Parameters
  ----------
  timeout
    The maximum number of seconds a read waits for, counted from the start of
    each read. `None` waits without bound.
  """

  __slots__ = ('_condition', '_futures', '_state', '_timeout')

  def __init__(self, timeout: Optional[float] = None):
    if timeout is not None:
      if math.isnan(timeout) or (timeout < 0):
        raise ValueError(f"Timeout must be a non-negative number, got {timeout!r}")

      # Longer waits are not supported by the threading module, infinity
      # included
      if timeout > threading.TIMEOUT_MAX:
        timeout = None

    self._condition = Condition(Lock())
    self._futures: dict[AbstractEventLoop, Future[None]] = {}
    self._state: HandoffState[T] = HandoffState.new_pending()
    self._timeout = timeout

  def __repr__(self):
    return f"{self.__class__.__name__}(timeout={self._timeout!r}, _state={self._state!r})"

  @property
  def timeout(self):
    """
    The maximum number of seconds a read waits for, or `None` if unbounded.
    """

    return self._timeout

  def done(self):
    with self._condition:
      return self._state.done()

  def write(self, value: T, /):
    """
    Store the value and wake up the consumer.

    This method never blocks and may be called from any thread.

    Parameters
    ----------
    value
      The value to hand off.

    Returns
    -------
    bool
      `True` if the value was accepted, `False` if the handoff had already been
      cancelled or had timed out, in which case the value is discarded.

    Raises
    ------
    HandoffResolvedError
      If a value was already written.
    """

    with self._condition:
      match self._state.status:
        case "cancelled" | "timed_out":
          logger.debug("Ignoring write to %s handoff %#x", self._state.status, id(self))
          return False
        case "written":
          raise HandoffResolvedError("A value was already written to this handoff")

      self._resolve(HandoffState.new_written(value))

    logger.debug("Handoff %#x written", id(self))
    return True

  def cancel(self):
    """
    Wake up the consumer without a value.

    The stored value is left untouched: cancelling a handoff that was already
    written, cancelled or timed out, including one whose read has already
    returned, has no effect.

    Returns
    -------
    bool
      `True` if this call resolved the handoff.
    """

    with self._condition:
      if self._state.done():
        return False

      self._resolve(HandoffState.new_cancelled())

    logger.debug("Handoff %#x cancelled", id(self))
    return True

  def read(self) -> Optional[T]:
    """
    Block the current thread until the handoff is written, cancelled or times
    out.

    Returns
    -------
    Optional[T]
      The written value, or `None` if the handoff was cancelled or timed out.
    """

    return self.read_state().unwrap()

  def read_state(self) -> HandoffState[T]:
    """
    Block like `read()` but return the full outcome.

    Returns
    -------
    HandoffState[T]
      A resolved state whose status is `"written"`, `"cancelled"` or
      `"timed_out"`.
    """

    with self._condition:
      if not self._condition.wait_for(lambda: self._state.done(), self._timeout):
        self._resolve_timed_out()

      return self._state

  def __await__(self):
    """
    Wait until the handoff is resolved, without blocking the event loop.

    The configured timeout applies. The result is the same as that of `read()`.
    """

    return self._read_async().__await__()

  async def _read_async(self) -> Optional[T]:
    return (await self._read_state_async()).unwrap()

  async def _read_state_async(self) -> HandoffState[T]:
    loop = asyncio.get_running_loop()

    with self._condition:
      if self._state.done():
        return self._state

      future = register_loop_future(self._futures, loop)

    try:
      await asyncio.wait_for(asyncio.shield(future), self._timeout)
    except TimeoutError:
      with self._condition:
        if not self._state.done():
          self._resolve_timed_out()

    with self._condition:
      return self._state

  def _resolve(self, state: HandoffState[T], /):
    # Must be called with the condition held; the state is stored before
    # anyone is notified
    self._state = state

    self._condition.notify_all()
    wake_loop_futures(self._futures)

  def _resolve_timed_out(self):
    self._resolve(HandoffState.new_timed_out())
    logger.debug("Handoff %#x timed out after %s seconds", id(self), self._timeout)


__all__ = [
  'CancellableBlockingHandoff',
]
