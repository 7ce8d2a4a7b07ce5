import asyncio
import logging
from asyncio import AbstractEventLoop, Future
from dataclasses import dataclass, field
from threading import Condition, Lock

from ..internal.wakeup import register_loop_future, wake_loop_futures
from .handoff_state import HandoffResolvedError, HandoffState


logger = logging.getLogger('syncbridge')


@dataclass(slots=True)
class BlockingHandoff[T]:
  """
  A thread-safe, non-cancellable, one-shot transfer of a single value from a
  producer to a consumer.

  The producer, typically a completion callback running on another thread or
  on an event loop, calls `write()`. The consumer blocks in `read()` until the
  value is available. There is no timeout: reading a handoff that is never
  written blocks forever. For a cancellable version see
  `CancellableBlockingHandoff`.
  """

  _condition: Condition = field(default_factory=(lambda: Condition(Lock())), init=False, repr=False)
  _futures: dict[AbstractEventLoop, Future[None]] = field(default_factory=dict, init=False, repr=False)
  _state: HandoffState[T] = field(default_factory=HandoffState.new_pending, init=False)

  def done(self):
    """
    Return whether a value has been written, without blocking.
    """

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

    Raises
    ------
    HandoffResolvedError
      If a value was already written.
    """

    with self._condition:
      if self._state.done():
        raise HandoffResolvedError("A value was already written to this handoff")

      # The value is stored before anyone is notified
      self._state = HandoffState.new_written(value)

      self._condition.notify_all()
      wake_loop_futures(self._futures)

    logger.debug("Handoff %#x written", id(self))

  def read(self) -> T:
    """
    Block the current thread until a value is written.

    This method should not be called from a running event loop; await the
    handoff instead.

    Returns
    -------
    T
      The written value. Subsequent calls return the same value immediately.
    """

    with self._condition:
      self._condition.wait_for(lambda: self._state.done())
      return self._state.value # type: ignore

  def __await__(self):
    """
    Wait until a value is written, without blocking the event loop.
    """

    return self._read_async().__await__()

  async def _read_async(self) -> T:
    loop = asyncio.get_running_loop()

    with self._condition:
      if self._state.done():
        return self._state.value # type: ignore

      future = register_loop_future(self._futures, loop)

    # Shielded so that cancelling one waiter leaves the others on this loop
    await asyncio.shield(future)

    with self._condition:
      return self._state.value # type: ignore


__all__ = [
  'BlockingHandoff',
]
