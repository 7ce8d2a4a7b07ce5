from collections.abc import Callable
from typing import Any, Optional

from .cancellable_handoff import CancellableBlockingHandoff
from .handoff import BlockingHandoff


type CompletionCallback[T] = Callable[[T], Any]


def wait_for_callback[T](func: Callable[..., Any], /, *args: Any, **kwargs: Any) -> T:
  """
  Call a function which delivers its result through a completion callback and
  block until that callback fires.

  The callback is passed to `func` as its last positional argument, after
  `args`. It may be invoked from any thread, but must not be invoked more than
  once.

  Parameters
  ----------
  func
    The function to call.
  *args
    Positional arguments to pass to the function before the callback.
  **kwargs
    Keyword arguments to pass to the function.

  Returns
  -------
  T
    The value the callback was invoked with.
  """

  handoff = BlockingHandoff[T]()
  callback: CompletionCallback[T] = handoff.write

  func(*args, callback, **kwargs)
  return handoff.read()


def wait_for_callback_cancellable[T](
  func: Callable[..., Any],
  /,
  *args: Any,
  timeout: Optional[float] = None,
  **kwargs: Any,
) -> Optional[T]:
  """
  Call a function which delivers its result through a completion callback and
  block until that callback fires or the timeout elapses.

  A callback firing after the timeout is ignored.

  Parameters
  ----------
  func
    The function to call.
  *args
    Positional arguments to pass to the function before the callback.
  timeout
    The maximum number of seconds to wait for, or `None` to wait without bound.
  **kwargs
    Keyword arguments to pass to the function.

  Returns
  -------
  Optional[T]
    The value the callback was invoked with, or `None` on timeout.
  """

  handoff = CancellableBlockingHandoff[T](timeout)
  callback: CompletionCallback[T] = handoff.write

  func(*args, callback, **kwargs)
  return handoff.read()


__all__ = [
  'CompletionCallback',
  'wait_for_callback',
  'wait_for_callback_cancellable',
]
