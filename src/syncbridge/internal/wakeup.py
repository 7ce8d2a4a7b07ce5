from asyncio import AbstractEventLoop, Future


def _set_pending_result(future: Future[None], /):
  # The future may have been cancelled by its loop in the meantime
  if not future.done():
    future.set_result(None)


def register_loop_future(futures: dict[AbstractEventLoop, Future[None]], loop: AbstractEventLoop, /):
  future = futures.get(loop)

  if future is None:
    future = loop.create_future()
    futures[loop] = future

  return future


def wake_loop_futures(futures: dict[AbstractEventLoop, Future[None]], /):
  """
  Resolve every registered future from its own loop, then forget them.

  Must be called with the lock guarding `futures` held.
  """

  for future in futures.values():
    try:
      future.get_loop().call_soon_threadsafe(_set_pending_result, future)
    except RuntimeError:
      # The loop is closed
      pass

  futures.clear()
