from dataclasses import dataclass
from typing import Literal, Optional


class HandoffResolvedError(RuntimeError):
  """
  Raised when a value is written to a handoff that already holds one.
  """


@dataclass(frozen=True, kw_only=True, slots=True)
class HandoffState[T]:
  """
  A primitive for storing the outcome of a single handoff cycle.
  """

  status: Literal["cancelled", "pending", "timed_out", "written"]
  value: Optional[T] = None

  def done(self):
    return self.status != "pending"

  def unwrap(self):
    """
    Return the delivered value, if any.

    Returns
    -------
    Optional[T]
      The written value, or `None` if the handoff was cancelled or timed out.

    Raises
    ------
    RuntimeError
      If the status is `"pending"`.
    """

    match self.status:
      case "cancelled" | "timed_out":
        return None
      case "pending":
        raise RuntimeError("Handoff is still pending")
      case "written":
        return self.value

  @classmethod
  def new_cancelled(cls):
    return cls(status="cancelled")

  @classmethod
  def new_pending(cls):
    return cls(status="pending")

  @classmethod
  def new_timed_out(cls):
    return cls(status="timed_out")

  @classmethod
  def new_written(cls, value: T, /):
    return cls(status="written", value=value)


__all__ = [
  'HandoffResolvedError',
  'HandoffState',
]
