from .modules.callback import *
from .modules.cancellable_handoff import *
from .modules.handoff import *
from .modules.handoff_state import *
