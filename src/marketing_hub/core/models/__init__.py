"""Domain models for the agent client.

Re-exports every public symbol so imports like
``from marketing_hub.core.models import ChunkEvent`` keep working.
"""

from .constants import *  # noqa: F401, F403
from .events import *  # noqa: F401, F403
from .requests import *  # noqa: F401, F403
