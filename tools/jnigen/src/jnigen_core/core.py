from __future__ import annotations

from ._core_base import *  # noqa: F401,F403
from ._core_types import *  # noqa: F401,F403
from ._core_java import *  # noqa: F401,F403
from ._core_header import *  # noqa: F401,F403
from ._core_correlate import *  # noqa: F401,F403
from ._core_emit import *  # noqa: F401,F403
from ._core_orchestration import *  # noqa: F401,F403
