from .core import *  # noqa: F401,F403
from .commands import (
    command_generate,
    command_generate_file,
    command_list_targets,
    command_parse,
    command_validate_config,
)
