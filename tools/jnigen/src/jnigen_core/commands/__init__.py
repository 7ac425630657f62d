from .generation import command_generate, command_generate_file
from .inspection import command_parse
from .targets import command_list_targets, command_validate_config

__all__ = [
    "command_generate",
    "command_generate_file",
    "command_list_targets",
    "command_parse",
    "command_validate_config",
]
