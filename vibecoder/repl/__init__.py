"""Interactive terminal front end."""

from .session import TutorREPL, render_preview
from .commands import COMMANDS, get_command_help

__all__ = ['TutorREPL', 'render_preview', 'COMMANDS', 'get_command_help']
