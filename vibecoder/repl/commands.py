#!/usr/bin/env python3
"""
Command definitions for the tutor REPL.
"""

COMMANDS = {
    # Map
    'levels': {
        'help': 'Show the level map with locks and stars',
        'usage': 'levels',
        'examples': ['levels'],
    },
    'play': {
        'help': 'Start a level',
        'usage': 'play <level_id>',
        'examples': ['play 1', 'play 11'],
    },
    'menu': {
        'help': 'Leave the current level and go back to the map',
        'usage': 'menu',
        'examples': ['menu'],
    },

    # Playing
    'hint': {
        'help': 'Show the hint for the current step',
        'usage': 'hint',
        'examples': ['hint'],
    },
    'code': {
        'help': 'Show the code written so far',
        'usage': 'code',
        'examples': ['code'],
    },
    'edit': {
        'help': 'Edit the code yourself (Esc+Enter to save, Tab for suggestions)',
        'usage': 'edit',
        'examples': ['edit'],
    },
    'run': {
        'help': 'Run the code and see what happens',
        'usage': 'run',
        'examples': ['run'],
    },
    'preview': {
        'help': 'Show the game screen, optionally saving it as a PNG',
        'usage': 'preview [path]',
        'examples': ['preview', 'preview screen.png'],
    },
    'status': {
        'help': 'Show level, step and stars',
        'usage': 'status',
        'examples': ['status'],
    },
    'finish': {
        'help': 'Collect your stars after the last step',
        'usage': 'finish',
        'examples': ['finish'],
    },

    # Utilities
    'lang': {
        'help': 'Switch language (en/zh)',
        'usage': 'lang <en|zh>',
        'examples': ['lang zh', 'lang en'],
    },
    'help': {
        'help': 'Show available commands',
        'usage': 'help [command]',
        'examples': ['help', 'help run'],
    },
    'clear': {
        'help': 'Clear the screen',
        'usage': 'clear',
        'examples': ['clear'],
    },
    'exit': {
        'help': 'Exit VibeCoder',
        'usage': 'exit',
        'examples': ['exit', 'quit'],
    },
    'quit': {
        'help': 'Exit VibeCoder (alias for exit)',
        'usage': 'quit',
        'examples': ['quit'],
    },
}


def get_command_help(command: str = None) -> str:
    """Get help text for a command or all commands"""
    if command and command in COMMANDS:
        cmd = COMMANDS[command]
        lines = [
            f"  {command}: {cmd['help']}",
            f"  Usage: {cmd['usage']}",
        ]
        if cmd.get('examples'):
            lines.append(f"  Examples: {', '.join(cmd['examples'])}")
        return '\n'.join(lines)

    # Show all commands grouped
    groups = {
        'Map': ['levels', 'play', 'menu'],
        'Playing': ['hint', 'code', 'edit', 'run', 'preview', 'status', 'finish'],
        'Utilities': ['lang', 'help', 'clear', 'exit'],
    }

    lines = ["Available commands:\n"]
    for group, cmds in groups.items():
        lines.append(f"  {group}:")
        for cmd in cmds:
            if cmd in COMMANDS:
                lines.append(f"    {cmd:12} - {COMMANDS[cmd]['help']}")
        lines.append("")

    lines.append("While playing, anything else you type goes to the tutor.")
    lines.append("Type 'help <command>' for detailed help on a specific command.")
    return '\n'.join(lines)
