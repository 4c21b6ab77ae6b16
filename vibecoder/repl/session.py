#!/usr/bin/env python3
"""
Interactive REPL session for the coding tutor.
"""

import inspect
import os
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.markdown import Markdown
from rich.syntax import Syntax
from rich.style import Style
from rich.text import Text

from ..assist import CodeAssistCompleter
from ..canvas import CanvasRenderer, Frame, UpdateFlash
from ..config import SUPPORTED_LANGUAGES, get_config_dir, set_config_value
from ..curriculum import get_worlds
from ..errors import LevelLockedError, UnknownLevelError
from ..i18n import BOT_NAME, t
from ..tutoring import GuideFocus, SessionSnapshot, TutoringEngine
from .commands import get_command_help

PREVIEW_COLUMNS = 48

_FOCUS_KEYS = {
    GuideFocus.AWAITING_INPUT: 'focus_input',
    GuideFocus.AWAITING_EXECUTION: 'focus_run',
    GuideFocus.AWAITING_FINISH: 'focus_finish',
}


def render_preview(frame: Frame, columns: int = PREVIEW_COLUMNS) -> Text:
    """Downscale a frame into half-block characters (two pixel rows per line)"""
    rows = max(2, columns * frame.height // frame.width)
    rows += rows % 2
    image = frame.to_image().resize((columns, rows))

    text = Text()
    for y in range(0, rows, 2):
        for x in range(columns):
            top = image.getpixel((x, y))
            bottom = image.getpixel((x, y + 1))
            text.append('▀', style=Style(
                color='#{:02x}{:02x}{:02x}'.format(*top[:3]),
                bgcolor='#{:02x}{:02x}{:02x}'.format(*bottom[:3]),
            ))
        if y + 2 < rows:
            text.append('\n')
    return text


class TutorREPL:
    """Interactive REPL for vibe-coding missions"""

    def __init__(self, engine: TutoringEngine, console: Optional[Console] = None):
        self.console = console or Console()
        self.engine = engine
        self.renderer = CanvasRenderer(placeholder_text=t('os_not_loaded', engine.language))
        self.flash = UpdateFlash()

        # Highest chat message id already printed
        self._last_message_id = 0
        self._unsubscribe = engine.subscribe(self._on_update)

        # REPL setup
        history_path = get_config_dir() / 'repl_history'
        history_path.parent.mkdir(parents=True, exist_ok=True)
        self.prompt_session = PromptSession(
            history=FileHistory(str(history_path)),
            auto_suggest=AutoSuggestFromHistory(),
        )

    @property
    def lang(self) -> str:
        return self.engine.language

    async def run(self):
        """Main REPL loop"""
        self._print_welcome()

        with patch_stdout():
            while True:
                try:
                    user_input = await self.prompt_session.prompt_async(
                        self._get_prompt(),
                        bottom_toolbar=self._get_toolbar,
                    )

                    if not user_input.strip():
                        continue

                    result = await self._process_command(user_input.strip())

                    if result == 'exit':
                        self._handle_exit()
                        break

                except KeyboardInterrupt:
                    self.console.print("\n[dim]Use 'exit' to quit[/dim]")
                except EOFError:
                    self._handle_exit()
                    break
                except Exception as e:
                    self.console.print(f"[red]Error: {e}[/red]")

    def _print_welcome(self):
        """Print welcome message"""
        welcome = f"""
[bold magenta]VibeCoder[/bold magenta] - Learn Python by talking to {BOT_NAME}

Describe what you want, let {BOT_NAME} write the code, then run it.

[dim]Commands: levels, play, run, preview, hint, help
Type 'help' for all commands or 'help <cmd>' for details.[/dim]
"""
        self.console.print(Panel(welcome, border_style="magenta"))

    def _get_prompt(self) -> str:
        """Generate context-aware prompt"""
        parts = ['vibecoder']

        snapshot = self.engine.snapshot()
        if snapshot:
            parts.append(f"[L{snapshot.level_id}]")
            parts.append(f"({t('step', self.lang)} {snapshot.step_index + 1}/{snapshot.step_count})")

        return ' '.join(parts) + '> '

    def _get_toolbar(self) -> str:
        snapshot = self.engine.snapshot()
        if snapshot is None:
            return " levels | play <id> | help"
        focus = t(_FOCUS_KEYS[snapshot.guide_focus], self.lang, bot=BOT_NAME)
        return f" {snapshot.level_title} | {focus}"

    async def _process_command(self, user_input: str) -> Optional[str]:
        """Process user input and dispatch to handlers"""
        parts = user_input.split(maxsplit=1)
        command = parts[0].lower()
        args = parts[1] if len(parts) > 1 else ''

        handlers = {
            'levels': self._cmd_levels,
            'play': self._cmd_play,
            'menu': self._cmd_menu,
            'hint': self._cmd_hint,
            'code': self._cmd_code,
            'edit': self._cmd_edit,
            'run': self._cmd_run,
            'preview': self._cmd_preview,
            'status': self._cmd_status,
            'finish': self._cmd_finish,
            'lang': self._cmd_lang,
            'help': self._cmd_help,
            'clear': self._cmd_clear,
            'exit': lambda _: 'exit',
            'quit': lambda _: 'exit',
        }

        handler = handlers.get(command)
        if handler:
            result = handler(args)
            if inspect.isawaitable(result):
                result = await result
            return result

        # Anything else is a prompt for the tutor
        if self.engine.is_active():
            return await self._cmd_say(user_input)

        self.console.print(f"[red]Unknown command: {command}[/red]")
        self.console.print("[dim]Pick a level with 'play <id>' to start chatting with the tutor.[/dim]")
        return None

    # === Engine updates ===

    def _on_update(self, snapshot: Optional[SessionSnapshot]) -> None:
        if snapshot is None:
            self.flash.observe(0)
            return

        self.flash.observe(len(snapshot.batches))
        for message in snapshot.messages:
            if message.id <= self._last_message_id:
                continue
            self._last_message_id = message.id
            if message.role == 'model':
                self._print_tutor_message(message.text, message.code, message.is_correct)

    def _print_tutor_message(self, text: str, code: Optional[str], is_correct: Optional[bool]) -> None:
        border = {True: "green", False: "yellow"}.get(is_correct, "magenta")
        self.console.print(Panel(Markdown(text), title=BOT_NAME, border_style=border))
        if code:
            self.console.print(Syntax(code, "python", theme="monokai", line_numbers=False))

    # === Command Handlers ===

    async def _cmd_say(self, text: str) -> None:
        """Send a prompt to the tutor"""
        snapshot = self.engine.snapshot()
        if snapshot and snapshot.finished:
            self.console.print(f"[yellow]{t('focus_finish', self.lang)}[/yellow]")
            return
        if snapshot and snapshot.is_judging:
            self.console.print("[dim]Still waiting for the last answer...[/dim]")
            return

        self.console.print(f"[dim]{BOT_NAME} is thinking...[/dim]")
        await self.engine.submit_prompt(text)

    def _cmd_levels(self, args: str) -> None:
        """Show the level map"""
        levels = self.engine.levels()
        progress = self.engine.progress

        for world in get_worlds(self.lang):
            table = Table(title=world.title, title_style=f"bold {world.theme_color}")
            table.add_column("ID", style="cyan", justify="right")
            table.add_column("Level")
            table.add_column("Steps", justify="right")
            table.add_column("Stars")

            for level in levels:
                if level.world_id != world.id:
                    continue
                if progress.is_unlocked(level.id):
                    stars = progress.stars.get(level.id, 0)
                    star_text = '⭐' * stars if stars else '[dim]-[/dim]'
                    table.add_row(str(level.id), level.title, str(level.step_count), star_text)
                else:
                    table.add_row(str(level.id), f"[dim]{level.title}[/dim]", str(level.step_count), '🔒')

            self.console.print(table)

        self.console.print(f"\n[dim]Total stars: {progress.total_stars()}[/dim]")

    def _cmd_play(self, args: str) -> None:
        """Start a level"""
        if not args.strip().isdigit():
            self.console.print("[red]Usage: play <level_id>[/red]")
            return

        level_id = int(args.strip())
        try:
            self.engine.select_level(level_id)
        except UnknownLevelError:
            self.console.print(f"[red]Level not found: {level_id}[/red]")
            self.console.print("[dim]Use 'levels' to see the map[/dim]")
        except LevelLockedError:
            self.console.print(
                f"[yellow]{t('level_locked', self.lang, level=level_id, previous=level_id - 1)}[/yellow]"
            )

    def _cmd_menu(self, args: str) -> None:
        """Back to the map"""
        if not self.engine.is_active():
            self.console.print("[yellow]Already at the map.[/yellow]")
            return
        self.engine.return_to_menu()
        self.console.print("[dim]Back at the map. Progress kept.[/dim]")

    def _cmd_hint(self, args: str) -> None:
        """Show hint for the current step"""
        hint = self.engine.current_hint()
        if hint is None:
            self.console.print("[yellow]No level in progress. Use 'play <id>'.[/yellow]")
            return
        self.console.print(f"[cyan]💡 {t('hint', self.lang)}:[/cyan] {hint}")

    def _cmd_code(self, args: str) -> None:
        """Show the code buffer"""
        snapshot = self.engine.snapshot()
        if snapshot is None:
            self.console.print("[yellow]No level in progress. Use 'play <id>'.[/yellow]")
            return
        if not snapshot.code.strip():
            self.console.print("[dim]No code yet. Ask the tutor for some![/dim]")
            return
        self.console.print(Panel(
            Syntax(snapshot.code, "python", theme="monokai", line_numbers=True),
            title="main.py",
            border_style="blue",
        ))

    async def _cmd_edit(self, args: str) -> None:
        """Edit the code buffer with completion"""
        snapshot = self.engine.snapshot()
        if snapshot is None:
            self.console.print("[yellow]No level in progress. Use 'play <id>'.[/yellow]")
            return

        self.console.print("[dim]Editing main.py - Esc+Enter to save, Ctrl+C to cancel, Tab to complete[/dim]")
        editor = PromptSession(multiline=True, completer=CodeAssistCompleter(), complete_while_typing=True)
        try:
            code = await editor.prompt_async('... ', default=snapshot.code)
        except KeyboardInterrupt:
            self.console.print("[dim]Edit cancelled.[/dim]")
            return

        self.engine.set_code(code)
        self.console.print("[green]Code saved.[/green]")

    async def _cmd_run(self, args: str) -> None:
        """Run the code buffer"""
        snapshot = self.engine.snapshot()
        if snapshot is None:
            self.console.print("[yellow]No level in progress. Use 'play <id>'.[/yellow]")
            return
        if snapshot.is_running:
            self.console.print("[dim]Already running...[/dim]")
            return
        if snapshot.finished:
            self.console.print(f"[yellow]{t('focus_finish', self.lang)}[/yellow]")
            return
        if not snapshot.code.strip():
            self.console.print("[dim]No code to run yet.[/dim]")
            return

        self.console.print(f"[dim]{t('running', self.lang)}[/dim]")
        result = await self.engine.run_code()

        snapshot = self.engine.snapshot()
        if snapshot is None:
            return

        style = "green" if result is not None and result.is_success else "red"
        self.console.print(Panel(snapshot.console_output, title="Console", border_style=style))

        if self.flash.just_updated():
            self._show_preview(snapshot)

    def _cmd_preview(self, args: str) -> None:
        """Show (and optionally save) the game screen"""
        snapshot = self.engine.snapshot()
        if snapshot is None:
            self.console.print("[yellow]No level in progress. Use 'play <id>'.[/yellow]")
            return

        frame = self._show_preview(snapshot)
        path = args.strip()
        if path:
            frame.save(path)
            self.console.print(f"[green]Saved screen to {path}[/green]")

    def _show_preview(self, snapshot: SessionSnapshot) -> Frame:
        frame = self.renderer.render(snapshot.batches)
        updated = self.flash.just_updated()
        title = t('screen_updated', self.lang) if updated else "Game window"
        subtitle = frame.placeholder if frame.is_placeholder else None
        self.console.print(Panel.fit(
            render_preview(frame),
            title=title,
            subtitle=subtitle,
            border_style="green" if updated else "bright_black",
        ))
        return frame

    def _cmd_status(self, args: str) -> None:
        """Show current level status"""
        snapshot = self.engine.snapshot()
        if snapshot is None:
            self.console.print("[yellow]No level in progress. Use 'play <id>'.[/yellow]")
            self.console.print(f"[dim]Total stars: {self.engine.progress.total_stars()}[/dim]")
            return

        self.console.print(f"\n[bold]Level {snapshot.level_id}: {snapshot.level_title}[/bold]")
        self.console.print(f"  {t('step', self.lang)}: {snapshot.step_index + 1}/{snapshot.step_count}")
        self.console.print(f"  Mission: {snapshot.instruction}")
        self.console.print(f"  Next: {t(_FOCUS_KEYS[snapshot.guide_focus], self.lang, bot=BOT_NAME)}")
        self.console.print(f"  Screens drawn: {len(snapshot.batches)}")
        self.console.print(f"  Total stars: {self.engine.progress.total_stars()}")

    def _cmd_finish(self, args: str) -> None:
        """Collect stars for a finished level"""
        snapshot = self.engine.snapshot()
        if snapshot is None:
            self.console.print("[yellow]No level in progress. Use 'play <id>'.[/yellow]")
            return

        stars = self.engine.finish_level()
        if stars is None:
            self.console.print(
                f"[yellow]Not yet! You're on {t('step', self.lang).lower()} "
                f"{snapshot.step_index + 1}/{snapshot.step_count}.[/yellow]"
            )
            return

        self.console.print(Panel(
            f"[bold]{t('mission_accomplished', self.lang)}[/bold]\n\n{'⭐' * stars}",
            border_style="yellow",
        ))
        self.console.print("[dim]Use 'levels' to pick the next one.[/dim]")

    def _cmd_lang(self, args: str) -> None:
        """Switch language"""
        lang = args.strip().lower()
        if lang not in SUPPORTED_LANGUAGES:
            self.console.print(f"[red]Usage: lang <{'|'.join(SUPPORTED_LANGUAGES)}>[/red]")
            return

        self.engine.set_language(lang)
        self.renderer.placeholder_text = t('os_not_loaded', lang)
        set_config_value('language', lang)
        self.console.print(f"[green]Language set to {lang}.[/green]")
        if self.engine.is_active():
            self.console.print("[dim]Level text switches when you next pick a level.[/dim]")

    def _cmd_help(self, args: str) -> None:
        """Show help"""
        self.console.print(get_command_help(args if args else None))

    def _cmd_clear(self, args: str) -> None:
        """Clear screen"""
        os.system('clear' if os.name != 'nt' else 'cls')

    def _handle_exit(self):
        """Handle exit"""
        self.engine.return_to_menu()
        self._unsubscribe()
        self.console.print(f"[dim]Stars collected: {self.engine.progress.total_stars()}. Bye![/dim]")
