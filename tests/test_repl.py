#!/usr/bin/env python3
"""
Tests for the REPL command dispatch.
"""

import io
from unittest.mock import patch

import pytest
from rich.console import Console

from vibecoder.repl import TutorREPL, get_command_help, COMMANDS

from conftest import execution, judgement


@pytest.fixture
def repl(engine, tmp_path):
    console = Console(file=io.StringIO(), width=120, color_system=None)
    with patch('vibecoder.repl.session.PromptSession'), \
         patch('vibecoder.repl.session.get_config_dir', return_value=tmp_path):
        yield TutorREPL(engine, console=console)


def output(repl) -> str:
    return repl.console.file.getvalue()


class TestCommandHelp:

    def test_all_commands_listed(self):
        """Grouped help lists the main commands"""
        text = get_command_help()
        for command in ('levels', 'play', 'run', 'preview', 'finish', 'lang'):
            assert command in text

    def test_single_command(self):
        """Help for one command shows its usage"""
        assert COMMANDS['play']['usage'] in get_command_help('play')


class TestTutorREPL:

    @pytest.mark.asyncio
    async def test_exit(self, repl):
        """exit and quit end the loop"""
        assert await repl._process_command('exit') == 'exit'
        assert await repl._process_command('QUIT') == 'exit'

    @pytest.mark.asyncio
    async def test_play_prints_greeting(self, repl):
        """play starts the level and prints the greeting"""
        await repl._process_command('play 1')

        assert repl.engine.is_active()
        assert 'Do thing 1' in output(repl)
        assert repl._get_prompt() == 'vibecoder [L1] (Step 1/2)> '

    @pytest.mark.asyncio
    async def test_locked_level_message(self, repl):
        """Locked levels print the localized lock message"""
        await repl._process_command('play 2')

        assert not repl.engine.is_active()
        assert 'Level 2 is locked' in output(repl)

    @pytest.mark.asyncio
    async def test_free_text_goes_to_tutor(self, repl, fake_llm):
        """Free text while playing is judged by the tutor"""
        await repl._process_command('play 1')
        fake_llm.script(judgement(True, message='Here you go!', code='thing_1()'))

        await repl._process_command('please do thing one')

        assert fake_llm.requests[0].turns[-1].text == 'please do thing one'
        assert 'Here you go!' in output(repl)
        assert "Type 'run'" in repl._get_toolbar()

    @pytest.mark.asyncio
    async def test_free_text_without_level(self, repl, fake_llm):
        """Free text at the map is an unknown command"""
        await repl._process_command('draw a cat')

        assert fake_llm.requests == []
        assert 'Unknown command' in output(repl)

    @pytest.mark.asyncio
    async def test_run_shows_console_and_screen(self, repl, fake_llm):
        """run prints the console and the updated screen"""
        await repl._process_command('play 1')
        repl.engine.set_code('thing_1()')
        fake_llm.script(execution(commands=[{'type': 'fill', 'color': '#0000FF'}]))

        await repl._process_command('run')

        text = output(repl)
        assert 'Process finished with exit code 0.' in text
        assert 'Screen updated!' in text

    @pytest.mark.asyncio
    async def test_preview_saves_png(self, repl, tmp_path):
        """preview with a path writes a PNG"""
        await repl._process_command('play 1')
        path = tmp_path / 'screen.png'

        await repl._process_command(f'preview {path}')

        assert path.exists()
        assert 'OS not loaded' in output(repl)

    @pytest.mark.asyncio
    async def test_lang_switch(self, repl, tmp_path):
        """lang switches engine, placeholder and saved preference"""
        with patch('vibecoder.repl.session.set_config_value') as set_value:
            await repl._process_command('lang zh')

        set_value.assert_called_once_with('language', 'zh')
        assert repl.engine.language == 'zh'
        assert repl.renderer.placeholder_text == '系统未加载'
