#!/usr/bin/env python3
"""
VibeCoder - Learn Python by prompting an AI tutor

Usage:
    vibecoder                     # Start the tutor
    vibecoder --setup             # Configure API key (first time)
    vibecoder --levels            # Show the level map
    vibecoder --lang zh           # Play in Simplified Chinese
"""

import sys
import asyncio
import argparse
import logging

from rich.console import Console
from rich.logging import RichHandler

from .config import (
    DEFAULT_LANGUAGE,
    SUPPORTED_LANGUAGES,
    get_config_value,
    load_settings,
)
from .curriculum import get_levels, get_worlds
from .errors import ConfigurationError
from .llm import WIRE_FORMATS, create_llm_client, select_wire_format


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
    )
    # Keep library chatter out of the tutor's way
    for name in ('httpx', 'httpcore', 'openai'):
        logging.getLogger(name).setLevel(logging.WARNING)


def print_levels(lang: str) -> None:
    """Print the curriculum, world by world"""
    from .tutoring import LevelProgress

    progress = LevelProgress()
    levels = get_levels(lang)
    for world in get_worlds(lang):
        print(f"\n{world.title}")
        print("=" * 60)
        for level in levels:
            if level.world_id == world.id:
                lock = "" if progress.is_unlocked(level.id) else "  [locked]"
                print(f"  {level.id:3}. {level.title} ({level.step_count} steps){lock}")


async def run_tutor(settings) -> None:
    from .repl import TutorREPL
    from .tutoring import TutoringEngine

    async with create_llm_client(settings) as llm:
        engine = TutoringEngine(llm, model=settings.model, language=settings.language)
        repl = TutorREPL(engine)
        await repl.run()


def main():
    """Main CLI entry point"""

    parser = argparse.ArgumentParser(
        description='VibeCoder - Learn Python by prompting an AI tutor',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  vibecoder --setup                                   # Configure API key (first time)
  vibecoder                                           # Start the tutor
  vibecoder --lang zh                                 # Play in Simplified Chinese
  vibecoder --base-url https://hub.example.com        # Use an OpenAI-compatible hub
  vibecoder --levels                                  # Show the level map
        """
    )

    parser.add_argument('--setup', action='store_true',
                        help='Configure VibeCoder (set API key and optional hub address)')
    parser.add_argument('--clear-key', action='store_true',
                        help='Remove the stored API key')
    parser.add_argument('--levels', action='store_true',
                        help='List all levels and exit')
    parser.add_argument('--lang', choices=list(SUPPORTED_LANGUAGES),
                        help='Tutor language (default: from config, else en)')
    parser.add_argument('--base-url', metavar='URL',
                        help='OpenAI-compatible service address (switches to compatible mode)')
    parser.add_argument('--model', help='Model name')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show debug logging')

    args = parser.parse_args()
    setup_logging(args.verbose)

    # Setup mode
    if args.setup:
        from .config import prompt_for_api_key, load_config
        print("VibeCoder Setup")
        print("=" * 40)
        config = load_config()
        if config.get('api_key'):
            print(f"\nCurrent API key: ...{config['api_key'][-6:]}")
            if config.get('base_url'):
                print(f"Current base URL: {config['base_url']}")
            replace = input("Replace with new key? [y/N]: ").strip().lower()
            if replace != 'y':
                print("Setup complete.")
                return
        prompt_for_api_key()
        return

    if args.clear_key:
        from .config import clear_api_key
        clear_api_key()
        return

    if args.levels:
        print_levels(args.lang or get_config_value('language', DEFAULT_LANGUAGE))
        return

    console = Console()
    try:
        settings = load_settings(base_url=args.base_url, model=args.model, language=args.lang)
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    wire_format = WIRE_FORMATS[select_wire_format(settings)]
    console.print(f"[dim]Using {wire_format['display_name']} ({settings.model})[/dim]")

    try:
        asyncio.run(run_tutor(settings))
    except KeyboardInterrupt:
        console.print("\n[dim]Bye![/dim]")


if __name__ == "__main__":
    main()
