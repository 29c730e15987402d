#!/usr/bin/env python3
"""Daily Word Drill - interactive terminal session."""

import argparse
import asyncio
import logging
import sys

import config
from drill.errors import ConfigurationError, PreconditionViolation
from drill.gemini_client import create_provider
from drill.logger import GEMINI_LOGGER, setup_logger
from drill.models import ControllerStatus, DifficultyTier
from drill.scoring import PERFECT_SCORE, accuracy_label
from drill.session import SessionController

HELP_TEXT = """Commands:
  (enter)            show the current batch
  t N                cover/uncover example N and practice it
  w N <sentence>     write your attempt for example N
  f N                ask why attempt N differs from the example
  r                  recommend a new word at the current level
  word <text>        study a word of your own
  level <name>       switch level ({levels})
  help               show this help
  q                  quit"""


def render(controller: SessionController) -> str:
    """Format the session as plain text."""
    state = controller.state
    lines = [f"[{state.difficulty.value} / {state.difficulty.label}]"]

    if not controller.provider_available:
        lines.append("AI network unavailable")
    if controller.status is ControllerStatus.LOADING:
        lines.append("Loading...")
        return "\n".join(lines)

    lines.append(state.current_word.lower() or "Ready")
    if state.batch is None:
        return "\n".join(lines)

    for i, example in enumerate(state.batch.slots):
        slot = state.per_slot[i]
        lines.append("")
        lines.append(f"EX {i + 1}")
        if slot.revealed:
            lines.append(f"  ✎ {slot.practice_text or '...'}")
        else:
            lines.append(f"  {example.reference}")
            if slot.practice_text:
                score = controller.slot_accuracy(i)
                lines.append(f"  My Practice [{accuracy_label(score)}] \"{slot.practice_text}\"")
                if score < PERFECT_SCORE:
                    if slot.feedback_text:
                        lines.append(f"  💡 {slot.feedback_text}")
                    elif slot.feedback_pending:
                        lines.append("  분석 중...")
        lines.append(f"  {example.translation}")
        lines.append(f"  ({example.context_note}) ({example.grammar_note})")
    return "\n".join(lines)


def parse_slot_index(token: str) -> int:
    """Convert a 1-based slot number from the prompt to an index."""
    index = int(token) - 1
    if not 0 <= index < config.BATCH_SIZE:
        raise ValueError(f"Example number must be 1-{config.BATCH_SIZE}")
    return index


def existing_feedback(controller: SessionController, index: int) -> str | None:
    """Feedback already shown for the slot, if any. The CLI asks only once per slot."""
    feedback = controller.slot(index).feedback_text
    if feedback:
        return f"  💡 {feedback}"
    return None


async def run_session(controller: SessionController, first_word: str | None) -> None:
    background: set[asyncio.Task] = set()

    def spawn(coro) -> None:
        task = asyncio.create_task(coro)
        background.add(task)
        task.add_done_callback(background.discard)

    if first_word:
        spawn(controller.load_manual_word(first_word))
    else:
        spawn(controller.select_word(controller.state.difficulty))

    levels = ", ".join(tier.value for tier in DifficultyTier)
    print(HELP_TEXT.format(levels=levels))

    while True:
        line = (await asyncio.to_thread(input, "> ")).strip()
        command, _, rest = line.partition(" ")
        rest = rest.strip()

        try:
            if command == "":
                print(render(controller))
            elif command in ("q", "quit", "exit"):
                break
            elif command == "help":
                print(HELP_TEXT.format(levels=levels))
            elif command == "t":
                controller.toggle_reveal(parse_slot_index(rest))
                print(render(controller))
            elif command == "w":
                number, _, text = rest.partition(" ")
                controller.set_practice_text(parse_slot_index(number), text)
            elif command == "f":
                index = parse_slot_index(rest)
                existing = existing_feedback(controller, index)
                if existing is not None:
                    print(existing)
                else:
                    spawn(controller.request_feedback(index))
            elif command == "r":
                spawn(controller.select_word(controller.state.difficulty))
            elif command == "word":
                spawn(controller.load_manual_word(rest))
            elif command == "level":
                spawn(controller.select_word(DifficultyTier.parse(rest)))
            else:
                print(f"Unknown command: {command}. Type 'help'.")
        except ValueError as e:
            print(e)
        except PreconditionViolation as e:
            print(f"Not available right now: {e}")

    for task in background:
        task.cancel()


async def amain(args: argparse.Namespace, logger: logging.Logger) -> None:
    try:
        provider = create_provider()
    except ConfigurationError as e:
        logger.error(f"{e}. Set {' or '.join(config.API_KEY_ENV_VARS)} to enable generation.")
        provider = None

    controller = SessionController(
        provider,
        difficulty=DifficultyTier.parse(args.difficulty),
        on_notice=lambda message: print(f"! {message}"),
    )
    try:
        await run_session(controller, args.word)
    finally:
        if provider is not None:
            await provider.aclose()


def main():
    parser = argparse.ArgumentParser(
        description="Daily Word Drill",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start with a recommended Intermediate word
  python main.py

  # Start at a given level
  python main.py --difficulty Advanced

  # Study your own word
  python main.py --word serendipity
        """,
    )

    parser.add_argument(
        "--difficulty",
        default=config.DEFAULT_DIFFICULTY,
        help="Starting level: " + ", ".join(tier.value for tier in DifficultyTier),
    )
    parser.add_argument(
        "--word",
        type=str,
        help="Study this word instead of a recommended one",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Level written to the log file",
    )
    parser.add_argument(
        "--debug-api",
        action="store_true",
        help="Also log Gemini request timings at DEBUG level",
    )

    args = parser.parse_args()

    module_levels = {GEMINI_LOGGER: logging.DEBUG} if args.debug_api else None
    logger = setup_logger(level=getattr(logging, args.log_level), module_levels=module_levels)

    try:
        DifficultyTier.parse(args.difficulty)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        asyncio.run(amain(args, logger))
    except (KeyboardInterrupt, EOFError):
        logger.warning("Session ended by user.")
        sys.exit(1)


if __name__ == "__main__":
    main()
