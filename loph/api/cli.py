"""
Interactive terminal transport for Loph.

Architectural role:
- Simulates a one-to-one chat transport on stdin/stdout for a single user id.
- Delegates every message to `MessageHandler`, exactly like the HTTP adapter.

Request lifecycle (per input line, see `run_session`):
1. Read stdin.
2. Handle local commands (`exit`/`quit`, `clear chat`, `/doc <path>`).
3. Forward everything else, control tokens included, to `MessageHandler.handle`.
4. Print each reply on its own block.

Error handling strategy:
- EOF and keyboard interrupts terminate the loop without traceback output.
- Document extraction failures are reported and the loop continues.
"""

from dotenv import load_dotenv

load_dotenv()

import argparse
import asyncio
import logging

from loph.api.multimodal.file_input_manager import extract_document_text
from loph.bot.handler import InboundMessage, build_handler


DOC_COMMAND_PREFIX = "/doc "


def _print_replies(replies):
    for reply in replies:
        print(f"\n{reply}")
    print("\n" + "-" * 60 + "\n")


async def run_session(handler, user: str):
    """
    Run the interactive loop on one event loop.

    Interaction with core:
    - Calls `handler.handle(InboundMessage(user, line))` for chat input.
    - Calls `handler.handle_document(user, text)` for `/doc` input.
    """
    print("Loph started. Send /ativar to begin, /ajuda for help, 'exit' to quit.\n")
    print("-" * 60)

    while True:

        try:
            line = (await asyncio.to_thread(input, "> ")).strip()

        except EOFError:
            print()
            break

        except KeyboardInterrupt:
            print("\nInterrupted.")
            break

        if not line:
            continue

        if line.lower() in ("exit", "quit"):
            print("Shutting down.")
            break

        if line.lower() == "clear chat":
            handler.orchestrator.memory.clear(user)
            print("Chat cleared.")
            continue

        if line.startswith(DOC_COMMAND_PREFIX):
            path = line[len(DOC_COMMAND_PREFIX):].strip()
            try:
                text = extract_document_text(path)
            except Exception as err:
                print(f"Could not read document: {err}")
                continue
            _print_replies(await handler.handle_document(user, text))
            continue

        _print_replies(await handler.handle(InboundMessage(sender_id=user, text=line)))


def main(argv=None):
    """Parse arguments, configure logging and start the terminal session."""
    parser = argparse.ArgumentParser(description="Loph terminal chat")
    parser.add_argument("--user", default="cli", help="sender id used for this session")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    asyncio.run(run_session(build_handler(), args.user))


if __name__ == "__main__":
    main()
