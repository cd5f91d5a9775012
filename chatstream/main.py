"""
Command-line entry point: stream one reply to stdout.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from chatstream.chat_service import ChatService
from chatstream.config import Configuration
from chatstream.llm.client import ChatCompletionsClient
from chatstream.llm.models import AVAILABLE_MODELS, ContentDelta
from chatstream.logging_utils import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="chatstream",
        description="Stream a chat-completion reply to stdout.",
    )
    parser.add_argument("prompt", help="User message to send")
    parser.add_argument(
        "--model",
        help="Model id, e.g. " + ", ".join(AVAILABLE_MODELS),
    )
    parser.add_argument("--temperature", type=float, help="Sampling temperature")
    parser.add_argument("--config", help="Path to an alternate config.yaml")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    """Main entry point - streams one reply with signal-driven cancellation."""
    args = parse_args(argv)
    config = Configuration(args.config)
    configure_logging(config.get_logging_config().get("level", "WARNING"))

    overrides = {}
    if args.model:
        overrides["model"] = args.model
    if args.temperature is not None:
        overrides["temperature"] = args.temperature

    chat_config = config.get_chat_config()

    async with ChatCompletionsClient.from_configuration(config, **overrides) as llm_client:
        service = ChatService(ChatService.ChatServiceConfig(
            llm_client=llm_client,
            system_prompt=chat_config.get("system_prompt", ""),
            title_prefix=chat_config.get("title_prefix", "Chat"),
        ))

        def signal_handler() -> None:
            """Cancel the active stream on shutdown signals."""
            logging.info("Received shutdown signal, cancelling stream...")
            service.cancel()

        if sys.platform != "win32":
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(sig, signal_handler)

        conversation = service.new_conversation()
        exit_code = 0
        async for item in service.send(conversation, args.prompt):
            if isinstance(item, ContentDelta):
                sys.stdout.write(item.content)
                sys.stdout.flush()
            elif item.is_failed:
                sys.stdout.write("\n")
                print(f"Error: {item.description}", file=sys.stderr)
                exit_code = 1
            elif item.is_cancelled:
                sys.stdout.write("\n")
                print(item.description, file=sys.stderr)
                exit_code = 130
            else:
                sys.stdout.write("\n")

    return exit_code


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
