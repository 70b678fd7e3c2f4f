"""Main entry point for slackbot.

Initializes logging in two phases (defaults then config-driven),
builds a SlackBot with the built-in commands, and runs it until the
server closes the connection or SIGTERM/SIGINT arrives.

Key functions:
    main: Async entry point.
    run: Synchronous wrapper for the ``slackbot`` console script.
"""

import asyncio
import signal
import sys

import structlog

from .logging_config import setup_logging


async def main():
    """Main async entry point."""
    # Console only until the config says where files go
    setup_logging()
    logger = structlog.get_logger("slackbot")

    # Import here to ensure logging is configured first
    from . import __version__
    from .bot import SlackBot
    from .commands import register_builtin_commands
    from .config import get_config
    from .session import RtmSession

    logger.info("slackbot_starting", version=__version__)

    config = get_config()
    config.validate()

    # Levels and the log file come from config
    setup_logging(config)

    session = RtmSession(
        config.api_token,
        api_url=config.slack_api_url,
        reconnect_max_attempts=config.reconnect_max_attempts,
        reconnect_base_delay=config.reconnect_base_delay,
    )
    bot = SlackBot(config.bot_name, session=session)
    register_builtin_commands(bot.name, bot.registry)

    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def handle_shutdown(sig):
        logger.info("shutdown_signal_received", signal=sig.name)
        shutdown_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, handle_shutdown, sig)
        except NotImplementedError:
            # Windows: add_signal_handler not supported.
            if sig == signal.SIGINT:
                signal.signal(
                    signal.SIGINT,
                    lambda s, f: loop.call_soon_threadsafe(handle_shutdown, signal.SIGINT),
                )

    bot_task = asyncio.create_task(bot.serve())
    shutdown_task = asyncio.create_task(shutdown_event.wait())
    try:
        await asyncio.wait(
            {bot_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED
        )
        if not bot_task.done():
            bot_task.cancel()
            try:
                await bot_task
            except asyncio.CancelledError:
                pass
        else:
            # Surface session or handler failures
            bot_task.result()
    finally:
        shutdown_task.cancel()
        logger.info("slackbot_stopped")


def run():
    """Synchronous entry point for the ``slackbot`` console script."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
    except Exception as e:
        structlog.get_logger("slackbot").error(
            "fatal_error", error=str(e), error_type=type(e).__name__
        )
        sys.exit(1)


if __name__ == "__main__":
    run()
