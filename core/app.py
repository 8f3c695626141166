import asyncio
import signal
import sys

from dotenv import load_dotenv

from core.config_loader import load_bot_config
from core.context import RuntimeSettings
from core.errors import StartupFatal
from core.scheduler import Scheduler
from runtime.version import as_string
from services.announcements.timed import TimedAnnouncer
from services.relay.webhook import WebhookRelay
from services.triggers.commands import CommandTable
from services.triggers.moderation import ModerationFilter
from services.triggers.pipeline import ChatMessagePipeline
from services.youtube.api.chat import YouTubeChatClient
from services.youtube.api.livestream import YouTubeLivestreamAPI
from services.youtube.auth import YouTubeAuthSession
from services.youtube.workers.chat_worker import YouTubeChatWorker
from services.youtube.workers.livestream_worker import YouTubeLivestreamWorker
from shared.logging.logger import get_logger
from shared.storage.participants import ParticipantStore

log = get_logger("core.app")


async def main(stop_event: asyncio.Event) -> None:
    # --------------------------------------------------
    # ENV + CONFIG
    # --------------------------------------------------
    load_dotenv()
    log.info(f"{as_string()} booting")

    settings = RuntimeSettings.from_env()
    config = load_bot_config(settings.config_path)

    participants = ParticipantStore(settings.participants_path).load()

    # --------------------------------------------------
    # AUTH + LIVE CHAT RESOLUTION
    # --------------------------------------------------
    auth = YouTubeAuthSession(
        client_secret_path=settings.client_secret_path,
        token_path=settings.token_path,
    )
    await auth.authorize()

    session = await YouTubeLivestreamWorker(
        api=YouTubeLivestreamAPI(auth=auth)
    ).run()

    # --------------------------------------------------
    # COMPONENTS
    # --------------------------------------------------
    chat = YouTubeChatClient(auth=auth, live_chat_id=session.live_chat_id)

    pipeline = ChatMessagePipeline(
        session=session,
        send=chat.send_message,
        commands=CommandTable.from_definitions(config.commands),
        moderation=ModerationFilter(
            config.banned_words, warning_template=config.moderation_warning
        ),
        participants=participants,
        relay=WebhookRelay(config.webhook),
        welcome_template=config.welcome_message,
    )

    scheduler = Scheduler()
    scheduler.start(
        chat_worker=YouTubeChatWorker(client=chat, pipeline=pipeline),
        announcer=TimedAnnouncer(config.timed_messages, chat.send_message),
    )
    log.info(f"[YouTube][{session.live_chat_id}] Bot attached to live chat")

    # --------------------------------------------------
    # BLOCK UNTIL SHUTDOWN SIGNAL
    # --------------------------------------------------
    await stop_event.wait()

    log.info("Shutdown initiated")
    await scheduler.shutdown()
    log.info("Bot stopped")


# ----------------------------------------------------------------------
# SIGNAL HANDLING (WINDOWS-SAFE)
# ----------------------------------------------------------------------

def _install_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    stop_event: asyncio.Event,
):
    """
    Windows-safe Ctrl+C handler.
    Uses signal.signal + asyncio.Event to unwind cleanly.
    """

    def _handler(signum, frame):
        loop.call_soon_threadsafe(stop_event.set)

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            signal.signal(sig, _handler)
        except (ValueError, OSError) as e:
            log.debug(f"Could not install handler for {sig}: {e}")


# ----------------------------------------------------------------------
# ENTRYPOINT
# ----------------------------------------------------------------------

def run() -> int:
    stop_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    _install_signal_handlers(loop, stop_event)

    exit_code = 0
    try:
        loop.run_until_complete(main(stop_event))

    except StartupFatal as e:
        log.error(f"[FATAL] {e}")
        exit_code = 1

    except KeyboardInterrupt:
        log.info("KeyboardInterrupt received — shutdown complete")

    except Exception as e:
        log.exception(f"[FATAL] Unhandled error: {e}")
        exit_code = 1

    finally:
        # --------------------------------------------------
        # CANCEL REMAINING TASKS (CLEANLY)
        # --------------------------------------------------
        pending = [t for t in asyncio.all_tasks(loop) if not t.done()]
        for task in pending:
            task.cancel()

        if pending:
            loop.run_until_complete(
                asyncio.gather(*pending, return_exceptions=True)
            )

        loop.run_until_complete(loop.shutdown_asyncgens())
        asyncio.set_event_loop(None)
        loop.close()

    return exit_code


if __name__ == "__main__":
    sys.exit(run())
