"""CLI entry point for vk-relay."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from vk_relay.adapters.storage import JsonLedgerStore
from vk_relay.adapters.telegram import TelegramClient
from vk_relay.adapters.vk import VKClient
from vk_relay.config import Settings, get_settings
from vk_relay.core import ProcessedLedger
from vk_relay.errors import BridgeError, ConfigError, PersistenceError
from vk_relay.polling import Poller
from vk_relay.use_cases import MarkPolicy, RelayService

LOGGER = logging.getLogger("vk_relay")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """Log to stderr, and to combined.log/error.log when a log directory is set."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / "combined.log", encoding="utf-8"))
        error_handler = logging.FileHandler(log_dir / "error.log", encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)

    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )

    # httpx logs every request URL at INFO, and Bot API URLs contain the token
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_service(settings: Settings) -> RelayService:
    """Wire clients, ledger and the relay service from settings."""
    feed = VKClient(
        access_token=settings.vk_access_token,
        group_id=settings.vk_group_id,
        api_version=settings.vk.api_version,
        timeout=settings.http.timeout,
        max_retries=settings.http.max_retries,
        initial_retry_delay=settings.http.initial_retry_delay,
        audio_search_count=settings.vk.audio_search_count,
    )
    channel = TelegramClient(
        bot_token=settings.telegram_bot_token,
        channel_id=settings.telegram_channel_id,
        parse_mode=settings.telegram.parse_mode,
        timeout=settings.http.timeout,
        max_retries=settings.http.max_retries,
        initial_retry_delay=settings.http.initial_retry_delay,
        album_limit=settings.telegram.album_limit,
    )
    ledger = ProcessedLedger(JsonLedgerStore(settings.ledger_path))

    return RelayService(
        feed=feed,
        channel=channel,
        ledger=ledger,
        mark_policy=MarkPolicy(settings.dispatch.mark_policy),
        posts_per_poll=settings.vk.posts_per_poll,
        match_threshold=settings.matching.threshold,
    )


def main(
    config: Path = typer.Option(Path("config.yaml"), "--config", "-c", help="Path to YAML config"),
    once: bool = typer.Option(False, "--once", help="Run a single poll cycle and exit"),
    interval: Optional[float] = typer.Option(None, "--interval", help="Seconds between polls"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
) -> None:
    """Relay new VK wall posts to a Telegram channel."""
    try:
        settings = get_settings(config)
        if interval is not None:
            settings.polling.interval_seconds = interval
        if log_level:
            settings.logging.level = log_level
        settings.validate()
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=1)

    configure_logging(settings.logging.level, settings.logging.log_dir)

    try:
        asyncio.run(async_run(settings, once))
    except PersistenceError as e:
        LOGGER.error("Refusing to start: %s", e)
        raise typer.Exit(code=1)
    except BridgeError as e:
        LOGGER.error("Poll failed: %s", e)
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        LOGGER.info("Interrupted, shutting down")


def app() -> None:
    """CLI entry point."""
    typer.run(main)


async def async_run(settings: Settings, once: bool) -> None:
    """Async implementation of the relay loop."""
    LOGGER.info("Starting VK to Telegram relay...")
    service = build_service(settings)

    if once:
        await service.process_new_posts()
        return

    poller = Poller(service, settings.poll_interval)
    await poller.run_forever()


if __name__ == "__main__":
    app()
