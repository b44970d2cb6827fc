from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, TYPE_CHECKING

from fastapi import FastAPI
from structlog.stdlib import BoundLogger

from infrastructure.logging.setup import configure_logging
from infrastructure.services import get_settings
from jobs.scheduled_tasks import NotificationScheduler
from modules.notifications.providers import get_dispatcher

if TYPE_CHECKING:
    from infrastructure.configuration import Settings


def _get_logger(settings: "Settings") -> BoundLogger:
    return configure_logging(
        log_level=settings.LOG_LEVEL, is_production=settings.is_production
    )


def _list_configs(settings: "Settings", logger: BoundLogger) -> None:
    config_settings: dict[str, list[object]] = {"settings": []}

    for key, value in settings.model_dump().items():
        if isinstance(value, dict):
            config_settings[key] = list(value.keys())
        else:
            config_settings["settings"].append({key: value})

    logger.info("configuration_initialized", base_settings=config_settings["settings"])
    for key, value in config_settings.items():
        if key != "settings":
            logger.info("configuration_loaded", config_setting=key, keys=value)


def _start_notification_scheduler(
    settings: "Settings", logger: BoundLogger
) -> Optional[NotificationScheduler]:
    if not settings.notifications.dispatch_enabled:
        logger.info("notification_scheduler_skipped", reason="dispatch_disabled")
        return None

    scheduler = NotificationScheduler(
        dispatcher=get_dispatcher(),
        interval_seconds=settings.notifications.dispatch_interval_seconds,
        initial_delay_seconds=settings.notifications.dispatch_initial_delay_seconds,
    )
    scheduler.start()
    return scheduler


def _stop_notification_scheduler(scheduler: Optional[NotificationScheduler]) -> None:
    if scheduler is None:
        return
    scheduler.stop()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger = _get_logger(settings)

    app.state.settings = settings
    app.state.logger = logger

    logger.info("application_startup")
    _list_configs(settings, logger)

    app.state.notification_scheduler = _start_notification_scheduler(settings, logger)

    yield

    logger.info("application_shutdown")
    _stop_notification_scheduler(app.state.notification_scheduler)
