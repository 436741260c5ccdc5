"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from rescue_radar.adapters.sos_api_client import HttpxSosGateway
from rescue_radar.adapters.sqlalchemy_sos_repository import SqlAlchemySosRepository
from rescue_radar.adapters.supabase_sos_repository import SupabaseSosRepository
from rescue_radar.config import Settings, parse_api_url
from rescue_radar.services.gateway import (
    LocalSosGateway,
    SosGateway,
    seed_demo_records,
)
from rescue_radar.services.listing import ListingService
from rescue_radar.services.poller import SosPoller
from rescue_radar.services.records import RecordStore
from rescue_radar.services.resolution import ResolutionService
from rescue_radar.services.submission import SubmissionService

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    record_store: RecordStore
    submission_service: SubmissionService
    listing_service: ListingService
    resolution_service: ResolutionService
    close_resources: Callable[[], Awaitable[None]]


def build_record_store(settings: Settings) -> RecordStore:
    """Pick the record store backing for the configured environment."""
    if settings.uses_supabase:
        supabase_client = create_client(
            settings.supabase_url, settings.supabase_service_key
        )
        return SupabaseSosRepository(
            supabase_client, table_name=settings.supabase_table
        )
    logger.info("Supabase not configured, using %s", settings.database_url)
    return SqlAlchemySosRepository.create(settings.database_url)


def build_services(
    store: RecordStore, settings: Settings
) -> tuple[SubmissionService, ListingService, ResolutionService]:
    """Create the three SOS services over one store."""
    return (
        SubmissionService(store, ttl_days=settings.record_ttl_days),
        ListingService(store),
        ResolutionService(store),
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    record_store = build_record_store(resolved_settings)
    submission_service, listing_service, resolution_service = build_services(
        record_store, resolved_settings
    )

    async def close_resources() -> None:
        close = getattr(record_store, "close", None)
        if close is not None:
            close()

    return AppContainer(
        settings=resolved_settings,
        record_store=record_store,
        submission_service=submission_service,
        listing_service=listing_service,
        resolution_service=resolution_service,
        close_resources=close_resources,
    )


def build_gateway(settings: Settings | None = None) -> SosGateway:
    """Create the client gateway: remote when an API URL is set, else local."""
    resolved_settings = settings or Settings()
    api_url = parse_api_url(resolved_settings.api_url)
    if api_url:
        return HttpxSosGateway.create(api_url)
    logger.info("No SOS API configured, using local store")
    store = SqlAlchemySosRepository.create(resolved_settings.database_url)
    if resolved_settings.seed_demo_data:
        seed_demo_records(store, ttl_days=resolved_settings.record_ttl_days)
    submission_service, listing_service, resolution_service = build_services(
        store, resolved_settings
    )
    return LocalSosGateway(
        submission_service=submission_service,
        listing_service=listing_service,
        resolution_service=resolution_service,
    )


def build_poller(
    gateway: SosGateway,
    settings: Settings | None = None,
    type_filter: str | None = None,
) -> SosPoller:
    """Create a poller refreshing the active listing at the configured interval."""
    resolved_settings = settings or Settings()
    return SosPoller(
        gateway=gateway,
        interval_seconds=resolved_settings.poll_interval_seconds,
        type_filter=type_filter,
    )
