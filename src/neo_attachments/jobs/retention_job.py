"""Scheduled retention job for attachments.

Runs the expiry purge on an interval, plus the stale-pending sweep when it is
enabled. Multiple instances may run at once: every per-item transition is a
conditional update, so a record is settled by exactly one of them.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from uuid import UUID

import click

from ..config.settings import AttachmentSettings
from ..features.attachments.services.retention_service import RetentionService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetentionRunResult:
    purged: int
    released: int = 0


class RetentionJob:
    """Drives RetentionService on a schedule."""

    def __init__(self, retention_service: RetentionService, settings: AttachmentSettings):
        self._service = retention_service
        self._settings = settings
        self._stopping = asyncio.Event()

    async def run_once(self, limit: Optional[int] = None) -> RetentionRunResult:
        limit = limit or self._settings.attachments_purge_limit
        purged = await self._service.purge_expired(limit=limit)

        released = 0
        if self._settings.attachments_stale_pending_sweep_enabled:
            released = await self._service.release_stale_pending(
                older_than=timedelta(seconds=self._settings.attachments_stale_pending_seconds),
                limit=limit,
            )

        logger.info(f"Retention run finished: purged={purged} released={released}")
        return RetentionRunResult(purged=purged, released=released)

    async def run_forever(self, interval_seconds: Optional[int] = None) -> None:
        interval = interval_seconds or self._settings.attachments_purge_interval_seconds
        logger.info(f"Retention job started, interval={interval}s")
        while not self._stopping.is_set():
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Retention run failed: {e}", exc_info=True)
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
        logger.info("Retention job stopped")

    def stop(self) -> None:
        self._stopping.set()


async def _with_service(settings: AttachmentSettings, action):
    """Build a RetentionService against the configured database and run ``action`` with it."""
    from ..database.connection import DatabaseManager
    from ..features.attachments.adapters import LoggingAuditSink, S3StorageGateway, StaticEntitlementLookup
    from ..features.attachments.repositories import (
        AttachmentDatabaseRepository,
        StorageUsageDatabaseRepository,
    )
    from ..features.attachments.services import QuotaService

    db = DatabaseManager(settings.database_url, application_name=f"{settings.app_name}-retention", min_size=1, max_size=4)
    await db.create_pool()
    try:
        usage_repository = StorageUsageDatabaseRepository(db, settings.attachments_db_schema)
        service = RetentionService(
            attachment_repository=AttachmentDatabaseRepository(db, settings.attachments_db_schema),
            quota_service=QuotaService(
                usage_repository,
                StaticEntitlementLookup.from_settings(settings),
                warning_threshold=settings.storage_warning_threshold,
            ),
            storage_gateway=S3StorageGateway.from_settings(settings),
            audit_sink=LoggingAuditSink(),
            usage_repository=usage_repository,
        )
        return await action(service)
    finally:
        await db.close_pool()


@click.group()
@click.pass_context
def cli(ctx):
    """Attachment retention maintenance."""
    from dotenv import load_dotenv
    from ..config.logging_config import LoggingConfig

    load_dotenv(".env")
    LoggingConfig.configure()
    ctx.ensure_object(dict)
    ctx.obj["settings"] = AttachmentSettings()


@cli.command()
@click.option("--limit", "-l", type=int, default=None, help="Maximum records per run")
@click.pass_context
def purge(ctx, limit):
    """Purge expired attachments once."""
    settings = ctx.obj["settings"]
    result = asyncio.run(_with_service(settings, lambda s: RetentionJob(s, settings).run_once(limit)))
    click.echo(f"purged={result.purged} released={result.released}")


@cli.command("release-stale")
@click.option("--older-than", type=int, default=None, help="Minimum age in seconds of pending uploads")
@click.option("--limit", "-l", type=int, default=None, help="Maximum records to release")
@click.pass_context
def release_stale(ctx, older_than, limit):
    """Release reservations held by abandoned uploads."""
    settings = ctx.obj["settings"]
    older = timedelta(seconds=older_than or settings.attachments_stale_pending_seconds)
    released = asyncio.run(_with_service(
        settings, lambda s: s.release_stale_pending(older_than=older, limit=limit or settings.attachments_purge_limit)
    ))
    click.echo(f"released={released}")


@cli.command()
@click.argument("organization_id", type=click.UUID)
@click.pass_context
def reconcile(ctx, organization_id: UUID):
    """Report ledger drift for an organization."""
    settings = ctx.obj["settings"]
    drifts = asyncio.run(_with_service(settings, lambda s: s.reconcile_ledger(organization_id)))
    if not drifts:
        click.echo("ledger in sync")
    for drift in drifts:
        click.echo(
            f"{drift.workspace_id}: used {drift.used_delta:+d} reserved {drift.reserved_delta:+d}"
        )
    ctx.exit(1 if drifts else 0)


@cli.command()
@click.option("--interval", "-i", type=int, default=None, help="Seconds between runs")
@click.pass_context
def run(ctx, interval):
    """Run the retention job until interrupted."""
    settings = ctx.obj["settings"]
    try:
        asyncio.run(_with_service(settings, lambda s: RetentionJob(s, settings).run_forever(interval)))
    except KeyboardInterrupt:
        logger.info("Retention job interrupted")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
