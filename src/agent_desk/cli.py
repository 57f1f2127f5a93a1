"""Command line entry points — run the server, submit work, seed version histories."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
import uvicorn

from agent_desk.config import load_settings
from agent_desk.dispatch import create_dispatcher
from agent_desk.logging import configure_logging
from agent_desk.models.status import DeliverableStatus
from agent_desk.services import versions as versions_svc
from agent_desk.services.workflow import WorkflowController
from agent_desk.storage import ContentStore, DeliverableResolver, SidecarStore
from agent_desk.storage.repositories import (
    FeedbackRepository,
    StatusLogRepository,
    VersionRepository,
)

app = typer.Typer(help="Review desk for agent deliverables.", no_args_is_help=True)

logger = logging.getLogger(__name__)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),  # noqa: FBT001, FBT003
) -> None:
    """Run the dashboard and JSON API."""
    uvicorn.run("agent_desk.app:create_app", factory=True, host=host, port=port, reload=reload)


@app.command()
def submit(
    path: Path = typer.Argument(..., help="Markdown deliverable under the business root"),
    by: str = typer.Option("agent", "--by", help="Who is submitting"),
    note: str = typer.Option(None, "--note", help="Note recorded in the status log"),
) -> None:
    """Mark a deliverable as needing review and snapshot its current text."""
    settings = load_settings()
    configure_logging(settings.app.log_level, log_file=settings.app.log_file or None)

    content = ContentStore()
    resolver = DeliverableResolver(
        settings.storage.business_root, settings.storage.workspaces, content
    )
    deliverable = resolver.from_path(path)
    if deliverable is None:
        typer.echo(f"Not a deliverable under {settings.storage.business_root}: {path}", err=True)
        raise typer.Exit(code=1)

    sidecars = SidecarStore(settings.storage)
    dispatcher, publisher = create_dispatcher(settings)
    controller = WorkflowController(
        settings,
        content,
        VersionRepository(sidecars),
        FeedbackRepository(sidecars),
        StatusLogRepository(sidecars),
        dispatcher,
    )

    async def run():
        try:
            return await controller.change_status(
                deliverable, DeliverableStatus.NEEDS_REVIEW, by=by, note=note
            )
        finally:
            if publisher is not None:
                await publisher.close()

    result = asyncio.run(run())
    version = f"v{result.version}" if result.version else "no snapshot"
    typer.echo(f"{deliverable.relative_path}: {result.status} ({version})")


def _had_review_cycle(path: Path, status_log: StatusLogRepository) -> bool:
    return any(
        entry.to_status == DeliverableStatus.REQUESTED_CHANGES
        for entry in status_log.load(path).logs
    )


@app.command("init-versions")
def init_versions(
    paths: list[Path] = typer.Argument(..., help="Markdown deliverables to seed"),
    by: str = typer.Option("migration", "--by", help="Author recorded on v1"),
    require_review_cycle: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--require-review-cycle",
        help="Only seed documents whose status log shows requested changes",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report without writing"),  # noqa: FBT001, FBT003
) -> None:
    """Give each listed document a v1 snapshot if it has no version history."""
    settings = load_settings()
    configure_logging(settings.app.log_level, log_file=settings.app.log_file or None)

    content = ContentStore()
    sidecars = SidecarStore(settings.storage)
    versions = VersionRepository(sidecars)
    status_log = StatusLogRepository(sidecars)

    created = skipped = 0
    for path in paths:
        text = content.read(path)
        if not text:
            typer.echo(f"skip {path}: missing or empty")
            skipped += 1
            continue
        if versions_svc.has_versions(path, versions):
            typer.echo(f"skip {path}: already versioned")
            skipped += 1
            continue
        if require_review_cycle and not _had_review_cycle(path, status_log):
            typer.echo(f"skip {path}: no requested-changes cycle")
            skipped += 1
            continue
        if dry_run:
            typer.echo(f"would initialize {path}")
        else:
            versions_svc.initialize_versions(path, text, by, versions)
            typer.echo(f"initialized {path}")
        created += 1

    verb = "would initialize" if dry_run else "initialized"
    typer.echo(f"{verb} {created}, skipped {skipped}")
    logger.info("init-versions finished — created=%d skipped=%d dry_run=%s", created, skipped, dry_run)


if __name__ == "__main__":
    app()
