"""Status workflow — transitions, audit log, review snapshots, revision requests, delete cascade."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi.concurrency import run_in_threadpool

from agent_desk.dispatch import DispatchResult
from agent_desk.events import RevisionRequested
from agent_desk.exceptions import InvalidStatusError
from agent_desk.models.base import CamelModel
from agent_desk.models.feedback import CommentAuthor
from agent_desk.models.status import DeliverableStatus, StatusLog, StatusLogEntry
from agent_desk.services import feedback as feedback_svc
from agent_desk.services import versions as versions_svc

if TYPE_CHECKING:
    from pathlib import Path

    from agent_desk.config import Settings
    from agent_desk.dispatch import RevisionDispatcher
    from agent_desk.models.deliverable import Deliverable
    from agent_desk.storage.content import ContentStore
    from agent_desk.storage.repositories import (
        FeedbackRepository,
        StatusLogRepository,
        VersionRepository,
    )

logger = logging.getLogger(__name__)


class StatusChange(CamelModel):
    """Outcome of a status change; side-effect fields are None when they did not happen."""

    status: DeliverableStatus
    logged: bool = True
    version: int | None = None
    thread_id: str | None = None
    spawn: DispatchResult | None = None


def parse_status(value: str | DeliverableStatus) -> DeliverableStatus:
    if isinstance(value, DeliverableStatus):
        return value
    if not value or not str(value).strip():
        raise InvalidStatusError("status is required")
    try:
        return DeliverableStatus(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in DeliverableStatus)
        raise InvalidStatusError(f"Unknown status '{value}'. Expected one of: {allowed}") from None


class WorkflowController:
    """Coordinates the content store, the three sidecar repositories and the dispatcher."""

    def __init__(
        self,
        settings: Settings,
        content: ContentStore,
        versions: VersionRepository,
        feedback: FeedbackRepository,
        status_log: StatusLogRepository,
        dispatcher: RevisionDispatcher,
    ) -> None:
        self._settings = settings
        self._content = content
        self._versions = versions
        self._feedback = feedback
        self._status_log = status_log
        self._dispatcher = dispatcher

    def _check_transition(self, old: DeliverableStatus, new: DeliverableStatus) -> None:
        table = self._settings.workflow.transitions
        if table is None or old == new:
            return
        if new.value not in table.get(old.value, []):
            raise InvalidStatusError(f"Transition from '{old}' to '{new}' is not allowed")

    async def change_status(
        self,
        deliverable: Deliverable,
        new_status: str | DeliverableStatus,
        *,
        by: str | None = None,
        note: str | None = None,
    ) -> StatusChange:
        """Move a deliverable to ``new_status`` and run the side effects tied to it.

        Validation happens before anything is written. The marker and log entry
        always commit; the snapshot, the note thread and the dispatch are each
        best-effort and never undo what already committed. File work runs in
        the threadpool; only the dispatch is awaited on the event loop.
        """
        new = parse_status(new_status)
        result, revision = await run_in_threadpool(self._commit, deliverable, new, by, note)
        if revision is not None:
            result.spawn = await self._dispatch(revision)
        return result

    def _commit(
        self,
        deliverable: Deliverable,
        new: DeliverableStatus,
        by: str | None,
        note: str | None,
    ) -> tuple[StatusChange, RevisionRequested | None]:
        path = deliverable.file_path
        old = self._content.read_status(path)
        self._check_transition(old, new)
        actor = by or self._settings.workflow.default_actor

        self._content.set_status(path, new)
        self._status_log.append(
            path,
            StatusLogEntry(
                from_status=old.value,
                to_status=new,
                by=actor,
                note=note or f"Status changed to {new}",
            ),
        )
        logger.info(
            "Status changed — deliverable=%s %s -> %s by=%s", deliverable.id, old, new, actor
        )
        result = StatusChange(status=new)

        if new == DeliverableStatus.NEEDS_REVIEW:
            result.version = self._snapshot(path, actor, note)

        if new == DeliverableStatus.REQUESTED_CHANGES and note:
            result.thread_id = self._note_thread(deliverable, note)

        revision = None
        if new == DeliverableStatus.REQUESTED_CHANGES and old != DeliverableStatus.REQUESTED_CHANGES:
            revision = RevisionRequested(
                deliverable_id=deliverable.id,
                agent_id=deliverable.agent_id,
                path=deliverable.relative_path,
                requested_by=actor,
                note=note,
                threads=feedback_svc.open_thread_summaries(path, self._feedback),
            )
        return result, revision

    def _snapshot(self, path: Path, actor: str, note: str | None) -> int | None:
        try:
            entry = versions_svc.snapshot_for_review(
                path,
                actor,
                self._versions,
                self._content,
                note=note,
                max_bytes=self._settings.storage.max_snapshot_bytes,
            )
        except OSError:
            logger.exception("Review snapshot failed — path=%s", path)
            return None
        return entry.version if entry else None

    def _note_thread(self, deliverable: Deliverable, note: str) -> str | None:
        history = self._versions.load(deliverable.file_path)
        try:
            thread = feedback_svc.create_thread(
                deliverable.file_path,
                deliverable.id,
                deliverable.agent_id,
                None,
                None,
                note,
                self._feedback,
                author=CommentAuthor.USER,
                version=history.current_version or None,
            )
        except OSError:
            logger.exception("Could not record requested-changes note — path=%s", deliverable.file_path)
            return None
        return thread.id

    async def _dispatch(self, request: RevisionRequested) -> DispatchResult:
        try:
            return await self._dispatcher.dispatch(request)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Revision dispatch raised — deliverable=%s", request.deliverable_id, exc_info=True
            )
            return DispatchResult(success=False, message=str(exc))

    def status_log(self, path: Path) -> StatusLog:
        return self._status_log.load(path)

    def delete_deliverable(self, deliverable: Deliverable) -> list[str]:
        """Remove the document and its sidecars, then the parent directory if left empty.

        Each removal is attempted independently; the returned names are the ones
        that were actually removed.
        """
        path = deliverable.file_path
        deleted: list[str] = []

        removals = [
            (path, lambda: self._content.delete(path)),
            (self._versions.path_for(path), lambda: self._versions.delete(path)),
            (self._status_log.path_for(path), lambda: self._status_log.delete(path)),
            (self._feedback.path_for(path), lambda: self._feedback.delete(path)),
        ]
        for target, remove in removals:
            try:
                if remove():
                    deleted.append(target.name)
            except OSError:
                logger.exception("Could not delete %s", target)

        parent = path.parent
        root = self._settings.storage.business_root.resolve()
        if parent.resolve() != root:
            try:
                if parent.is_dir() and not any(parent.iterdir()):
                    parent.rmdir()
                    deleted.append(f"{parent.name}/")
            except OSError:
                logger.warning("Could not remove empty directory %s", parent, exc_info=True)

        logger.info("Deliverable deleted — id=%s removed=%s", deliverable.id, deleted)
        return deleted
