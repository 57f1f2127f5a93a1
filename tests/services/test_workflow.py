"""Tests for the status workflow controller."""

import threading
from dataclasses import replace
from unittest.mock import AsyncMock, patch

import pytest

from agent_desk.config import WorkflowConfig
from agent_desk.dispatch import DispatchResult
from agent_desk.events import RevisionRequested
from agent_desk.exceptions import InvalidStatusError
from agent_desk.models.status import DeliverableStatus
from agent_desk.services import feedback as feedback_svc
from agent_desk.services import versions as versions_svc
from agent_desk.services.workflow import WorkflowController, parse_status


@pytest.fixture
def dispatcher() -> AsyncMock:
    mock = AsyncMock()
    mock.dispatch.return_value = DispatchResult(success=True, message="spawned")
    return mock


@pytest.fixture
def controller(settings, content, versions_repo, feedback_repo, status_log_repo, dispatcher):
    return WorkflowController(
        settings, content, versions_repo, feedback_repo, status_log_repo, dispatcher
    )


@pytest.fixture
def deliverable(resolver, document):
    return resolver.from_path(document)


def test_parse_status():
    assert parse_status(" Needs Review ") == DeliverableStatus.NEEDS_REVIEW
    with pytest.raises(InvalidStatusError):
        parse_status("shipped")
    with pytest.raises(InvalidStatusError):
        parse_status("")


class TestChangeStatus:
    """Test status transitions and their side effects."""

    async def test_needs_review_snapshots_each_submission(
        self, controller, deliverable, versions_repo
    ) -> None:
        """Verify the first submission creates v1 and the next one v2."""
        first = await controller.change_status(deliverable, "needs review", by="scribe")
        second = await controller.change_status(
            deliverable, DeliverableStatus.NEEDS_REVIEW, by="scribe", note="second pass"
        )

        assert (first.version, second.version) == (1, 2)
        history = versions_repo.load(deliverable.file_path)
        assert history.versions[0].comment == versions_svc.INITIAL_COMMENT
        assert history.versions[1].comment == "second pass"
        assert "**Status:** needs review" in history.versions[0].content

    async def test_file_work_runs_off_the_event_loop(self, controller, deliverable, content) -> None:
        """Verify marker and sidecar writes happen in a worker thread."""
        loop_thread = threading.get_ident()
        seen: list[int] = []
        original = content.set_status

        def record(path, status):
            seen.append(threading.get_ident())
            return original(path, status)

        with patch.object(content, "set_status", side_effect=record):
            await controller.change_status(deliverable, "approved")

        assert seen and seen[0] != loop_thread

    async def test_marker_and_log_are_written(self, controller, deliverable, content) -> None:
        """Verify the document marker and the audit log record the change."""
        result = await controller.change_status(deliverable, "approved")

        assert result.status == DeliverableStatus.APPROVED
        assert result.logged is True
        assert content.read_status(deliverable.file_path) == DeliverableStatus.APPROVED
        entry = controller.status_log(deliverable.file_path).logs[-1]
        assert (entry.from_status, entry.to_status, entry.by) == ("draft", "approved", "reviewer")
        assert entry.note == "Status changed to approved"

    async def test_requested_changes_with_note(
        self, controller, deliverable, feedback_repo, dispatcher
    ) -> None:
        """Verify the note becomes a general thread and the agent is dispatched."""
        result = await controller.change_status(
            deliverable, "requested changes", by="editor", note="Cut the intro in half"
        )

        threads = feedback_svc.list_threads(deliverable.file_path, feedback_repo)
        assert len(threads) == 1
        assert threads[0].id == result.thread_id
        assert not threads[0].is_inline
        assert threads[0].comments[0].content == "Cut the intro in half"

        dispatcher.dispatch.assert_awaited_once()
        request = dispatcher.dispatch.call_args[0][0]
        assert isinstance(request, RevisionRequested)
        assert request.agent_id == "scribe"
        assert request.requested_by == "editor"
        assert request.threads == ["Cut the intro in half"]
        assert result.spawn.success is True

    async def test_requested_changes_without_note(
        self, controller, deliverable, feedback_repo, dispatcher
    ) -> None:
        """Verify no thread is created but the agent is still dispatched."""
        result = await controller.change_status(deliverable, "requested changes")
        assert result.thread_id is None
        assert not feedback_repo.exists(deliverable.file_path)
        dispatcher.dispatch.assert_awaited_once()

    async def test_repeat_requested_changes_does_not_redispatch(
        self, controller, deliverable, dispatcher
    ) -> None:
        """Verify dispatch only happens when entering requested changes."""
        await controller.change_status(deliverable, "requested changes")
        second = await controller.change_status(deliverable, "requested changes", note="also")
        assert dispatcher.dispatch.await_count == 1
        assert second.spawn is None
        assert second.thread_id is not None

    async def test_dispatch_failure_keeps_status(
        self, controller, deliverable, content, dispatcher
    ) -> None:
        """Verify a failing dispatcher never rolls back the transition."""
        dispatcher.dispatch.side_effect = RuntimeError("gateway down")

        result = await controller.change_status(deliverable, "requested changes")

        assert result.spawn.success is False
        assert "gateway down" in result.spawn.message
        assert content.read_status(deliverable.file_path) == DeliverableStatus.REQUESTED_CHANGES
        assert len(controller.status_log(deliverable.file_path).logs) == 1

    async def test_invalid_status_writes_nothing(
        self, controller, deliverable, status_log_repo
    ) -> None:
        """Verify validation happens before any side effect."""
        before = deliverable.file_path.read_text(encoding="utf-8")
        with pytest.raises(InvalidStatusError):
            await controller.change_status(deliverable, "shipped")
        assert deliverable.file_path.read_text(encoding="utf-8") == before
        assert not status_log_repo.exists(deliverable.file_path)

    async def test_oversized_document_skips_snapshot(
        self, settings_with, content, versions_repo, feedback_repo, status_log_repo, dispatcher, deliverable
    ) -> None:
        """Verify the status still changes when the snapshot is skipped."""
        controller = WorkflowController(
            settings_with(max_snapshot_bytes=16),
            content,
            versions_repo,
            feedback_repo,
            status_log_repo,
            dispatcher,
        )
        result = await controller.change_status(deliverable, "needs review")
        assert result.version is None
        assert content.read_status(deliverable.file_path) == DeliverableStatus.NEEDS_REVIEW
        assert not versions_repo.exists(deliverable.file_path)
        entry = controller.status_log(deliverable.file_path).logs[-1]
        assert entry.to_status == DeliverableStatus.NEEDS_REVIEW

    async def test_transition_table_is_enforced(
        self, settings, content, versions_repo, feedback_repo, status_log_repo, dispatcher, deliverable
    ) -> None:
        """Verify a configured table rejects transitions it does not list."""
        restricted = replace(
            settings,
            workflow=WorkflowConfig(
                default_actor="reviewer", transitions={"draft": ["needs review"]}
            ),
        )
        controller = WorkflowController(
            restricted, content, versions_repo, feedback_repo, status_log_repo, dispatcher
        )
        with pytest.raises(InvalidStatusError):
            await controller.change_status(deliverable, "published")
        result = await controller.change_status(deliverable, "needs review")
        assert result.status == DeliverableStatus.NEEDS_REVIEW


class TestDeleteDeliverable:
    """Test the delete cascade."""

    async def test_removes_document_sidecars_and_empty_dir(
        self, controller, resolver, feedback_repo, tmp_path
    ) -> None:
        """Verify all four artifacts and the emptied folder are reported."""
        path = tmp_path / "content" / "drafts" / "post.md"
        path.parent.mkdir(parents=True)
        path.write_text("# Post\n", encoding="utf-8")
        deliverable = resolver.from_path(path)
        await controller.change_status(deliverable, "needs review")
        await controller.change_status(deliverable, "requested changes", note="redo")
        feedback_svc.create_thread(
            path, deliverable.id, deliverable.agent_id, 1, 1, "Retitle", feedback_repo
        )
        assert len(feedback_svc.list_threads(path, feedback_repo)) == 2

        deleted = controller.delete_deliverable(deliverable)

        assert deleted == [
            "post.md",
            "post-versions.json",
            "post-status-log.json",
            "post-feedback.json",
            "drafts/",
        ]
        assert not path.parent.exists()
        assert feedback_svc.list_threads(path, feedback_repo) == []
        assert (tmp_path / "content").is_dir()

    def test_keeps_non_empty_dir_and_skips_missing(self, controller, deliverable, tmp_path) -> None:
        """Verify only existing artifacts are reported and shared folders stay."""
        (tmp_path / "content" / "other.md").write_text("# Other\n", encoding="utf-8")
        assert controller.delete_deliverable(deliverable) == ["launch-plan.md"]
        assert (tmp_path / "content").is_dir()
