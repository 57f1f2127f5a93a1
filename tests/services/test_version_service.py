"""Tests for version history operations."""

import pytest

from agent_desk.exceptions import InvalidVersionError
from agent_desk.services import versions as versions_svc
from agent_desk.storage import SidecarStore
from agent_desk.storage.repositories import VersionRepository


class TestAddVersion:
    """Test appending snapshots."""

    def test_numbers_are_monotonic(self, versions_repo, document) -> None:
        """Verify each snapshot is numbered currentVersion + 1."""
        numbers = [
            versions_svc.add_version(document, f"text {i}", "scribe", versions_repo).version
            for i in range(4)
        ]
        assert numbers == [1, 2, 3, 4]
        assert versions_svc.read_history(document, versions_repo).current_version == 4

    def test_snapshot_round_trip(self, versions_repo, document) -> None:
        """Verify content, author and metadata read back unchanged."""
        versions_svc.add_version(
            document,
            "exact\ncontent\n",
            "ralph",
            versions_repo,
            comment="first pass",
            feedback_addressed=["thread-abc"],
        )
        entry = versions_svc.get_version(document, 1, versions_repo)
        assert entry.content == "exact\ncontent\n"
        assert entry.updated_by == "ralph"
        assert entry.comment == "first pass"
        assert entry.feedback_addressed == ["thread-abc"]

    def test_identical_content_is_not_deduplicated(self, versions_repo, document) -> None:
        """Verify the same text twice still creates two versions."""
        versions_svc.add_version(document, "same", "a", versions_repo)
        versions_svc.add_version(document, "same", "a", versions_repo)
        assert len(versions_svc.list_versions(document, versions_repo)) == 2

    @pytest.mark.parametrize(("content", "author"), [("", "a"), ("text", ""), ("text", "  ")])
    def test_rejects_missing_fields(self, versions_repo, document, content, author) -> None:
        """Verify empty content or author is rejected before writing."""
        with pytest.raises(InvalidVersionError):
            versions_svc.add_version(document, content, author, versions_repo)
        assert not versions_repo.exists(document)

    def test_retention_drops_oldest(self, settings_with, document) -> None:
        """Verify the cap keeps the newest snapshots and numbering continues."""
        repo = VersionRepository(SidecarStore(settings_with(max_versions=3).storage))
        for i in range(5):
            versions_svc.add_version(document, f"v{i + 1}", "scribe", repo)
        history = versions_svc.read_history(document, repo)
        assert [v.version for v in history.versions] == [3, 4, 5]
        assert history.current_version == 5
        assert history.first_available_version == 3
        assert versions_svc.get_version(document, 1, repo) is None
        assert versions_svc.add_version(document, "v6", "scribe", repo).version == 6

    def test_list_versions_omits_content(self, versions_repo, document) -> None:
        """Verify listings carry metadata only."""
        versions_svc.add_version(document, "body", "scribe", versions_repo)
        meta = versions_svc.list_versions(document, versions_repo)[0]
        assert "content" not in meta.to_json_dict()


class TestInitializeVersions:
    """Test v1 initialization."""

    def test_creates_v1_once(self, versions_repo, document) -> None:
        """Verify initialization is idempotent."""
        history = versions_svc.initialize_versions(document, "first", "scribe", versions_repo)
        assert history.current_version == 1
        assert history.versions[0].comment == versions_svc.INITIAL_COMMENT

        again = versions_svc.initialize_versions(document, "other", "scribe", versions_repo)
        assert again.current_version == 1
        assert versions_svc.get_version(document, 1, versions_repo).content == "first"


class TestSnapshotForReview:
    """Test automatic review snapshots."""

    def test_first_then_revision(self, versions_repo, content, document) -> None:
        """Verify the first snapshot is v1 and later ones are revisions."""
        first = versions_svc.snapshot_for_review(
            document, "scribe", versions_repo, content, max_bytes=1024
        )
        second = versions_svc.snapshot_for_review(
            document, "scribe", versions_repo, content, max_bytes=1024
        )
        assert (first.version, first.comment) == (1, versions_svc.INITIAL_COMMENT)
        assert (second.version, second.comment) == (2, versions_svc.REVISION_COMMENT)
        assert second.content == document.read_text(encoding="utf-8")

    def test_note_becomes_comment(self, versions_repo, content, document) -> None:
        """Verify a submission note labels revision snapshots."""
        versions_svc.snapshot_for_review(document, "a", versions_repo, content, max_bytes=1024)
        entry = versions_svc.snapshot_for_review(
            document, "a", versions_repo, content, note="tightened intro", max_bytes=1024
        )
        assert entry.comment == "tightened intro"

    def test_oversized_content_is_skipped(self, versions_repo, content, document) -> None:
        """Verify documents above the byte cap are not snapshotted."""
        result = versions_svc.snapshot_for_review(
            document, "scribe", versions_repo, content, max_bytes=10
        )
        assert result is None
        assert not versions_repo.exists(document)

    def test_missing_document_is_skipped(self, versions_repo, content, tmp_path) -> None:
        """Verify a missing file yields no snapshot."""
        missing = tmp_path / "content" / "gone.md"
        assert (
            versions_svc.snapshot_for_review(missing, "a", versions_repo, content, max_bytes=1024)
            is None
        )
