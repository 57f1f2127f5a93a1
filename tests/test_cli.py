"""Tests for the command line interface."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from agent_desk.cli import app
from agent_desk.models.status import DeliverableStatus, StatusLogEntry
from agent_desk.services import versions as versions_svc

runner = CliRunner()


@pytest.fixture(autouse=True)
def _settings(settings):
    with (
        patch("agent_desk.cli.load_settings", return_value=settings),
        patch("agent_desk.cli.configure_logging"),
    ):
        yield


@pytest.mark.unit
def test_submit_marks_needs_review(document, content, versions_repo):
    result = runner.invoke(app, ["submit", str(document), "--by", "scribe", "--note", "ready"])

    assert result.exit_code == 0, result.output
    assert "content/launch-plan.md: needs review (v1)" in result.output
    assert content.read_status(document) == DeliverableStatus.NEEDS_REVIEW
    assert versions_repo.load(document).versions[0].updated_by == "scribe"


@pytest.mark.unit
def test_submit_outside_root(tmp_path_factory):
    outside = tmp_path_factory.mktemp("elsewhere") / "doc.md"
    outside.write_text("# Doc\n", encoding="utf-8")
    result = runner.invoke(app, ["submit", str(outside)])
    assert result.exit_code == 1


@pytest.mark.unit
def test_init_versions(document, tmp_path, versions_repo):
    versioned = tmp_path / "content" / "done.md"
    versioned.write_text("# Done\n", encoding="utf-8")
    versions_svc.add_version(versioned, "# Done\n", "scribe", versions_repo)

    result = runner.invoke(app, ["init-versions", str(document), str(versioned)])

    assert result.exit_code == 0, result.output
    assert "initialized 1, skipped 1" in result.output
    history = versions_repo.load(document)
    assert history.current_version == 1
    assert history.versions[0].updated_by == "migration"
    assert versions_repo.load(versioned).current_version == 1


@pytest.mark.unit
def test_init_versions_dry_run(document, versions_repo):
    result = runner.invoke(app, ["init-versions", "--dry-run", str(document)])
    assert "would initialize 1, skipped 0" in result.output
    assert not versions_repo.exists(document)


@pytest.mark.unit
def test_init_versions_requires_review_cycle(document, tmp_path, versions_repo, status_log_repo):
    reviewed = tmp_path / "content" / "reviewed.md"
    reviewed.write_text("# Reviewed\n", encoding="utf-8")
    status_log_repo.append(
        reviewed,
        StatusLogEntry(
            from_status="needs review", to_status=DeliverableStatus.REQUESTED_CHANGES, by="editor"
        ),
    )

    result = runner.invoke(
        app, ["init-versions", "--require-review-cycle", str(document), str(reviewed)]
    )

    assert "initialized 1, skipped 1" in result.output
    assert not versions_repo.exists(document)
    assert versions_repo.load(reviewed).current_version == 1
