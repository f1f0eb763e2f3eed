"""Tests for saved project discovery."""

import os

from api.services.project_service import ProjectService

from conftest import write_report_project


def test_list_projects_newest_first(tmp_path):
    older = write_report_project(tmp_path / "older")
    newer = write_report_project(tmp_path / "newer")
    os.utime(older, (1_000_000, 1_000_000))
    (tmp_path / "not-a-project").mkdir()

    projects = ProjectService(str(tmp_path)).list_projects()

    assert [p["id"] for p in projects] == ["newer", "older"]
    assert projects[0]["name"] == "Quarterly Sales"
    assert projects[0]["config_path"] == str(newer)


def test_broken_project_is_skipped(tmp_path):
    write_report_project(tmp_path / "good")
    (tmp_path / "broken").mkdir()
    (tmp_path / "broken" / "report-pipeline.config.json").write_text("{")

    service = ProjectService(str(tmp_path))

    assert [p["id"] for p in service.list_projects()] == ["good"]
    assert service.get_project("broken") is None


def test_get_project(tmp_path):
    write_report_project(tmp_path / "q1")
    service = ProjectService(str(tmp_path))

    project = service.get_project("q1")

    assert project["path"] == str(tmp_path / "q1")
    assert project["config"].author == "Analytics"
    assert service.get_project("missing") is None


def test_project_ids_are_plain_names(tmp_path):
    write_report_project(tmp_path / "projects" / "q1")
    write_report_project(tmp_path / "outside")
    service = ProjectService(str(tmp_path / "projects"))

    assert service.get_project("../outside") is None
    assert service.get_project("..") is None
    assert service.get_project("") is None


def test_missing_directory_is_created(tmp_path):
    service = ProjectService(str(tmp_path / "new"))

    assert service.list_projects() == []
    assert (tmp_path / "new").is_dir()
