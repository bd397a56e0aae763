"""Unit tests for ArtifactRepository."""

import io
import logging
from pathlib import Path

import pytest

from cp2fm.exceptions import DeployError
from cp2fm.io.artifact_repository import ArtifactRepository
from cp2fm.models.artifact_id import ArtifactId


class TestDeploy:
    def test_layout_without_classifier(self, tmp_path: Path):
        repository = ArtifactRepository(tmp_path)
        path = repository.deploy(
            io.BytesIO(b"jar"), "com.example", "widget", "1.2.0", None, "jar"
        )
        assert path == tmp_path / "bundles/com/example/widget/1.2.0/widget-1.2.0.jar"
        assert path.read_bytes() == b"jar"

    def test_layout_with_classifier(self, tmp_path: Path):
        repository = ArtifactRepository(tmp_path)
        path = repository.deploy(
            io.BytesIO(b"src"), "com.example", "widget", "1.2.0", "sources", "jar"
        )
        assert path.relative_to(tmp_path).as_posix() == (
            "bundles/com/example/widget/1.2.0/widget-1.2.0-sources.jar"
        )

    def test_overwrites_existing_file(self, tmp_path: Path):
        repository = ArtifactRepository(tmp_path)
        aid = ArtifactId(group_id="com.example", artifact_id="widget", version="1.2.0")
        repository.deploy_artifact(io.BytesIO(b"first version, longer"), aid)
        path = repository.deploy_artifact(io.BytesIO(b"second"), aid)
        assert path.read_bytes() == b"second"

    def test_resolve_matches_deploy(self, tmp_path: Path):
        repository = ArtifactRepository(tmp_path)
        aid = ArtifactId(
            group_id="org.apache.sling", artifact_id="api", version="2", type="zip"
        )
        assert repository.resolve(aid) == repository.deploy_artifact(io.BytesIO(b""), aid)
        assert repository.root == tmp_path / "bundles"

    def test_logs_progress(self, tmp_path: Path, caplog):
        caplog.set_level(logging.INFO)
        ArtifactRepository(tmp_path).deploy(
            io.BytesIO(b"x"), "com.example", "widget", "1.2.0", None, "jar"
        )
        messages = [r.message for r in caplog.records]
        assert any(m.startswith("Writing data to") for m in messages)
        assert any(m.startswith("Data successfully written to") for m in messages)

    def test_io_failure_raises_deploy_error(self, tmp_path: Path):
        # "bundles" exists as a file, so no directory can be created below it
        (tmp_path / "bundles").write_text("blocker", encoding="utf-8")
        with pytest.raises(DeployError) as exc_info:
            ArtifactRepository(tmp_path).deploy(
                io.BytesIO(b"x"), "com.example", "widget", "1.2.0", None, "jar"
            )
        assert exc_info.value.path.endswith("widget-1.2.0.jar")
