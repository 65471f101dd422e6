# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for staging directory assembly.
"""

from pathlib import Path

import pytest

from releasekit.config.schema import PathsConfig, ReleaseConfig
from releasekit.pipeline.exceptions import DocumentMissing, StagingFailed
from releasekit.staging import assembler
from releasekit.staging.assembler import StagedDocument, assemble_staging, resolve_documents
from releasekit.targets.descriptor import resolve_target


@pytest.fixture()
def binary(tmp_path: Path) -> Path:
    path = tmp_path / "build" / "librecard"
    path.parent.mkdir()
    path.write_bytes(b"\x7fELF")
    path.chmod(0o755)
    return path


class TestResolveDocuments:
    def test_linux_documents(self, project: Path, config: ReleaseConfig) -> None:
        docs = resolve_documents(resolve_target("linux_amd64"), config, project)
        assert [(d.source.name, d.staged_name) for d in docs] == [
            ("LICENSE", "LICENSE"),
            ("README.md", "README.md"),
        ]

    def test_windows_renames(self, project: Path, config: ReleaseConfig) -> None:
        docs = resolve_documents(resolve_target("windows_amd64"), config, project)
        assert [d.staged_name for d in docs] == ["LICENSE.txt", "README.txt"]

    def test_missing_license(self, project: Path, config: ReleaseConfig) -> None:
        (project / "LICENSE").unlink()
        with pytest.raises(DocumentMissing, match="LICENSE"):
            resolve_documents(resolve_target("linux_amd64"), config, project)

    def test_macos_needs_platform_notes(self, project: Path, config: ReleaseConfig) -> None:
        (project / "README_MACOS.txt").unlink()
        resolve_documents(resolve_target("linux_amd64"), config, project)
        with pytest.raises(DocumentMissing, match="README_MACOS.txt"):
            resolve_documents(resolve_target("macos_universal"), config, project)

    def test_configured_paths(self, project: Path) -> None:
        (project / "docs").mkdir()
        (project / "docs" / "COPYING").write_text("GPL", encoding="utf-8")
        config = ReleaseConfig(paths=PathsConfig(license_file="docs/COPYING"))
        docs = resolve_documents(resolve_target("linux_amd64"), config, project)
        assert docs[0].source == project / "docs" / "COPYING"
        assert docs[0].staged_name == "LICENSE"


class TestAssembleStaging:
    def test_contains_exactly_binary_and_documents(
        self, project: Path, config: ReleaseConfig, binary: Path, tmp_path: Path
    ) -> None:
        docs = resolve_documents(resolve_target("linux_amd64"), config, project)
        staging_path = tmp_path / "target" / "librecard-linux_amd64-abc1234"
        staging = assemble_staging(staging_path, binary, "librecard", docs)

        assert sorted(p.name for p in staging_path.iterdir()) == ["LICENSE", "README.md", "librecard"]
        assert staging.names == {"librecard", "LICENSE", "README.md"}
        assert (staging_path / "librecard").stat().st_mode & 0o111
        assert (staging_path / "README.md").read_text(encoding="utf-8") == "# LibreCard\n"

    def test_stale_contents_are_discarded(
        self, project: Path, config: ReleaseConfig, binary: Path, tmp_path: Path
    ) -> None:
        staging_path = tmp_path / "stage"
        staging_path.mkdir()
        (staging_path / "leftover.txt").write_text("old", encoding="utf-8")

        docs = resolve_documents(resolve_target("linux_amd64"), config, project)
        assemble_staging(staging_path, binary, "librecard", docs)
        assert not (staging_path / "leftover.txt").exists()

    def test_directory_payload_is_copied_recursively(self, tmp_path: Path, project: Path) -> None:
        bundle = tmp_path / "LibreCard.app"
        (bundle / "Contents" / "MacOS").mkdir(parents=True)
        (bundle / "Contents" / "MacOS" / "LibreCard").write_bytes(b"fat")
        staging_path = tmp_path / "stage"

        staging = assemble_staging(
            staging_path,
            bundle,
            "LibreCard.app",
            [StagedDocument(project / "LICENSE", "LICENSE.txt")],
        )
        assert (staging_path / "LibreCard.app" / "Contents" / "MacOS" / "LibreCard").is_file()
        assert staging.names == {"LibreCard.app", "LICENSE.txt"}

    def test_missing_payload(self, tmp_path: Path) -> None:
        with pytest.raises(StagingFailed, match="payload not found"):
            assemble_staging(tmp_path / "stage", tmp_path / "ghost", "ghost", [])
        assert not (tmp_path / "stage").exists()

    def test_copy_failure_is_a_staging_error(
        self, binary: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def refuse(src, dst, **kwargs):
            raise PermissionError(13, "Permission denied", str(dst))

        monkeypatch.setattr(assembler.shutil, "copy2", refuse)
        with pytest.raises(StagingFailed, match="Permission denied") as excinfo:
            assemble_staging(tmp_path / "stage", binary, "librecard", [])
        assert excinfo.value.stage == "staging"
