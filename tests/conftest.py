# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for releasekit tests.

The pipeline shells out to git, cargo, lipo and hdiutil. Tests never run
those; FakeToolchain stands in for all of them through the injectable
command runner and writes the files each tool would have produced.
"""

import subprocess
import textwrap
from collections.abc import Sequence
from pathlib import Path

import pytest

from releasekit.config.schema import ReleaseConfig

REVISION = "abc1234"


class FakeToolchain:
    """
    Callable matching the CommandRunner protocol.

    Knobs:
      revision      : what `git rev-parse --short HEAD` prints
      git_returncode
      failing_triples : cargo exits 101 for these
      silent_triples  : cargo exits 0 but writes no binary
      lipo_returncode / hdiutil_returncode
      missing_tools   : raise FileNotFoundError as if not installed
      unrunnable_tools : raise PermissionError as if installed without the exec bit
    """

    def __init__(self, revision: str = REVISION) -> None:
        self.revision = revision
        self.git_returncode = 0
        self.failing_triples: set[str] = set()
        self.silent_triples: set[str] = set()
        self.lipo_returncode = 0
        self.hdiutil_returncode = 0
        self.missing_tools: set[str] = set()
        self.unrunnable_tools: set[str] = set()
        self.calls: list[list[str]] = []

    def programs(self) -> list[str]:
        return [Path(call[0]).name for call in self.calls]

    def __call__(
        self,
        args: Sequence[str],
        cwd: Path,
        capture: bool = False,
    ) -> "subprocess.CompletedProcess[str]":
        cmd = [str(a) for a in args]
        self.calls.append(cmd)
        program = Path(cmd[0]).name

        if program in self.missing_tools:
            raise FileNotFoundError(program)
        if program in self.unrunnable_tools:
            raise PermissionError(13, "Permission denied", program)

        handler = getattr(self, f"_{program}", None)
        if handler is None:
            raise AssertionError(f"Unexpected command: {cmd}")
        return handler(cmd, Path(cwd))

    @staticmethod
    def _done(cmd: list[str], returncode: int, stdout: str = "", stderr: str = ""):
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)

    def _git(self, cmd: list[str], cwd: Path):
        if self.git_returncode != 0:
            return self._done(cmd, self.git_returncode, stderr="fatal: not a git repository")
        return self._done(cmd, 0, stdout=f"{self.revision}\n")

    def _cargo(self, cmd: list[str], cwd: Path):
        triple = cmd[cmd.index("--target") + 1]
        if triple in self.failing_triples:
            return self._done(cmd, 101, stderr="error: could not compile `librecard`")
        if triple not in self.silent_triples:
            binary = "librecard.exe" if "windows" in triple else "librecard"
            out = cwd / "target" / triple / "release" / binary
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_bytes(f"binary for {triple}".encode())
            out.chmod(0o755)
        return self._done(cmd, 0)

    def _lipo(self, cmd: list[str], cwd: Path):
        if self.lipo_returncode != 0:
            return self._done(cmd, self.lipo_returncode, stderr="lipo: can't figure out the architecture")
        output = Path(cmd[cmd.index("-output") + 1])
        inputs = cmd[cmd.index("-create") + 1 : cmd.index("-output")]
        output.write_bytes(b"".join(Path(p).read_bytes() for p in inputs))
        # lipo output does not reliably carry the execute bit.
        output.chmod(0o644)
        return self._done(cmd, 0)

    def _hdiutil(self, cmd: list[str], cwd: Path):
        if self.hdiutil_returncode != 0:
            return self._done(cmd, self.hdiutil_returncode, stderr="hdiutil: create failed")
        if cmd[1] == "create":
            src = Path(cmd[cmd.index("-srcfolder") + 1])
            listing = sorted(p.relative_to(src).as_posix() for p in src.rglob("*"))
            Path(cmd[-1]).write_text("UDRW\n" + "\n".join(listing), encoding="utf-8")
        elif cmd[1] == "convert":
            source = Path(cmd[2]).read_text(encoding="utf-8")
            Path(cmd[cmd.index("-o") + 1]).write_text(
                source.replace("UDRW", "UDZO", 1), encoding="utf-8"
            )
        return self._done(cmd, 0)


@pytest.fixture()
def toolchain() -> FakeToolchain:
    return FakeToolchain()


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """A minimal project checkout with the documentation every package ships."""
    root = tmp_path / "librecard"
    root.mkdir()
    (root / "LICENSE").write_text("MIT License\n", encoding="utf-8")
    (root / "README.md").write_text("# LibreCard\n", encoding="utf-8")
    (root / "README_MACOS.txt").write_text(
        "Right-click the app and choose Open on first launch.\n", encoding="utf-8"
    )
    return root


@pytest.fixture()
def config() -> ReleaseConfig:
    return ReleaseConfig()


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """A small valid config overriding a few defaults."""
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          project_name: "librecard-test"
          log_level: "DEBUG"
        app:
          bundle_version: "0.2"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """Valid YAML that fails schema validation (unknown key)."""
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text("app:\n  colour: blue\n", encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file
