"""Integration tests using real git repositories.

Builds small workspaces of real repositories (with bare repos acting as
remotes) and runs the full scan pipeline end-to-end, including the CLI.
"""

import json
import shutil
import subprocess
from pathlib import Path

import pytest

from gitski import (
    DEFAULT_IGNORE_PATTERNS,
    NullOutputHandler,
    ScanConfig,
    ScanOrchestrator,
    ScanReport,
    load_config_file,
    main,
)

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _git(cwd: Path, *args: str) -> str:
    """Run a git command and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _commit_file(repo: Path, filename: str, content: str, message: str) -> str:
    """Create/overwrite a file and commit it. Returns the commit hash."""
    filepath = repo / filename
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text(content)
    _git(repo, "add", filename)
    _git(repo, "commit", "-m", message)
    return _git(repo, "rev-parse", "HEAD")


def _init_repo(path: Path, branch: str = "main") -> Path:
    """Create a repository with one commit on the given branch."""
    path.mkdir(parents=True)
    _git(path, "init", "-b", branch)
    _git(path, "config", "user.email", "test@test.com")
    _git(path, "config", "user.name", "Test")
    _commit_file(path, "init.txt", "initial", "Initial commit")
    return path


def _add_upstream(repo: Path, remotes_dir: Path, branch: str) -> Path:
    """Create a bare remote outside the workspace and push the branch with tracking."""
    remote = remotes_dir / f"{repo.name}.git"
    remote.mkdir(parents=True)
    _git(remote, "init", "--bare", "-b", branch)
    _git(repo, "remote", "add", "origin", str(remote))
    _git(repo, "push", "-u", "origin", branch)
    return remote


def _run_scan(root: Path, **config_overrides) -> ScanReport:
    """Run the scan orchestrator on a directory and return the report."""
    defaults = dict(root=root, show_progress=False)
    defaults.update(config_overrides)
    orchestrator = ScanOrchestrator(ScanConfig(**defaults), NullOutputHandler())
    return orchestrator.run()


def _run_cli(argv: list[str], capsys) -> tuple[int, str]:
    """Run main() and return (exit code, stdout)."""
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code, capsys.readouterr().out


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A directory that contains the repositories to scan."""
    ws = tmp_path / "workspace"
    ws.mkdir()
    return ws


@pytest.fixture
def remotes_dir(tmp_path: Path) -> Path:
    """Bare remotes live here, outside the scanned workspace."""
    remotes = tmp_path / "remotes"
    remotes.mkdir()
    return remotes


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch):
    """Keep a user's ~/.gitskirc.toml out of the tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def mixed_workspace(workspace: Path, remotes_dir: Path) -> Path:
    """repoA: clean on main. repoB: develop, one modified file, one unpushed commit."""
    _init_repo(workspace / "repoA", branch="main")

    repo_b = _init_repo(workspace / "repoB", branch="develop")
    _add_upstream(repo_b, remotes_dir, "develop")
    _commit_file(repo_b, "feature.txt", "feature", "Unpushed work")
    (repo_b / "init.txt").write_text("modified")
    return workspace


# ---------------------------------------------------------------------------
# Tests: End-to-end scenarios
# ---------------------------------------------------------------------------

class TestScenarios:
    def test_clean_and_dirty_repositories(self, mixed_workspace: Path):
        report = _run_scan(mixed_workspace)

        assert [s.rel_path for s in report.statuses] == ["repoA", "repoB"]
        repo_a, repo_b = report.statuses

        assert repo_a.is_dirty is False
        assert repo_a.branch == "main"
        assert repo_a.unpushed == 0

        assert repo_b.is_dirty is True
        assert "init.txt" in repo_b.status
        assert repo_b.branch == "develop"
        assert repo_b.unpushed == 1
        assert report.attention_count() == 1

    def test_default_ignore_skips_node_modules(self, workspace: Path):
        _init_repo(workspace / "node_modules" / "innerRepo")
        _init_repo(workspace / "app")

        report = _run_scan(workspace)
        assert [s.rel_path for s in report.statuses] == ["app"]

    def test_empty_ignore_set_finds_node_modules_repo(self, workspace: Path):
        inner = _init_repo(workspace / "node_modules" / "innerRepo")

        report = _run_scan(workspace, ignore_patterns=frozenset())
        assert [s.path for s in report.statuses] == [inner]

    def test_no_repositories(self, workspace: Path):
        (workspace / "just" / "folders").mkdir(parents=True)

        report = _run_scan(workspace)
        assert report.statuses == []
        assert report.has_attention() is False


# ---------------------------------------------------------------------------
# Tests: Status fields
# ---------------------------------------------------------------------------

class TestStatusFields:
    def test_no_upstream_does_not_affect_other_fields(self, workspace: Path):
        repo = _init_repo(workspace / "local-only")
        _commit_file(repo, "more.txt", "more", "Second commit")
        (repo / "init.txt").write_text("stash me")
        _git(repo, "stash")
        (repo / "untracked.txt").write_text("new")

        (status,) = _run_scan(workspace).statuses
        assert status.unpushed == 0
        assert status.stash_count == 1
        assert "untracked.txt" in status.status
        assert status.branch == "main"

    def test_verbose_collects_last_commit(self, workspace: Path):
        repo = _init_repo(workspace / "repo")
        _commit_file(repo, "a.txt", "a", "Add feature A")

        (status,) = _run_scan(workspace, verbose=True).statuses
        assert status.last_commit is not None
        assert status.last_commit.message == "Add feature A"
        assert status.last_commit.author == "Test"

    def test_non_verbose_skips_last_commit(self, workspace: Path):
        _init_repo(workspace / "repo")
        (status,) = _run_scan(workspace).statuses
        assert status.last_commit is None

    def test_empty_repository_still_reported(self, workspace: Path):
        empty = workspace / "empty"
        empty.mkdir()
        _git(empty, "init", "-b", "main")

        (status,) = _run_scan(workspace).statuses
        assert status.rel_path == "empty"
        assert status.unpushed == 0
        assert status.stash_count == 0

    def test_root_is_repository(self, workspace: Path):
        _init_repo(workspace / "solo")
        (status,) = _run_scan(workspace / "solo").statuses
        assert status.rel_path == "."

    def test_many_repositories_keep_order(self, workspace: Path):
        names = [f"repo{i:02d}" for i in range(10)]
        for name in names:
            _init_repo(workspace / name)

        report = _run_scan(workspace, concurrency=3)
        assert [s.rel_path for s in report.statuses] == names


# ---------------------------------------------------------------------------
# Tests: CLI
# ---------------------------------------------------------------------------

class TestCli:
    def test_json_output(self, mixed_workspace: Path, capsys):
        code, out = _run_cli([str(mixed_workspace), "--json"], capsys)

        assert code == 0
        data = json.loads(out)
        assert data["total"] == 2
        assert data["needs_attention"] == 1
        by_name = {r["rel_path"]: r for r in data["repositories"]}
        assert by_name["repoB"]["dirty"] is True
        assert by_name["repoB"]["unpushed"] == 1
        assert by_name["repoA"]["dirty"] is False

    def test_console_output(self, mixed_workspace: Path, capsys):
        code, out = _run_cli([str(mixed_workspace), "--no-progress"], capsys)

        assert code == 0
        assert "repoA → [main] clean" in out
        assert "repoB → [develop] uncommitted changes, 1 unpushed commit" in out
        assert "Found 1 repository(s) with uncommitted changes." in out
        assert "Completed in" in out

    def test_verbose_console_output(self, workspace: Path, capsys):
        repo = _init_repo(workspace / "repo")
        _commit_file(repo, "a.txt", "a", "Add feature A")

        code, out = _run_cli([str(workspace), "-v", "--no-progress"], capsys)
        assert code == 0
        assert "Last commit: Add feature A" in out

    def test_no_repositories(self, workspace: Path, capsys):
        code, out = _run_cli([str(workspace), "--no-progress"], capsys)
        assert code == 0
        assert "No Git repositories found." in out

    def test_missing_directory_exits_1(self, tmp_path: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "nope")])
        assert exc_info.value.code == 1
        assert "does not exist" in capsys.readouterr().err

    def test_file_instead_of_directory_exits_1(self, tmp_path: Path, capsys):
        target = tmp_path / "file.txt"
        target.write_text("x")
        with pytest.raises(SystemExit) as exc_info:
            main([str(target)])
        assert exc_info.value.code == 1
        assert "not a directory" in capsys.readouterr().err

    def test_no_default_ignore(self, workspace: Path, capsys):
        _init_repo(workspace / "node_modules" / "innerRepo")

        _, out = _run_cli([str(workspace), "--json"], capsys)
        assert json.loads(out)["total"] == 0

        _, out = _run_cli([str(workspace), "--json", "--no-default-ignore"], capsys)
        assert json.loads(out)["repositories"][0]["rel_path"].endswith("innerRepo")

    def test_custom_ignore(self, workspace: Path, capsys):
        _init_repo(workspace / "keep")
        _init_repo(workspace / "archive-2020" / "old")
        _init_repo(workspace / "skip-me")

        _, out = _run_cli([str(workspace), "--json", "--ignore", "archive-*, skip-me"], capsys)
        assert [r["rel_path"] for r in json.loads(out)["repositories"]] == ["keep"]

    def test_max_depth(self, workspace: Path, capsys):
        _init_repo(workspace / "a" / "b" / "deep")
        _init_repo(workspace / "top")

        _, out = _run_cli([str(workspace), "--json", "--max-depth", "1"], capsys)
        assert [r["rel_path"] for r in json.loads(out)["repositories"]] == ["top"]

    def test_invalid_max_depth_rejected(self, workspace: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([str(workspace), "--max-depth", "0"])
        assert exc_info.value.code == 2


# ---------------------------------------------------------------------------
# Tests: Config file integration
# ---------------------------------------------------------------------------

class TestConfigFile:
    def test_loads_config_from_search_dir(self, workspace: Path):
        (workspace / ".gitskirc.toml").write_text('concurrency = 2\nignore = ["legacy"]\n')

        loaded = load_config_file(workspace)
        assert loaded.get("concurrency") == 2
        assert loaded.get("ignore") == ["legacy"]

    def test_explicit_config_path(self, tmp_path: Path):
        custom = tmp_path / "my_config.toml"
        custom.write_text('verbose = true\nmax_depth = 3\n')

        loaded = load_config_file(tmp_path, config_path=str(custom))
        assert loaded.get("verbose") is True
        assert loaded.get("max_depth") == 3

    def test_home_config_used_as_fallback(self, workspace: Path, isolated_home: Path):
        (isolated_home / ".gitskirc.toml").write_text('timeout = 9.5\n')
        assert load_config_file(workspace) == {"timeout": 9.5}

    def test_missing_config_returns_empty(self, workspace: Path):
        assert load_config_file(workspace) == {}

    def test_invalid_toml_returns_empty(self, workspace: Path, capsys):
        (workspace / ".gitskirc.toml").write_text("not = [valid")
        assert load_config_file(workspace) == {}
        assert "Failed to parse" in capsys.readouterr().out

    def test_config_file_reaches_scan(self, workspace: Path, capsys):
        _init_repo(workspace / "keep")
        _init_repo(workspace / "legacy" / "old")
        (workspace / ".gitskirc.toml").write_text('ignore = ["legacy"]\njson_output = true\n')

        _, out = _run_cli([str(workspace)], capsys)
        assert [r["rel_path"] for r in json.loads(out)["repositories"]] == ["keep"]

    def test_cli_overrides_config_file(self, workspace: Path, capsys):
        _init_repo(workspace / "node_modules" / "dep")
        (workspace / ".gitskirc.toml").write_text('no_default_ignore = false\n')

        _, out = _run_cli([str(workspace), "--json", "--no-default-ignore"], capsys)
        assert json.loads(out)["total"] == 1

    @pytest.mark.parametrize("toml, key", [
        ('concurrency = "eight"\n', "concurrency"),
        ('ignore = 5\n', "ignore"),
        ('max_depth = -1\n', "max_depth"),
        ('verbose = "yes"\n', "verbose"),
    ])
    def test_invalid_config_value_exits_1(self, workspace: Path, capsys, toml, key):
        _init_repo(workspace / "repo")
        (workspace / ".gitskirc.toml").write_text(toml)

        with pytest.raises(SystemExit) as exc_info:
            main([str(workspace), "--json"])
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert key in captured.err
        assert "config file" in captured.err

    def test_numeric_string_in_config_accepted(self, workspace: Path, capsys):
        _init_repo(workspace / "top")
        _init_repo(workspace / "a" / "deep")
        (workspace / ".gitskirc.toml").write_text('max_depth = "1"\n')

        code, out = _run_cli([str(workspace), "--json"], capsys)
        assert code == 0
        assert [r["rel_path"] for r in json.loads(out)["repositories"]] == ["top"]

    def test_defaults_listed_in_help(self, capsys):
        with pytest.raises(SystemExit):
            main(["--help"])
        out = capsys.readouterr().out
        for name in DEFAULT_IGNORE_PATTERNS:
            assert name in out
