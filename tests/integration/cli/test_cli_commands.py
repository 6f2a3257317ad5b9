"""Tests for the rit command-line interface."""

import os
import re
from pathlib import Path

from typer.testing import CliRunner

from rit.cli.main import app
from rit.constants import EXIT_DATA_ERROR, EXIT_USER_ERROR

HASH_RE = re.compile(r"\b[0-9a-f]{40}\b")


def _hash_in(output: str) -> str:
    match = HASH_RE.search(output)
    assert match is not None, output
    return match.group(0)


class TestInit:
    """Test rit init."""

    def test_init_creates_layout(self, rit, cli_workspace: Path) -> None:
        """Test that init creates the repository directory."""
        result = rit("init")

        assert result.exit_code == 0
        assert "Initialized Rit repository" in result.output
        assert (cli_workspace / ".rit" / "objects").is_dir()
        assert (cli_workspace / ".rit" / "HEAD").exists()
        assert (cli_workspace / ".rit" / "index").exists()

    def test_init_twice_is_informational(self, rit, initialized: Path) -> None:
        """Test that re-running init reports and exits successfully."""
        result = rit("init")

        assert result.exit_code == 0
        assert "already exists" in result.output

    def test_root_from_environment(self, runner: CliRunner, cli_workspace: Path) -> None:
        """Test that RIT_ROOT selects the repository root."""
        result = runner.invoke(app, ["init", "--quiet"], env={"RIT_ROOT": str(cli_workspace)})

        assert result.exit_code == 0
        assert (cli_workspace / ".rit").is_dir()


class TestAdd:
    """Test rit add."""

    def test_add_prints_hash(self, rit, initialized: Path) -> None:
        """Test that add prints the blob hash and stages the file."""
        target = initialized / "a.txt"
        target.write_text("hello\n")

        result = rit("add", str(target))

        assert result.exit_code == 0
        blob_hash = _hash_in(result.output)
        assert (initialized / ".rit" / "objects" / blob_hash).read_text() == "hello\n"
        assert "Added a.txt" in result.output

    def test_add_missing_file(self, rit, initialized: Path) -> None:
        """Test that a missing file is an error with a non-zero exit."""
        result = rit("add", str(initialized / "missing.txt"))

        assert result.exit_code == EXIT_USER_ERROR
        assert "Error:" in result.output
        assert "File not found" in result.output

    def test_add_undecodable_file_name(self, rit, initialized: Path) -> None:
        """Test that a non-UTF-8 file name is a clean error, not a traceback."""
        target = initialized / os.fsdecode(b"\xff.txt")
        target.write_text("hi\n")

        result = rit("add", str(target))

        assert result.exit_code == EXIT_USER_ERROR
        assert "Error:" in result.output
        assert "not valid utf-8" in result.output

    def test_add_without_init(self, rit, cli_workspace: Path) -> None:
        """Test that add outside a repository fails."""
        target = cli_workspace / "a.txt"
        target.write_text("x")

        result = rit("add", str(target))

        assert result.exit_code == EXIT_USER_ERROR
        assert "Not a Rit repository" in result.output


class TestCommit:
    """Test rit commit."""

    def test_commit_positional_message(self, rit, initialized: Path) -> None:
        """Test committing with the message as an argument."""
        (initialized / "a.txt").write_text("hello\n")
        rit("add", str(initialized / "a.txt"))

        result = rit("commit", "first")

        assert result.exit_code == 0
        commit_hash = _hash_in(result.output)
        assert (initialized / ".rit" / "HEAD").read_text() == commit_hash

    def test_commit_message_option(self, rit, initialized: Path) -> None:
        """Test committing with -m."""
        result = rit("commit", "-m", "via option")

        assert result.exit_code == 0
        assert "Committed with hash" in result.output

    def test_commit_empty_index_notes_it(self, rit, initialized: Path) -> None:
        """Test that an empty commit is allowed and mentioned."""
        result = rit("commit", "nothing staged")

        assert result.exit_code == 0
        assert "empty commit" in result.output

    def test_commit_requires_message(self, rit, initialized: Path) -> None:
        """Test that a missing message is an error."""
        result = rit("commit")

        assert result.exit_code == EXIT_USER_ERROR
        assert "Commit message is required" in result.output


class TestLog:
    """Test rit log."""

    def test_log_no_commits(self, rit, initialized: Path) -> None:
        result = rit("log")

        assert result.exit_code == 0
        assert "No commits yet" in result.output

    def test_log_newest_first(self, rit, initialized: Path) -> None:
        """Test that log lists commits from HEAD back to the root."""
        first = _hash_in(rit("commit", "first").output)
        second = _hash_in(rit("commit", "second").output)

        result = rit("log")

        assert result.exit_code == 0
        assert result.output.index(second) < result.output.index("second")
        assert result.output.index("second") < result.output.index("first")
        assert f"Parent: {first}" in result.output
        assert "(root commit)" in result.output

    def test_log_oneline_and_limit(self, rit, initialized: Path) -> None:
        """Test --oneline together with --max-count."""
        rit("commit", "first")
        second = _hash_in(rit("commit", "second").output)

        result = rit("log", "--oneline", "-n", "1")

        assert result.exit_code == 0
        assert result.output.strip() == f"{second[:7]} second"

    def test_log_limit_skips_damaged_older_commit(self, rit, initialized: Path) -> None:
        """Test that -n 1 only reads the newest commit."""
        first = _hash_in(rit("commit", "first").output)
        rit("commit", "second")
        (initialized / ".rit" / "objects" / first).write_text("garbage")

        result = rit("log", "--oneline", "-n", "1")

        assert result.exit_code == 0
        assert "second" in result.output

    def test_log_corrupt_head(self, rit, initialized: Path) -> None:
        """Test that a damaged HEAD is reported as a data error."""
        (initialized / ".rit" / "HEAD").write_text("not a hash")

        result = rit("log")

        assert result.exit_code == EXIT_DATA_ERROR
        assert "Error:" in result.output


class TestShow:
    """Test rit show."""

    def test_show_initial_commit(self, rit, initialized: Path) -> None:
        """Test that the root commit lists files without a diff."""
        (initialized / "a.txt").write_text("hello\n")
        rit("add", str(initialized / "a.txt"))
        first = _hash_in(rit("commit", "first").output)

        result = rit("show", first)

        assert result.exit_code == 0
        assert "File: a.txt" in result.output
        assert "Initial commit" in result.output
        assert "File content:" in result.output
        assert "++hello" in result.output
        assert "Diff:" not in result.output

    def test_show_diff(self, rit, initialized: Path) -> None:
        """Test that a modified file shows added and removed lines."""
        target = initialized / "a.txt"
        target.write_text("hello\nold\n")
        rit("add", str(target))
        rit("commit", "first")
        target.write_text("hello\nnew\n")
        rit("add", str(target))
        second = _hash_in(rit("commit", "second").output)

        result = rit("show", second)

        assert result.exit_code == 0
        assert "Diff:" in result.output
        assert "--old" in result.output
        assert "++new" in result.output
        assert "  hello" in result.output

    def test_show_no_diff(self, rit, initialized: Path) -> None:
        """Test that --no-diff keeps the counts but drops the lines."""
        target = initialized / "a.txt"
        target.write_text("a\n")
        rit("add", str(target))
        rit("commit", "first")
        target.write_text("a\nb\n")
        rit("add", str(target))
        second = _hash_in(rit("commit", "second").output)

        result = rit("show", "--no-diff", second)

        assert result.exit_code == 0
        assert "+1 -0" in result.output
        assert "++b" not in result.output

    def test_show_markup_in_content_is_literal(self, rit, initialized: Path) -> None:
        """Test that file content is not interpreted as console markup."""
        target = initialized / "a.txt"
        target.write_text("x\n")
        rit("add", str(target))
        rit("commit", "first")
        target.write_text("x\n[bold]y[/bold]\n")
        rit("add", str(target))
        second = _hash_in(rit("commit", "second").output)

        result = rit("show", second)

        assert "++[bold]y[/bold]" in result.output

    def test_show_new_file_content(self, rit, initialized: Path) -> None:
        """Test that a path absent from the parent prints its content."""
        (initialized / "a.txt").write_text("a\n")
        rit("add", str(initialized / "a.txt"))
        rit("commit", "first")
        (initialized / "b.txt").write_text("brand new\n")
        rit("add", str(initialized / "b.txt"))
        second = _hash_in(rit("commit", "second").output)

        result = rit("show", second)

        assert "First commit of this file" in result.output
        assert "++brand new" in result.output

        hidden = rit("show", "--no-diff", second)
        assert "brand new" not in hidden.output

    def test_show_marks_missing_final_newline(self, rit, initialized: Path) -> None:
        """Test that "a" and "a\\n" are distinguishable in the output."""
        target = initialized / "a.txt"
        target.write_text("x\na")
        rit("add", str(target))
        rit("commit", "first")
        target.write_text("x\na\n")
        rit("add", str(target))
        second = _hash_in(rit("commit", "second").output)

        result = rit("show", second)

        lines = result.output.splitlines()
        removed = lines.index("--a")
        assert lines[removed + 1] == "\\ No newline at end of file"
        assert lines[removed + 2] == "++a"
        assert lines.count("\\ No newline at end of file") == 1

    def test_show_crlf_lines(self, rit, initialized: Path) -> None:
        """Test that CRLF terminators are not echoed."""
        target = initialized / "w.txt"
        target.write_bytes(b"one\r\n")
        rit("add", str(target))
        rit("commit", "first")
        target.write_bytes(b"one\r\ntwo\r\n")
        rit("add", str(target))
        second = _hash_in(rit("commit", "second").output)

        result = rit("show", second)

        assert "++two" in result.output.splitlines()
        assert "\r" not in result.output

    def test_show_unknown_hash(self, rit, initialized: Path) -> None:
        """Test that an unknown commit is an error and changes nothing."""
        head_before = (initialized / ".rit" / "HEAD").read_text()
        index_before = (initialized / ".rit" / "index").read_text()

        result = rit("show", "0" * 40)

        assert result.exit_code == EXIT_USER_ERROR
        assert "Object not found" in result.output
        assert (initialized / ".rit" / "HEAD").read_text() == head_before
        assert (initialized / ".rit" / "index").read_text() == index_before


class TestStatusAndVersion:
    """Test rit status and rit version."""

    def test_status_lists_staged(self, rit, initialized: Path) -> None:
        """Test that status shows HEAD and staged entries."""
        (initialized / "a.txt").write_text("hello\n")
        rit("add", str(initialized / "a.txt"))

        result = rit("status")

        assert result.exit_code == 0
        assert "(no commits yet)" in result.output
        assert "Staged (1)" in result.output
        assert "a.txt" in result.output

    def test_status_nothing_staged(self, rit, initialized: Path) -> None:
        commit_hash = _hash_in(rit("commit", "first").output)

        result = rit("status")

        assert commit_hash in result.output
        assert "Nothing staged" in result.output

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output
