import json
import unittest
from pathlib import Path
from unittest.mock import patch

import click
from click.testing import CliRunner

import nullcommits.cli as cli
from nullcommits.llm.openai_client import LLMError


CONFIG = {
    "apiKey": "sk-test",
    "model": "gpt-test",
    "baseUrl": "https://example.test/v1",
    "requestTimeout": 30,
    "diffBudget": 128000,
    "source": "config file",
}


class DummyGitClient:
    def __init__(self, staged=None, diffs=None):
        self.staged = staged or []
        self.diffs = diffs or {}

    def get_staged_files(self):
        return list(self.staged)

    def get_file_diff(self, path):
        return self.diffs.get(path, "")


class DummyGenerator:
    def __init__(self, client=None, message="Rewritten message", error=None):
        self.client = client
        self.message = message
        self.error = error

    def rewrite(self, original_message, diff):
        if self.error:
            raise self.error
        return self.message


class TestProcessCommand(unittest.TestCase):
    def test_process_rewrites_message(self) -> None:
        runner = CliRunner()
        dummy = DummyGitClient(["a.py"], {"a.py": "+x\n"})
        with runner.isolated_filesystem():
            Path("MSG").write_text("wip", encoding="utf-8")
            with patch.object(cli, "open_repository", return_value=dummy):
                with patch.object(cli, "load_config", return_value=CONFIG):
                    with patch.object(cli, "CommitMessageGenerator", DummyGenerator):
                        result = runner.invoke(cli.main, ["process", "MSG", "--diff-budget", "10K"])
            self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
            self.assertEqual(Path("MSG").read_text(encoding="utf-8"), "Rewritten message\n")
            self.assertIn("Commit message enhanced", result.output)

    def test_process_passes_budget_and_jobs(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("MSG").write_text("wip", encoding="utf-8")
            with patch.object(cli, "open_repository", return_value=DummyGitClient()):
                with patch.object(cli, "load_config", return_value=CONFIG):
                    with patch.object(cli, "process_commit_message", return_value=False) as mock_process:
                        result = runner.invoke(cli.main, ["process", "MSG", "--diff-budget", "2K", "-j", "3"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        kwargs = mock_process.call_args.kwargs
        self.assertEqual(kwargs["diff_budget"], 2000)
        self.assertEqual(kwargs["max_workers"], 3)
        self.assertNotIn("enhanced", result.output)

    def test_process_missing_api_key(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("MSG").write_text("wip", encoding="utf-8")
            with patch.object(cli, "open_repository", return_value=DummyGitClient(["a.py"], {"a.py": "+x\n"})):
                result = runner.invoke(cli.main, ["process", "MSG"])
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)
        self.assertIn("API key not found", result.output)

    def test_process_skips_special_commit_without_api_key(self) -> None:
        runner = CliRunner()
        dummy = DummyGitClient(["a.py"], {"a.py": "+x\n"})
        with runner.isolated_filesystem():
            Path("MSG").write_text("Merge branch 'dev'", encoding="utf-8")
            with patch.object(cli, "open_repository", return_value=dummy):
                result = runner.invoke(cli.main, ["process", "MSG"])
            self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
            self.assertEqual(Path("MSG").read_text(encoding="utf-8"), "Merge branch 'dev'")

    def test_process_without_staged_changes_without_api_key(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("MSG").write_text("wip", encoding="utf-8")
            with patch.object(cli, "open_repository", return_value=DummyGitClient()):
                result = runner.invoke(cli.main, ["process", "MSG"])
            self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
            self.assertEqual(Path("MSG").read_text(encoding="utf-8"), "wip")

    def test_process_invalid_budget(self) -> None:
        runner = CliRunner()
        with patch.object(cli, "open_repository", return_value=DummyGitClient()):
            result = runner.invoke(cli.main, ["process", "MSG", "--diff-budget", "zero"])
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)

    def test_process_llm_failure(self) -> None:
        runner = CliRunner()
        dummy = DummyGitClient(["a.py"], {"a.py": "+x\n"})

        def failing_generator(client):
            return DummyGenerator(client, error=LLMError("quota exceeded"))

        with runner.isolated_filesystem():
            Path("MSG").write_text("wip", encoding="utf-8")
            with patch.object(cli, "open_repository", return_value=dummy):
                with patch.object(cli, "load_config", return_value=CONFIG):
                    with patch.object(cli, "CommitMessageGenerator", failing_generator):
                        result = runner.invoke(cli.main, ["process", "MSG"])
            self.assertEqual(result.exit_code, cli.EXIT_LLM_FAILURE)
            self.assertIn("quota exceeded", result.output)
            self.assertEqual(Path("MSG").read_text(encoding="utf-8"), "wip")

    def test_process_missing_message_file(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            with patch.object(cli, "open_repository", return_value=DummyGitClient()):
                with patch.object(cli, "load_config", return_value=CONFIG):
                    result = runner.invoke(cli.main, ["process", "does-not-exist"])
        self.assertEqual(result.exit_code, cli.EXIT_GENERIC_ERROR)
        self.assertIn("Commit message file not found", result.output)

    def test_process_outside_repository(self) -> None:
        runner = CliRunner()
        with patch.object(cli.GitClient, "find_repo_root", return_value=None):
            result = runner.invoke(cli.main, ["process", "MSG"])
        self.assertEqual(result.exit_code, cli.EXIT_NO_REPO)
        self.assertIn("Not a git repository", result.output)


class TestPreviewCommand(unittest.TestCase):
    def test_preview_prints_diff_and_stats(self) -> None:
        runner = CliRunner()
        dummy = DummyGitClient(["a.py", "logo.png"], {"a.py": "+one\n-two\n"})
        with patch.object(cli, "open_repository", return_value=dummy):
            result = runner.invoke(cli.main, ["preview", "--diff-budget", "500"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        self.assertIn("[media] logo.png", result.output)
        self.assertIn("+one", result.output)
        self.assertIn("Files: 2", result.output)
        self.assertIn("Lines changed: 2", result.output)

    def test_preview_without_changes(self) -> None:
        runner = CliRunner()
        with patch.object(cli, "open_repository", return_value=DummyGitClient()):
            result = runner.invoke(cli.main, ["preview"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("No staged changes", result.output)


class TestConfigCommands(unittest.TestCase):
    def test_show_default_budget(self) -> None:
        result = CliRunner().invoke(cli.main, ["config", "show-diff-budget"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("128000 characters (128K)", result.output)
        self.assertIn("(using default value)", result.output)

    def test_invalid_budget_rejected(self) -> None:
        result = CliRunner().invoke(cli.main, ["config", "set-diff-budget", "lots"])
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)


def test_set_and_show_budget(config_path: Path):
    runner = CliRunner()
    result = runner.invoke(cli.main, ["config", "set-diff-budget", "64K"])
    assert result.exit_code == cli.EXIT_SUCCESS, result.output
    assert "Diff budget set to 64000 characters (64K)" in result.output
    assert json.loads(config_path.read_text()) == {"diffBudget": 64000}

    result = runner.invoke(cli.main, ["config", "show-diff-budget"])
    assert "64000 characters" in result.output
    assert "using default value" not in result.output


def test_set_budget_warnings(config_path: Path):
    runner = CliRunner()
    assert "Very small budget" in runner.invoke(cli.main, ["config", "set-diff-budget", "500"]).output
    assert "Very large budget" in runner.invoke(cli.main, ["config", "set-diff-budget", "600K"]).output


def test_open_repository_returns_client(tmp_path: Path):
    (tmp_path / ".git").mkdir()
    with patch.object(cli.Path, "cwd", return_value=tmp_path):
        client = cli.open_repository()
    assert client.repo_root == tmp_path.resolve()


def test_open_repository_exits_outside_repo(tmp_path: Path):
    with patch.object(cli.GitClient, "find_repo_root", return_value=None):
        try:
            cli.open_repository()
        except click.exceptions.Exit as exc:
            assert exc.exit_code == cli.EXIT_NO_REPO
        else:
            raise AssertionError("Exit was not raised")


if __name__ == "__main__":
    unittest.main()
