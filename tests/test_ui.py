"""Tests for the terminal prompts and progress bars."""

import io
from unittest.mock import MagicMock

import pytest
from prompt_toolkit.document import Document
from prompt_toolkit.validation import ValidationError as PromptValidationError
from rich.console import Console

from deploykit_cli.services.validation import validate_hostname
from deploykit_cli.ui.progress import RichProgressReporter
from deploykit_cli.ui.prompts import FieldValidator, InquirerPrompter


class TestFieldValidator:
    """Tests for FieldValidator."""

    def test_accepts_valid_input(self):
        FieldValidator(validate_hostname).validate(Document("aosc"))

    def test_reports_reason(self):
        with pytest.raises(PromptValidationError) as exc_info:
            FieldValidator(validate_hostname).validate(Document("aosc.local"))
        assert "special characters" in exc_info.value.message
        assert exc_info.value.cursor_position == len("aosc.local")


class TestInquirerPrompter:
    """Tests for InquirerPrompter."""

    @pytest.fixture
    def inquirer(self, mocker):
        return mocker.patch("deploykit_cli.ui.prompts.inquirer")

    def test_confirm(self, inquirer):
        inquirer.confirm.return_value.execute.return_value = True

        assert InquirerPrompter().confirm("Proceed?", default=False) is True
        inquirer.confirm.assert_called_once_with(message="Proceed?", default=False)

    def test_select_returns_value(self, inquirer):
        sentinel = object()
        inquirer.select.return_value.execute.return_value = sentinel

        result = InquirerPrompter().select("Pick", [("one", 1), ("two", sentinel)])

        assert result is sentinel
        choices = inquirer.select.call_args.kwargs["choices"]
        assert [(c.name, c.value) for c in choices] == [("one", 1), ("two", sentinel)]

    def test_searchable_select_uses_fuzzy(self, inquirer):
        inquirer.fuzzy.return_value.execute.return_value = "UTC"

        assert InquirerPrompter().select("Zone", [("UTC", "UTC")], searchable=True) == "UTC"
        inquirer.select.assert_not_called()

    def test_text_with_check(self, inquirer):
        inquirer.text.return_value.execute.return_value = "aosc"

        InquirerPrompter().text("Hostname", check=validate_hostname)

        validator = inquirer.text.call_args.kwargs["validate"]
        assert isinstance(validator, FieldValidator)

    def test_password_uses_secret(self, inquirer):
        inquirer.secret.return_value.execute.return_value = "hunter2"

        assert InquirerPrompter().password("Password") == "hunter2"
        assert inquirer.secret.call_args.kwargs["validate"] is None


class TestRichProgressReporter:
    """Tests for RichProgressReporter."""

    @pytest.fixture
    def reporter(self):
        console = Console(file=io.StringIO(), force_terminal=False, width=80)
        reporter = RichProgressReporter(console)
        yield reporter
        reporter.close()

    def test_tracks_step_and_progress(self, reporter):
        reporter.start(8, 100)
        reporter.update(3, 40)

        step, sub = reporter._progress.tasks
        assert (step.completed, step.total) == (3, 8)
        assert (sub.completed, sub.total) == (40, 100)

    def test_finish_completes_both_bars(self, reporter):
        reporter.start(8, 100)
        reporter.update(2, 10)
        reporter.finish()

        assert all(task.finished for task in reporter._progress.tasks)

    def test_update_before_start_is_ignored(self, reporter):
        reporter.update(1, 1)
        reporter.finish()
        assert reporter._progress is None

    def test_close_stops_display(self, reporter):
        reporter.start(8, 100)
        progress = reporter._progress
        progress.stop = MagicMock(side_effect=progress.stop)

        reporter.close()

        progress.stop.assert_called_once_with()
        assert reporter._progress is None
