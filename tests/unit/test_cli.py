"""
Unit Tests for the command-line entry point
===========================================
"""

from unittest.mock import AsyncMock, patch

import pytest

from bragging_rights.__main__ import apply_overrides, build_parser, main
from bragging_rights.schemas.domain import SayingGuess, WorkflowResult
from bragging_rights.utils.errors import ConfigurationError, LLMError


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])

        assert args.model is None
        assert args.attempts is None
        assert args.no_candidates is False
        assert args.fresh is False

    def test_flags(self):
        args = build_parser().parse_args(
            ["--model", "mistral", "--attempts", "3", "--no-candidates", "--fresh"]
        )

        assert args.model == "mistral"
        assert args.attempts == 3
        assert args.no_candidates is True
        assert args.fresh is True


class TestApplyOverrides:
    def test_no_overrides_returns_same_settings(self, settings):
        args = build_parser().parse_args([])

        assert apply_overrides(settings, args) is settings

    def test_overrides_applied(self, settings):
        args = build_parser().parse_args(["--attempts", "2", "--no-candidates"])

        result = apply_overrides(settings, args)

        assert result.saying_attempts == 2
        assert result.guess_with_candidates is False
        assert result.ollama_base_url == settings.ollama_base_url

    @pytest.mark.parametrize("attempts", ["0", "-3", "1000"])
    def test_out_of_range_attempts_rejected(self, settings, attempts):
        args = build_parser().parse_args(["--attempts", attempts])

        with pytest.raises(ConfigurationError) as exc_info:
            apply_overrides(settings, args)

        assert exc_info.value.details["saying_attempts"] == int(attempts)

    def test_invalid_override_exits_nonzero(self, settings):
        with patch("bragging_rights.__main__.configure_logging"), patch(
            "bragging_rights.__main__.get_settings", return_value=settings
        ), patch("bragging_rights.__main__.open_services") as mock_open_services:
            exit_code = main(["--attempts", "-3"])

        assert exit_code == 1
        mock_open_services.assert_not_called()


class TestMain:
    def test_success_prints_summary(self, capsys):
        result = WorkflowResult(
            model="llama3",
            sayings=["Patience pays off"],
            guesses=[
                SayingGuess(
                    saying="Patience pays off",
                    essay="Waiting is rewarded.",
                    raw_response='"Patience pays off."',
                    guess="Patience pays off",
                    correct=True,
                )
            ],
            store_ms=12.0,
        )

        with patch("bragging_rights.__main__.configure_logging"), patch(
            "bragging_rights.__main__.run_workflow",
            AsyncMock(return_value=result),
        ):
            exit_code = main(["--model", "llama3"])

        assert exit_code == 0
        output = capsys.readouterr().out
        assert "[+] saying: Patience pays off" in output
        assert "1/1 correct" in output

    def test_failure_returns_nonzero(self):
        with patch("bragging_rights.__main__.configure_logging"), patch(
            "bragging_rights.__main__.run_workflow",
            AsyncMock(side_effect=LLMError("LLM call failed", {"model": "llama3"})),
        ):
            exit_code = main([])

        assert exit_code == 1
