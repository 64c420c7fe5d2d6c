"""Tests for the format_result dispatcher and OutputSettings."""

import json

from initstate.output.formatters import OutputSettings, format_result
from initstate.services.result import ServiceError, ServiceResult

CODE = "impl S {\n    fn check_initial_state(&self) {}\n}\n"


def _ok(op: str = "expand", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str = "expand", msg: str = "fail") -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code="GENERATION_FAILED", message=msg),
    )


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert s.json_output is False
        assert s.quiet is False
        assert s.verbose is False


class TestFormatResultJSON:
    def test_json_mode_returns_valid_json(self) -> None:
        output = format_result(_ok(code=CODE), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is True
        assert data["op"] == "expand"
        assert data["data"]["code"] == CODE

    def test_json_mode_error(self) -> None:
        data = json.loads(format_result(_err(msg="Bad"), json_output=True))
        assert data["ok"] is False
        assert data["error"]["code"] == "GENERATION_FAILED"
        assert data["error"]["message"] == "Bad"

    def test_json_wins_over_quiet(self) -> None:
        settings = OutputSettings(json_output=True, quiet=True)
        assert json.loads(format_result(_ok(code=CODE), settings=settings))["ok"] is True


class TestFormatResultText:
    def test_quiet(self) -> None:
        output = format_result(_ok(code=CODE), settings=OutputSettings(quiet=True))
        assert output == CODE.rstrip("\n")

    def test_default_renders_rich(self) -> None:
        output = format_result(_ok("check", items=[]))
        assert "OK" in output
        assert "check" in output

    def test_error_text(self) -> None:
        output = format_result(_err(msg="1 declaration(s) rejected"))
        assert "ERROR" in output
        assert "1 declaration(s) rejected" in output
