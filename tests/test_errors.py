import logging

from bom_backend.core import errors


def test_rule_not_found_carries_id():
    exc = errors.RuleNotFoundError(42)
    assert exc.rule_id == 42
    assert isinstance(exc, LookupError)
    assert "42" in str(exc)


def test_log_exception_appends_context(caplog):
    logger = logging.getLogger("test_errors")
    caplog.set_level(logging.ERROR)
    try:
        raise RuntimeError("boom")
    except RuntimeError as exc:
        errors.log_exception(logger, "Startup step failed", extra={"step": "seed", "path": None}, exc=exc)

    record = caplog.records[-1]
    assert record.getMessage() == "Startup step failed step=seed: boom"
    assert record.exc_info is not None
