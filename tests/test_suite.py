from pathlib import Path

import pytest

from web_autotest.core.action import Suite
from web_autotest.core.controller.suite import SuiteExecutor, cleanup, sanitize_filename
from web_autotest.core.settings import settings


def suite(tmp_path: Path, **kw) -> Suite:
    data = {"autoBrowser": False, "artifactsDir": str(tmp_path / "artifacts")}
    data.update(kw)
    return Suite.model_validate(data)


def case(name: str, *actions: str) -> dict:
    return {"name": name, "steps": [{"name": a} for a in actions]}


@pytest.mark.asyncio
async def test_retry_then_pass_records_no_artifacts(runner, script, tmp_path) -> None:
    s = suite(tmp_path, retries=1, tests=[case("flaky one", "flaky")])
    result = await SuiteExecutor(runner).run_suite(s)
    [t] = result.tests
    assert t.ok is True
    assert t.error is None
    assert t.artifacts == []
    assert t.attempts == 2
    assert script.calls.count("flaky") == 2


@pytest.mark.asyncio
async def test_passing_retry_keeps_artifacts_of_failed_attempt(runner, session, tmp_path) -> None:
    await session.open()
    s = suite(tmp_path, retries=1, onFailureScreenshot=True, tests=[case("flaky one", "flaky")])
    result = await SuiteExecutor(runner).run_suite(s)
    [t] = result.tests
    assert t.ok is True
    assert [Path(p).name for p in t.artifacts] == ["flaky_one_attempt1.png"]


@pytest.mark.asyncio
async def test_failure_screenshot_named_after_test_and_attempt(
    runner, session, driver, tmp_path
) -> None:
    await session.open()
    s = suite(tmp_path, retries=0, onFailureScreenshot=True, tests=[case("Login", "fail")])
    result = await SuiteExecutor(runner).run_suite(s)
    [t] = result.tests
    assert t.ok is False
    assert "boom" in t.error
    assert len(t.artifacts) == 1
    assert t.artifacts[0].endswith("Login_attempt1.png")
    assert Path(t.artifacts[0]).exists()


@pytest.mark.asyncio
async def test_attempts_capped_by_retry_budget(runner, session, script, tmp_path) -> None:
    await session.open()
    s = suite(tmp_path, retries=2, onFailureScreenshot=True, tests=[case("a/b c", "fail")])
    result = await SuiteExecutor(runner).run_suite(s)
    [t] = result.tests
    assert t.ok is False
    assert t.attempts == 3
    assert script.calls == ["fail", "fail", "fail"]
    assert [Path(p).name for p in t.artifacts] == [
        "a_b_c_attempt1.png",
        "a_b_c_attempt2.png",
        "a_b_c_attempt3.png",
    ]


@pytest.mark.asyncio
async def test_success_stops_retrying(runner, script, tmp_path) -> None:
    s = suite(tmp_path, retries=5, tests=[case("t", "ok")])
    result = await SuiteExecutor(runner).run_suite(s)
    assert result.tests[0].attempts == 1
    assert script.calls == ["ok"]


@pytest.mark.asyncio
async def test_capture_failures_are_ignored(runner, session, driver, tmp_path) -> None:
    await session.open()
    driver.fail_screenshot = True
    s = suite(tmp_path, onFailureScreenshot=True, tests=[case("t", "fail")])
    result = await SuiteExecutor(runner).run_suite(s)
    assert result.tests[0].ok is False
    assert result.tests[0].artifacts == []
    assert result.error is None


@pytest.mark.asyncio
async def test_trace_on_failure(runner, session, driver, script, tmp_path) -> None:
    await session.open()
    s = suite(
        tmp_path,
        retries=1,
        traceOnFailure=True,
        tests=[case("bad", "fail"), case("good", "ok")],
        continueOnError=True,
    )
    result = await SuiteExecutor(runner).run_suite(s)
    bad, good = result.tests
    assert [Path(p).name for p in bad.artifacts] == [
        "bad_attempt1_trace.zip",
        "bad_attempt2_trace.zip",
    ]
    assert good.ok and good.artifacts == []
    # the passing test's trace is stopped without saving
    assert ("tracing_stop", None) in driver.calls
    assert driver.tracing is False


@pytest.mark.asyncio
async def test_trace_start_failure_is_ignored(runner, session, driver, tmp_path) -> None:
    await session.open()
    driver.fail_tracing = True
    s = suite(
        tmp_path,
        traceOnFailure=True,
        continueOnError=True,
        tests=[case("bad", "fail"), case("good", "ok")],
    )
    result = await SuiteExecutor(runner).run_suite(s)
    bad, good = result.tests
    assert bad.ok is False and "boom" in bad.error
    assert bad.artifacts == []
    assert good.ok is True
    assert result.error is None
    assert not any(c[0] == "tracing_stop" for c in driver.calls)


@pytest.mark.asyncio
async def test_trace_stop_failure_is_ignored(runner, session, driver, tmp_path) -> None:
    await session.open()
    driver.fail_trace_stop = True
    s = suite(tmp_path, retries=1, traceOnFailure=True, tests=[case("bad", "fail")])
    result = await SuiteExecutor(runner).run_suite(s)
    [t] = result.tests
    assert t.ok is False
    assert t.attempts == 2
    assert t.artifacts == []
    assert result.error is None
    assert not list((tmp_path / "artifacts").glob("*_trace.zip"))


@pytest.mark.asyncio
async def test_failed_test_stops_remaining_tests(runner, script, tmp_path) -> None:
    s = suite(
        tmp_path,
        tests=[case("one", "fail"), case("two", "ok")],
        teardown=[{"name": "echo"}],
    )
    result = await SuiteExecutor(runner).run_suite(s)
    assert [t.name for t in result.tests] == ["one"]
    assert script.calls == ["fail", "echo"]
    assert len(result.teardown) == 1
    # a failed test is not a suite-level error
    assert result.error is None
    assert result.ok is False


@pytest.mark.asyncio
async def test_continue_on_error_runs_all_tests(runner, tmp_path) -> None:
    s = suite(tmp_path, continueOnError=True, tests=[case("one", "fail"), case("two", "ok")])
    result = await SuiteExecutor(runner).run_suite(s)
    assert [(t.name, t.ok) for t in result.tests] == [("one", False), ("two", True)]


@pytest.mark.asyncio
async def test_setup_failure_skips_tests_but_runs_teardown(runner, script, tmp_path) -> None:
    s = suite(
        tmp_path,
        setup=[{"name": "fail"}, {"name": "ok"}],
        tests=[case("never", "echo")],
        teardown=[{"name": "ok"}],
    )
    result = await SuiteExecutor(runner).run_suite(s)
    assert result.aborted is True
    assert result.tests == []
    assert len(result.setup) == 1
    assert result.error.startswith("setup failed at fail")
    assert script.calls == ["fail", "ok"]
    assert [r.ok for r in result.teardown] == [True]


@pytest.mark.asyncio
async def test_teardown_runs_once_when_every_test_fails(runner, script, tmp_path) -> None:
    s = suite(
        tmp_path,
        continueOnError=True,
        retries=1,
        tests=[case("a", "fail"), case("b", "fail")],
        teardown=[{"name": "echo"}],
    )
    result = await SuiteExecutor(runner).run_suite(s)
    assert script.calls.count("echo") == 1
    assert result.failures == 2


@pytest.mark.asyncio
async def test_teardown_failure_becomes_suite_error(runner, tmp_path) -> None:
    s = suite(tmp_path, tests=[case("t", "ok")], teardown=[{"name": "fail"}, {"name": "ok"}])
    result = await SuiteExecutor(runner).run_suite(s)
    assert result.tests[0].ok is True
    assert len(result.teardown) == 1
    assert result.error.startswith("teardown failed at fail")
    assert result.aborted is False


@pytest.mark.asyncio
async def test_auto_browser_opened_and_released(runner, session, driver, tmp_path) -> None:
    s = suite(tmp_path, autoBrowser=True, headless=False, tests=[case("t", "ok")])
    result = await SuiteExecutor(runner).run_suite(s)
    assert result.ok
    assert driver.starts == 1
    assert driver.headless is False
    assert driver.stops == 1
    assert session.is_open is False


@pytest.mark.asyncio
async def test_existing_browser_is_not_released(runner, session, driver, tmp_path) -> None:
    await session.open()
    s = suite(tmp_path, autoBrowser=True, tests=[case("t", "ok")])
    await SuiteExecutor(runner).run_suite(s)
    assert driver.starts == 1
    assert driver.stops == 0
    assert session.is_open is True


@pytest.mark.asyncio
async def test_release_failure_is_swallowed(runner, session, driver, tmp_path) -> None:
    driver.fail_stop = True
    s = suite(tmp_path, autoBrowser=True, tests=[case("t", "fail")])
    result = await SuiteExecutor(runner).run_suite(s)
    assert result.tests[0].ok is False
    assert result.error is None
    assert driver.stops == 1


@pytest.mark.asyncio
async def test_browser_open_failure_is_reported(runner, driver, script, tmp_path) -> None:
    driver.fail_start = True
    s = suite(tmp_path, autoBrowser=True, tests=[case("t", "ok")], teardown=[{"name": "echo"}])
    result = await SuiteExecutor(runner).run_suite(s)
    assert result.aborted is True
    assert "chromium missing" in result.error
    assert result.tests == []
    assert script.calls == ["echo"]


@pytest.mark.asyncio
async def test_junit_inline_and_written(runner, tmp_path) -> None:
    out = tmp_path / "reports" / "junit.xml"
    s = suite(
        tmp_path,
        junit=True,
        junitPath=str(out),
        continueOnError=True,
        tests=[case("pass", "ok"), case("broken", "fail")],
    )
    result = await SuiteExecutor(runner).run_suite(s)
    assert 'tests="2" failures="1"' in result.junit
    assert out.read_text(encoding="utf-8") == result.junit


@pytest.mark.asyncio
async def test_junit_write_failure_becomes_suite_error(runner, tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    out = blocker / "junit.xml"
    s = suite(tmp_path, junitPath=str(out), tests=[case("pass", "ok")])
    result = await SuiteExecutor(runner).run_suite(s)
    assert result.tests[0].ok is True
    assert result.ok is False
    assert result.error.startswith("junit write failed")
    assert 'tests="1" failures="0"' in result.junit
    assert not out.exists()


@pytest.mark.asyncio
async def test_no_report_unless_requested(runner, tmp_path) -> None:
    result = await SuiteExecutor(runner).run_suite(suite(tmp_path, tests=[case("t", "ok")]))
    assert result.junit is None


@pytest.mark.asyncio
async def test_artifacts_dir_created_only_when_needed(runner, tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(settings, "artifacts_root", tmp_path / "root")
    await SuiteExecutor(runner).run_suite(
        Suite.model_validate({"autoBrowser": False, "tests": [case("t", "ok")]})
    )
    assert not (tmp_path / "root").exists()

    s = suite(tmp_path, onFailureScreenshot=True, tests=[case("t", "ok")])
    await SuiteExecutor(runner).run_suite(s)
    assert (tmp_path / "artifacts").is_dir()


def test_sanitize_filename() -> None:
    assert sanitize_filename("Login") == "Login"
    assert sanitize_filename("a/b c?") == "a_b_c_"
    assert sanitize_filename("v1.2-x_y") == "v1.2-x_y"
    assert len(sanitize_filename("x" * 300)) == 100


@pytest.mark.asyncio
async def test_cleanup_reports_instead_of_raising() -> None:
    async def boom():
        raise RuntimeError("nope")

    res = await cleanup("thing", boom())
    assert res.ok is False
    assert res.error == "nope"
