"""
JUnit XML rendering for suite results.

The output depends only on the test results, so rendering the same
SuiteResult twice gives identical text.
"""

from __future__ import annotations

from xml.sax.saxutils import escape

from ..core.settings import settings
from .schemas import SuiteResult

_ATTR_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def escape_xml(value: object) -> str:
    """Escape & < > " ' for use in XML text and attribute values."""
    return escape(str(value), _ATTR_ENTITIES)


def render_junit(result: SuiteResult, *, suite_name: str | None = None) -> str:
    name = suite_name or settings.suite_name
    cases = []
    for test in result.tests:
        if test.ok:
            cases.append(f'<testcase name="{escape_xml(test.name)}"/>')
        else:
            message = escape_xml(test.error or "error")
            cases.append(
                f'<testcase name="{escape_xml(test.name)}">'
                f'<failure message="{message}"/></testcase>'
            )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<testsuite name="{escape_xml(name)}" tests="{len(result.tests)}" '
        f'failures="{result.failures}">'
        + "".join(cases)
        + "</testsuite>"
    )
