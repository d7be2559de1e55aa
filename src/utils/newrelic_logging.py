"""New Relic logging integration helpers."""

from collections.abc import MutableMapping
from typing import Any

import newrelic.agent


def newrelic_error_processor(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Processor that reports error-level logs to New Relic.

    Upstream failures and unexpected request errors are logged at error level, this
    forwards them with notice_error. Outside an agent-instrumented process the call is a
    no-op. Every log level passes through unchanged.
    """
    if method_name in ("error", "critical"):
        newrelic.agent.notice_error()

    return event_dict
