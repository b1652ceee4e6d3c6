"""
Request event names.

Events are a closed set of outcome categories plus a ``Status``
variant carrying an HTTP status code. ``parse_event`` turns the
string names accepted by ``ApiRequest.on_any`` into these values.
"""

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Union


class Event(Enum):
    """Outcome categories of a settled request."""
    OK = "onOk"           # response passed validation
    FAIL = "onFail"       # response failed validation
    CANCEL = "onCancel"   # call was cancelled
    ERROR = "onError"     # transport raised


@dataclass(frozen=True)
class Status:
    """Event fired for a response with an exact status code."""
    code: int


EventSpec = Union[Event, Status]

_STATUS_PATTERN = re.compile(r"onStatus=(.*)")


def _is_status_code(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_event(name: Union[str, Event, Status]) -> List[EventSpec]:
    """
    Resolve an event name to the events it designates.

    Supported names are ``"onOk"``, ``"onFail"``, ``"onCancel"``,
    ``"onError"``, ``"onStatus=<code>"`` and
    ``"onStatus=<JSON array of codes>"``. The status part may appear
    anywhere in the name. ``Event`` and ``Status`` values are passed
    through.

    Returns:
        The designated events; empty for unsupported or malformed names.
    """
    if isinstance(name, (Event, Status)):
        return [name]

    if not isinstance(name, str):
        return []

    for event in Event:
        if name == event.value:
            return [event]

    match = _STATUS_PATTERN.search(name)
    if not match:
        return []

    try:
        codes = json.loads(match.group(1))
    except ValueError:
        return []

    if not isinstance(codes, list):
        codes = [codes]
    return [Status(code) for code in codes if _is_status_code(code)]
