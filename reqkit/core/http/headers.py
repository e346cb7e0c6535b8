from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

HeaderValue = Union[str, Sequence[str], Any]
HeaderList = List[Tuple[str, str]]


def apply_headers(target: HeaderList, headers: Optional[Mapping[str, HeaderValue]]) -> None:
    """
    Apply caller headers onto an ordered (name, value) list.

    A str value replaces existing values for that name, a list or tuple
    appends one value per item, and anything else is stringified and set.
    """
    if not headers:
        return
    for name, value in headers.items():
        if isinstance(value, str):
            set_header(target, name, value)
        elif isinstance(value, (list, tuple)):
            for item in value:
                target.append((name, str(item)))
        else:
            set_header(target, name, str(value))


def set_header(target: HeaderList, name: str, value: str) -> None:
    target[:] = [(k, v) for k, v in target if k.lower() != name.lower()]
    target.append((name, value))


def get_header(target: HeaderList, name: str) -> str:
    """First value for `name` (case-insensitive), or "" when unset."""
    for k, v in target:
        if k.lower() == name.lower():
            return v
    return ""


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "…"
