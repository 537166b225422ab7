"""Parsing and validation of the string inputs actions receive."""

from typing import Iterable, List, Optional

from ..exceptions import ValidationError

EXCEPTION_NULL_EMPTY = "The {} can't be null or empty."
EXCEPTION_INVALID_BOOLEAN = "The {} for {} input is not a valid boolean value."
EXCEPTION_INVALID_NUMBER = "The {} for {} input is not a valid number value."
EXCEPTION_INVALID_PROXY = "The {} is not a valid proxy details."
EXCEPTION_INVALID_VALUE = "The {} for {} input is not valid. Valid values: {}."

BOOLEAN_TRUE = "true"
BOOLEAN_FALSE = "false"


def is_empty(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def default_if_empty(value: Optional[str], default: Optional[str]) -> Optional[str]:
    return default if is_empty(value) else value.strip()


def require(value: Optional[str], input_name: str) -> str:
    """Return the stripped value or raise if it is empty."""
    if is_empty(value):
        raise ValidationError(EXCEPTION_NULL_EMPTY.format(input_name), field=input_name)
    return value.strip()


def parse_bool(value: Optional[str], input_name: str, default: bool = False) -> bool:
    """
    Parse a 'true'/'false' input, case insensitive.

    Args:
        value: Raw input value
        input_name: Input name used in the error message
        default: Value used when the input is empty

    Raises:
        ValidationError: If the value is neither 'true' nor 'false'
    """
    if is_empty(value):
        return default
    lowered = value.strip().lower()
    if lowered == BOOLEAN_TRUE:
        return True
    if lowered == BOOLEAN_FALSE:
        return False
    raise ValidationError(EXCEPTION_INVALID_BOOLEAN.format(value, input_name), field=input_name)


def parse_int(
    value: Optional[str],
    input_name: str,
    default: Optional[int] = None,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> Optional[int]:
    """Parse an integer input and check its bounds."""
    if is_empty(value):
        return default
    try:
        number = int(value.strip())
    except ValueError:
        raise ValidationError(EXCEPTION_INVALID_NUMBER.format(value, input_name), field=input_name)
    if (minimum is not None and number < minimum) or (maximum is not None and number > maximum):
        raise ValidationError(EXCEPTION_INVALID_NUMBER.format(value, input_name), field=input_name)
    return number


def parse_list(value: Optional[str], delimiter: str = ",") -> List[str]:
    """Split a delimited input, dropping blank entries."""
    if is_empty(value):
        return []
    return [item.strip() for item in value.split(delimiter) if item.strip()]


def validate_choice(value: str, input_name: str, valid: Iterable[str], case_sensitive: bool = True) -> str:
    """Return the canonical spelling of value if it is one of the valid values."""
    valid = list(valid)
    for candidate in valid:
        if value == candidate or (not case_sensitive and value.lower() == candidate.lower()):
            return candidate
    raise ValidationError(
        EXCEPTION_INVALID_VALUE.format(value, input_name, ", ".join(valid)), field=input_name
    )


def validate_port(value: Optional[str], input_name: str, default: Optional[int] = None) -> Optional[int]:
    """Parse a TCP port; -1 means 'use the scheme default'."""
    port = parse_int(value, input_name, default=default)
    if port is None or port == -1:
        return port
    if not 0 < port <= 65535:
        raise ValidationError(EXCEPTION_INVALID_NUMBER.format(value, input_name), field=input_name)
    return port


def parse_headers(value: Optional[str]) -> dict:
    """
    Parse 'Name:Value' header lines separated by new lines.

    Raises:
        ValidationError: If a non-empty line has no ':' separator
    """
    headers = {}
    if is_empty(value):
        return headers
    for line in value.replace("\r\n", "\n").split("\n"):
        if not line.strip():
            continue
        name, sep, header_value = line.partition(":")
        if not sep or not name.strip():
            raise ValidationError(f"The header '{line}' is not in the 'Name:Value' format.", field="headers")
        headers[name.strip()] = header_value.strip()
    return headers
