import re
from typing import Any, Dict

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def to_camel_case(name: str) -> str:
    """first_name -> firstName. Used as the pydantic alias generator."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_snake_case(name: str) -> str:
    """firstName -> first_name. Also folds spreadsheet headers ('First Name')."""
    name = name.strip().replace("-", " ")
    name = _CAMEL_BOUNDARY.sub(r"_\1", name)
    return re.sub(r"[\s_]+", "_", name).lower()


def keys_to_camel(data: Dict[str, Any]) -> Dict[str, Any]:
    return {to_camel_case(key): value for key, value in data.items()}


def keys_to_snake(data: Dict[str, Any]) -> Dict[str, Any]:
    return {to_snake_case(key): value for key, value in data.items()}
