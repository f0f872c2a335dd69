from collections import OrderedDict
from typing import Any, Dict

__all__ = ["sort_dict", "shorten_address"]


def sort_dict(input: Dict[str, Any]) -> Dict[str, Any]:
    keys = sorted(input.keys())

    res = OrderedDict()
    for key in keys:
        value = input[key]
        if isinstance(value, dict):
            value = sort_dict(value)
        elif isinstance(value, list):
            value = [sort_dict(v) if isinstance(v, dict) else v for v in value]
        res[key] = value

    return res


def shorten_address(address: str, chars: int = 4) -> str:
    if len(address) <= chars * 2:
        return address
    return f"{address[:chars]}...{address[-chars:]}"
