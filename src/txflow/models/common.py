import base64
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer


def bytes_from_base64(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    assert isinstance(value, str)
    return base64.b64decode(value, validate=True)


def bytes_to_base64(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


BytesFromBase64 = Annotated[
    bytes,
    BeforeValidator(bytes_from_base64),
    PlainSerializer(bytes_to_base64, return_type=str),
]
