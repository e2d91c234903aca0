"""Write a Response to the ASGI ``send`` callable."""

from stackpeek._internal.types import Send
from stackpeek.http.response import Response

# 1xx, 204 and 304 responses never carry a body
_NO_BODY = frozenset({204, 304})


def encode_headers(response: Response, content_length: int) -> list[tuple[bytes, bytes]]:
    """Lower-cased latin-1 header pairs, with content-type first."""
    pairs = [("content-type", response.content_type), *response.headers]
    pairs.append(("content-length", str(content_length)))
    return [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in pairs]


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Send start and body messages.

    For ``HEAD`` the headers describe the full body but none is sent.
    """
    status = response.status
    body = b"" if status < 200 or status in _NO_BODY else response.body_bytes
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": encode_headers(response, len(body)),
        }
    )
    await send({"type": "http.response.body", "body": b"" if head else body})
