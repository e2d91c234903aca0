"""Turn whatever a handler returned into a Response.

==========================  =============================================
Return value                Response
==========================  =============================================
``Response``                unchanged
``str``                     200 ``text/html``
``bytes``                   200 ``application/octet-stream``
``dict`` / ``list``         200 ``application/json`` (``str()`` fallback)
``(value, status)``         *value* negotiated, status replaced
``(value, status, dict)``   same, plus extra headers
==========================  =============================================
"""

import json
from typing import Any

from stackpeek.http.response import Response

_JSON = "application/json; charset=utf-8"


def negotiate(value: Any) -> Response:
    match value:
        case Response():
            return value
        case str():
            return Response(value)
        case bytes():
            return Response(value, content_type="application/octet-stream")
        case dict() | list():
            return Response(json.dumps(value, default=str), content_type=_JSON)
        case (body, int() as status):
            return negotiate(body).with_status(status)
        case (body, int() as status, dict() as headers):
            return negotiate(body).with_status(status).with_headers(headers)
    msg = (
        f"Cannot convert {type(value).__name__} to a response. "
        "Return str, bytes, dict, list, or Response."
    )
    raise TypeError(msg)
