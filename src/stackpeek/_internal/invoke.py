"""One call path for ``def`` and ``async def`` callables.

Route handlers, error handlers and lifecycle hooks all go through
``invoke``.
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    result = func(*args, **kwargs)
    return await result if inspect.isawaitable(result) else result
