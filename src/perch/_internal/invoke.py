"""Call sync or async application callables uniformly.

A server entry may export ``def render`` or ``async def render``.
The pipeline awaits both through this one helper::

    result = await invoke(render, url, context)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
