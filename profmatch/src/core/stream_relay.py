"""
ProfMatch - Stream Relay
=========================
Forwards completion text chunks to the HTTP response body.

Each non-empty chunk is UTF-8 encoded and yielded as soon as it arrives;
nothing is buffered, merged or reordered.  Back-pressure is whatever the
ASGI server applies when it awaits the next body chunk.

Termination
-----------
- Upstream exhausted  → generator returns, response closes normally.
- Upstream raises     → logged and re-raised; the server aborts the
  response (bytes already sent stay sent).
- Client disconnects  → the server cancels / closes this generator; the
  ``finally`` block closes the upstream iterator so no completion keeps
  streaming in the background.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any

from profmatch.src.utils.logger import get_logger

logger = get_logger(__name__)

ENCODING = "utf-8"


async def close_upstream(upstream: AsyncIterator[Any]) -> None:
    """Close *upstream* if it is an async generator (or anything with ``aclose``)."""
    aclose = getattr(upstream, "aclose", None)
    if aclose is not None:
        await aclose()


async def relay_stream(upstream: AsyncIterator[str]) -> AsyncIterator[bytes]:
    """Yield each non-empty text chunk from *upstream* as encoded bytes."""
    chunks = 0
    try:
        async for text in upstream:
            if not text:
                continue
            chunks += 1
            yield text.encode(ENCODING)
    except asyncio.CancelledError:
        logger.info("[RELAY] Client went away after %d chunk(s); stopping upstream.", chunks)
        raise
    except Exception:
        logger.exception("[RELAY] Upstream stream failed after %d chunk(s).", chunks)
        raise
    else:
        logger.debug("[RELAY] Stream complete: %d chunk(s).", chunks)
    finally:
        await close_upstream(upstream)
