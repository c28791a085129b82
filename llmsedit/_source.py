import re
import logging
from functools import partial

import anyio
import httpx

from ._tokens import DEFAULT_ENCODING, load_tokenizer

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

_IS_URL = re.compile(r'^https?://', re.IGNORECASE)


def is_url(source) -> bool:
    return isinstance(source, str) and _IS_URL.match(source) is not None


async def _fetch(client, url):
    response = await client.get(url)
    response.raise_for_status()
    logger.info('Fetched %s (%d chars)', url, len(response.text))
    return response.text.replace('\r\n', '\n')


async def aload_text(source, client: httpx.AsyncClient | None = None, timeout: float = DEFAULT_TIMEOUT) -> str:
    """
    Read a document from a local path or an ``http(s)://`` URL.

    Files are read as UTF-8 through anyio. URLs are fetched with ``client`` when given,
    otherwise with a short-lived ``httpx.AsyncClient``; non-2xx responses raise
    ``httpx.HTTPStatusError``.
    """
    if is_url(source):
        if client is not None:
            return await _fetch(client, source)
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            return await _fetch(client, source)
    async with await anyio.open_file(source, 'r', encoding='utf-8') as f:
        text = await f.read()
    logger.info('Read %s (%d chars)', source, len(text))
    return text


async def aload_tokenizer(encoding: str = DEFAULT_ENCODING, approximate: bool = False):
    # first use of an encoding may download its vocabulary
    return await anyio.to_thread.run_sync(partial(load_tokenizer, encoding, approximate=approximate))
