import logging
from pathlib import Path

import requests

logger = logging.getLogger(__name__)


def response_stream_to_file(
    session: requests.Session, url: str, filepath: Path, chunk_size: int = 8192, timeout: float | None = None
) -> int:
    """Streams the body of a GET request into a new file.

    The file is created in exclusive mode, an existing file is never
    overwritten. Returns the number of bytes written.
    """
    written = 0
    with session.get(url, stream=True, timeout=timeout) as response:
        response.raise_for_status()
        with open(filepath, "xb") as f:
            for chunk in response.iter_content(chunk_size=chunk_size):
                if chunk:
                    f.write(chunk)
                    written += len(chunk)

    logger.debug(f"Wrote {written} bytes from {url} to {filepath}")
    return written
