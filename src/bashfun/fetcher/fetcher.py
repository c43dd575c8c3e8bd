import asyncio
import logging
import os
import re
import requests
from dataclasses import dataclass, field
from pathlib import Path
from bashfun.common.core import ActionCore
from bashfun.fetcher.utils import response_stream_to_file

logger = logging.getLogger(__name__)

SRC_REPO_NAME = "actions-rindeal/bash-fun"
SRC_REF_DEFAULT = "master"
SRC_BASH_FUN_PATH = "fun.sh"
DEST_DEFAULT = f"~/{SRC_BASH_FUN_PATH}"
GITHUB_URL = "https://github.com"

REF_PATTERN = re.compile(r"[a-zA-Z0-9_.-]*")


class FetchError(Exception):
    """Base class for errors that abort the download."""


class InvalidRefError(FetchError):
    pass


class DestinationExistsError(FetchError):
    pass


class DownloadError(FetchError):
    pass


@dataclass
class Fetcher:
    core: ActionCore
    source_repo: str = SRC_REPO_NAME
    source_path: str = SRC_BASH_FUN_PATH
    default_ref: str = SRC_REF_DEFAULT
    default_dest: str = DEST_DEFAULT
    github_url: str = GITHUB_URL
    timeout: float = 30.0
    chunk_size: int = 8192
    session: requests.Session = field(init=False)

    def __post_init__(self) -> None:
        self.session = requests.Session()

    def read_ref(self) -> str:
        ref = self.core.get_input("ref") or self.default_ref
        logger.debug(f"Reference: {ref}")
        if not REF_PATTERN.fullmatch(ref):
            raise InvalidRefError("Invalid ref input. It must conform to GitHub's git reference syntax.")
        return ref

    def read_dest(self) -> Path:
        dest = self.core.get_input("dest") or self.default_dest
        logger.debug(f"Destination: {dest}")
        resolved = self.resolve_dest(dest)
        logger.debug(f"Resolved destination: {resolved}")
        if resolved.exists():
            raise DestinationExistsError(f"Destination file already exists: {resolved}")
        return resolved

    def resolve_dest(self, dest: str) -> Path:
        return Path(os.path.abspath(Path(dest).expanduser()))

    def build_url(self, ref: str) -> str:
        return f"{self.github_url.rstrip('/')}/{self.source_repo}/raw/{ref}/{self.source_path}"

    def download(self, url: str, dest: Path) -> int:
        """Downloads ``url`` to ``dest``, removing the partial file on failure."""
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DownloadError(f"Failed to create destination directory {dest.parent}: {e}") from e

        try:
            return response_stream_to_file(self.session, url, dest, self.chunk_size, self.timeout)
        except FileExistsError as e:
            raise DestinationExistsError(f"Destination file already exists: {dest}") from e
        except (requests.RequestException, OSError) as e:
            dest.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download file: {e}") from e

    async def run(self) -> Path:
        """Reads the action inputs and downloads the script.

        Returns:
            Path: Where the script was written

        Raises:
            FetchError: If the inputs are invalid or the download fails
        """
        logger.debug("Starting the run function")
        ref = self.read_ref()
        url = self.build_url(ref)
        logger.debug(f"Download URL: {url}")
        dest = self.read_dest()

        written = await self.core.group(
            f"Downloading {url}", lambda: asyncio.to_thread(self.download, url, dest)
        )
        logger.info(f"Downloaded {written} bytes to {dest}")
        return dest

    def cleanup(self) -> None:
        if self.session:
            self.session.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: object | None
    ) -> None:
        self.cleanup()
