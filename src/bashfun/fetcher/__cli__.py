from bashfun.fetcher.config import Settings
from bashfun.fetcher.fetcher import Fetcher
from bashfun.common.core import ActionCore
from bashfun.common.logger import setup_package_logger
import asyncio
import logging
import sys

logger = logging.getLogger(__name__)


async def main() -> int:
    core = ActionCore()
    try:
        settings = Settings()
        log_level = "debug" if core.is_debug() else settings.log_level
        setup_package_logger("bashfun-fetch", __name__, log_level, settings.log_max_line_length, core=core)
        logger.debug(f"Settings: {settings}")

        with Fetcher(
            core,
            source_repo=settings.source_repo,
            source_path=settings.source_path,
            default_ref=settings.default_ref,
            default_dest=settings.default_dest,
            github_url=settings.github_url,
            timeout=settings.timeout,
            chunk_size=settings.chunk_size,
        ) as fetcher:
            dest = await fetcher.run()

        core.set_output("message", f"BASH Fun! downloaded successfully to '{dest}'")
        logger.debug("File downloaded successfully")
    except Exception as e:
        core.set_failed(e)
    return core.exit_code


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
