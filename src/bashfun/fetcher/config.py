from pydantic_settings import BaseSettings
from typing import Annotated
from pydantic import Field


class Settings(BaseSettings):
    log_level: Annotated[str, Field(default="debug", description="Log level")]
    log_max_line_length: Annotated[int | None, Field(default=None, description="Log max line length")]
    source_repo: Annotated[
        str, Field(default="actions-rindeal/bash-fun", description="Repository the script is downloaded from")
    ]
    source_path: Annotated[str, Field(default="fun.sh", description="Path of the script inside the repository")]
    default_ref: Annotated[str, Field(default="master", description="Git reference used when the ref input is empty")]
    default_dest: Annotated[
        str, Field(default="~/fun.sh", description="Destination used when the dest input is empty")
    ]
    github_url: Annotated[str, Field(default="https://github.com", description="GitHub web URL")]
    timeout: Annotated[float, Field(default=30.0, description="HTTP timeout in seconds")]
    chunk_size: Annotated[int, Field(default=8192, description="Download chunk size in bytes")]

    class Config:
        env_prefix = "BASHFUN_"
        env_file = ".env"
        extra = "allow"
