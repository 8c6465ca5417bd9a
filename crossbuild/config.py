"""
Application configuration
"""
from pydantic_settings import BaseSettings


DEFAULT_TARGETS = """darwin/amd64,
  dragonfly/amd64,
  freebsd/*,
  linux/*,
  netbsd/*,
  openbsd/*,
  windows/*"""


class Settings(BaseSettings):
    """Pipeline settings, read from the environment or a .env file"""

    # Project
    PROJECT_NAME: str = "syncthing-inotify"
    WORK_DIR: str = "."

    # Targets (human-edited, whitespace is stripped before use)
    TARGETS: str = DEFAULT_TARGETS

    # Build tool
    BUILD_TOOL: str = "xgo"
    BUILD_ENV: str = "GO386=387"  # space-separated KEY=VALUE pairs
    VERSION_VARIABLE: str = "main.Version"
    DRY_RUN: bool = True
    CHECK_CLEAN: bool = False
    COMMAND_TIMEOUT: int | None = None  # seconds, None waits forever

    # Packaging
    KEEP_ARTIFACTS: bool = True
    WRITE_CHECKSUMS: bool = False
    REPORT_DIR: str | None = None

    @property
    def build_env(self) -> dict[str, str]:
        """Parse BUILD_ENV into an environment override mapping"""
        env = {}
        for pair in self.BUILD_ENV.split():
            key, sep, value = pair.partition("=")
            if not sep or not key:
                raise ValueError(f"Invalid BUILD_ENV entry: {pair!r}")
            env[key] = value
        return env

    class Config:
        env_file = ".env"
        case_sensitive = True
