"""SSR handle configuration.

SSRConfig is a frozen dataclass: immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from perch.errors import ConfigurationError


class Mode(Enum):
    """Serving mode, fixed for the life of the process."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"


def is_test_run() -> bool:
    """True when running under a test build (``PERCH_ENV=test`` or ``PERCH_TEST_BUILD``)."""
    return os.environ.get("PERCH_ENV") == "test" or bool(os.environ.get("PERCH_TEST_BUILD"))


@dataclass(frozen=True, slots=True)
class SSRConfig:
    """Configuration for an SSR handle. Immutable after creation.

    Override what you need::

        config = SSRConfig(root="web", dev=False, index="web/dist/client/index.html")

    Relative paths are resolved against the current working directory,
    except ``dev_entry`` which is resolved against ``root`` by the live
    transformer.
    """

    root: str | Path = "."
    dev: bool = True

    # Base HTML document with <!--init-props--> and <!--app-html-->
    index: str | Path = "index.html"

    # Production build output: <dist>/client (assets) and <dist>/<server_entry>
    dist: str | Path = "dist"
    server_entry: str = "server/entry_server.py"

    # Development server entry, relative to root
    dev_entry: str = "src/entry_server.py"

    # Live transformer
    public_dir: str = "public"
    debug_client: bool = True  # Inject the live-reload client script

    @property
    def mode(self) -> Mode:
        return Mode.DEVELOPMENT if self.dev else Mode.PRODUCTION

    @property
    def root_path(self) -> Path:
        return Path(self.root).resolve()

    @property
    def index_path(self) -> Path:
        return Path(self.index).resolve()

    @property
    def client_dir(self) -> Path:
        return Path(self.dist).resolve() / "client"

    @property
    def server_entry_path(self) -> Path:
        return Path(self.dist).resolve() / self.server_entry

    def validate(self) -> None:
        """Reject values that can never work. Called once at bootstrap."""
        if self.dev and not self.dev_entry.strip():
            msg = "dev_entry must name the server entry module (e.g. 'src/entry_server.py')"
            raise ConfigurationError(msg)
        if not self.dev and not self.server_entry.strip():
            msg = "server_entry must name the built server entry (e.g. 'server/entry_server.py')"
            raise ConfigurationError(msg)
        if Path(self.public_dir).is_absolute():
            msg = f"public_dir must be relative to root, got {self.public_dir!r}"
            raise ConfigurationError(msg)
