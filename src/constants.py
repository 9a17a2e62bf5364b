"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    RESOLUTION_ERROR = 3
    DOWNLOAD_ERROR = 4
    INTERRUPTED = 130


class QueryFlags(Enum):
    """Flag sets understood by the gallery extension query endpoint.

    Args:
        Enum (int): Bitmask sent as ``flags`` in the query body.
    """

    LATEST = 0x3D6  # latest version per target platform
    ALL_VERSIONS = 0x1D6  # full version history


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    GALLERY_HOST = "https://marketplace.visualstudio.com"
    GALLERY_QUERY_URL = GALLERY_HOST + "/_apis/public/gallery/extensionquery"
    GALLERY_DOWNLOAD_URL = (
        "{host}/_apis/public/gallery/publishers/{publisher}"
        "/vsextensions/{name}/{version}/vspackage"
    )
    GALLERY_API_VERSION = "7.1-preview.1"
    FILTER_TYPE_EXTENSION_NAME = 7
    ARTIFACT_EXTENSION = ".vsix"

    VALID_PLATFORMS = [
        "win32-x64",
        "win32-arm64",
        "linux-x64",
        "linux-arm64",
        "linux-armhf",
        "alpine-x64",
        "alpine-arm64",
        "darwin-x64",
        "darwin-arm64",
        "web",
    ]

    DEFAULT_MANIFEST_FILE = "extensions.yaml"
    DEFAULT_OUTPUT_DIR = "./vsix"
    DEFAULT_CONCURRENCY = 4
    ORDERINGS = ["server", "semver"]

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    LOG_LEVEL_ENV = "VSIXFETCH_LOG_LEVEL"

    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 2.0
    # When False, 4xx responses (other than 408/429) are not retried.
    HTTP_RETRY_CLIENT_ERRORS = True
    DOWNLOAD_CHUNK_SIZE = 64 * 1024
    ERROR_BODY_LIMIT = 200
