"""
File acceptance filter.

Decides whether a candidate file may enter the upload workflow based on its
name, declared content type and size.
"""

from dataclasses import dataclass, field

from app.schemas.workflow import UploadedFile
from app.utils.messages import get_message

ACCEPTABLE_FILE_EXTENSIONS: tuple[str, ...] = (".vec",)
ACCEPTABLE_MIME_TYPES: frozenset[str] = frozenset({"application/octet-stream", "text/plain"})
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


@dataclass(frozen=True)
class Accepted:
    accepted = True


@dataclass(frozen=True)
class Rejected:
    reason: str
    params: dict[str, str] = field(default_factory=dict)

    accepted = False

    @property
    def message(self) -> str:
        return get_message(self.reason, **self.params)


FilterDecision = Accepted | Rejected


def format_file_size(size: int) -> str:
    """
    Format a byte count for display.

    Examples:
        0 -> "0 B", 1536 -> "1.5 KB", 10485760 -> "10 MB"
    """
    if size == 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    exponent = 0
    while exponent < len(units) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = size / 1024**exponent
    if value >= 10 or exponent == 0:
        return f"{value:.0f} {units[exponent]}"
    return f"{value:.1f} {units[exponent]}"


class FileAcceptanceFilter:
    """Type and size policy for uploaded VEC files."""

    def __init__(self, max_size_bytes: int = DEFAULT_MAX_FILE_SIZE):
        self.max_size_bytes = max_size_bytes

    def is_supported_type(self, filename: str, content_type: str | None) -> bool:
        has_valid_extension = filename.lower().endswith(ACCEPTABLE_FILE_EXTENSIONS)
        mime_type = (content_type or "").split(";")[0].strip().lower()
        return has_valid_extension or mime_type in ACCEPTABLE_MIME_TYPES

    def accept(self, filename: str, content_type: str | None, size: int) -> FilterDecision:
        if not self.is_supported_type(filename, content_type):
            return Rejected("fileTypeNotSupported")

        if size > self.max_size_bytes:
            return Rejected(
                "fileTooLarge", {"maxSize": format_file_size(self.max_size_bytes)}
            )

        return Accepted()

    def accept_file(self, file: UploadedFile) -> FilterDecision:
        return self.accept(file.filename, file.content_type, file.size)
