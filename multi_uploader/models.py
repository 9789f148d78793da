"""
Models for multi_uploader module.

Immutable dataclasses following Single Responsibility Principle.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Mapping, Tuple
from enum import Enum
import base64
import logging
import re


PLUGIN_NAME = "multi-uploader"
DEFAULT_EXTENSION = ".png"

# Fields a destination may use to report where the image ended up
URL_FIELDS = ("url", "img_url", "image", "source")

logger = logging.getLogger(__name__)

_DATA_URI_PREFIX = re.compile(r"^data:\S+;base64,")


def decode_base64_image(text: str) -> bytes:
    """Decode base64 image text, stripping a data URI prefix if present."""
    return base64.b64decode(_DATA_URI_PREFIX.sub("", text, count=1), validate=True)


def read_field(item: Any, *names: str, default: Any = None) -> Any:
    """Read the first present field from a mapping or an object."""
    for name in names:
        if isinstance(item, Mapping):
            value = item.get(name)
        else:
            value = getattr(item, name, None)
        if value is not None:
            return value
    return default


class FilenameCapability(Enum):
    """Whether a destination honors a caller-supplied filename."""
    CUSTOM = "custom"
    PROVIDER_ASSIGNED = "provider_assigned"


@dataclass(frozen=True)
class ImageArtifact:
    """Immutable snapshot of one image taken before any destination runs."""
    file_name: str
    extension: str = DEFAULT_EXTENSION
    buffer: Optional[bytes] = None
    base64_image: Optional[str] = None

    @property
    def has_content(self) -> bool:
        return self.buffer is not None or bool(self.base64_image)

    def real_buffer(self) -> Optional[bytes]:
        """
        Resolve the artifact content to raw bytes.

        Returns:
            The raw buffer, the decoded base64 text, or None when the
            artifact carries no content at all.

        Raises:
            ValueError: base64 text is present but not decodable
        """
        if self.buffer is not None:
            return bytes(self.buffer)
        if self.base64_image:
            return decode_base64_image(self.base64_image)
        return None


@dataclass(frozen=True)
class UploadResult:
    """Immutable result of one artifact uploaded to one destination."""
    file_name: Optional[str] = None
    url: Optional[str] = None
    img_url: Optional[str] = None
    image: Optional[str] = None
    source: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def resolved_url(self) -> Optional[str]:
        """First URL-bearing field that is set."""
        for name in URL_FIELDS:
            value = getattr(self, name)
            if value:
                return value
        return None

    @property
    def has_url(self) -> bool:
        return self.resolved_url is not None

    @classmethod
    def from_any(cls, item: Any) -> "UploadResult":
        """
        Normalize a destination's output entry.

        Accepts UploadResult instances, mappings (snake_case or the host's
        camelCase keys) and plain objects. Unknown mapping keys are kept in
        metadata.
        """
        if isinstance(item, UploadResult):
            return item

        # Image content never travels into results
        known = {
            "file_name", "fileName", "url", "img_url", "imgUrl",
            "image", "source", "metadata", "uploader",
            "buffer", "base64_image", "base64Image",
        }
        metadata: Dict[str, Any] = dict(read_field(item, "metadata", default={}) or {})
        if isinstance(item, Mapping):
            metadata.update({k: v for k, v in item.items() if k not in known})

        return cls(
            file_name=read_field(item, "file_name", "fileName"),
            url=read_field(item, "url"),
            img_url=read_field(item, "img_url", "imgUrl"),
            image=read_field(item, "image"),
            source=read_field(item, "source"),
            metadata=metadata,
        )


@dataclass(frozen=True)
class MergedRecord:
    """An UploadResult tagged with the destination that produced it."""
    result: UploadResult
    uploader: str

    @property
    def file_name(self) -> Optional[str]:
        return self.result.file_name

    @property
    def url(self) -> Optional[str]:
        return self.result.resolved_url

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "file_name": self.result.file_name,
            "url": self.result.url,
            "img_url": self.result.img_url,
            "image": self.result.image,
            "source": self.result.source,
            "uploader": self.uploader,
        }
        data.update(self.result.metadata)
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class ConfigOption:
    """Descriptor for one option shown in the host's settings UI."""
    name: str
    type: str
    default: Any
    message: str
    alias: str


CONFIG_SCHEMA: Tuple[ConfigOption, ...] = (
    ConfigOption(
        name="enabledBeds",
        type="string",
        default="smms,github",
        message="Enabled image beds (comma-separated)",
        alias="Enabled Beds",
    ),
    ConfigOption(
        name="unifyFileName",
        type="boolean",
        default=True,
        message="Whether to maintain a unified filename across all beds",
        alias="Unify Filename",
    ),
    ConfigOption(
        name="retryCount",
        type="number",
        default=2,
        message="Number of retry attempts on failure",
        alias="Retry Count",
    ),
    ConfigOption(
        name="retryDelay",
        type="number",
        default=2000,
        message="Delay between retries (milliseconds)",
        alias="Retry Delay",
    ),
    ConfigOption(
        name="generateMarkdown",
        type="boolean",
        default=True,
        message="Whether to generate a Markdown summary of links",
        alias="Generate Markdown",
    ),
)


@dataclass(frozen=True)
class MultiUploadConfig:
    """Immutable configuration for a fan-out upload batch."""
    enabled_beds: str = "smms,github"
    unify_filename: bool = True
    retry_count: int = 2
    retry_delay: int = 2000  # milliseconds
    generate_markdown: bool = True

    @property
    def bed_list(self) -> List[str]:
        return parse_bed_list(self.enabled_beds)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "MultiUploadConfig":
        """Build config from the host's option block (camelCase keys)."""
        data = data or {}
        defaults = cls()

        def pick(key: str, fallback: Any) -> Any:
            value = data.get(key)
            return fallback if value is None else value

        return cls(
            enabled_beds=str(pick("enabledBeds", "")),
            unify_filename=bool(pick("unifyFileName", defaults.unify_filename)),
            retry_count=_non_negative_int(data, "retryCount", defaults.retry_count),
            retry_delay=_non_negative_int(data, "retryDelay", defaults.retry_delay),
            generate_markdown=bool(pick("generateMarkdown", defaults.generate_markdown)),
        )


def parse_bed_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated bed option into trimmed, non-empty ids."""
    if not value:
        return []
    return [bed.strip() for bed in value.split(",") if bed.strip()]


def _non_negative_int(data: Mapping[str, Any], key: str, default: int) -> int:
    """Read a numeric option; unparseable values fall back to the default."""
    value = data.get(key)
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid {key} {value!r}, using default {default}")
        return default
    return max(number, 0)
