"""Tests for multi_uploader services."""
import base64

import pytest

from multi_uploader.models import FilenameCapability
from multi_uploader.services.artifact_cache import ArtifactCache
from multi_uploader.services.capabilities import CapabilityTable, DestinationClassifier
from multi_uploader.services.config import DictConfigProvider, ReadOnlyConfig, get_primary_destination
from multi_uploader.services.registry import DestinationRegistry, capability_overrides


class TestArtifactCache:
    def test_capture_copies_buffer(self):
        data = bytearray(b"raw-bytes")
        snapshot = ArtifactCache.capture([{"file_name": "a.jpg", "extension": ".jpg", "buffer": data}])
        data[:3] = b"XXX"

        assert len(snapshot) == 1
        assert snapshot[0].buffer == b"raw-bytes"
        assert snapshot[0].file_name == "a.jpg"
        assert snapshot[0].base64_image is None

    def test_capture_host_keys_and_base64(self):
        encoded = "data:image/gif;base64," + base64.b64encode(b"gif").decode()
        snapshot = ArtifactCache.capture([{"fileName": "b.gif", "extname": ".gif", "base64Image": encoded}])

        assert snapshot[0].file_name == "b.gif"
        assert snapshot[0].extension == ".gif"
        assert snapshot[0].buffer is None
        assert snapshot[0].real_buffer() == b"gif"

    def test_capture_fallback_name(self, monkeypatch):
        monkeypatch.setattr("multi_uploader.services.artifact_cache.time.time", lambda: 1700000000.5)
        snapshot = ArtifactCache.capture([{"buffer": b"x"}])
        assert snapshot[0].extension == ".png"
        assert snapshot[0].file_name == "1700000000500.png"

    def test_capture_without_content(self):
        snapshot = ArtifactCache.capture([{"file_name": "empty.png"}])
        assert snapshot[0].has_content is False

    def test_capture_is_immutable_tuple(self):
        snapshot = ArtifactCache.capture([{"file_name": "a.png", "buffer": b"x"}])
        assert isinstance(snapshot, tuple)
        with pytest.raises(Exception):
            snapshot[0].buffer = b"y"


class TestCapabilityTable:
    def test_defaults(self):
        table = CapabilityTable()
        assert table.supports_custom_filename("smms") is False
        assert table.supports_custom_filename("IMGUR") is False
        assert table.supports_custom_filename("github") is True
        assert table.supports_custom_filename(None) is True

    def test_overrides(self):
        table = CapabilityTable({"weibo": FilenameCapability.PROVIDER_ASSIGNED, "smms": FilenameCapability.CUSTOM})
        assert table.supports_custom_filename("weibo") is False
        assert table.supports_custom_filename("smms") is True


class TestDestinationClassifier:
    def test_classify_preserves_order_and_excludes_primary(self):
        result = DestinationClassifier().classify(["github", "smms", "custom1", "imgur"], "github")
        assert result.backups == ("smms", "custom1", "imgur")
        assert result.no_custom_filename_backups == ("smms", "imgur")
        assert result.custom_filename_backups == ("custom1",)
        assert result.primary_supports_custom is True

    def test_classify_deduplicates(self):
        result = DestinationClassifier().classify(["smms", "github", "github", "smms"], "imgur")
        assert result.backups == ("smms", "github")
        assert result.primary_supports_custom is False

    def test_only_primary_has_no_backups(self):
        result = DestinationClassifier().classify(["smms"], "smms")
        assert result.has_backups is False


class TestConfig:
    def test_dotted_lookup(self):
        config = DictConfigProvider({"bed": {"current": "smms"}, "multi-uploader": {"retryCount": 1}})
        assert config.get_config("bed.current") == "smms"
        assert config.get_config("multi-uploader") == {"retryCount": 1}
        assert config.get_config("bed.missing") is None

    def test_set_config_creates_nodes(self):
        config = DictConfigProvider()
        config.set_config("multi-uploader.enabledBeds", "a,b")
        assert config.get_config("multi-uploader.enabledBeds") == "a,b"

    def test_primary_prefers_uploader_key(self):
        config = DictConfigProvider({"bed": {"current": "smms", "uploader": "github"}})
        assert get_primary_destination(config) == "github"
        assert get_primary_destination(DictConfigProvider()) is None

    def test_read_only_config(self):
        read_only = ReadOnlyConfig(DictConfigProvider({"a": 1}))
        assert read_only.get_config("a") == 1
        assert not hasattr(read_only, "set_config")


class TestDestinationRegistry:
    def test_register_and_get(self):
        registry = DestinationRegistry()
        bed = object()
        registry.register("github", bed)
        assert registry.get("github") is bed
        assert registry.get("smms") is None
        assert "github" in registry
        assert registry.ids() == ["github"]

    def test_from_config(self):
        registry = DestinationRegistry.from_config({"custom": {"endpoint": "https://up.example.com"}})
        assert registry.ids() == ["custom"]

    def test_from_config_requires_endpoint(self):
        with pytest.raises(ValueError):
            DestinationRegistry.from_config({"custom": {}})

    def test_capability_overrides(self):
        overrides = capability_overrides(
            {"a": {"custom_filename": False}, "b": {"custom_filename": True}, "c": {}}
        )
        assert overrides == {
            "a": FilenameCapability.PROVIDER_ASSIGNED,
            "b": FilenameCapability.CUSTOM,
        }
