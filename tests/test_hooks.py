"""Tests for host lifecycle hooks and the local host."""
from unittest.mock import AsyncMock

import pytest

from multi_uploader.models import PLUGIN_NAME
from multi_uploader.orchestrator import LocalUploadHost, MultiUploadPlugin, PrimaryUploadError
from multi_uploader.orchestrator.models import BatchState, UploadBatch
from multi_uploader.services.config import DictConfigProvider

from fakes import FakeDestination, make_registry


def _config(primary: str, beds: str, **options):
    return DictConfigProvider(
        {"bed": {"current": primary}, PLUGIN_NAME: {"enabledBeds": beds, "retryDelay": 0, **options}}
    )


def _items():
    return [{"file_name": "cat.png", "extension": ".png", "buffer": b"cat-bytes"}]


def _run_host(registry, config, eager_unify=True):
    host = LocalUploadHost(registry, config)
    MultiUploadPlugin(registry, eager_unify=eager_unify, sleep=AsyncMock()).register(host)
    return host


class TestMultiUploadPlugin:
    def test_config_schema(self):
        names = [option.name for option in MultiUploadPlugin.config_schema()]
        assert names == ["enabledBeds", "unifyFileName", "retryCount", "retryDelay", "generateMarkdown"]

    @pytest.mark.asyncio
    async def test_before_upload_captures_snapshot(self):
        plugin = MultiUploadPlugin(make_registry())
        batch = UploadBatch(output=_items(), config=_config("smms", "smms,github"))

        await plugin.before_upload(batch)

        state = batch.state[PLUGIN_NAME]
        assert isinstance(state, BatchState)
        assert state.primary_id == "smms"
        assert state.snapshot[0].buffer == b"cat-bytes"
        assert state.eager_filename is None
        assert batch.output[0]["file_name"] == "cat.png"

    @pytest.mark.asyncio
    async def test_before_upload_renames_primary_when_all_accept_custom(self):
        plugin = MultiUploadPlugin(make_registry())
        batch = UploadBatch(output=_items(), config=_config("github", "github,custom1"))

        await plugin.before_upload(batch)

        state = batch.state[PLUGIN_NAME]
        assert state.eager_filename.endswith(".png")
        assert batch.output[0]["file_name"] == state.eager_filename
        assert state.snapshot[0].file_name == "cat.png"

    @pytest.mark.asyncio
    async def test_before_upload_keeps_name_without_backups(self):
        plugin = MultiUploadPlugin(make_registry())
        batch = UploadBatch(output=_items(), config=_config("github", "github"))

        await plugin.before_upload(batch)

        assert batch.state[PLUGIN_NAME].eager_filename is None
        assert batch.output[0]["file_name"] == "cat.png"

    @pytest.mark.asyncio
    async def test_unparseable_retry_options_use_defaults(self):
        github = FakeDestination("github", fail_times=1)
        sleep = AsyncMock()
        plugin = MultiUploadPlugin(make_registry(github), sleep=sleep)
        config = DictConfigProvider(
            {
                "bed": {"current": "smms"},
                PLUGIN_NAME: {"enabledBeds": "smms,github", "retryCount": "two", "retryDelay": "soon"},
            }
        )
        batch = UploadBatch(output=_items(), config=config)

        await plugin.before_upload(batch)
        batch.output = [{"fileName": "AbC.png", "url": "https://smms/AbC.png"}]
        await plugin.after_upload(batch)

        assert [item["uploader"] for item in batch.output] == ["smms", "github"]
        assert len(github.calls) == 2
        sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_after_upload_without_snapshot_captures_current_output(self):
        github = FakeDestination("github")
        plugin = MultiUploadPlugin(make_registry(github), sleep=AsyncMock())
        batch = UploadBatch(
            output=[{"fileName": "AbC.png", "url": "https://smms/AbC.png", "buffer": b"x"}],
            config=_config("smms", "smms,github"),
        )

        await plugin.after_upload(batch)

        assert [item["uploader"] for item in batch.output] == ["smms", "github"]
        assert github.file_names == ["AbC.png"]


class TestLocalUploadHost:
    @pytest.mark.asyncio
    async def test_full_batch_with_eager_unification(self):
        github, custom1 = FakeDestination("github"), FakeDestination("custom1")
        host = _run_host(make_registry(github, custom1), _config("github", "github,custom1"))

        batch = await host.upload(_items())

        outcome = batch.state["outcome"]
        assert outcome.uploaders == ["github", "custom1"]
        assert github.file_names == custom1.file_names == [outcome.filename]
        assert PLUGIN_NAME not in batch.state
        assert [item["uploader"] for item in batch.output] == ["github", "custom1"]

    @pytest.mark.asyncio
    async def test_full_batch_with_provider_named_primary(self):
        smms = FakeDestination("smms", assigned_name="S1.png")
        github = FakeDestination("github")
        host = _run_host(make_registry(smms, github), _config("smms", "smms,github"))

        batch = await host.upload(_items())

        assert batch.state["outcome"].filename == "S1.png"
        assert github.file_names == ["S1.png"]
        assert "### 🖼️ S1.png" in batch.state["outcome"].markdown

    @pytest.mark.asyncio
    async def test_markdown_disabled(self):
        github, custom1 = FakeDestination("github"), FakeDestination("custom1")
        host = _run_host(
            make_registry(github, custom1),
            _config("github", "github,custom1", generateMarkdown=False),
        )
        batch = await host.upload(_items())
        assert batch.state["outcome"].markdown == ""

    @pytest.mark.asyncio
    async def test_extra_primary_results_are_kept(self):
        class ThumbnailBed(FakeDestination):
            async def upload(self, context):
                await super().upload(context)
                context.results.append({"fileName": "thumb.png", "imgUrl": "https://github.example.com/i/thumb.png"})

        github = ThumbnailBed("github")
        host = LocalUploadHost(make_registry(github), _config("github", "github"))

        batch = await host.upload(_items())

        assert [item["file_name"] for item in batch.output] == ["cat.png", "thumb.png"]
        assert batch.output[1]["extension"] is None

    @pytest.mark.asyncio
    async def test_primary_failure_raises(self):
        smms = FakeDestination("smms", fail_times=1)
        host = _run_host(make_registry(smms), _config("smms", "smms,github"))
        with pytest.raises(PrimaryUploadError):
            await host.upload(_items())

    @pytest.mark.asyncio
    async def test_missing_primary_raises(self):
        host = _run_host(make_registry(), DictConfigProvider())
        with pytest.raises(PrimaryUploadError, match="No primary bed"):
            await host.upload(_items())

    @pytest.mark.asyncio
    async def test_unknown_primary_raises(self):
        host = _run_host(make_registry(), _config("smms", "smms,github"))
        with pytest.raises(PrimaryUploadError, match="Uploader not found"):
            await host.upload(_items())
