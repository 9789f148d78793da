"""In-memory beds and helpers shared by the tests."""
import asyncio
from typing import List, Optional

from multi_uploader.services.registry import DestinationRegistry


class FakeDestination:
    """In-memory bed that records every attempt context it receives."""

    def __init__(
        self,
        bed: str,
        fail_times: int = 0,
        assigned_name: Optional[str] = None,
        latency: float = 0.0,
        with_url: bool = True,
        via_return: bool = False,
    ):
        self.bed = bed
        self.fail_times = fail_times
        self.assigned_name = assigned_name
        self.latency = latency
        self.with_url = with_url
        self.via_return = via_return
        self.calls: List = []

    async def upload(self, context):
        self.calls.append(context)
        if self.latency:
            await asyncio.sleep(self.latency)
        if len(self.calls) <= self.fail_times:
            raise RuntimeError(f"{self.bed} attempt {len(self.calls)} failed")

        entries = []
        for artifact in context.artifacts:
            name = self.assigned_name or artifact.file_name
            entry = {"fileName": name, "size": len(artifact.buffer or b"")}
            if self.with_url:
                entry["imgUrl"] = f"https://{self.bed}.example.com/i/{name}?v=1"
            entries.append(entry)

        if self.via_return:
            return entries
        context.results.extend(entries)
        return None

    @property
    def file_names(self) -> List[str]:
        return [a.file_name for context in self.calls for a in context.artifacts]


class SleepRecorder:
    """Replacement for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def make_registry(*destinations: FakeDestination) -> DestinationRegistry:
    return DestinationRegistry({d.bed: d for d in destinations})
