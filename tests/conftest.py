import asyncio
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Set

import pytest

# Run Qt headless when no display is available
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add src to sys.path so we can import problem_viewer
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from problem_viewer.core.errors import RecordLoadError
from problem_viewer.core.models import Locator, Record, SortKey


class FakeLoader:
    """
    In-memory TextLoader.

    Bodies are looked up by uri. A uri listed in ``failing`` raises
    RecordLoadError. While ``gate`` is set and not yet released, every
    load waits on it, which lets tests hold fetches in flight.
    """

    def __init__(
        self,
        bodies: Optional[Dict[str, str]] = None,
        failing: Optional[Set[str]] = None,
        gate: Optional[asyncio.Event] = None,
    ):
        self.bodies = dict(bodies or {})
        self.failing = set(failing or ())
        self.gate = gate
        self.calls: List[str] = []

    async def load(self, uri: str, encoding_hint: str = "auto") -> str:
        self.calls.append(uri)
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        if uri in self.failing or uri not in self.bodies:
            raise RecordLoadError(uri, "not available")
        return self.bodies[uri]


class RecordingSink:
    """RenderSink that records what it was given."""

    def __init__(self):
        self.rendered: List[Record] = []
        self.clears = 0

    def clear(self) -> None:
        self.clears += 1
        self.rendered = []

    async def render(self, record: Record) -> None:
        self.rendered.append(record)

    @property
    def ids(self) -> List[str]:
        return [r.id for r in self.rendered]


class ManualProximity:
    """ProximitySource fired by hand."""

    def __init__(self):
        self.callbacks = []
        self.subscribe_count = 0

    def subscribe(self, callback):
        self.subscribe_count += 1
        self.callbacks.append(callback)

        def unsubscribe():
            if callback in self.callbacks:
                self.callbacks.remove(callback)

        return unsubscribe

    def fire(self) -> None:
        for callback in list(self.callbacks):
            callback()


def make_record(
    record_id: str,
    date: str = "2025-02-25",
    sequence: int = 1,
    source: str = "tokyo",
    source_display: str = "",
    uri: Optional[str] = None,
) -> Record:
    return Record(
        id=record_id,
        sort_key=SortKey(date=date, sequence=sequence),
        source_tag=source,
        source_display=source_display,
        locator=Locator(uri=uri or f"posts/{record_id}.tex", encoding_hint="utf-8"),
    )


@pytest.fixture
def record_factory():
    """Return the make_record helper."""
    return make_record


@pytest.fixture
def loader_factory():
    """Return the FakeLoader class for tests that need custom bodies."""
    return FakeLoader


@pytest.fixture
def fake_loader():
    return FakeLoader()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def proximity():
    return ManualProximity()


@pytest.fixture
def sample_records():
    """Three records with bodies available through ``sample_loader``."""
    return [
        make_record("2025_tokyo_6", date="2025-06-01", sequence=6, source="tokyo", source_display="東京大学"),
        make_record("2024_kyoto_2", date="2024-02-25", sequence=2, source="kyoto", source_display="京都大学"),
        make_record("2023_osaka_1", date="2023-02-25", sequence=1, source="osaka", source_display="大阪大学"),
    ]


@pytest.fixture
def sample_loader():
    return FakeLoader(
        bodies={
            "posts/2025_tokyo_6.tex": "Evaluate the integral $\\int_0^1 x^{2} dx$.",
            "posts/2024_kyoto_2.tex": "Prove that $n^2 + n$ is even.",
            "posts/2023_osaka_1.tex": "Find the limit of the sequence.",
        }
    )
