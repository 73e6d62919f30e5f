"""
Unit tests for the pagination controller.
"""

import asyncio

import pytest

from problem_viewer.core.models import LoadState
from problem_viewer.search.content_store import ContentStore
from problem_viewer.view.paginator import PageState, PaginationController


def _records(factory, count):
    return [factory(f"r{i}", uri=f"r{i}.tex") for i in range(count)]


def _bodies(records):
    return {r.locator.uri: f"body {r.id}" for r in records}


class TestPaginationController:
    """Tests for reset() and render_next_page()."""

    def test_rejects_non_positive_page_size(self, fake_loader, sink, proximity):
        """Page size must be at least one."""
        with pytest.raises(ValueError):
            PaginationController(ContentStore(fake_loader), sink, proximity, page_size=0)

    @pytest.mark.asyncio
    async def test_reset_renders_first_page(self, record_factory, loader_factory, sink, proximity):
        """reset() clears the sink and renders one page with loaded bodies."""
        records = _records(record_factory, 12)
        controller = PaginationController(
            ContentStore(loader_factory(_bodies(records))), sink, proximity, page_size=5
        )

        await controller.reset(records)

        assert sink.clears == 1
        assert sink.ids == ["r0", "r1", "r2", "r3", "r4"]
        assert all(r.load_state is LoadState.LOADED for r in sink.rendered)
        assert controller.state is PageState.IDLE
        assert controller.subscribed

    @pytest.mark.asyncio
    async def test_batches_append(self, record_factory, loader_factory, sink, proximity):
        """Each further page appends, never replaces."""
        records = _records(record_factory, 12)
        controller = PaginationController(
            ContentStore(loader_factory(_bodies(records))), sink, proximity, page_size=5
        )
        await controller.reset(records)

        assert await controller.render_next_page() == 5
        assert await controller.render_next_page() == 2

        assert sink.ids == [r.id for r in records]
        assert controller.exhausted

    @pytest.mark.asyncio
    async def test_subscription_retired_at_end(self, record_factory, loader_factory, sink, proximity):
        """Rendering the last record drops the proximity subscription."""
        records = _records(record_factory, 7)
        controller = PaginationController(
            ContentStore(loader_factory(_bodies(records))), sink, proximity, page_size=5
        )
        await controller.reset(records)
        assert proximity.callbacks

        await controller.render_next_page()

        assert proximity.callbacks == []
        assert not controller.subscribed
        assert await controller.render_next_page() == 0

    @pytest.mark.asyncio
    async def test_proximity_triggers_next_page(self, record_factory, loader_factory, sink, proximity):
        """A near-end signal schedules the next page."""
        records = _records(record_factory, 8)
        controller = PaginationController(
            ContentStore(loader_factory(_bodies(records))), sink, proximity, page_size=5
        )
        await controller.reset(records)

        proximity.fire()
        for _ in range(200):
            if controller.exhausted:
                break
            await asyncio.sleep(0)

        assert sink.ids == [r.id for r in records]

    @pytest.mark.asyncio
    async def test_trigger_while_rendering_is_ignored(self, record_factory, loader_factory, sink, proximity):
        """A second trigger during a page does not start another page."""
        gate = asyncio.Event()
        records = _records(record_factory, 12)
        controller = PaginationController(
            ContentStore(loader_factory(_bodies(records), gate=gate)), sink, proximity, page_size=5
        )

        first_page = controller.reset(records)
        await asyncio.sleep(0)
        assert controller.state is PageState.RENDERING_PAGE

        assert await controller.render_next_page() == 0
        proximity.fire()

        gate.set()
        await first_page
        for _ in range(10):
            await asyncio.sleep(0)

        assert sink.ids == ["r0", "r1", "r2", "r3", "r4"]

    @pytest.mark.asyncio
    async def test_reset_mid_page_stops_stale_items(self, record_factory, loader_factory, sink, proximity):
        """A page for a replaced list stops after its pending await."""
        gate = asyncio.Event()
        old = _records(record_factory, 5)
        new = [record_factory(f"n{i}", uri=f"n{i}.tex") for i in range(3)]
        loader = loader_factory({**_bodies(old), **_bodies(new)}, gate=gate)
        controller = PaginationController(ContentStore(loader), sink, proximity, page_size=5)

        stale_page = controller.reset(old)
        await asyncio.sleep(0)
        fresh_page = controller.reset(new)

        gate.set()
        await asyncio.gather(stale_page, fresh_page)

        assert sink.clears == 2
        assert sink.ids == ["n0", "n1", "n2"]
        assert proximity.subscribe_count == 2
        assert len(proximity.callbacks) == 0

    @pytest.mark.asyncio
    async def test_failed_bodies_still_render(self, record_factory, loader_factory, sink, proximity):
        """Records whose body failed to load are rendered anyway."""
        records = _records(record_factory, 2)
        controller = PaginationController(ContentStore(loader_factory({})), sink, proximity)

        await controller.reset(records)

        assert sink.ids == ["r0", "r1"]
        assert all(r.load_state is LoadState.FAILED for r in records)

    @pytest.mark.asyncio
    async def test_empty_list(self, fake_loader, sink, proximity):
        """An empty list clears the sink and subscribes to nothing."""
        controller = PaginationController(ContentStore(fake_loader), sink, proximity)

        assert controller.reset([]) is None
        assert sink.clears == 1
        assert proximity.subscribe_count == 0

    @pytest.mark.asyncio
    async def test_rerender_after_reset(self, record_factory, loader_factory, sink, proximity):
        """The same records can be rendered again after a reset."""
        records = _records(record_factory, 2)
        loader = loader_factory(_bodies(records))
        controller = PaginationController(ContentStore(loader), sink, proximity)

        await controller.reset(records)
        await controller.reset(list(reversed(records)))

        assert sink.ids == ["r1", "r0"]
        assert len(loader.calls) == 2
