"""
Unit tests for ByteLoader (file transport).
"""

import pytest

from problem_viewer.core.errors import RecordLoadError
from problem_viewer.loading.byte_loader import ByteLoader


class TestByteLoaderFiles:
    """Tests for locators that resolve to local files."""

    @pytest.mark.asyncio
    async def test_relative_path(self, tmp_path):
        """Relative locators resolve against the base directory."""
        posts = tmp_path / "posts"
        posts.mkdir()
        (posts / "a.tex").write_bytes("極限".encode("utf-8"))
        loader = ByteLoader(tmp_path)

        assert await loader.load("posts/a.tex", "auto") == "極限"

    @pytest.mark.asyncio
    async def test_shift_jis_file(self, tmp_path):
        """Legacy files decode with the Shift_JIS hint."""
        (tmp_path / "old.tex").write_bytes("複素数".encode("cp932"))
        loader = ByteLoader(tmp_path)

        assert await loader.load("old.tex", "shift_jis") == "複素数"

    @pytest.mark.asyncio
    async def test_file_uri(self, tmp_path):
        """file:// URIs are read directly."""
        path = tmp_path / "b.tex"
        path.write_text("body", encoding="utf-8")
        loader = ByteLoader(tmp_path / "elsewhere")

        assert await loader.load(path.as_uri(), "utf-8") == "body"

    @pytest.mark.asyncio
    async def test_missing_file_raises_record_load_error(self, tmp_path):
        """A missing file surfaces as RecordLoadError."""
        loader = ByteLoader(tmp_path)

        with pytest.raises(RecordLoadError) as excinfo:
            await loader.load("posts/missing.tex", "auto")
        assert excinfo.value.uri == "posts/missing.tex"

    def test_resolve_absolute_path(self, tmp_path):
        """Absolute paths are not re-rooted."""
        loader = ByteLoader(tmp_path / "base")
        target = tmp_path / "x.tex"
        assert loader.resolve_path(str(target)) == target

    @pytest.mark.asyncio
    async def test_close_without_session(self, tmp_path):
        """Closing a loader that never made an HTTP request is a no-op."""
        loader = ByteLoader(tmp_path)
        await loader.close()
