"""Top-level package for the problem archive viewer.

Provides subpackages:
- problem_viewer.search – canonicalization, query matching, content cache, search runner
- problem_viewer.loading – index loading, byte loading and decoding
- problem_viewer.ratings – difficulty ratings store and local ledger
- problem_viewer.view – sorting, pagination, presentation helpers
- problem_viewer.gui – PySide6 desktop viewer
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        return pkg_version("problem-viewer")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
