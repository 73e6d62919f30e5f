"""
Entry point for the PySide6 viewer.
"""
import logging
import sys
from typing import Optional, Sequence


def run(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for the GUI application.

    Args:
        argv: Command-line arguments without the program name
            (defaults to sys.argv[1:]).
    """
    from PySide6.QtWidgets import QApplication

    from problem_viewer import __version__
    from problem_viewer.config import ViewerConfig
    from problem_viewer.gui.main_window import ViewerWindow
    from problem_viewer.gui.theme import GLOBAL_STYLESHEET

    args = list(sys.argv[1:] if argv is None else argv)
    config = ViewerConfig.from_args(args)

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info(f"Problem viewer {__version__} opening {config.index_path}")

    app = QApplication.instance() or QApplication([sys.argv[0], *args])
    app.setApplicationName("Problem Viewer")
    app.setApplicationDisplayName("入試問題ビューア")
    app.setStyleSheet(GLOBAL_STYLESHEET)

    window = ViewerWindow(config)
    window.show()

    return app.exec()


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
