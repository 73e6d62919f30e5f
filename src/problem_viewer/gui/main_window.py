"""
Module: gui.main_window

Purpose:
    The viewer window: toolbar (search box, clear, sort toggle), a note
    banner, the scrolling list of problem cards and the console log.
    Widgets live on the GUI thread; the ViewSession and everything it
    drives run on the SearchEngine loop. The two sides talk only through
    Qt signals (engine -> GUI) and engine.submit()/call_soon() (GUI -> engine).

Key Classes:
    - QtRenderSink: RenderSink that forwards records to the GUI thread
    - ViewerWindow: QMainWindow wiring config, index, session and widgets

Dependencies:
    - PySide6: widgets, timers, signals
    - loading / search / view / ratings: the viewing pipeline

Used By:
    - gui.app: run()
"""

from __future__ import annotations

import logging
from queue import Queue
from typing import Dict, List, Optional

from PySide6.QtCore import QObject, Qt, QTimer, Signal, Slot
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from problem_viewer.config import ViewerConfig
from problem_viewer.core.errors import IndexLoadError, RatingSubmitError
from problem_viewer.core.models import Record
from problem_viewer.loading import ByteLoader, load_index
from problem_viewer.ratings import JsonlRatingStore, RatedLedger
from problem_viewer.search import ContentStore, SearchOrchestrator, SearchResult
from problem_viewer.view.paginator import PaginationController
from problem_viewer.view.session import ViewSession
from problem_viewer.view.sorting import SortMode

from .engine import SearchEngine
from .scroll_proximity import ScrollProximity
from .utils.logging_utils import attach_queue_handler, detach_queue_handler, drain_queue
from .widgets.console_widget import ConsoleWidget
from .widgets.problem_card import ProblemCard

logger = logging.getLogger(__name__)

LOG_POLL_MS = 100


class QtRenderSink(QObject):
    """RenderSink whose calls arrive on the engine loop and land on the GUI thread."""

    cleared = Signal()
    record_ready = Signal(object)  # Record

    def clear(self) -> None:
        self.cleared.emit()

    async def render(self, record: Record) -> None:
        self.record_ready.emit(record)


class ViewerWindow(QMainWindow):
    """
    Main viewer window.

    Signals below are emitted from the engine thread and delivered queued
    on the GUI thread.
    """

    sort_changed = Signal(str)             # New sort button label
    status_changed = Signal(str)           # Result count text
    rating_applied = Signal(object, int)   # Record, score
    rating_failed = Signal(str, str)       # Record id, user-visible message

    def __init__(self, config: ViewerConfig, parent=None):
        super().__init__(parent)
        self.config = config
        self.setWindowTitle("入試問題ビューア")
        self.resize(960, 900)

        self.session: Optional[ViewSession] = None
        self.loader: Optional[ByteLoader] = None
        self._cards: Dict[str, ProblemCard] = {}

        self._build_ui()
        self._connect_logging()

        self.engine = SearchEngine(self)
        self.engine.error_occurred.connect(self._on_engine_error)
        self.engine.start()
        self.engine.wait_ready()

        self.sort_changed.connect(self.sort_button.setText)
        self.status_changed.connect(self.status_label.setText)
        self.rating_applied.connect(self._on_rating_applied)
        self.rating_failed.connect(self._on_rating_failed)

        self._open_index()

    # ------------------------------------------------------------------ UI

    def _build_ui(self) -> None:
        central = QWidget()
        root = QVBoxLayout(central)
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(8)

        toolbar = QHBoxLayout()
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("検索（例：2025,東京大学,積分）")
        self.search_input.setClearButtonEnabled(False)
        toolbar.addWidget(self.search_input, 1)

        self.clear_button = QPushButton("クリア")
        toolbar.addWidget(self.clear_button)

        self.sort_button = QPushButton(SortMode.YEAR.label)
        toolbar.addWidget(self.sort_button)
        root.addLayout(toolbar)

        self.note_banner = QLabel()
        self.note_banner.setObjectName("NoteBanner")
        self.note_banner.setWordWrap(True)
        self.note_banner.setTextFormat(Qt.TextFormat.PlainText)
        self.note_banner.hide()
        root.addWidget(self.note_banner)

        self.status_label = QLabel()
        root.addWidget(self.status_label)

        self.scroll_area = QScrollArea()
        self.scroll_area.setWidgetResizable(True)
        self.card_container = QWidget()
        self.card_layout = QVBoxLayout(self.card_container)
        self.card_layout.setSpacing(12)
        self.card_layout.addStretch()
        self.scroll_area.setWidget(self.card_container)

        self.console = ConsoleWidget()

        splitter = QSplitter(Qt.Orientation.Vertical)
        splitter.addWidget(self.scroll_area)
        splitter.addWidget(self.console)
        splitter.setStretchFactor(0, 5)
        splitter.setStretchFactor(1, 1)
        root.addWidget(splitter, 1)

        self.setCentralWidget(central)

        self.debounce_timer = QTimer(self)
        self.debounce_timer.setSingleShot(True)
        self.debounce_timer.setInterval(self.config.debounce_ms)
        self.debounce_timer.timeout.connect(self._run_search)

        self.search_input.textChanged.connect(lambda _text: self.debounce_timer.start())
        self.clear_button.clicked.connect(self._on_clear_clicked)
        self.sort_button.clicked.connect(self._on_sort_clicked)

    def _connect_logging(self) -> None:
        self.log_queue: Queue = Queue()
        level = logging.getLevelName(self.config.log_level.upper())
        self.log_handler = attach_queue_handler(self.log_queue, "problem_viewer", level)
        self.log_timer = QTimer(self)
        self.log_timer.setInterval(LOG_POLL_MS)
        self.log_timer.timeout.connect(self._drain_logs)
        self.log_timer.start()

    def show_note(self, text: str) -> None:
        self.note_banner.setText(text)
        self.note_banner.show()

    # ------------------------------------------------------------- Startup

    def _open_index(self) -> None:
        try:
            records = load_index(
                self.config.index_path,
                source_names=self.config.source_names,
                legacy_prefixes=self.config.legacy_encoding_prefixes,
            )
        except IndexLoadError as e:
            logger.error(f"Cannot open index: {e}")
            self.show_note(f"❌ 問題一覧の読み込みに失敗しました。\n{e}")
            self._set_controls_enabled(False)
            return

        self.sink = QtRenderSink()
        self.sink.cleared.connect(self._clear_cards)
        self.sink.record_ready.connect(self._add_card)

        self.proximity = ScrollProximity(
            self.scroll_area,
            margin_px=self.config.proximity_margin_px,
            dispatch=self.engine.call_soon,
            parent=self,
        )

        self.loader = ByteLoader(self.config.base_dir, timeout_s=self.config.http_timeout_s)
        store = ContentStore(self.loader)
        paginator = PaginationController(
            store, self.sink, self.proximity, page_size=self.config.page_size
        )
        self.session = ViewSession(
            records,
            SearchOrchestrator(store, concurrency=self.config.concurrency),
            paginator,
            rating_store=JsonlRatingStore(self.config.resolved_ratings_path),
            ledger=RatedLedger(self.config.resolved_ledger_path),
        )
        self.session.add_result_listener(self._on_search_result)
        self.status_changed.emit(f"{len(records)}件")
        self.engine.submit(self.session.start())

    def _set_controls_enabled(self, enabled: bool) -> None:
        for widget in (self.search_input, self.clear_button, self.sort_button):
            widget.setEnabled(enabled)

    # -------------------------------------------------------------- Search

    @Slot()
    def _run_search(self) -> None:
        if self.session is None:
            return
        self.engine.submit(self.session.search(self.search_input.text()))

    @Slot()
    def _on_clear_clicked(self) -> None:
        self.debounce_timer.stop()
        self.search_input.blockSignals(True)
        self.search_input.clear()
        self.search_input.blockSignals(False)
        if self.session is not None:
            self.engine.call_soon(self.session.clear_search)
            self.status_changed.emit(f"{len(self.session.records)}件")

    def _on_search_result(self, result: SearchResult) -> None:
        # Engine thread
        if result.is_unfiltered:
            text = f"{len(result)}件"
        elif result.final:
            text = f"{len(result)}件ヒット"
        else:
            text = f"{len(result)}件ヒット（本文を検索中…）"
        self.status_changed.emit(text)

    @Slot()
    def _on_sort_clicked(self) -> None:
        if self.session is not None:
            self.engine.call_soon(self._toggle_sort)

    def _toggle_sort(self) -> None:
        # Engine thread
        mode = self.session.toggle_sort()
        self.sort_changed.emit(mode.label)

    # --------------------------------------------------------------- Cards

    @Slot()
    def _clear_cards(self) -> None:
        for card in self._cards.values():
            self.card_layout.removeWidget(card)
            card.deleteLater()
        self._cards.clear()
        self.scroll_area.verticalScrollBar().setValue(0)

    @Slot(object)
    def _add_card(self, record: Record) -> None:
        previous = self._cards.pop(record.id, None)
        if previous is not None:
            self.card_layout.removeWidget(previous)
            previous.deleteLater()

        rated = self.session.ledger.score_for(record.id) if self.session.ledger else None
        card = ProblemCard(record, rated_score=rated)
        card.score_selected.connect(self._on_score_selected)
        # Keep the trailing stretch last
        self.card_layout.insertWidget(self.card_layout.count() - 1, card)
        self._cards[record.id] = card
        QTimer.singleShot(0, self.proximity.check)

    # ------------------------------------------------------------- Ratings

    @Slot(str, int)
    def _on_score_selected(self, record_id: str, score: int) -> None:
        card = self._cards.get(record_id)
        if card is None or self.session is None:
            return
        self.engine.submit(self._rate(card.record, score))

    async def _rate(self, record: Record, score: int) -> None:
        # Engine thread
        try:
            await self.session.rate(record, score)
        except RatingSubmitError as e:
            logger.warning(f"Rating for {record.id} failed: {e}")
            if self.session.is_rated(record) or self.session.is_rating_pending(record):
                return
            self.rating_failed.emit(record.id, "評価の送信に失敗しました。ログを確認してください。")
            return
        self.rating_applied.emit(record, score)

    @Slot(object, int)
    def _on_rating_applied(self, record: Record, score: int) -> None:
        card = self._cards.get(record.id)
        if card is not None:
            card.set_rating(record.rating)
            card.lock_scores(score)

    @Slot(str, str)
    def _on_rating_failed(self, record_id: str, message: str) -> None:
        card = self._cards.get(record_id)
        if card is not None:
            card.unlock_scores()
        QMessageBox.warning(self, "評価", message)

    # -------------------------------------------------------------- Misc

    @Slot(str)
    def _on_engine_error(self, message: str) -> None:
        self.show_note(f"⚠️ 処理中にエラーが発生しました：{message}")

    @Slot()
    def _drain_logs(self) -> None:
        for message, level in drain_queue(self.log_queue):
            self.console.append_log(level, message)

    def card_ids(self) -> List[str]:
        return list(self._cards)

    async def _shutdown_session(self) -> None:
        if self.session is not None:
            self.session.close()
        if self.loader is not None:
            await self.loader.close()

    def closeEvent(self, event):
        self.debounce_timer.stop()
        self.engine.shutdown(cleanup=self._shutdown_session)
        self.log_timer.stop()
        detach_queue_handler(self.log_handler, "problem_viewer")
        super().closeEvent(event)
