"""
Card widget showing one problem record.
"""
from __future__ import annotations

import html
from typing import List, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
)

from problem_viewer.core.models import LoadState, Rating, Record
from problem_viewer.gui.theme import QNUM_STYLE, Colors, band_color
from problem_viewer.search.canonical import to_safe_html
from problem_viewer.view.presentation import build_tags, difficulty_band, format_average

LOAD_FAILED_TEXT = "（本文の読み込みに失敗しました）"
SCORES = range(1, 11)


def body_html(record: Record) -> str:
    """Rich text for the card body; newlines are preserved."""
    if record.load_state is LoadState.FAILED:
        return f"<p style='color:{Colors.TEXT_SECONDARY}'>{LOAD_FAILED_TEXT}</p>"
    safe = to_safe_html(record.display_text or "")
    return f"<style>{QNUM_STYLE}</style><div style='white-space: pre-wrap'>{safe}</div>"


class ProblemCard(QFrame):
    """
    One record: meta line, tag chips, body, explanation, answer link,
    average badge and the ten score buttons.

    Emits score_selected(record_id, score) when a score button is pressed;
    the window decides whether the submission succeeds and then calls
    set_rating() / lock_scores().
    """

    score_selected = Signal(str, int)

    def __init__(self, record: Record, rated_score: Optional[int] = None, parent=None):
        super().__init__(parent)
        self.record = record
        self.setObjectName("ProblemCard")

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 12, 16, 12)
        layout.setSpacing(8)

        meta = QLabel(f"{record.date}｜{record.source_display}")
        meta.setStyleSheet(f"color: {Colors.TEXT_SECONDARY};")
        layout.addWidget(meta)

        chips = QHBoxLayout()
        chips.setSpacing(4)
        for tag in build_tags(record):
            chip = QLabel(tag)
            chip.setObjectName("Chip")
            chips.addWidget(chip)
        chips.addStretch()
        layout.addLayout(chips)

        self.body_label = QLabel(body_html(record))
        self.body_label.setTextFormat(Qt.TextFormat.RichText)
        self.body_label.setWordWrap(True)
        self.body_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        layout.addWidget(self.body_label)

        if record.explanation:
            explain = QLabel(f"解説：{record.explanation}")
            explain.setTextFormat(Qt.TextFormat.PlainText)
            explain.setWordWrap(True)
            layout.addWidget(explain)

        if record.answer_url:
            answer = QLabel(f'<a href="{html.escape(record.answer_url, quote=True)}">▶ 模範解答を見る</a>')
            answer.setTextFormat(Qt.TextFormat.RichText)
            answer.setOpenExternalLinks(True)
            layout.addWidget(answer)

        self.avg_label = QLabel()
        layout.addWidget(self.avg_label)

        buttons = QHBoxLayout()
        buttons.setSpacing(4)
        self.score_buttons: List[QPushButton] = []
        for score in SCORES:
            button = QPushButton(str(score))
            button.setFixedWidth(36)
            button.clicked.connect(lambda _checked=False, s=score: self._on_score_clicked(s))
            buttons.addWidget(button)
            self.score_buttons.append(button)
        buttons.addStretch()
        layout.addLayout(buttons)

        self.set_rating(record.rating)
        if rated_score is not None:
            self.lock_scores(rated_score)

    def set_rating(self, rating: Rating) -> None:
        color = band_color(difficulty_band(rating.average))
        self.avg_label.setText(f"平均難易度：<b style='color:{color}'>{format_average(rating)}</b>")

    def lock_scores(self, selected: Optional[int] = None) -> None:
        """Disable all score buttons, highlighting the chosen one."""
        for score, button in zip(SCORES, self.score_buttons):
            button.setEnabled(False)
            if score == selected:
                button.setProperty("selected", "true")
                button.style().unpolish(button)
                button.style().polish(button)

    def unlock_scores(self) -> None:
        """Re-enable the score buttons after a failed submission."""
        for button in self.score_buttons:
            button.setEnabled(True)

    @property
    def scores_locked(self) -> bool:
        return not any(button.isEnabled() for button in self.score_buttons)

    def _on_score_clicked(self, score: int) -> None:
        if self.scores_locked:
            return
        # Locked until the submission succeeds or fails
        self.lock_scores()
        self.score_selected.emit(self.record.id, score)
