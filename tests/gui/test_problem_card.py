"""Unit tests for the problem card widget."""

from problem_viewer.core.models import LoadState, Rating
from problem_viewer.gui.widgets.problem_card import LOAD_FAILED_TEXT, ProblemCard, body_html


def _loaded(record, display):
    record.display_text = display
    record.canonical_text = display
    record.load_state = LoadState.LOADED
    return record


class TestBodyHtml:
    """Tests for body rich text."""

    def test_escapes_and_marks_question_number(self, record_factory):
        """Markup is escaped, question numbers become spans."""
        html = body_html(_loaded(record_factory("a"), "[[QNUM:3]] a<b"))
        assert '<span class="qnum">3</span>' in html
        assert "a&lt;b" in html

    def test_failed_body(self, record_factory):
        """A failed load shows the failure notice."""
        record = record_factory("a")
        record.display_text = ""
        record.canonical_text = ""
        record.load_state = LoadState.FAILED
        assert LOAD_FAILED_TEXT in body_html(record)


class TestProblemCard:
    """Tests for ProblemCard."""

    def test_score_click_emits(self, qtbot, record_factory):
        """Pressing a score button emits the record id and score."""
        card = ProblemCard(_loaded(record_factory("a"), "body"))
        qtbot.addWidget(card)

        with qtbot.waitSignal(card.score_selected, timeout=1000) as blocker:
            card.score_buttons[6].click()

        assert blocker.args == ["a", 7]

    def test_already_rated_is_locked(self, qtbot, record_factory):
        """A card for a rated record starts with disabled buttons."""
        card = ProblemCard(_loaded(record_factory("a"), "body"), rated_score=4)
        qtbot.addWidget(card)

        assert card.scores_locked
        assert card.score_buttons[3].property("selected") == "true"

    def test_set_rating_updates_badge(self, qtbot, record_factory):
        """The badge shows the new average."""
        card = ProblemCard(_loaded(record_factory("a"), "body"))
        qtbot.addWidget(card)
        assert "未評価" in card.avg_label.text()

        card.set_rating(Rating(total=13.0, count=2))

        assert "6.50（2人）" in card.avg_label.text()

    def test_click_locks_until_unlocked(self, qtbot, record_factory):
        """A click locks the buttons so a second click sends nothing."""
        card = ProblemCard(_loaded(record_factory("a"), "body"))
        qtbot.addWidget(card)
        emitted = []
        card.score_selected.connect(lambda record_id, score: emitted.append(score))

        card.score_buttons[2].click()
        card.score_buttons[4].click()

        assert emitted == [3]
        assert card.scores_locked

        card.unlock_scores()

        assert not card.scores_locked
