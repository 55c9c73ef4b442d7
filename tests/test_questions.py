"""
Question Generator Tests

Seeded question kinds, the statistics helpers behind them, answer checking for
integers, decimals and numbered choices, and gates that ask non-integer questions.
"""

import pytest
from dataclasses import replace

from packages.runstate import actions
from packages.runstate.content.events import EVENT_HALLWAY_SHORTCUT, EVENT_LIBRARY
from packages.runstate.generation.questions import (
    DECIMAL_TOLERANCE,
    Question,
    difficulty_for_depth,
    five_number_summary,
    format_number,
    get_question,
    unique_mode,
)
from packages.runstate.state.rng import make_rng
from packages.runstate.state.screens import EventStep, LockerKind


def sample(difficulty: int, seeds=range(1, 301)):
    return [get_question(make_rng(seed), difficulty) for seed in seeds]


CHOICE = Question(
    id="correlation:test",
    prompt="Which is best?",
    answer=3,
    hint="",
    difficulty=2,
    choices=("Ice cream causes drownings", "Drownings cause ice cream", "A third factor explains both", "No link"),
)

DECIMAL = Question(id="mean:test", prompt="Mean?", answer=12.33, hint="", difficulty=1, tolerance=DECIMAL_TOLERANCE)


# =============================================================================
# GENERATION
# =============================================================================


class TestGetQuestion:

    @pytest.mark.parametrize("depth,difficulty", [(0, 1), (4, 1), (5, 2), (9, 2), (10, 3), (15, 3)])
    def test_difficulty_for_depth(self, depth, difficulty):
        assert difficulty_for_depth(depth) == difficulty

    def test_same_stream_same_question(self):
        for seed in (1, 7, 42):
            assert get_question(make_rng(seed), 2) == get_question(make_rng(seed), 2)

    def test_all_kinds_reachable(self):
        tags = set()
        for question in sample(2):
            tags.update(question.tags)
        assert {"arithmetic", "mean", "median", "mode", "boxplot", "axis", "correlation", "predict"} <= tags

    def test_first_tier_has_no_scatter_or_causation(self):
        for question in sample(1):
            assert "predict" not in question.tags
            assert "correlation" not in question.tags

    def test_generated_answers_check(self):
        for question in sample(3, range(1, 101)):
            assert question.check(question.answer), question.id
            assert question.check(f" {question.answer} "), question.id
            assert not question.check("wrong")

    def test_choice_questions_well_formed(self):
        choice = [q for q in sample(2) if q.is_choice]
        assert choice
        for question in choice:
            assert 1 <= question.answer <= len(question.choices)
            assert "Enter the number." in question.prompt
            assert question.check(question.choices[question.answer - 1])

    def test_mean_matches_dataset(self):
        means = [q for q in sample(2) if "mean" in q.tags]
        assert means
        for question in means:
            data = question.dataset
            assert question.answer == pytest.approx(round(sum(data) / len(data), 2))

    def test_mode_is_unique(self):
        for question in (q for q in sample(1) if "mode" in q.tags):
            assert unique_mode(question.dataset) == question.answer


# =============================================================================
# STATISTICS HELPERS
# =============================================================================


class TestStatistics:

    def test_five_number_summary_odd(self):
        assert five_number_summary([1, 3, 3, 4, 5, 8, 8, 9, 10, 12, 15]) == (1, 3, 8, 10, 15)

    def test_five_number_summary_even(self):
        data = [78, 66, 51, 56, 60, 70, 74, 70, 76, 59, 57, 71, 65, 76]
        assert five_number_summary(data) == (51, 59, 68, 74, 78)

    @pytest.mark.parametrize("data,mode", [([1, 2, 2, 3], 2), ([1, 2, 3], None), ([1, 1, 2, 2], None), ([], None)])
    def test_unique_mode(self, data, mode):
        assert unique_mode(data) == mode

    @pytest.mark.parametrize("value,text", [(12.0, "12"), (12.5, "12.5"), (1 / 3, "0.33"), (-4, "-4")])
    def test_format_number(self, value, text):
        assert format_number(value) == text


# =============================================================================
# ANSWER CHECKING
# =============================================================================


class TestCheck:

    def test_decimal_within_tolerance(self):
        assert DECIMAL.check("12.33")
        assert DECIMAL.check(12.335)
        assert not DECIMAL.check("12.4")

    def test_integer_exact(self):
        question = Question(id="arith:2+2", prompt="2 + 2 = ?", answer=4, hint="", difficulty=1)
        assert question.check("4")
        assert question.check(4.0)
        assert not question.check("4.5")

    def test_choice_by_number_or_text(self):
        assert CHOICE.check(3)
        assert CHOICE.check(" a third factor explains both ")
        assert not CHOICE.check("Ice cream causes drownings")
        assert not CHOICE.check(1)

    @pytest.mark.parametrize("given", [None, True, "nan", "inf", ""])
    def test_unusable_input(self, given):
        assert not CHOICE.check(given)
        assert not DECIMAL.check(given)

    def test_display_answer(self):
        assert CHOICE.display_answer == "3) A third factor explains both"
        assert DECIMAL.display_answer == "12.33"


# =============================================================================
# GATES WITH NON-INTEGER ANSWERS
# =============================================================================


class TestGatesAcceptAnyAnswerKind:

    @pytest.fixture
    def choice_gate(self, reducer, on_event):
        state = reducer.reduce(on_event(EVENT_LIBRARY), actions.EventChoose("leave"))
        prompt = replace(state.node_screen.prompt, question=CHOICE)
        return replace(state, node_screen=replace(state.node_screen, prompt=prompt))

    def test_gate_accepts_choice_text(self, reducer, choice_gate):
        state = reducer.reduce(choice_gate, actions.EventGateAnswer("A third factor explains both"))
        assert state.node_screen.step == EventStep.RESULT
        assert state.hp == choice_gate.hp

    def test_gate_logs_choice_text(self, reducer, choice_gate):
        state = reducer.reduce(choice_gate, actions.EventGateAnswer(1))
        assert state.hp == choice_gate.hp - 5
        (entry,) = state.wrong_answer_log
        assert entry.expected == "3) A third factor explains both"
        assert entry.given == "1"

    def test_hallway_quiz_accepts_decimal(self, dispatch, on_event):
        state = dispatch(on_event(EVENT_HALLWAY_SHORTCUT), actions.EventChoose("enter"))
        lockers = state.node_screen.hallway.lockers
        index = next(i for i, locker in enumerate(lockers) if locker.kind == LockerKind.DAMAGE)
        state = dispatch(state, actions.EventChoose(f"locker_{index}"), actions.EventChoose("collect"))

        screen = state.node_screen
        quiz = replace(screen.hallway.quiz, question=DECIMAL)
        state = replace(state, node_screen=replace(screen, hallway=replace(screen.hallway, quiz=quiz)))
        hp = state.hp
        state = dispatch(state, actions.EventHallwayAnswer("12.33"))
        assert state.hp == hp
        assert state.node_screen.hallway.lockers[index].negated
