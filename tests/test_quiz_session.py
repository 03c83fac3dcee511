import threading
import time

from mcq_mock_test.models.question_model import Question, QuizData
from mcq_mock_test.models.session_state import SessionPhase
from mcq_mock_test.services.quiz_session import QuizSession, SessionClock


def test_default_time_limit_is_two_minutes_per_question(quiz_session):
    state = quiz_session.state
    assert state.phase is SessionPhase.NOT_STARTED
    assert state.time_limit_minutes == 6
    assert state.time_remaining_seconds == 360


def test_time_limit_override_is_clamped(quiz_data, clock_factory):
    assert QuizSession(quiz_data, time_limit_minutes=1, clock_factory=clock_factory).state.time_limit_minutes == 5
    assert QuizSession(quiz_data, time_limit_minutes=999, clock_factory=clock_factory).state.time_limit_minutes == 180


def test_configure_only_before_start(quiz_session):
    assert quiz_session.configure_time_limit(200)
    assert quiz_session.state.time_remaining_seconds == 180 * 60

    quiz_session.start()
    assert not quiz_session.configure_time_limit(10)
    assert quiz_session.state.time_limit_minutes == 180


def test_start_runs_clock(quiz_session, clocks):
    assert quiz_session.start()
    assert quiz_session.phase is SessionPhase.IN_PROGRESS
    assert clocks[0].running
    assert not quiz_session.start()


def test_empty_quiz_cannot_start(clock_factory, clocks):
    quiz_session = QuizSession(QuizData(), clock_factory=clock_factory)

    assert quiz_session.is_empty
    assert not quiz_session.start()
    assert quiz_session.phase is SessionPhase.NOT_STARTED
    assert not clocks[0].started


def test_answers_ignored_before_start(quiz_session):
    assert not quiz_session.select_answer(1, "A")
    assert not quiz_session.navigate_to(1)
    assert quiz_session.state.answers == {}


def test_select_answer_records_and_overwrites(started_session):
    assert started_session.select_answer(2, "a")
    assert started_session.select_answer(2, "C")

    state = started_session.state
    assert state.answers == {2: "C"}
    assert 2 in state.visited


def test_select_answer_rejects_unknown_question_or_letter(started_session):
    assert not started_session.select_answer(9, "A")
    assert not started_session.select_answer(1, "E")
    assert started_session.state.answers == {}


def test_free_navigation_marks_visited(started_session):
    assert started_session.navigate_to(2)
    assert not started_session.navigate_to(3)
    assert not started_session.navigate_to(-1)

    state = started_session.state
    assert state.current_index == 2
    assert state.visited == {3}


def test_save_and_advance_stops_at_last(started_session):
    assert started_session.save_and_advance()
    assert started_session.save_and_advance()
    assert not started_session.save_and_advance()

    state = started_session.state
    assert state.current_index == 2
    assert state.visited == {2, 3}


def test_previous_question(started_session):
    assert not started_session.previous_question()
    started_session.navigate_to(2)
    assert started_session.previous_question()
    assert started_session.state.current_index == 1


def test_review_mark_requires_answer(started_session):
    assert not started_session.toggle_review_mark()
    assert started_session.state.marked_for_review == set()

    started_session.select_answer(1, "B")
    assert started_session.toggle_review_mark()
    assert started_session.state.marked_for_review == {1}
    assert started_session.toggle_review_mark()
    assert started_session.state.marked_for_review == set()


def test_clear_answer_resets_question(started_session):
    started_session.select_answer(1, "B")
    started_session.toggle_review_mark()

    assert started_session.clear_answer()

    state = started_session.state
    assert 1 not in state.answers
    assert 1 not in state.visited
    assert 1 not in state.marked_for_review


def test_state_is_a_snapshot(started_session):
    snapshot = started_session.state
    snapshot.answers[1] = "A"
    assert started_session.state.answers == {}


def test_submit_freezes_result(started_session, clocks):
    started_session.select_answer(1, "B")
    started_session.select_answer(2, "A")

    assert started_session.submit()

    result = started_session.result
    assert started_session.phase is SessionPhase.SUBMITTED
    assert clocks[0].stopped
    assert result.summary.correct == 1
    assert result.summary.incorrect == 1
    assert result.summary.unattempted == 1
    assert result.summary.score == 1.5
    assert result.summary.max_score == 6
    assert result.percentage == 25
    assert not result.timed_out

    assert not started_session.submit()
    assert not started_session.select_answer(3, "B")
    assert not started_session.clear_answer()
    assert started_session.result is result
    assert started_session.state.answers == {1: "B", 2: "A"}


def test_tick_counts_down_only_in_progress(quiz_session):
    quiz_session.tick()
    assert quiz_session.state.time_remaining_seconds == 360

    quiz_session.start()
    quiz_session.tick()
    quiz_session.tick(5)
    assert quiz_session.state.time_remaining_seconds == 354


def test_timeout_auto_submits(started_session, clocks):
    started_session.select_answer(1, "B")
    started_session.tick(359)
    assert started_session.phase is SessionPhase.IN_PROGRESS

    started_session.tick()

    assert started_session.phase is SessionPhase.SUBMITTED
    assert started_session.state.time_remaining_seconds == 0
    assert started_session.result.timed_out
    assert started_session.result.summary.correct == 1
    assert clocks[0].stopped

    started_session.tick()
    assert not started_session.select_answer(2, "B")
    assert started_session.state.answers == {1: "B"}


def test_review_marks_always_have_answers(started_session):
    started_session.select_answer(1, "A")
    started_session.toggle_review_mark()
    started_session.clear_answer()
    started_session.navigate_to(1)
    started_session.toggle_review_mark()

    state = started_session.state
    assert state.marked_for_review <= set(state.answers)


def test_close_stops_clock_without_submitting(started_session, clocks):
    started_session.close()
    assert clocks[0].stopped
    assert started_session.phase is SessionPhase.IN_PROGRESS
    assert started_session.result is None


def test_session_clock_ticks_until_stopped():
    ticked = threading.Event()
    clock = SessionClock(ticked.set, interval=0.01)

    clock.start()
    assert ticked.wait(1.0)
    assert clock.running

    clock.stop()
    assert not clock.running


def test_real_clock_auto_submits(quiz_data):
    def fast_clock(on_tick):
        return SessionClock(on_tick, interval=0.001)

    quiz_session = QuizSession(quiz_data, time_limit_minutes=5, clock_factory=fast_clock)
    quiz_session.start()
    quiz_session.tick(299)

    deadline = time.time() + 5
    while quiz_session.phase is not SessionPhase.SUBMITTED and time.time() < deadline:
        time.sleep(0.01)

    assert quiz_session.phase is SessionPhase.SUBMITTED
    assert quiz_session.result.timed_out
    assert not quiz_session.clock_running


def test_restart_keeps_unclamped_default_budget(clock_factory):
    quiz = QuizData(
        questions=[Question(question_number=1, question="Only?", options=["a", "b", "c", "d"])],
    )
    quiz_session = QuizSession(quiz, clock_factory=clock_factory)
    quiz_session.start()
    quiz_session.submit()

    fresh = quiz_session.restart()

    assert fresh.time_limit_override is None
    assert fresh.state.time_limit_minutes == 2
    assert fresh.phase is SessionPhase.NOT_STARTED
    assert fresh.quiz_data is quiz


def test_restart_keeps_configured_limit(quiz_session, clocks):
    quiz_session.configure_time_limit(1)
    quiz_session.start()
    quiz_session.select_answer(1, "B")

    fresh = quiz_session.restart()

    assert quiz_session.time_limit_override == 5
    assert fresh.state.time_limit_minutes == 5
    assert fresh.state.answers == {}
    assert len(clocks) == 2
