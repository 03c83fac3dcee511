"""
services/quiz_session.py

시험 세션 상태 머신 (NOT_STARTED → IN_PROGRESS → SUBMITTED).

- 모든 상태 변경은 QuizSession 메서드로만 수행
- 허용되지 않는 조작은 예외 없이 무시 (False 반환)
- 1초 간격 SessionClock 이 진행 중에만 동작, 0초가 되면 자동 제출
- 결과는 제출 순간 한 번만 계산되어 고정됨
"""

import logging
import threading
from typing import Callable, Optional

from config import CLOCK_INTERVAL_SECONDS, OPTION_LETTERS
from mcq_mock_test.models.question_model import QuizData
from mcq_mock_test.models.session_state import QuizResult, SessionPhase, SessionState
from mcq_mock_test.services.exam_service import build_result, clamp_time_limit, recommended_minutes

logger = logging.getLogger(__name__)


class SessionClock:
    """
    interval 초마다 on_tick 을 호출하는 데몬 스레드 타이머.
    stop() 이후에는 다시 시작할 수 없다.
    """

    def __init__(self, on_tick: Callable[[], None], interval: float = CLOCK_INTERVAL_SECONDS):
        self._on_tick = on_tick
        self._interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stop_event.is_set()

    def start(self) -> None:
        if self._thread is not None or self._stop_event.is_set():
            return
        self._thread = threading.Thread(target=self._run, name="quiz-clock", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        # join 하지 않음: 세션 락을 쥔 채로 호출되므로 다음 wait 에서 스스로 종료
        self._stop_event.set()

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                self._on_tick()
            except Exception:
                logger.exception("타이머 콜백 오류, 타이머를 중지합니다.")
                self._stop_event.set()


ClockFactory = Callable[[Callable[[], None]], SessionClock]


class QuizSession:
    """
    한 번의 시험 응시를 관리한다. QuizData 는 읽기만 한다.

    Args:
        quiz_data:          추출된 문제와 정답표.
        time_limit_minutes: 제한 시간 (분). None 이면 문항 수 × 2분.
        clock_factory:      on_tick 콜백을 받아 타이머를 만드는 함수.
    """

    def __init__(
        self,
        quiz_data: QuizData,
        time_limit_minutes: Optional[int] = None,
        clock_factory: ClockFactory = SessionClock,
    ):
        self._quiz = quiz_data
        self._lock = threading.RLock()
        self._clock_factory = clock_factory
        self._clock = clock_factory(self.tick)
        self._result: Optional[QuizResult] = None
        self._time_limit_override = time_limit_minutes

        if time_limit_minutes is None:
            minutes = recommended_minutes(quiz_data.total_questions)
        else:
            minutes = clamp_time_limit(time_limit_minutes)
        self._state = SessionState(time_limit_minutes=minutes, time_remaining_seconds=minutes * 60)

    # ── 조회 ────────────────────────────────────────────────────────────────

    @property
    def quiz_data(self) -> QuizData:
        return self._quiz

    @property
    def state(self) -> SessionState:
        """렌더링용 스냅샷 (복사본)."""
        with self._lock:
            return self._state.model_copy(deep=True)

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def result(self) -> Optional[QuizResult]:
        return self._result

    @property
    def is_empty(self) -> bool:
        return self._quiz.is_empty

    @property
    def clock_running(self) -> bool:
        return self._clock.running

    @property
    def time_limit_override(self) -> Optional[int]:
        """사용자가 지정한 제한 시간 (분). 기본값을 쓰는 중이면 None."""
        return self._time_limit_override

    def restart(self) -> "QuizSession":
        """같은 문제, 같은 제한 시간 설정으로 새 세션을 만든다."""
        return QuizSession(
            self._quiz,
            time_limit_minutes=self._time_limit_override,
            clock_factory=self._clock_factory,
        )

    # ── 시작 전 설정 ────────────────────────────────────────────────────────

    def configure_time_limit(self, minutes: int) -> bool:
        """제한 시간 변경 (5~180분으로 보정). 시작 전에만 가능."""
        with self._lock:
            if self._state.phase is not SessionPhase.NOT_STARTED:
                return False
            minutes = clamp_time_limit(minutes)
            self._time_limit_override = minutes
            self._state.time_limit_minutes = minutes
            self._state.time_remaining_seconds = minutes * 60
            return True

    def start(self) -> bool:
        with self._lock:
            if self._state.phase is not SessionPhase.NOT_STARTED:
                return False
            if self.is_empty:
                logger.warning("문제가 없어 시험을 시작할 수 없습니다.")
                return False
            self._state.phase = SessionPhase.IN_PROGRESS
            self._clock.start()
            logger.info(
                f"시험 시작: {self._quiz.total_questions}문제, 제한 시간 {self._state.time_limit_minutes}분"
            )
            return True

    # ── 진행 중 조작 ────────────────────────────────────────────────────────

    def select_answer(self, question_number: int, letter: str) -> bool:
        with self._lock:
            if self._state.phase is not SessionPhase.IN_PROGRESS:
                return False
            letter = (letter or "").strip().upper()
            if letter not in OPTION_LETTERS or not self._has_question(question_number):
                return False
            self._state.answers[question_number] = letter
            self._state.visited.add(question_number)
            return True

    def navigate_to(self, index: int) -> bool:
        with self._lock:
            if self._state.phase is not SessionPhase.IN_PROGRESS:
                return False
            if not 0 <= index < self._quiz.total_questions:
                return False
            self._state.current_index = index
            self._state.visited.add(self._number_at(index))
            return True

    def save_and_advance(self) -> bool:
        """답은 선택 즉시 저장되므로 다음 문제로 이동만 한다."""
        with self._lock:
            if self._state.phase is not SessionPhase.IN_PROGRESS:
                return False
            if self._state.current_index >= self._quiz.total_questions - 1:
                return False
            self._state.current_index += 1
            self._state.visited.add(self._number_at(self._state.current_index))
            return True

    def previous_question(self) -> bool:
        with self._lock:
            if self._state.phase is not SessionPhase.IN_PROGRESS:
                return False
            if self._state.current_index <= 0:
                return False
            self._state.current_index -= 1
            return True

    def toggle_review_mark(self) -> bool:
        """답이 있는 현재 문제만 검토 표시를 켜고 끌 수 있다."""
        with self._lock:
            if self._state.phase is not SessionPhase.IN_PROGRESS:
                return False
            number = self._number_at(self._state.current_index)
            if number not in self._state.answers:
                return False
            if number in self._state.marked_for_review:
                self._state.marked_for_review.discard(number)
            else:
                self._state.marked_for_review.add(number)
            return True

    def clear_answer(self) -> bool:
        """현재 문제를 답, 방문, 검토 표시가 모두 없는 상태로 되돌린다."""
        with self._lock:
            if self._state.phase is not SessionPhase.IN_PROGRESS:
                return False
            number = self._number_at(self._state.current_index)
            self._state.answers.pop(number, None)
            self._state.visited.discard(number)
            self._state.marked_for_review.discard(number)
            return True

    def submit(self) -> bool:
        with self._lock:
            if self._state.phase is not SessionPhase.IN_PROGRESS:
                return False
            self._finish(timed_out=False)
            return True

    def tick(self, seconds: int = 1) -> None:
        """타이머 콜백. 진행 중일 때만 시간을 줄이고 0초면 자동 제출."""
        with self._lock:
            if self._state.phase is not SessionPhase.IN_PROGRESS:
                return
            self._state.time_remaining_seconds = max(0, self._state.time_remaining_seconds - seconds)
            if self._state.time_remaining_seconds == 0:
                logger.info("시간 종료, 자동 제출")
                self._finish(timed_out=True)

    def close(self) -> None:
        """세션 폐기. 제출하지 않고 타이머만 멈춘다."""
        self._clock.stop()

    # ── 내부 ────────────────────────────────────────────────────────────────

    def _finish(self, timed_out: bool) -> None:
        self._clock.stop()
        self._state.phase = SessionPhase.SUBMITTED
        self._result = build_result(self._quiz, self._state, timed_out=timed_out)
        summary = self._result.summary
        logger.info(
            f"시험 제출: 점수 {summary.score}/{summary.max_score} "
            f"(정답 {summary.correct}, 오답 {summary.incorrect}, 미응답 {summary.unattempted})"
        )

    def _number_at(self, index: int) -> int:
        return self._quiz.questions[index].question_number

    def _has_question(self, question_number: int) -> bool:
        return any(q.question_number == question_number for q in self._quiz.questions)
