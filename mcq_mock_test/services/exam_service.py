"""
services/exam_service.py

시험 채점 및 결과/화면 표시용 파생 값 계산 로직.
순수 Python 함수로 구성 — UI 코드, 전역 상태 변경 없음.
SessionState 에 저장하지 않고 매번 기본 상태에서 다시 계산한다.
"""

import math
from typing import Dict, List, Set

from config import (
    MARKS_CORRECT,
    MARKS_INCORRECT,
    MAX_TIME_LIMIT_MINUTES,
    MIN_TIME_LIMIT_MINUTES,
    MINUTES_PER_QUESTION,
    TIMER_CRITICAL_SECONDS,
    TIMER_WARNING_SECONDS,
)
from mcq_mock_test.models.question_model import QuizData
from mcq_mock_test.models.session_state import (
    QuestionResult,
    QuizResult,
    ScoreSummary,
    SessionState,
)


def build_question_results(
    quiz_data: QuizData,
    answers: Dict[int, str],
    marked_for_review: Set[int],
) -> List[QuestionResult]:
    """
    문제별 채점 결과 리스트를 반환한다.

    정답 판정 기준: 응답이 있고 answers[번호] == answer_key[번호]
    정답표에 없는 문제는 응답해도 오답, 응답하지 않으면 미응답.

    Args:
        quiz_data:         채점 대상 문제와 정답표.
        answers:           사용자 답안지. {문제 번호: 보기 문자}
        marked_for_review: 검토 표시된 문제 번호 집합.

    Returns:
        QuestionResult 리스트. 원본 순서 유지.
    """
    results: List[QuestionResult] = []
    for q in quiz_data.questions:
        number = q.question_number
        user_answer = answers.get(number)
        correct_answer = quiz_data.answer_key.get(number, "")
        is_attempted = user_answer is not None
        results.append(
            QuestionResult(
                question_number=number,
                question=q.question,
                options=list(q.options),
                user_answer=user_answer,
                correct_answer=correct_answer,
                is_correct=is_attempted and user_answer == correct_answer,
                is_attempted=is_attempted,
                is_marked_for_review=number in marked_for_review,
            )
        )
    return results


def summarize(results: List[QuestionResult]) -> ScoreSummary:
    """문제별 결과 → 집계 (정답 +2, 오답 -0.5, 미응답 0)."""
    attempted = sum(1 for r in results if r.is_attempted)
    correct = sum(1 for r in results if r.is_correct)
    incorrect = attempted - correct
    return ScoreSummary(
        total_questions=len(results),
        attempted=attempted,
        correct=correct,
        incorrect=incorrect,
        unattempted=len(results) - attempted,
        score=calculate_score(correct, incorrect),
        max_score=MARKS_CORRECT * len(results),
    )


def calculate_score(correct: int, incorrect: int) -> float:
    return MARKS_CORRECT * correct + MARKS_INCORRECT * incorrect


def calculate_percentage(score: float, max_score: float) -> int:
    """
    표시용 백분율. 음수 점수는 그대로 음수 백분율 (0에서 자르지 않음).
    max_score 가 0이면 0. 0.5는 올림 처리.
    """
    if max_score == 0:
        return 0
    return math.floor(100 * score / max_score + 0.5)


def build_result(quiz_data: QuizData, state: SessionState, timed_out: bool = False) -> QuizResult:
    """제출 시점의 상태로 최종 결과를 만든다."""
    results = build_question_results(quiz_data, state.answers, state.marked_for_review)
    summary = summarize(results)
    return QuizResult(
        questions=results,
        summary=summary,
        percentage=calculate_percentage(summary.score, summary.max_score),
        timed_out=timed_out,
    )


def get_incorrect_questions(result: QuizResult) -> List[QuestionResult]:
    """
    오답 문제 리스트 (오답 노트용). 미응답 문제는 포함하지 않는다.
    """
    return [r for r in result.questions if r.is_attempted and not r.is_correct]


# ── 시간 설정 ────────────────────────────────────────────────────────────────

def recommended_minutes(total_questions: int) -> int:
    return MINUTES_PER_QUESTION * total_questions


def clamp_time_limit(minutes: int) -> int:
    return max(MIN_TIME_LIMIT_MINUTES, min(MAX_TIME_LIMIT_MINUTES, int(minutes)))


def format_time(seconds: int) -> str:
    """남은 시간 표시. 예: 125 → '2:05'"""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def timer_level(seconds: int) -> str:
    """1분 미만 'critical', 5분 미만 'warning', 그 외 'normal'."""
    if seconds < TIMER_CRITICAL_SECONDS:
        return "critical"
    if seconds < TIMER_WARNING_SECONDS:
        return "warning"
    return "normal"


# ── 문제 번호 팔레트 ─────────────────────────────────────────────────────────

def question_status(quiz_data: QuizData, state: SessionState, index: int) -> str:
    """
    팔레트 버튼 상태. 우선순위:
      marked > answered > visited(답 없음) > current > not_visited
    """
    number = quiz_data.questions[index].question_number
    if number in state.marked_for_review:
        return "marked"
    if number in state.answers:
        return "answered"
    if number in state.visited:
        return "visited"
    if index == state.current_index:
        return "current"
    return "not_visited"


def question_palette(quiz_data: QuizData, state: SessionState) -> List[Dict[str, object]]:
    return [
        {"questionNumber": q.question_number, "status": question_status(quiz_data, state, i)}
        for i, q in enumerate(quiz_data.questions)
    ]


def progress_counts(quiz_data: QuizData, state: SessionState) -> Dict[str, int]:
    """진행 현황 (답함 / 검토 / 방문 / 미방문)."""
    visited = len(state.visited)
    return {
        "answered": len(state.answers),
        "markedForReview": len(state.marked_for_review),
        "visited": visited,
        "unvisited": quiz_data.total_questions - visited,
    }
