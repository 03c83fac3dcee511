"""
models/session_state.py

시험 진행 상태를 담는 OMR 카드 모델과 채점 결과 모델.
Pydantic BaseModel 기반 — 직렬화/역직렬화 및 타입 안전성 확보.
UI 코드 없음. 상태 변경은 services/quiz_session.py 의 QuizSession 만 수행한다.
"""

from enum import Enum
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SessionPhase(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"


class SessionState(BaseModel):
    """
    사용자의 시험 세션 전체 상태를 표현하는 모델.

    Attributes:
        answers:                사용자 답안지. {문제 번호: 선택한 보기 문자}
        visited:                사용자가 화면을 연 문제 번호 집합.
        marked_for_review:      검토 표시된 문제 번호 집합 (답이 있는 문제만).
        current_index:          현재 풀고 있는 문제의 인덱스 (0-based).
        time_limit_minutes:     설정된 제한 시간 (분).
        time_remaining_seconds: 남은 시간 (초). 진행 중에만 줄어든다.
        phase:                  NOT_STARTED → IN_PROGRESS → SUBMITTED.
    """
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    answers: Dict[int, str] = Field(
        default_factory=dict,
        description="사용자 답안지. key: 문제 번호, value: 선택한 보기 문자"
    )
    visited: Set[int] = Field(default_factory=set)
    marked_for_review: Set[int] = Field(default_factory=set)
    current_index: int = Field(
        default=0,
        ge=0,
        description="현재 풀고 있는 문제 인덱스 (0-based)"
    )
    time_limit_minutes: int = Field(default=0, ge=0)
    time_remaining_seconds: int = Field(default=0, ge=0)
    phase: SessionPhase = SessionPhase.NOT_STARTED


class QuestionResult(BaseModel):
    """문제별 채점 결과 (결과 화면의 상세 보기용)."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    question_number: int
    question: str
    options: List[str]
    user_answer: Optional[str] = None
    correct_answer: str = Field(
        default="",
        description="정답 문자. 정답표에 없는 문제면 빈 문자열"
    )
    is_correct: bool
    is_attempted: bool
    is_marked_for_review: bool = False


class ScoreSummary(BaseModel):
    """전체 집계. score = 2×정답 − 0.5×오답, max_score = 2×문항 수."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    total_questions: int
    attempted: int
    correct: int
    incorrect: int
    unattempted: int
    score: float
    max_score: float


class QuizResult(BaseModel):
    """제출 시점에 한 번 계산되어 고정되는 결과."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    questions: List[QuestionResult]
    summary: ScoreSummary
    percentage: int
    timed_out: bool = False
