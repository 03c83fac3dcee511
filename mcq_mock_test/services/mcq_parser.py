"""
services/mcq_parser.py

자유 형식 텍스트 → 객관식 문제(MCQ) 추출 서비스.
Public API:
  - parse_mcq_text(text) -> QuizData : 문제 + 정답표 추출

설계 원칙:
- 줄 단위 분류기(문제 시작 / 보기 / 정답표 / 머리말)를 순서대로 적용
- 문제 구역 → 정답표 구역 (한 방향 전환, 되돌아가지 않음)
- 보기 4개를 모두 모은 문제만 채택, 나머지는 조용히 버림
- 예외를 던지지 않음. 문제가 없으면 빈 QuizData 반환
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from config import MAX_QUESTIONS, OPTIONS_PER_QUESTION
from mcq_mock_test.models.question_model import Question, QuizData

logger = logging.getLogger(__name__)


# ── 상수 ─────────────────────────────────────────────────────────────────────
NOISE_KEYWORDS = (
    "SECTION",
    "QUANTITATIVE",
    "REASONING",
    "GENERAL KNOWLEDGE",
    "PRACTICE TEST",
    "TOTAL QUESTIONS",
)

# 줄바꿈(\n)은 남기고 나머지 제어 문자는 공백으로
_CONTROL_CHARS_RE = re.compile(r"[\u0000-\u0009\u000b-\u001f\u007f-\u009f]")

_QUESTION_RE = re.compile(r"^(\d+)\.\s*(.+)$")
_OPTION_RE = re.compile(r"^([A-D])\)\s*(.+)$")
_ANSWER_KEY_RE = re.compile(
    r"^(?:Q(?:UESTION)?\s*\.?\s*)?(\d+)\s*[.):\-]?\s*\(?([A-D])\)?$",
    re.IGNORECASE,
)

# 한 줄로 뭉친 텍스트 복구용: 각 매치 앞에 줄바꿈 삽입
_SPLIT_PATTERNS = (
    re.compile(r"(\d+\.\s+)"),
    re.compile(r"([A-D]\)\s+)"),
    re.compile(r"(ANSWER\s+KEY)", re.IGNORECASE),
    re.compile(
        r"(\bLOGICAL\s+REASONING\b|\bQUANTITATIVE\s+APTITUDE\b"
        r"|\bGENERAL\s+KNOWLEDGE\b|\bSECTION\b|\bREASONING\b)",
        re.IGNORECASE,
    ),
)


class ParseRegion(Enum):
    QUESTIONS = "questions"
    ANSWER_KEY = "answer_key"


@dataclass
class _DraftQuestion:
    number: int
    text: str
    options: List[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return len(self.options) == OPTIONS_PER_QUESTION


# ══════════════════════════════════════════════════════════════════════════════
# Public API
# ══════════════════════════════════════════════════════════════════════════════

def parse_mcq_text(text: str) -> QuizData:
    """
    텍스트 → QuizData.

    1. 제어 문자 정리 후 줄 단위 분리 (한 줄뿐이면 패턴 기준 재분할)
    2. 줄마다 분류기를 적용하며 문제/정답표를 수집
    3. 최대 30문제로 자르고 1번부터 재번호, 정답표도 새 번호로 옮김
    """
    lines = split_lines(normalize_text(text or ""))
    logger.info(f"parse_mcq_text: {len(lines)}줄 처리 시작")

    drafts: List[_DraftQuestion] = []
    answer_key: Dict[int, str] = {}
    region = ParseRegion.QUESTIONS
    current: Optional[_DraftQuestion] = None

    for line in lines:
        if region is ParseRegion.ANSWER_KEY:
            _read_answer_line(line, answer_key)
            continue

        if "answer key" in line.lower():
            _flush(current, drafts)
            current = None
            region = ParseRegion.ANSWER_KEY
            continue

        question_match = _QUESTION_RE.match(line)
        if question_match:
            _flush(current, drafts)
            current = _DraftQuestion(
                number=int(question_match.group(1)),
                text=question_match.group(2).strip(),
            )
            continue

        option_match = _OPTION_RE.match(line)
        if option_match:
            if current is not None:
                _add_option(current, option_match.group(2).strip())
            continue

        if is_noise_line(line):
            continue

        # 첫 보기 전까지는 문제 줄바꿈으로 간주
        if current is not None and not current.options:
            current.text = f"{current.text} {line}"

    _flush(current, drafts)
    return _finalize(drafts, answer_key)


def normalize_text(text: str) -> str:
    """줄바꿈 통일(\\r\\n, \\r → \\n) 후 남은 제어 문자를 공백 하나로 치환."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return _CONTROL_CHARS_RE.sub(" ", text)


def split_lines(text: str) -> List[str]:
    """공백 제거 후 빈 줄을 뺀 줄 리스트. 한 줄뿐이면 패턴 기준으로 재분할."""
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    if len(lines) != 1:
        return lines

    logger.info("split_lines: 한 줄로 된 텍스트, 패턴 기준으로 재분할")
    single = lines[0]
    for pattern in _SPLIT_PATTERNS:
        single = pattern.sub(r"\n\1", single)
    return [line.strip() for line in single.split("\n") if line.strip()]


def is_noise_line(line: str) -> bool:
    upper = line.upper()
    return any(keyword in upper for keyword in NOISE_KEYWORDS)


# ══════════════════════════════════════════════════════════════════════════════
# 내부 헬퍼
# ══════════════════════════════════════════════════════════════════════════════

def _add_option(draft: _DraftQuestion, option_text: str) -> None:
    if len(draft.options) >= OPTIONS_PER_QUESTION:
        return
    if is_noise_line(option_text):
        return
    draft.options.append(option_text)


def _flush(draft: Optional[_DraftQuestion], drafts: List[_DraftQuestion]) -> None:
    if draft is None:
        return
    if draft.is_complete:
        drafts.append(draft)
    else:
        logger.debug(f"{draft.number}번 문제 제외: 보기 {len(draft.options)}개")


def _read_answer_line(line: str, answer_key: Dict[int, str]) -> None:
    match = _ANSWER_KEY_RE.match(line)
    if not match:
        return
    number = int(match.group(1))
    # 먼저 나온 정답 우선
    answer_key.setdefault(number, match.group(2).upper())


def _finalize(drafts: List[_DraftQuestion], answer_key: Dict[int, str]) -> QuizData:
    kept = drafts[:MAX_QUESTIONS]
    if len(drafts) > MAX_QUESTIONS:
        logger.info(f"문제 {len(drafts)}개 중 앞 {MAX_QUESTIONS}개만 사용")

    questions: List[Question] = []
    renumbered_key: Dict[int, str] = {}
    for new_number, draft in enumerate(kept, start=1):
        questions.append(
            Question(question_number=new_number, question=draft.text, options=list(draft.options))
        )
        if draft.number in answer_key:
            renumbered_key[new_number] = answer_key[draft.number]

    logger.info(
        f"parse_mcq_text: 문제 {len(questions)}개, 정답 {len(renumbered_key)}개 추출 완료"
    )
    return QuizData(questions=questions, answer_key=renumbered_key)
