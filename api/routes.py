"""
api/routes.py — FastAPI 엔드포인트
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from pydantic import BaseModel

import api.session as session
from config import MAX_UPLOAD_SIZE

# Core Logic Imports (Relative paths handled by package structure)
from mcq_mock_test.models.question_model import QuizData
from mcq_mock_test.models.session_state import SessionPhase
from mcq_mock_test.services.exam_service import (
    format_time, get_incorrect_questions, progress_counts,
    question_palette, recommended_minutes, timer_level,
)
from mcq_mock_test.services.mcq_parser import parse_mcq_text
from mcq_mock_test.services.quiz_session import QuizSession
from mcq_mock_test.services.text_ingest import UnsupportedDocumentError, extract_text

logger = logging.getLogger(__name__)

router = APIRouter()

NO_QUESTIONS_MESSAGE = (
    "No MCQ questions found. Please check the formatting: numbered questions "
    "followed by options A), B), C), D) and an ANSWER KEY section."
)

# ── Pydantic request bodies ──────────────────────────────────────────────────

class TimeLimitBody(BaseModel):
    minutes: Optional[int] = None

class SaveAnswerBody(BaseModel):
    question_number: int
    letter: str

class NavigateBody(BaseModel):
    index: int = 0


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

def _sid(request: Request) -> str:
    return request.state.session_id


def _quiz_data_to_dict(quiz_data: QuizData) -> dict:
    return quiz_data.model_dump(by_alias=True)


def _require_quiz_data(sid: str) -> QuizData:
    quiz_data: Optional[QuizData] = session.get(sid, "quiz_data")
    if quiz_data is None:
        raise HTTPException(status_code=400, detail="No quiz loaded. Please upload a question file first.")
    return quiz_data


def _require_quiz_session(sid: str) -> QuizSession:
    quiz_session: Optional[QuizSession] = session.get(sid, "quiz_session")
    if quiz_session is None:
        raise HTTPException(status_code=404, detail="No quiz session. Please set up the quiz first.")
    return quiz_session


def _state_view(quiz_session: QuizSession) -> dict:
    """렌더링용 상태. 파생 값은 매번 다시 계산."""
    quiz_data = quiz_session.quiz_data
    state = quiz_session.state
    view = state.model_dump(by_alias=True, mode="json")
    view["visited"] = sorted(state.visited)
    view["markedForReview"] = sorted(state.marked_for_review)
    current = None
    if not quiz_data.is_empty:
        current = quiz_data.questions[state.current_index].model_dump(by_alias=True)
        current["savedAnswer"] = state.answers.get(current["questionNumber"])
    view.update({
        "totalQuestions": quiz_data.total_questions,
        "recommendedMinutes": recommended_minutes(quiz_data.total_questions),
        "currentQuestion": current,
        "timeDisplay": format_time(state.time_remaining_seconds),
        "timerLevel": timer_level(state.time_remaining_seconds),
        "counts": progress_counts(quiz_data, state),
        "palette": question_palette(quiz_data, state),
    })
    return view


def _intent_response(quiz_session: QuizSession, changed: bool) -> dict:
    return {"ok": changed, "state": _state_view(quiz_session)}


# ── 엔드포인트 ───────────────────────────────────────────────────────────────

@router.post("/api/upload")
async def api_upload(request: Request, file: UploadFile = File(...)):
    sid = _sid(request)
    file_bytes = await file.read()
    if len(file_bytes) > MAX_UPLOAD_SIZE:
        raise HTTPException(status_code=413, detail="The file is too large.")
    try:
        text = extract_text(file_bytes, file.filename or "")
    except UnsupportedDocumentError as e:
        raise HTTPException(status_code=422, detail=str(e))

    quiz_data = await asyncio.to_thread(parse_mcq_text, text)
    if quiz_data.is_empty:
        raise HTTPException(status_code=422, detail=NO_QUESTIONS_MESSAGE)

    session.put(sid, "quiz_data", quiz_data)
    session.put(sid, "quiz_session", None)
    logger.info(f"업로드 완료: {file.filename} → {quiz_data.total_questions}문제")
    return _quiz_data_to_dict(quiz_data)


@router.get("/api/quiz-data")
async def get_quiz_data(request: Request):
    return _quiz_data_to_dict(_require_quiz_data(_sid(request)))


@router.post("/api/quiz/setup")
async def setup_quiz(request: Request, body: TimeLimitBody):
    """
    시험 세션 준비. 이미 준비된 세션이 시작 전이면 제한 시간만 변경.
    시작했거나 제출된 세션은 건드리지 않는다 (ok: false).
    """
    sid = _sid(request)
    quiz_data = _require_quiz_data(sid)
    quiz_session: Optional[QuizSession] = session.get(sid, "quiz_session")

    if quiz_session is not None:
        if quiz_session.phase is not SessionPhase.NOT_STARTED:
            return _intent_response(quiz_session, False)
        if body.minutes is not None:
            return _intent_response(quiz_session, quiz_session.configure_time_limit(body.minutes))

    quiz_session = QuizSession(quiz_data, time_limit_minutes=body.minutes)
    session.put(sid, "quiz_session", quiz_session)
    return _intent_response(quiz_session, True)


@router.post("/api/quiz/start")
async def start_quiz(request: Request):
    sid = _sid(request)
    quiz_session: Optional[QuizSession] = session.get(sid, "quiz_session")
    if quiz_session is None:
        quiz_session = QuizSession(_require_quiz_data(sid))
        session.put(sid, "quiz_session", quiz_session)
    if quiz_session.is_empty:
        raise HTTPException(status_code=400, detail=NO_QUESTIONS_MESSAGE)
    return _intent_response(quiz_session, quiz_session.start())


@router.get("/api/quiz/state")
async def get_quiz_state(request: Request):
    return _state_view(_require_quiz_session(_sid(request)))


@router.post("/api/quiz/answer")
async def select_answer(request: Request, body: SaveAnswerBody):
    quiz_session = _require_quiz_session(_sid(request))
    return _intent_response(quiz_session, quiz_session.select_answer(body.question_number, body.letter))


@router.post("/api/quiz/navigate")
async def navigate(request: Request, body: NavigateBody):
    quiz_session = _require_quiz_session(_sid(request))
    return _intent_response(quiz_session, quiz_session.navigate_to(body.index))


@router.post("/api/quiz/next")
async def save_and_next(request: Request):
    quiz_session = _require_quiz_session(_sid(request))
    return _intent_response(quiz_session, quiz_session.save_and_advance())


@router.post("/api/quiz/previous")
async def previous_question(request: Request):
    quiz_session = _require_quiz_session(_sid(request))
    return _intent_response(quiz_session, quiz_session.previous_question())


@router.post("/api/quiz/review")
async def toggle_review(request: Request):
    quiz_session = _require_quiz_session(_sid(request))
    return _intent_response(quiz_session, quiz_session.toggle_review_mark())


@router.post("/api/quiz/clear")
async def clear_answer(request: Request):
    quiz_session = _require_quiz_session(_sid(request))
    return _intent_response(quiz_session, quiz_session.clear_answer())


@router.post("/api/quiz/submit")
async def submit_quiz(request: Request):
    quiz_session = _require_quiz_session(_sid(request))
    return _intent_response(quiz_session, quiz_session.submit())


@router.get("/api/results")
async def get_results(request: Request):
    quiz_session = _require_quiz_session(_sid(request))
    result = quiz_session.result
    if result is None:
        raise HTTPException(status_code=404, detail="The quiz has not been submitted yet.")

    data = result.model_dump(by_alias=True)
    data["incorrectQuestions"] = [
        r.model_dump(by_alias=True) for r in get_incorrect_questions(result)
    ]
    return data


@router.post("/api/quiz/retry")
async def retry_quiz(request: Request):
    """같은 문제로 새 시험 세션 (이전 타이머는 중지)."""
    sid = _sid(request)
    quiz_session = _require_quiz_session(sid).restart()
    session.put(sid, "quiz_session", quiz_session)
    return _intent_response(quiz_session, True)


@router.post("/api/reset")
async def reset_session(request: Request):
    session.reset(_sid(request))
    return {"ok": True}
