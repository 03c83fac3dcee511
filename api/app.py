"""
api/app.py — FastAPI 앱 인스턴스 + 세션 미들웨어 + static 파일 서빙

만료 세션 정리 스레드는 lifespan 동안만 동작한다.
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse

from config import SESSION_COOKIE, SESSION_TTL, STATIC_DIR
from api.routes import router
import api.session as session


@asynccontextmanager
async def lifespan(app: FastAPI):
    stop_cleanup = session.start_cleanup()
    yield
    stop_cleanup.set()


def create_app() -> FastAPI:
    app = FastAPI(title="MCQ Mock Test", docs_url=None, redoc_url=None, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def attach_session_id(request: Request, call_next):
        """쿠키의 세션 ID가 없거나 만료됐으면 새로 발급해 request.state 에 싣는다."""
        sid = request.cookies.get(SESSION_COOKIE)
        if not sid or session.get_session(sid) is None:
            sid = session.create_session()

        request.state.session_id = sid
        response: Response = await call_next(request)
        response.set_cookie(SESSION_COOKIE, sid, httponly=True, samesite="lax", max_age=SESSION_TTL)
        return response

    app.include_router(router)

    if os.path.isdir(STATIC_DIR):
        app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.get("/")
    async def serve_index():
        index_path = os.path.join(STATIC_DIR, "index.html")
        if os.path.exists(index_path):
            return FileResponse(index_path)
        return {"error": "index.html not found"}

    return app
