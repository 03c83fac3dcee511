import os

# 기본 디렉토리 설정
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# 경로 설정
STATIC_DIR = os.path.join(BASE_DIR, "static")
LOG_FILE = os.path.join(BASE_DIR, "launch.log")

# 서버 설정
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("PORT", "8000"))
DEFAULT_TIMEOUT = 15.0

# 업로드 설정
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_MB", "10")) * 1024 * 1024

# 세션 저장소 설정
SESSION_COOKIE = "mcq_session"
SESSION_TTL = 3600              # 1시간
SESSION_CLEANUP_INTERVAL = 300  # 5분

# 문제 추출 설정
MAX_QUESTIONS = 30
OPTIONS_PER_QUESTION = 4
OPTION_LETTERS = ("A", "B", "C", "D")

# 시험 시간 설정 (분)
MIN_TIME_LIMIT_MINUTES = 5
MAX_TIME_LIMIT_MINUTES = 180
MINUTES_PER_QUESTION = 2
CLOCK_INTERVAL_SECONDS = 1.0

# 채점 설정
MARKS_CORRECT = 2.0
MARKS_INCORRECT = -0.5

# 타이머 표시 기준 (초)
TIMER_WARNING_SECONDS = 300
TIMER_CRITICAL_SECONDS = 60
