import os
import sys
import textwrap

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from mcq_mock_test.models.question_model import Question, QuizData
from mcq_mock_test.services.quiz_session import QuizSession


class ManualClock:
    """테스트용 타이머: 스레드 없이 start/stop 호출만 기록."""

    def __init__(self, on_tick):
        self.on_tick = on_tick
        self.started = False
        self.stopped = False

    @property
    def running(self):
        return self.started and not self.stopped

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True


def make_quiz_text(count, with_key=True):
    blocks = []
    for n in range(1, count + 1):
        blocks.append(
            f"{n}. Question number {n}?\n"
            f"A) alpha {n}\nB) beta {n}\nC) gamma {n}\nD) delta {n}"
        )
    text = "\n".join(blocks)
    if with_key:
        letters = "ABCD"
        key_lines = [f"{n}. {letters[(n - 1) % 4]}" for n in range(1, count + 1)]
        text += "\nANSWER KEY\n" + "\n".join(key_lines)
    return text


@pytest.fixture
def quiz_text_factory():
    return make_quiz_text


@pytest.fixture
def sample_text():
    return textwrap.dedent("""
        PRACTICE TEST 1
        Total Questions: 3
        SECTION A: GENERAL KNOWLEDGE
        1. What is the capital of France?
        A) Berlin
        B) Paris
        C) Rome
        D) Madrid
        2. Which planet is known
        as the red planet?
        A) Venus
        B) Mars
        C) Jupiter
        D) Saturn
        SECTION B: QUANTITATIVE APTITUDE
        3. What is 2+2?
        A) 3
        B) 4
        C) 5
        D) 6
        ANSWER KEY
        1. B
        2. B
        3. B
    """).strip()


@pytest.fixture
def quiz_data():
    return QuizData(
        questions=[
            Question(question_number=1, question="What is 2+2?", options=["3", "4", "5", "6"]),
            Question(question_number=2, question="What is 3+3?", options=["5", "6", "7", "8"]),
            Question(question_number=3, question="What is 4+4?", options=["7", "8", "9", "10"]),
        ],
        answer_key={1: "B", 2: "B", 3: "B"},
    )


@pytest.fixture
def clocks():
    return []


@pytest.fixture
def clock_factory(clocks):
    def factory(on_tick):
        clock = ManualClock(on_tick)
        clocks.append(clock)
        return clock
    return factory


@pytest.fixture
def quiz_session(quiz_data, clock_factory):
    return QuizSession(quiz_data, clock_factory=clock_factory)


@pytest.fixture
def started_session(quiz_session):
    assert quiz_session.start()
    return quiz_session
