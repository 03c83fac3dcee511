from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from config import OPTION_LETTERS, OPTIONS_PER_QUESTION


class Question(BaseModel):
    """
    객관식(MCQ) 문제 모델
    Pydantic v2 적용. 보기는 위치 순서대로 A~D에 대응한다.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    question_number: int = Field(
        ...,
        ge=1,
        description="문제 번호 (1-based, 재번호 후 연속)"
    )
    question: str = Field(
        ...,
        min_length=1,
        description="발문/문제 내용"
    )
    options: List[str] = Field(
        ...,
        description="보기 리스트 (A, B, C, D 순서)"
    )

    @field_validator('options')
    @classmethod
    def validate_options_length(cls, v: List[str]) -> List[str]:
        """
        검증 로직: 보기는 정확히 4개여야 한다.
        """
        if len(v) != OPTIONS_PER_QUESTION:
            raise ValueError(f"보기(options)는 정확히 {OPTIONS_PER_QUESTION}개여야 합니다 (현재 {len(v)}개).")
        return v


class QuizData(BaseModel):
    """
    문제 추출 결과. 추출기가 한 번 생성한 뒤로는 변경하지 않는다.

    Attributes:
        questions:  재번호가 끝난 Question 리스트 (최대 30개).
        answer_key: {문제 번호: 정답 문자}. 남아있는 문제 번호만 키로 가진다.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    questions: List[Question] = Field(default_factory=list)
    answer_key: Dict[int, str] = Field(default_factory=dict)

    @computed_field(alias="totalQuestions")
    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @field_validator('answer_key')
    @classmethod
    def validate_answer_letters(cls, v: Dict[int, str]) -> Dict[int, str]:
        for number, letter in v.items():
            if letter not in OPTION_LETTERS:
                raise ValueError(f"{number}번 정답('{letter}')은 A~D 중 하나여야 합니다.")
        return v

    @model_validator(mode='after')
    def validate_key_numbers(self) -> 'QuizData':
        """
        검증 로직: 정답표의 문제 번호는 반드시 문제 리스트 안에 있어야 한다.
        """
        numbers = {q.question_number for q in self.questions}
        orphans = sorted(set(self.answer_key) - numbers)
        if orphans:
            raise ValueError(f"문제 리스트에 없는 번호의 정답이 있습니다: {orphans}")
        return self

    @property
    def is_empty(self) -> bool:
        return not self.questions
