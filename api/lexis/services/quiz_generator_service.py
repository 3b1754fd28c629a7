"""
AI question generation for quiz packages.

Builds a prompt from catalog words, calls the xAI chat completions API and
validates the returned questions.
"""
import requests
import json
import logging
from typing import List, Protocol
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from lexis.core.config import settings
from lexis.core.exceptions import UpstreamError
from lexis.models.models import Word, QuizQuestionType, QuizAnswer

logger = logging.getLogger(__name__)

SYSTEM_MESSAGE = "You are a helpful assistant that outputs JSON."
TEMPERATURE = 0.7
MAX_TOKENS = 4000

# Spellings used by earlier prompt versions
_LEGACY_TYPE_NAMES = {
    "synonimOrAntonym": QuizQuestionType.SYNONYM_OR_ANTONYM.value,
    "clouze": QuizQuestionType.CLOZE.value,
}


class GeneratedQuestion(BaseModel):
    """One multiple-choice question as returned by the AI."""

    word_id: int = Field(..., alias="wordId")
    type: QuizQuestionType
    question: str = Field(..., min_length=1)
    correct_answer: QuizAnswer = Field(..., alias="correctAnswer")
    answer_a: str = Field(..., alias="answerA")
    answer_b: str = Field(..., alias="answerB")
    answer_c: str = Field(..., alias="answerC")

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value):
        if isinstance(value, str):
            return _LEGACY_TYPE_NAMES.get(value, value)
        return value

    @field_validator("correct_answer", mode="before")
    @classmethod
    def normalize_correct_answer(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    class Config:
        populate_by_name = True


class QuestionGenerator(Protocol):
    """Anything that turns words and a level range into quiz questions."""

    def generate(self, words: List[Word], level: str) -> List[GeneratedQuestion]:
        ...


def format_words_for_prompt(words: List[Word]) -> str:
    """One JSON object per line with id, word, pronunciation, parts of speech and meanings."""
    lines = []
    for word in words:
        lines.append(json.dumps({
            "id": word.id,
            "word": word.text,
            "pronunciation": word.pronunciation,
            "partOfSpeech": ", ".join(word.part_of_speech or []),
            "meanings": ", ".join(m.meaning for m in word.meanings),
        }, ensure_ascii=False))
    return "\n".join(lines)


def build_quiz_prompt(words: List[Word], level: str) -> str:
    """Build the question generation prompt for the given words and target level."""
    words_list = format_words_for_prompt(words)
    return f"""You are an expert language tutor.
I have a list of words (in JSON format). For each word, generate a multiple-choice quiz question (A, B, C) to test the user's knowledge of the word.
The target proficiency level for the questions is: {level}.

Words:
{words_list}

Instructions:
1. For each word, select the most appropriate question type from these 3 options: 'matching', 'synonymOrAntonym', 'cloze'. Use 'cloze' if the word fits well in a sentence context and 'synonymOrAntonym' if it has clear synonyms or antonyms.
2. Create exactly one question per word based on the selected type.

Rules for Question Types:
- 'matching': The question is a definition or description of the word's meaning. The options must include the target word (correct) and two other words (distractors).
- 'synonymOrAntonym': The question asks to identify a synonym or antonym of the target word. The options must be words.
- 'cloze': The question is a sentence using the target word, with the word replaced by a blank "_____". The options must include the target word (correct) and two words that fit grammatically but are wrong in context.

General Rules:
1. Provide 3 options: A, B and C.
2. One option is the correct answer, the other two are plausible distractors.
3. Randomize the position of the correct answer among 'answerA', 'answerB' and 'answerC'.
4. 'correctAnswer' MUST be the letter ('A', 'B' or 'C') of the option holding the correct answer.
5. Return a strictly valid JSON array of objects.

Output JSON Format:
[
  {{
    "wordId": "id_of_the_word",
    "type": "matching",
    "question": "The question text here?",
    "answerA": "Option A text",
    "answerB": "Option B text",
    "answerC": "Option C text",
    "correctAnswer": "A"
  }}
]

Do not include any markdown formatting. Return only the raw JSON string.
"""


def strip_markdown_fences(content: str) -> str:
    """Remove ```json / ``` fences the model sometimes adds."""
    return content.replace("```json", "").replace("```", "").strip()


def parse_questions(content: str) -> List[GeneratedQuestion]:
    """
    Parse the model output into validated questions.

    Raises:
        UpstreamError: If the content is not a JSON array of valid questions
    """
    text = strip_markdown_fences(content)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI JSON response: {e}")
        logger.error(f"Response text: {text[:500]}")
        raise UpstreamError("Invalid JSON response from AI API")

    if not isinstance(data, list):
        raise UpstreamError("AI response is not a JSON array")

    try:
        questions = [GeneratedQuestion.model_validate(entry) for entry in data]
    except PydanticValidationError as e:
        logger.error(f"AI returned malformed questions: {e}")
        raise UpstreamError("AI response contains malformed questions")

    logger.debug(f"Parsed {len(questions)} quiz question(s)")
    return questions


class XaiQuestionGenerator:
    """Question generator backed by the xAI chat completions API."""

    def __init__(
        self,
        api_key: str = None,
        api_url: str = None,
        model: str = None,
        timeout: int = None,
    ):
        self.api_key = api_key if api_key is not None else settings.xai_api_key
        self.api_url = api_url or settings.xai_api_url
        self.model = model or settings.xai_model
        self.timeout = timeout or settings.ai_request_timeout

    def generate(self, words: List[Word], level: str) -> List[GeneratedQuestion]:
        """
        Generate one question per word at the target level.

        Raises:
            UpstreamError: On a missing API key, HTTP error, timeout, empty
                content or unparseable response
        """
        if not self.api_key:
            logger.warning("XAI_API_KEY is not set, cannot generate quiz questions")
            raise UpstreamError("xAI API key not configured")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": build_quiz_prompt(words, level)},
            ],
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        }

        try:
            response = requests.post(
                self.api_url,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout:
            logger.error(f"xAI API request timed out after {self.timeout}s")
            raise UpstreamError("xAI API request timed out")
        except requests.exceptions.RequestException as e:
            error_msg = f"xAI API request failed: {str(e)}"
            if getattr(e, "response", None) is not None:
                error_msg += f" - Status: {e.response.status_code}"
            logger.error(error_msg)
            raise UpstreamError(error_msg)
        except ValueError:
            raise UpstreamError("xAI API returned a non-JSON body")

        if not isinstance(data, dict):
            raise UpstreamError("xAI API returned an unexpected body")

        choices = data.get("choices") or []
        first = choices[0] if isinstance(choices, list) and choices else None
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not content:
            raise UpstreamError("xAI API returned empty content")

        return parse_questions(content)
