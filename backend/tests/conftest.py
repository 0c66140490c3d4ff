import os
import sys
from pathlib import Path

import pytest

# Keep tests deterministic and offline.
os.environ["GEMINI_STUB"] = "true"
os.environ["GEMINI_API_KEY"] = ""
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ.pop("HINT_CONTENT_DIR", None)

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from tugon_hints.config import Settings, get_settings  # noqa: E402

# A developer .env must not leak into test settings.
Settings.model_config["env_file"] = None
get_settings.cache_clear()

from tugon_hints.engine.store import HintStore, HintStoreBuilder  # noqa: E402
from tugon_hints.models.schemas import CategoryHints, QuestionHints, StepHint  # noqa: E402


def make_category(category_id: int = 1, name: str = "Function Evaluation", questions=()) -> CategoryHints:
    return CategoryHints(category_id=category_id, category_name=name, questions=tuple(questions))


@pytest.fixture
def sample_category() -> CategoryHints:
    return make_category(
        questions=[
            QuestionHints(
                question_id=1,
                question_text="If f(x) = 2x - 7, evaluate f(8).",
                general_tips=("Replace every 'x' with 8",),
                step_hints=(
                    StepHint(
                        step_label="substitution",
                        generic_hint="replace x with 8",
                        sign_error_hint="check your signs",
                        common_mistakes=("Writing 2*8 - 7 without parentheses",),
                    ),
                    StepHint(
                        step_label="evaluation",
                        generic_hint="multiply first",
                        sign_error_hint="keep the minus sign",
                        guessing_hint="",
                    ),
                    StepHint(
                        step_label="Evaluation",
                        generic_hint="then subtract",
                        sign_error_hint="watch the subtraction sign",
                        magnitude_error_hint="2 x 8 is 16",
                        common_mistakes=("Subtracting before multiplying",),
                    ),
                    StepHint(
                        step_label="final",
                        generic_hint="write f(8) = 9",
                        sign_error_hint="check your signs",
                    ),
                ),
            ),
            QuestionHints(question_id=2, question_text="Empty question"),
        ]
    )


@pytest.fixture
def sample_store(sample_category) -> HintStore:
    return HintStoreBuilder().register(1, 1, sample_category).build()
