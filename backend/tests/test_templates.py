from tugon_hints.engine.resolver import category_fallback_hint
from tugon_hints.engine.store import HintStoreBuilder
from tugon_hints.engine.templates import (
    FALLBACK_TEMPLATES,
    catalog_templates,
    fallback_bundle,
    get_contextual_templates,
)
from tugon_hints.models.schemas import (
    CategoryHints,
    QuestionHints,
    StepHint,
    TemplateBehavior,
    TemplateSource,
)

PADDING = category_fallback_hint("Function Evaluation")

CURATED_ORDER = [
    TemplateBehavior.SIGN_ERROR,
    TemplateBehavior.MAGNITUDE_ERROR,
    TemplateBehavior.CLOSE_ATTEMPT,
    TemplateBehavior.REPEATING,
    TemplateBehavior.GUESSING,
    TemplateBehavior.GENERAL,
    TemplateBehavior.STRUGGLING,
    TemplateBehavior.SELF_CORRECTION,
]


def test_curated_bundle_shape(sample_store):
    bundle = get_contextual_templates(sample_store, 1, 1, 1, "substitution")

    assert bundle.source == TemplateSource.CURATED
    assert [t.behavior_type for t in bundle.templates] == CURATED_ORDER
    for entry in bundle.templates:
        assert len(entry.templates) == 3


def test_single_step_pads_with_category_template(sample_store):
    bundle = get_contextual_templates(sample_store, 1, 1, 1, "substitution")

    assert bundle.for_behavior(TemplateBehavior.SIGN_ERROR) == ["check your signs", PADDING, PADDING]
    # no magnitude hint on this step: generic hint, then padding
    assert bundle.for_behavior(TemplateBehavior.MAGNITUDE_ERROR) == ["replace x with 8", PADDING, PADDING]


def test_duplicate_labels_dedup_before_pad(sample_store):
    bundle = get_contextual_templates(sample_store, 1, 1, 1, "Evaluation")

    assert bundle.for_behavior(TemplateBehavior.SIGN_ERROR) == [
        "keep the minus sign",
        "watch the subtraction sign",
        PADDING,
    ]
    assert bundle.for_behavior(TemplateBehavior.MAGNITUDE_ERROR) == [
        "multiply first",
        "2 x 8 is 16",
        PADDING,
    ]


def test_all_steps_dedup_and_truncate(sample_store):
    bundle = get_contextual_templates(sample_store, 1, 1, 1)

    # "check your signs" appears on two steps and is kept once, in first-seen order
    assert bundle.for_behavior(TemplateBehavior.SIGN_ERROR) == [
        "check your signs",
        "keep the minus sign",
        "watch the subtraction sign",
    ]
    assert get_contextual_templates(sample_store, 1, 1, 1, "") == bundle


def test_synthetic_entries_are_category_qualified(sample_store):
    bundle = get_contextual_templates(sample_store, 1, 1, 1, "final")

    general = bundle.for_behavior(TemplateBehavior.GENERAL)
    assert general[0] == PADDING
    assert "function evaluation question" in general[1]
    assert "together" in bundle.for_behavior(TemplateBehavior.STRUGGLING)[0]
    assert bundle.for_behavior(TemplateBehavior.SELF_CORRECTION)[0].startswith("Great awareness!")
    assert "function evaluation" in bundle.for_behavior(TemplateBehavior.SELF_CORRECTION)[0]


def test_absent_context_returns_global_fallback(sample_store):
    expected = fallback_bundle()
    assert get_contextual_templates(sample_store, 9, 9, 1) == expected
    assert get_contextual_templates(sample_store, 9, 9, 1) == expected
    assert get_contextual_templates(sample_store, 1, 1, 999) == expected
    assert get_contextual_templates(sample_store, 1, 1, 1, "nope") == expected
    # question exists but has no steps
    assert get_contextual_templates(sample_store, 1, 1, 2) == expected


def test_global_fallback_contents():
    bundle = fallback_bundle()

    assert bundle.source == TemplateSource.FALLBACK
    assert [t.behavior_type for t in bundle.templates] == [
        TemplateBehavior.GENERAL,
        TemplateBehavior.SIGN_ERROR,
        TemplateBehavior.MAGNITUDE_ERROR,
    ]
    for entry in bundle.templates:
        assert entry.templates == list(FALLBACK_TEMPLATES[entry.behavior_type])
        assert len(entry.templates) == 3
        assert all("problem!" not in t for t in entry.templates)


def test_bundle_is_independent_copy(sample_store):
    first = get_contextual_templates(sample_store, 9, 9, 9)
    first.templates[0].templates.append("mutated")

    assert len(get_contextual_templates(sample_store, 9, 9, 9).templates[0].templates) == 3


def test_catalog_templates_span_all_categories():
    store = (
        HintStoreBuilder()
        .register(1, 1, CategoryHints(category_id=1, category_name="A", questions=(
            QuestionHints(question_id=1, question_text="q", step_hints=(
                StepHint(step_label="s", generic_hint="g1", guessing_hint="guess a"),
            )),
        )))
        .register(2, 1, CategoryHints(category_id=1, category_name="B", questions=(
            QuestionHints(question_id=1, question_text="q", step_hints=(
                StepHint(step_label="s", generic_hint="g2", guessing_hint="guess a"),
            )),
        )))
        .build()
    )
    bundle = catalog_templates(store)

    assert bundle.source == TemplateSource.CATALOG
    assert [t.behavior_type for t in bundle.templates] == CURATED_ORDER
    guessing = bundle.for_behavior(TemplateBehavior.GUESSING)
    assert guessing[0] == "guess a"
    assert guessing[1] == guessing[2]
    assert "carefully!" in guessing[1]
    assert bundle.for_behavior(TemplateBehavior.SIGN_ERROR)[:2] == ["g1", "g2"]
