import random

import pytest
from pydantic import ValidationError

from snakesss.engine.questions import (
    DEFAULT_CORPUS_PATH,
    Difficulty,
    Question,
    QuestionPool,
    load_questions,
)
from snakesss.settings import DifficultyMode, GameSettings
from snakesss.storage import MemoryUsedQuestionStore, YamlUsedQuestionStore


class FixedRoll:
    """Rng stand-in: fixed mixed-mode roll, always picks the first candidate."""

    def __init__(self, roll):
        self.roll = roll

    def randrange(self, stop):
        return self.roll

    def choice(self, seq):
        return seq[0]


def _pool(questions, rng=None, store=None, **settings):
    return QuestionPool(
        questions,
        GameSettings(**settings),
        store=store or MemoryUsedQuestionStore(),
        rng=rng or random.Random(42),
    )


def test_no_repeats_until_exhausted(make_questions):
    pool = _pool(make_questions(10))
    ids = [pool.get_question().id for _ in range(10)]
    assert len(set(ids)) == 10
    assert pool.remaining_count == 0


def test_exhaustion_recycles_pool(make_questions):
    pool = _pool(make_questions(3))
    for _ in range(3):
        pool.get_question()
    assert pool.remaining_count == 0

    question = pool.get_question()
    assert question is not None
    assert pool.remaining_count == 2


def test_recycling_only_resets_current_pool(make_questions):
    science = make_questions(2, category="Science", prefix="sci")
    history = make_questions(2, category="History", prefix="his")
    store = MemoryUsedQuestionStore({"his-0"})
    pool = _pool(science + history, store=store, enabled_categories={"Science"})

    pool.get_question()
    pool.get_question()
    pool.get_question()

    assert "his-0" in pool.used_question_ids
    assert "his-0" in store.ids


def test_empty_corpus_returns_none():
    pool = _pool([])
    assert pool.get_question() is None
    assert pool.remaining_count == 0


def test_category_filter_keeps_uncategorized(make_questions):
    questions = (
        make_questions(2, category="Science", prefix="sci")
        + make_questions(2, category="Sports", prefix="spo")
        + make_questions(1, prefix="gen")
    )
    pool = _pool(questions, enabled_categories={"Science"})
    assert pool.remaining_count == 3
    drawn = {pool.get_question().id for _ in range(3)}
    assert drawn == {"sci-0", "sci-1", "gen-0"}


def test_categories_matching_nothing_fall_back_to_corpus(make_questions):
    pool = _pool(make_questions(2, category="Sports"), enabled_categories={"Science"})
    assert pool.get_question() is not None


def test_settings_are_read_on_every_draw(make_questions):
    questions = make_questions(2, category="Science", prefix="sci") + make_questions(2, category="History", prefix="his")
    settings = GameSettings(enabled_categories={"Science"})
    pool = QuestionPool(questions, settings, rng=random.Random(1))
    assert pool.get_question().category == "Science"

    settings.enabled_categories = {"History"}
    assert pool.get_question().category == "History"


def test_difficulty_filter(make_questions):
    questions = make_questions(3, difficulty="easy", prefix="e") + make_questions(3, difficulty="hard", prefix="h")
    pool = _pool(questions, difficulty_mode="easy", rounds_per_game=3)
    assert pool.remaining_count == 3
    for _ in range(3):
        assert pool.get_question().difficulty is Difficulty.EASY


def test_difficulty_falls_back_when_too_few(make_questions):
    questions = make_questions(1, difficulty="hard", prefix="h") + make_questions(5, difficulty="easy", prefix="e")
    pool = _pool(questions, difficulty_mode="hard", rounds_per_game=3)
    assert pool.remaining_count == 6
    drawn = {pool.get_question().id for _ in range(6)}
    assert len(drawn) == 6


@pytest.mark.parametrize("roll,expected", [
    (0, Difficulty.EASY),
    (29, Difficulty.EASY),
    (30, Difficulty.MEDIUM),
    (79, Difficulty.MEDIUM),
    (80, Difficulty.HARD),
    (99, Difficulty.HARD),
])
def test_mixed_roll_thresholds(make_questions, roll, expected):
    questions = (
        make_questions(1, difficulty="easy", prefix="e")
        + make_questions(1, difficulty="medium", prefix="m")
        + make_questions(1, difficulty="hard", prefix="h")
    )
    pool = _pool(questions, rng=FixedRoll(roll), difficulty_mode="mixed")
    assert pool.roll_mixed_difficulty() is expected
    assert pool.get_question().difficulty is expected


def test_mixed_target_missing_uses_available(make_questions):
    pool = _pool(make_questions(2, difficulty="medium"), rng=FixedRoll(0), difficulty_mode="mixed")
    question = pool.get_question()
    assert question.difficulty is Difficulty.MEDIUM


def test_mixed_mode_spread(make_questions):
    questions = (
        make_questions(50, difficulty="easy", prefix="e")
        + make_questions(50, difficulty="medium", prefix="m")
        + make_questions(50, difficulty="hard", prefix="h")
    )
    pool = _pool(questions, rng=random.Random(99), difficulty_mode=DifficultyMode.MIXED)
    drawn = [pool.get_question().difficulty for _ in range(100)]
    assert drawn.count(Difficulty.MEDIUM) > drawn.count(Difficulty.HARD)


def test_mark_used_and_reset(make_questions):
    pool = _pool(make_questions(5))
    pool.mark_used("q-0")
    pool.mark_used("q-1")
    assert pool.remaining_count == 3
    pool.reset_pool()
    assert pool.remaining_count == 5
    assert pool.used_question_ids == frozenset()


def test_used_ids_persist_across_pools(make_questions, tmp_path):
    store = YamlUsedQuestionStore(tmp_path / "used.yaml")
    first = _pool(make_questions(4), store=store)
    drawn = {first.get_question().id, first.get_question().id}

    second = _pool(make_questions(4), store=YamlUsedQuestionStore(tmp_path / "used.yaml"))
    assert second.used_question_ids == drawn
    assert second.remaining_count == 2


def test_yaml_store_missing_file(tmp_path):
    assert YamlUsedQuestionStore(tmp_path / "nope.yaml").load() == set()


def test_load_questions_from_yaml(tmp_path):
    path = tmp_path / "questions.yaml"
    path.write_text(
        "- id: x1\n"
        "  question: Why?\n"
        "  choices: {a: One, b: Two, c: Three}\n"
        "  answer: B\n"
        "  funFact: Because.\n"
        "  category: Science\n"
        "  difficulty: hard\n"
        "- id: x2\n"
        "  question: What?\n"
        "  choices: {a: One, b: Two, c: Three}\n"
        "  answer: c\n",
        encoding="utf-8",
    )
    questions = load_questions(path)
    assert [q.id for q in questions] == ["x1", "x2"]
    assert questions[0].fun_fact == "Because."
    assert questions[0].answer_text == "Two"
    assert questions[1].difficulty is Difficulty.MEDIUM
    assert questions[1].category is None
    assert questions[1].answer_text == "Three"


def test_load_questions_missing_file(tmp_path):
    assert load_questions(tmp_path / "missing.yaml") == []


def test_load_questions_rejects_bad_entries(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- id: x1\n  question: No choices\n  answer: A\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_questions(path)


def test_packaged_corpus_loads():
    assert DEFAULT_CORPUS_PATH.exists()
    questions = load_questions()
    assert questions
    assert len({q.id for q in questions}) == len(questions)
    assert all(q.answer_text for q in questions)


def test_question_is_immutable(make_questions):
    question = make_questions(1)[0]
    with pytest.raises(ValidationError):
        question.answer = "B"


def test_question_accepts_field_names():
    q = Question(
        id="n1", question="Q?", choices={"a": "x", "b": "y", "c": "z"},
        answer="A", fun_fact="fact",
    )
    assert q.fun_fact == "fact"
