from survey_backend.schemas import Question, QuestionType
from survey_backend.services.students import find_name_question, is_name_question, parse_full_name

from conftest import T0


def test_parse_two_part_name():
    assert parse_full_name("Ada Lovelace") == ("Ada", "Lovelace")


def test_parse_single_name_has_empty_last_name():
    assert parse_full_name("Madonna") == ("Madonna", "")


def test_parse_irregular_whitespace():
    assert parse_full_name("  Ada   Lovelace  ") == parse_full_name("Ada Lovelace")


def test_parse_joins_remaining_tokens():
    assert parse_full_name("Juan  Carlos\tde la Cruz") == ("Juan", "Carlos de la Cruz")


def test_parse_blank_is_none():
    assert parse_full_name("   ") is None
    assert parse_full_name("") is None


def test_parse_keeps_case_and_accents():
    assert parse_full_name("josé ÁLVAREZ") == ("josé", "ÁLVAREZ")


def test_name_question_requires_text_type():
    assert is_name_question(Question(id="1", type=QuestionType.text, question="What is your NAME?"))
    assert not is_name_question(Question(id="2", type=QuestionType.comment, question="Your name?"))
    assert not is_name_question(Question(id="3", type=QuestionType.text, question="Favourite colour?"))


def test_earliest_name_question_wins():
    later = Question(id="a", question="Nickname", created_at=T0.replace(hour=5))
    earlier = Question(id="b", question="Full name", created_at=T0)
    assert find_name_question([later, earlier]).id == "b"


def test_name_question_ties_keep_order():
    first = Question(id="x", question="First name", created_at=T0)
    second = Question(id="y", question="Last name", created_at=T0)
    assert find_name_question([first, second]).id == "x"


def test_undated_name_question_sorts_last():
    undated = Question(id="u", question="Name")
    dated = Question(id="d", question="Name again", created_at=T0)
    assert find_name_question([undated, dated]).id == "d"


def test_no_name_question():
    assert find_name_question([Question(id="1", type=QuestionType.rating, question="Rate us")]) is None
