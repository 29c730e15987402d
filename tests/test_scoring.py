import pytest

from drill.scoring import accuracy, accuracy_label, normalize


@pytest.mark.parametrize("reference", ["The cat sat on the mat.", "Hello!", ""])
def test_empty_input_scores_zero(reference):
    assert accuracy(reference, "") == 0
    assert accuracy(reference, "   \t") == 0


def test_identical_after_normalization_is_perfect():
    assert accuracy("I drink water every day.", "i drink water every day") == 100
    assert accuracy("Wait; what?!", "WAIT WHAT") == 100
    assert accuracy("  Spaced out.  ", "spaced out") == 100


def test_word_order_is_ignored():
    assert accuracy("I go to school", "school to go I") == 100


def test_partial_attempt_against_longer_reference():
    # ref words: the cat sat on the mat (6), input: the cat sat (3)
    assert accuracy("The cat sat on the mat.", "the cat sat") == 50


def test_two_of_three_rounds_to_67():
    assert accuracy("a b c", "a b x") == 67


def test_exact_half_rounds_up():
    # 1/8 = 12.5%
    assert accuracy("one two three four five six seven eight", "one") == 13
    # 3/8 = 37.5%
    assert accuracy("one two three four five six seven eight", "one two three") == 38


def test_repeated_input_words_each_count():
    assert accuracy("the cat", "the the the") == 100
    assert accuracy("the cat naps", "the the") == 67


def test_longer_input_is_penalized():
    assert accuracy("I run", "I run very fast every day") == 33


def test_punctuation_is_removed_not_spaced():
    assert normalize("Hi,there!") == "hithere"
    assert accuracy("Hi, there!", "hithere") == 0


def test_apostrophes_are_kept():
    assert accuracy("Don't stop.", "dont stop") == 50


def test_punctuation_only_input_scores_zero():
    assert accuracy("Hello.", "...") == 0


def test_non_ascii_words_compare_by_membership():
    assert accuracy("Café au lait", "café noir") == 33


def test_accuracy_label():
    assert accuracy_label(100) == "PERFECT"
    assert accuracy_label(67) == "Acc: 67%"
    assert accuracy_label(0) == "Acc: 0%"
