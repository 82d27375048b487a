"""Tests for the interval index, including a brute-force comparison of pruned queries."""

from __future__ import annotations

import random
from collections import Counter
from typing import List

import pytest

from syncreader.readalong import IntervalIndex, WordInterval
from tests.conftest import make_word

EPS = 0.001


def _random_words(rng: random.Random, count: int) -> List[WordInterval]:
    words = []
    for i in range(count):
        start = round(rng.uniform(0.0, 100.0), 3)
        # Roughly one in ten words is zero-length
        length = 0.0 if rng.random() < 0.1 else round(rng.uniform(0.0, 3.0), 3)
        words.append(make_word(f"w{i}", start, start + length, sentence_index=i // 8))
    return words


def test_empty_index_returns_nothing() -> None:
    index = IntervalIndex()
    assert index.query(0.0) == []
    assert len(index) == 0
    assert index.height == 0
    assert not index


def test_rejects_negative_epsilon() -> None:
    with pytest.raises(ValueError):
        IntervalIndex(epsilon=-0.1)


@pytest.mark.parametrize("balanced", [True, False])
def test_containment_with_zero_epsilon(balanced: bool) -> None:
    words = [
        make_word("a", 0.0, 1.0),
        make_word("b", 0.5, 2.0),
        make_word("c", 2.0, 2.0),
        make_word("d", 5.0, 6.0),
    ]
    index = IntervalIndex.build(words, epsilon=0.0, balanced=balanced)

    for word in words:
        for point in (word.start, (word.start + word.end) / 2, word.end):
            assert word in index.query(point, 0.0)

    assert index.query(3.0, 0.0) == []


@pytest.mark.parametrize("balanced", [True, False])
def test_epsilon_boundary(balanced: bool) -> None:
    word = make_word("edge", 1.0, 2.0)
    index = IntervalIndex.build([make_word("early", 0.0, 0.5), word], balanced=balanced)

    assert word in index.query(2.0 + EPS / 2, EPS)
    assert word not in index.query(2.0 + 2 * EPS, EPS)
    assert word in index.query(1.0 - EPS / 2, EPS)
    assert word not in index.query(1.0 - 2 * EPS, EPS)


def test_epsilon_closes_rounding_gap_between_words() -> None:
    first = make_word("first", 0.0, 1.0)
    second = make_word("second", 1.0004, 2.0)
    index = IntervalIndex.build([first, second])

    assert Counter(index.query(1.0002)) == Counter([first, second])
    assert index.query(1.0002, epsilon=0.0) == []


def test_query_uses_index_epsilon_by_default() -> None:
    index = IntervalIndex.build([make_word("a", 0.0, 1.0)], epsilon=0.5)
    assert len(index.query(1.4)) == 1
    assert index.query(1.4, epsilon=0.0) == []


@pytest.mark.parametrize("balanced", [True, False])
@pytest.mark.parametrize("count", [1, 2, 7, 50, 400])
def test_pruned_query_matches_brute_force(balanced: bool, count: int) -> None:
    rng = random.Random(count * 31 + int(balanced))
    words = _random_words(rng, count)
    index = IntervalIndex.build(words, balanced=balanced)

    points = [rng.uniform(-1.0, 104.0) for _ in range(300)]
    # Exact and near-boundary points are where pruning mistakes show up
    for word in words[:50]:
        points.extend(
            [word.start, word.end, word.start - EPS, word.end + EPS, word.end + EPS / 2, word.end + 2 * EPS]
        )

    for point in points:
        assert Counter(index.query(point)) == Counter(index.brute_force(point)), point


@pytest.mark.parametrize("balanced", [True, False])
def test_insertion_order_does_not_change_results(balanced: bool) -> None:
    rng = random.Random(7)
    words = _random_words(rng, 200)
    shuffled = list(words)
    rng.shuffle(shuffled)

    first = IntervalIndex.build(words, balanced=balanced)
    second = IntervalIndex.build(shuffled, balanced=balanced)

    for _ in range(300):
        point = rng.uniform(0.0, 103.0)
        assert Counter(first.query(point)) == Counter(second.query(point))


def test_balanced_and_unbalanced_agree() -> None:
    rng = random.Random(11)
    words = _random_words(rng, 300)
    balanced = IntervalIndex.build(words, balanced=True)
    plain = IntervalIndex.build(words, balanced=False)

    for _ in range(300):
        point = rng.uniform(0.0, 103.0)
        assert Counter(balanced.query(point)) == Counter(plain.query(point))


def test_repeated_query_is_stable() -> None:
    rng = random.Random(3)
    index = IntervalIndex.build(_random_words(rng, 100))
    for point in (10.0, 50.5, 99.9):
        assert index.query(point) == index.query(point)


def test_sorted_insertion_stays_shallow_when_balanced() -> None:
    words = [make_word(f"w{i}", i * 0.3, i * 0.3 + 0.25) for i in range(4000)]
    index = IntervalIndex.build(words)

    assert len(index) == 4000
    # AVL height bound is about 1.44 * log2(n)
    assert index.height <= 18
    assert [w.text for w in index.query(300.1)] == ["w1000"]


def test_sorted_insertion_without_balancing_does_not_recurse() -> None:
    words = [make_word(f"w{i}", i * 0.3, i * 0.3 + 0.25) for i in range(2000)]
    index = IntervalIndex.build(words, balanced=False)

    assert index.height == 2000
    assert [w.text for w in index.query(599.8)] == ["w1999"]


def test_iteration_is_in_start_order_with_ties_kept_in_insertion_order() -> None:
    words = [
        make_word("c", 3.0, 4.0),
        make_word("a1", 1.0, 2.0),
        make_word("b", 2.0, 2.5),
        make_word("a2", 1.0, 1.5),
    ]
    for balanced in (True, False):
        index = IntervalIndex.build(words, balanced=balanced)
        assert [w.text for w in index] == ["a1", "a2", "b", "c"]


def test_max_end_tracks_longest_interval() -> None:
    index = IntervalIndex.build(
        [make_word("long", 0.0, 50.0), make_word("short", 10.0, 11.0), make_word("late", 20.0, 21.0)]
    )
    assert index.max_end == 50.0
    assert {w.text for w in index.query(30.0)} == {"long"}
