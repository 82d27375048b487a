"""
Interval Index

Augmented binary search tree over word intervals. Answers "which words
are playing at time t" fast enough to run on every animation frame.

Nodes are keyed by start time (equal starts go right) and each node
stores the largest end time found in its subtree, which lets a query
skip whole subtrees that finish before the playback point.
"""

from typing import Iterable, Iterator, List, Optional

from syncreader.readalong.word_interval import WordInterval
from syncreader.utils import logger

# Closes sub-millisecond gaps between consecutive word timestamps
DEFAULT_EPSILON = 0.001


class _Node:
    """Tree node wrapping one word interval."""

    __slots__ = ("word", "start", "end", "max_end", "height", "left", "right")

    def __init__(self, word: WordInterval):
        self.word = word
        self.start = word.start
        self.end = word.end
        self.max_end = word.end
        self.height = 1
        self.left: Optional["_Node"] = None
        self.right: Optional["_Node"] = None


def _height(node: Optional[_Node]) -> int:
    return node.height if node is not None else 0


def _refresh(node: _Node) -> None:
    """Recompute height and max_end from the children."""
    node.height = 1 + max(_height(node.left), _height(node.right))
    max_end = node.end
    if node.left is not None and node.left.max_end > max_end:
        max_end = node.left.max_end
    if node.right is not None and node.right.max_end > max_end:
        max_end = node.right.max_end
    node.max_end = max_end


def _rotate_right(node: _Node) -> _Node:
    pivot = node.left
    node.left = pivot.right
    pivot.right = node
    _refresh(node)
    _refresh(pivot)
    return pivot


def _rotate_left(node: _Node) -> _Node:
    pivot = node.right
    node.right = pivot.left
    pivot.left = node
    _refresh(node)
    _refresh(pivot)
    return pivot


def _rebalance(node: _Node) -> _Node:
    """AVL rotation step; keeps in-order (start) order intact."""
    balance = _height(node.left) - _height(node.right)
    if balance > 1:
        if _height(node.left.left) < _height(node.left.right):
            node.left = _rotate_left(node.left)
        return _rotate_right(node)
    if balance < -1:
        if _height(node.right.right) < _height(node.right.left):
            node.right = _rotate_right(node.right)
        return _rotate_left(node)
    return node


class IntervalIndex:
    """
    Index of word intervals supporting tolerant point queries.

    Handles:
    - Unsorted and overlapping input
    - Zero-length words
    - Timestamp jitter (epsilon widening on both interval ends)

    By default the tree rebalances itself (AVL) so sorted transcripts do
    not degrade into a linked list. Pass balanced=False for a plain
    insertion-order tree; query results are the same set either way.
    """

    def __init__(self, epsilon: float = DEFAULT_EPSILON, balanced: bool = True):
        """
        Initialize an empty index.

        Args:
            epsilon: Default tolerance in seconds applied to both interval ends
            balanced: Rebalance on insert
        """
        if epsilon < 0:
            raise ValueError(f"epsilon must be non-negative, got {epsilon}")
        self.epsilon = epsilon
        self.balanced = balanced
        self._root: Optional[_Node] = None
        self._intervals: List[WordInterval] = []

    @classmethod
    def build(
        cls,
        intervals: Iterable[WordInterval],
        epsilon: float = DEFAULT_EPSILON,
        balanced: bool = True,
    ) -> "IntervalIndex":
        """Build an index by inserting intervals in the given order."""
        index = cls(epsilon=epsilon, balanced=balanced)
        for interval in intervals:
            index.insert(interval)
        logger.debug(
            f"Built interval index: {len(index)} words, height {index.height}"
            f"{'' if balanced else ' (unbalanced)'}"
        )
        return index

    def __len__(self) -> int:
        return len(self._intervals)

    def __bool__(self) -> bool:
        return self._root is not None

    @property
    def height(self) -> int:
        return _height(self._root)

    @property
    def max_end(self) -> float:
        """Largest end time in the index (0.0 when empty)."""
        return self._root.max_end if self._root is not None else 0.0

    def insert(self, interval: WordInterval) -> None:
        """Add one interval. Nodes are never removed."""
        node = _Node(interval)
        self._intervals.append(interval)

        if self._root is None:
            self._root = node
            return

        path: List[_Node] = []
        current = self._root
        while True:
            path.append(current)
            if node.start < current.start:
                if current.left is None:
                    current.left = node
                    break
                current = current.left
            else:
                if current.right is None:
                    current.right = node
                    break
                current = current.right

        # Walk back up, fixing the augmentation (and balance) of every ancestor
        for depth in range(len(path) - 1, -1, -1):
            ancestor = path[depth]
            _refresh(ancestor)
            if not self.balanced:
                continue

            replacement = _rebalance(ancestor)
            if replacement is ancestor:
                continue
            if depth == 0:
                self._root = replacement
            else:
                parent = path[depth - 1]
                if parent.left is ancestor:
                    parent.left = replacement
                else:
                    parent.right = replacement

    def query(self, point: float, epsilon: Optional[float] = None) -> List[WordInterval]:
        """
        Find every interval whose range [start - eps, end + eps] contains point.

        Results come out in pre-order tree traversal order, which is stable
        for repeated queries on the same index.

        Args:
            point: Playback position in seconds
            epsilon: Tolerance override (defaults to the index epsilon)

        Returns:
            List of matching WordInterval
        """
        eps = self.epsilon if epsilon is None else epsilon
        result: List[WordInterval] = []
        if self._root is None:
            return result

        stack = [self._root]
        while stack:
            node = stack.pop()
            # Nothing below ends late enough to reach the point
            if point > node.max_end + eps:
                continue

            if node.start - eps <= point <= node.end + eps:
                result.append(node.word)

            # Right is pushed first so the left subtree is visited first
            if node.right is not None and point >= node.start - eps:
                stack.append(node.right)
            if node.left is not None and point <= node.left.max_end + eps:
                stack.append(node.left)

        return result

    def brute_force(self, point: float, epsilon: Optional[float] = None) -> List[WordInterval]:
        """Linear scan over all intervals in insertion order (reference for checks)."""
        eps = self.epsilon if epsilon is None else epsilon
        return [w for w in self._intervals if w.contains(point, eps)]

    def __iter__(self) -> Iterator[WordInterval]:
        """Intervals in start order (in-order traversal)."""
        stack: List[_Node] = []
        node = self._root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            yield node.word
            node = node.right
