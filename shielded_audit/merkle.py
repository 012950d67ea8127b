"""
Shielded-pool Merkle accumulator.

Append-only binary tree of fixed depth over value commitments. Empty slots are
represented by a ladder of default hashes: level 0 is the zero leaf and level
i is Hash(default[i-1], default[i-1]).
"""

from typing import Iterable, List, Optional

from .errors import MerkleTreeFullError
from .hashing import FieldHasher, default_hasher
from .params import TREE_DEPTH


def compute_default_hashes(hasher: FieldHasher, depth: int = TREE_DEPTH) -> List[int]:
    defaults = [0]
    for _ in range(depth):
        prev = defaults[-1]
        defaults.append(hasher.hash([prev, prev]))
    return defaults


def verify_proof(
    leaf: int,
    index: int,
    siblings: List[int],
    root: int,
    hasher: Optional[FieldHasher] = None,
) -> bool:
    """Recombine a sibling path with its leaf and compare against root."""
    hasher = hasher or default_hasher()
    current = leaf
    for sibling in siblings:
        if index % 2 == 1:
            current = hasher.hash([sibling, current])
        else:
            current = hasher.hash([current, sibling])
        index //= 2
    return current == root


class ShieldedPoolMerkleTree:
    def __init__(self, hasher: Optional[FieldHasher] = None, depth: int = TREE_DEPTH):
        self.hasher = hasher or default_hasher()
        self.depth = depth
        self.capacity = 1 << depth
        self._leaves: List[int] = []
        self.default_hashes = compute_default_hashes(self.hasher, depth)

    @classmethod
    def from_leaves(cls, leaves: Iterable[int], hasher: Optional[FieldHasher] = None,
                    depth: int = TREE_DEPTH) -> "ShieldedPoolMerkleTree":
        tree = cls(hasher, depth)
        for leaf in leaves:
            tree.insert(leaf)
        return tree

    def __len__(self):
        return len(self._leaves)

    @property
    def leaves(self) -> List[int]:
        return list(self._leaves)

    def insert(self, commitment: int) -> int:
        if len(self._leaves) >= self.capacity:
            raise MerkleTreeFullError(f"tree of depth {self.depth} is full")
        index = len(self._leaves)
        self._leaves.append(commitment)
        return index

    def _combine_level(self, level: List[int], height: int) -> List[int]:
        # Pairs past the populated prefix hash to default_hashes[height + 1]
        default = self.default_hashes[height]
        next_level = []
        for j in range(0, len(level), 2):
            left = level[j]
            right = level[j + 1] if j + 1 < len(level) else default
            next_level.append(self.hasher.hash([left, right]))
        return next_level

    def root(self) -> int:
        if not self._leaves:
            return self.default_hashes[self.depth]
        current_level = list(self._leaves)
        for i in range(self.depth):
            current_level = self._combine_level(current_level, i)
        return current_level[0]

    def root_optimized(self) -> int:
        return self._root_at(self.depth, 0)

    def _root_at(self, level: int, index: int) -> int:
        if index << level >= len(self._leaves):
            return self.default_hashes[level]
        if level == 0:
            return self._leaves[index]
        left = self._root_at(level - 1, index * 2)
        right = self._root_at(level - 1, index * 2 + 1)
        return self.hasher.hash([left, right])

    def proof(self, index: int) -> List[int]:
        """Sibling path from leaf `index` up to (excluding) the root."""
        if not 0 <= index < len(self._leaves):
            raise IndexError(f"no leaf at index {index}")
        siblings = []
        current_idx = index
        current_level = list(self._leaves)
        for i in range(self.depth):
            sibling_idx = current_idx - 1 if current_idx % 2 == 1 else current_idx + 1
            if sibling_idx < len(current_level):
                siblings.append(current_level[sibling_idx])
            else:
                siblings.append(self.default_hashes[i])
            current_level = self._combine_level(current_level, i)
            current_idx //= 2
        return siblings
