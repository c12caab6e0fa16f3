import heapq
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Optional


class HuffmanError(ValueError): # base class for every Huffman coding failure
    pass


class EmptyAlphabetError(HuffmanError):
    def __init__(self):
        super().__init__("cannot build a Huffman tree from an empty alphabet")


class UnknownSymbolError(HuffmanError):
    def __init__(self, symbol, position):
        super().__init__(f"symbol {symbol!r} at position {position} has no codeword")
        self.symbol = symbol
        self.position = position


class TruncatedInputError(HuffmanError):
    def __init__(self, decoded, position):
        super().__init__(f"bit sequence ends mid-codeword after {position} bits")
        self.decoded = decoded # symbols completed before the truncation
        self.position = position


class InvalidBitError(HuffmanError):
    def __init__(self, bit, position):
        super().__init__(f"invalid bit {bit!r} at position {position}")
        self.bit = bit
        self.position = position


@dataclass(frozen=True, eq=False)
class HuffmanNode: # Node for Huffman tree, immutable once built
    symbol: Any
    frequency: int
    left: Optional["HuffmanNode"] = field(default=None, repr=False)
    right: Optional["HuffmanNode"] = field(default=None, repr=False)

    def __post_init__(self):
        if (self.left is None) != (self.right is None):
            raise ValueError("internal node needs exactly two children")
        if self.left is not None and self.symbol is not None:
            raise ValueError("internal node cannot carry a symbol")
        if self.frequency < 0:
            raise ValueError(f"negative frequency: {self.frequency}")
        if self.left is not None and self.frequency != self.left.frequency + self.right.frequency:
            raise ValueError(f"internal node weight {self.frequency} is not the sum of its children")

    @property
    def is_leaf(self) -> bool:
        return self.left is None


def frequency_table(data) -> dict: # symbol -> occurrence count, in first-seen order
    ft = {}
    for symbol in data:
        ft[symbol] = ft.get(symbol, 0) + 1
    return ft


def leaves_from_frequencies(frequency_table: dict) -> list:
    leaves = []
    for symbol, frequency in frequency_table.items():
        if not isinstance(frequency, int) or isinstance(frequency, bool) or frequency <= 0:
            raise ValueError(f"frequency of {symbol!r} must be a positive integer, got {frequency!r}")
        leaves.append(HuffmanNode(symbol, frequency))
    return leaves


def build_huffman_tree(leaves) -> HuffmanNode: # leaves: collection of leaf nodes
    """
    Greedy construction with a binary heap.

    Ties on weight are broken by sequence number: leaves are numbered in input
    order and every merged node takes the next number, so the same leaves always
    give the same tree. The first tree popped becomes the left child.
    """
    order = count()
    priority_queue = [(leaf.frequency, next(order), leaf) for leaf in leaves]
    if not priority_queue:
        raise EmptyAlphabetError()
    heapq.heapify(priority_queue)

    while len(priority_queue) > 1:
        left_weight, _, left = heapq.heappop(priority_queue)
        right_weight, _, right = heapq.heappop(priority_queue)
        merged_node = HuffmanNode(None, left_weight + right_weight, left, right)
        heapq.heappush(priority_queue, (merged_node.frequency, next(order), merged_node))

    return priority_queue[0][2] # root of the tree


def build_huffman_tree_scan(leaves) -> HuffmanNode:
    """
    Same construction as build_huffman_tree, but each step rescans the whole
    forest for its two smallest trees. Quadratic; kept for small alphabets and
    for comparison against the heap builder, whose trees it reproduces exactly.
    """
    order = count()
    forest = [(leaf.frequency, next(order), leaf) for leaf in leaves]
    if not forest:
        raise EmptyAlphabetError()

    while len(forest) > 1:
        left_weight, _, left = forest.pop(forest.index(min(forest)))
        right_weight, _, right = forest.pop(forest.index(min(forest)))
        merged_node = HuffmanNode(None, left_weight + right_weight, left, right)
        forest.append((merged_node.frequency, next(order), merged_node))

    return forest[0][2]


def build_tree_from_frequencies(frequency_table: dict) -> HuffmanNode:
    return build_huffman_tree(leaves_from_frequencies(frequency_table))


def generate_huffman_codes(root: HuffmanNode) -> dict: # root: root of the Huffman tree
    # Single-symbol alphabet: the root is a leaf and its path is empty, use one placeholder bit
    if root.is_leaf:
        return {root.symbol: "0"}

    codes = {}
    stack = [(root, "")]
    while stack:
        node, current_code = stack.pop()
        if node.is_leaf:
            codes[node.symbol] = current_code
            continue
        # right pushed first so the left subtree is visited first
        stack.append((node.right, current_code + "1"))
        stack.append((node.left, current_code + "0"))
    return codes


def huffman_encode(data, code_map: dict) -> str: # data: sequence of symbols, code_map: symbol -> codeword
    if len(code_map) == 1 and "" in code_map.values():
        code_map = {symbol: "0" for symbol in code_map}

    bits = []
    for position, symbol in enumerate(data):
        try:
            bits.append(code_map[symbol])
        except KeyError:
            raise UnknownSymbolError(symbol, position) from None
    return "".join(bits)


_BIT_VALUES = {"0": 0, "1": 1, 0: 0, 1: 1}


def _bit_value(bit, position) -> int:
    try:
        return _BIT_VALUES[bit]
    except (KeyError, TypeError):
        raise InvalidBitError(bit, position) from None


def huffman_decode(bitstring, root: HuffmanNode) -> list: # bitstring: '0'/'1' characters or 0/1 ints
    decoded = []

    if root.is_leaf:
        for position, bit in enumerate(bitstring):
            if _bit_value(bit, position) != 0:
                raise InvalidBitError(bit, position)
            decoded.append(root.symbol)
        return decoded

    node = root
    consumed = 0
    for consumed, bit in enumerate(bitstring, start=1):
        node = node.right if _bit_value(bit, consumed - 1) else node.left
        if node.is_leaf:
            decoded.append(node.symbol)
            node = root # reset to the root for the next symbol

    if node is not root:
        raise TruncatedInputError(decoded, consumed)
    return decoded


def encoded_length(frequency_table: dict, code_map: dict) -> int:
    return sum(frequency * len(code_map[symbol]) for symbol, frequency in frequency_table.items())


def format_tree(root: HuffmanNode) -> str:
    if root.is_leaf:
        return f"({root.symbol}:{root.frequency})"
    return f"(*:{root.frequency} {format_tree(root.left)} {format_tree(root.right)})"
