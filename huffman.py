import heapq
from typing import Dict, Iterable, Optional, Tuple


class HuffmanError(Exception):
    """Base class for every error raised by the coding core."""

class EmptyInputError(HuffmanError, ValueError):
    pass

class InvalidFrequencyError(HuffmanError, ValueError):
    pass

class UnknownSymbolError(HuffmanError, LookupError):
    def __init__(self, symbol):
        super().__init__(f"Symbol not in code table: {symbol!r}")
        self.symbol = symbol

class DecodePreconditionError(HuffmanError, RuntimeError):
    pass

class MalformedBitstreamError(HuffmanError, ValueError):
    pass

class MalformedTreeDataError(HuffmanError, ValueError):
    pass

class MalformedCodeTableError(HuffmanError, ValueError):
    pass


LEAF_MARKER = '1'
INTERNAL_MARKER = '0'


class HuffmanNode: # Node for Huffman tree
    def __init__(self, symbol, frequency, left=None, right=None):
        self.symbol = symbol    # character, or None for internal nodes
        self.frequency = frequency
        self.left = left
        self.right = right

    @property
    def is_leaf(self) -> bool:
        return self.symbol is not None

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode({self.symbol!r}, {self.frequency})"
        return f"HuffmanNode(None, {self.frequency}, {self.left!r}, {self.right!r})"


def check_symbol(symbol, error=InvalidFrequencyError):
    if not isinstance(symbol, str) or len(symbol) != 1:
        raise error(f"Symbol must be a single character, got {symbol!r}")


def freq_table(text: str) -> Dict[str, int]: # count every character of text
    ft: Dict[str, int] = {}
    for ch in text:
        ft[ch] = ft.get(ch, 0) + 1
    return ft

def frequencies_from_pairs(pairs: Iterable[Tuple[str, int]]) -> Dict[str, int]:
    """
    Validate (symbol, count) pairs into a frequency table
    A repeated symbol keeps its last count
    """
    ft: Dict[str, int] = {}
    for symbol, count in pairs:
        check_symbol(symbol)
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise InvalidFrequencyError(f"Frequency for {symbol!r} must be a positive integer, got {count!r}")
        ft[symbol] = count
    return ft


def build_huffman_tree(frequency_table: Dict[str, int]) -> HuffmanNode: # frequency_table: dict of symbol -> frequency
    """
    Greedy merge of the two lightest nodes until one root remains

    Leaves enter the heap in ascending symbol order and every merged node
    gets the next insertion number, so equal weights pop oldest first and
    the same table always yields the same tree
    """
    if not frequency_table:
        raise EmptyInputError("Cannot build a Huffman tree from an empty frequency table")

    priority_queue = []
    order = 0
    for symbol in sorted(frequency_table):
        priority_queue.append((frequency_table[symbol], order, HuffmanNode(symbol, frequency_table[symbol])))
        order += 1
    heapq.heapify(priority_queue)

    while len(priority_queue) > 1:
        left_weight, _, left = heapq.heappop(priority_queue)
        right_weight, _, right = heapq.heappop(priority_queue)
        merged_node = HuffmanNode(None, left_weight + right_weight, left, right)
        heapq.heappush(priority_queue, (merged_node.frequency, order, merged_node))
        order += 1

    return priority_queue[0][2] # root of the tree


def generate_huffman_codes(root: Optional[HuffmanNode]) -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    Walk the tree and return (symbol -> code, code -> symbol)
    A lone leaf root gets the empty code
    """
    codes: Dict[str, str] = {}
    reverse_codes: Dict[str, str] = {}
    if root is None:
        return codes, reverse_codes

    stack = [(root, '')]
    while stack:
        node, current_code = stack.pop()
        if node.is_leaf:
            codes[node.symbol] = current_code
            reverse_codes[current_code] = node.symbol
            continue
        # right pushed first so the left subtree is visited first
        stack.append((node.right, current_code + '1'))
        stack.append((node.left, current_code + '0'))

    return codes, reverse_codes


def huffman_encode(text: str, code_map: Dict[str, str]) -> str: # text: input characters, code_map: dict of symbol -> Huffman code
    out = []
    for ch in text:
        code = code_map.get(ch)
        if code is None:
            raise UnknownSymbolError(ch)
        out.append(code)
    return ''.join(out)


def huffman_decode(bitstring: str, root: Optional[HuffmanNode], length: Optional[int] = None) -> str:
    """
    Decode a string of '0'/'1' by walking the tree from the root

    Bits left over after the last complete symbol are dropped. When length
    is given decoding stops after that many symbols; this is the only way
    to decode a single-leaf tree, whose only code is empty
    """
    if root is None:
        raise DecodePreconditionError("No Huffman tree loaded, cannot decode")
    if length is not None and length < 0:
        raise ValueError(f"length must be non-negative, got {length}")

    if root.is_leaf:
        if bitstring:
            raise MalformedBitstreamError(f"Bit at position 0 has no branch to follow: tree has a single symbol {root.symbol!r}")
        return root.symbol * (length or 0)

    decoded = []
    node = root
    for position, bit in enumerate(bitstring):
        if length is not None and len(decoded) >= length:
            break
        if bit == '0':
            node = node.left
        elif bit == '1':
            node = node.right
        else:
            raise MalformedBitstreamError(f"Invalid bit {bit!r} at position {position}")

        # Leaf
        if node.is_leaf:
            decoded.append(node.symbol)
            node = root

    if length is not None and len(decoded) < length:
        raise MalformedBitstreamError(f"Bitstream holds {len(decoded)} symbols, expected {length}")
    return ''.join(decoded)


def serialize_tree(root: Optional[HuffmanNode]) -> str:
    """
    Preorder encoding: '1' + symbol for a leaf, '0' + left + right for an
    internal node, '' for no tree. Weights are not kept
    """
    out = []
    stack = [root] if root is not None else []
    while stack:
        node = stack.pop()
        if node.is_leaf:
            out.append(LEAF_MARKER + node.symbol)
        else:
            out.append(INTERNAL_MARKER)
            stack.append(node.right)
            stack.append(node.left)
    return ''.join(out)


def deserialize_tree(data: str) -> Optional[HuffmanNode]:
    """
    Inverse of serialize_tree. Every loaded node has weight 0
    Markers are positional, so '0' and '1' are valid leaf symbols
    """
    if not data:
        return None

    root = None
    # each entry is an internal node still missing a child
    pending = []
    seen = set()
    pos = 0
    while True:
        if pos >= len(data):
            raise MalformedTreeDataError(f"Tree data truncated at position {pos}")

        marker = data[pos]
        if marker == LEAF_MARKER:
            if pos + 1 >= len(data):
                raise MalformedTreeDataError(f"Leaf marker at position {pos} has no symbol")
            symbol = data[pos + 1]
            if symbol in seen:
                raise MalformedTreeDataError(f"Symbol {symbol!r} appears twice in tree data")
            seen.add(symbol)
            node = HuffmanNode(symbol, 0)
            pos += 2
        elif marker == INTERNAL_MARKER:
            node = HuffmanNode(None, 0)
            pos += 1
        else:
            raise MalformedTreeDataError(f"Unknown marker {marker!r} at position {pos}")

        if root is None:
            root = node
        else:
            parent = pending[-1]
            if parent.left is None:
                parent.left = node
            else:
                parent.right = node
                pending.pop()

        if not node.is_leaf:
            pending.append(node)
        if not pending:
            break

    if pos != len(data):
        raise MalformedTreeDataError(f"Unexpected data after complete tree at position {pos}")
    return root


def average_code_length(code_map: Dict[str, str], frequency_table: Dict[str, int]) -> float:
    """Weighted average code length in bits per symbol"""
    total = sum(frequency_table.values())
    if total == 0:
        return 0.0
    return sum(len(code_map[s]) * f for s, f in frequency_table.items()) / total
