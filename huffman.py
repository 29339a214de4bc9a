import heapq
from typing import Dict, Iterable, Iterator, List, Sequence, TextIO, Tuple

from bitio import END_OF_STREAM, BitReader, BitWriter


class MalformedTreeData(ValueError):
    """Raised when a persisted code table cannot describe a valid Huffman tree."""


class HuffmanNode: # Node for Huffman tree
    def __init__(self, frequency, symbol=None, left=None, right=None):
        self.frequency = frequency
        self.symbol = symbol    # int on leaves, None on internal nodes
        self.left = left
        self.right = right

    @property
    def is_leaf(self):
        return self.left is None and self.right is None

    def __lt__(self, other):
        return self.frequency < other.frequency # heapq orders by frequency only, ties are unspecified

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode(frequency={self.frequency}, symbol={self.symbol})"
        return f"HuffmanNode(frequency={self.frequency})"


def count_frequencies(data: bytes, alphabet_size: int = 256) -> List[int]:
    counts = [0] * alphabet_size
    for b in data:
        if b >= alphabet_size:
            raise ValueError(f"symbol {b} outside alphabet of size {alphabet_size}")
        counts[b] += 1
    return counts


def build_huffman_tree(frequencies: Sequence[int]) -> HuffmanNode: # frequencies: list indexed by symbol
    priority_queue = [HuffmanNode(frequency, symbol) for symbol, frequency in enumerate(frequencies) if frequency > 0]

    # The end of file sentinel sits one past the largest real symbol and is always codeable
    priority_queue.append(HuffmanNode(1, len(frequencies)))
    heapq.heapify(priority_queue)

    while len(priority_queue) > 1:
        left = heapq.heappop(priority_queue)
        right = heapq.heappop(priority_queue)
        heapq.heappush(priority_queue, HuffmanNode(left.frequency + right.frequency, left=left, right=right))

    return priority_queue[0] # a lone sentinel leaf when no real symbol occurred


def serialize_tree(root: HuffmanNode) -> Iterator[Tuple[int, str]]:
    """
    Yield (symbol, path) for every leaf, left subtree before right.
    A root-only tree yields a single pair with an empty path.
    """
    stack = [(root, "")]
    while stack:
        node, path = stack.pop()
        if node.is_leaf:
            yield node.symbol, path
            continue
        # push right first so the left subtree is emitted first
        if node.right is not None:
            stack.append((node.right, path + "1"))
        if node.left is not None:
            stack.append((node.left, path + "0"))


def write_code_table(root: HuffmanNode, out: TextIO) -> int:
    count = 0
    for symbol, path in serialize_tree(root):
        out.write(f"{symbol}\n{path}\n")
        count += 1
    return count # number of leaves written


def deserialize_tree(pairs: Iterable[Tuple[int, str]]) -> HuffmanNode:
    """
    Rebuild a tree from (symbol, path) pairs.

    Nodes are grown as [left, right] lists while paths are walked, an int in a
    slot marks a labeled leaf. The finished structure is converted into
    HuffmanNode objects with frequency 0, since frequencies are not persisted.
    """
    root_symbol = None
    tree = [None, None]
    seen = set()

    for symbol, path in pairs:
        if not isinstance(symbol, int) or isinstance(symbol, bool) or symbol < 0:
            raise MalformedTreeData(f"invalid symbol {symbol!r}")
        if symbol in seen:
            raise MalformedTreeData(f"symbol {symbol} appears more than once")
        seen.add(symbol)
        for ch in path:
            if ch not in "01":
                raise MalformedTreeData(f"path {path!r} for symbol {symbol} contains {ch!r}")

        if path == "":
            if root_symbol is not None or tree != [None, None]:
                raise MalformedTreeData(f"empty path for symbol {symbol} but the root is already used")
            root_symbol = symbol
            continue
        if root_symbol is not None:
            raise MalformedTreeData(f"path {path!r} descends below the root leaf {root_symbol}")

        subtree = tree
        for depth, ch in enumerate(path[:-1]):
            branch = int(ch)
            child = subtree[branch]
            if child is None:
                child = subtree[branch] = [None, None]
            elif isinstance(child, int):
                raise MalformedTreeData(
                    f"path {path!r} for symbol {symbol} passes through leaf {child} at depth {depth + 1}")
            subtree = child

        branch = int(path[-1])
        if subtree[branch] is not None:
            raise MalformedTreeData(f"path {path!r} for symbol {symbol} is already taken")
        subtree[branch] = symbol

    if not seen:
        raise MalformedTreeData("code table is empty")
    if root_symbol is not None:
        return HuffmanNode(0, root_symbol)

    # depth comes from the input, so convert with an explicit stack
    root = HuffmanNode(0)
    stack = [(tree, root, "")]
    while stack:
        subtree, node, path = stack.pop()
        children = []
        for bit, child in zip("01", subtree):
            if child is None:
                raise MalformedTreeData(f"no symbol reachable at path {path + bit!r}")
            if isinstance(child, int):
                children.append(HuffmanNode(0, child))
            else:
                child_node = HuffmanNode(0)
                stack.append((child, child_node, path + bit))
                children.append(child_node)
        node.left, node.right = children

    return root


def read_code_table(lines: Iterable[str]) -> HuffmanNode:
    def records():
        it = iter(lines)
        for record, symbol_line in enumerate(it):
            number = 2 * record + 1 # line number of the symbol line
            symbol_text = symbol_line.rstrip("\r\n")
            try:
                path_line = next(it)
            except StopIteration:
                raise MalformedTreeData(f"record at line {number} has a symbol but no path") from None
            if not (symbol_text.isascii() and symbol_text.isdigit()):
                raise MalformedTreeData(f"line {number}: expected a decimal symbol, got {symbol_text!r}")
            yield int(symbol_text), path_line.rstrip("\r\n")

    return deserialize_tree(records())


def generate_huffman_codes(root: HuffmanNode) -> Dict[int, str]:
    return dict(serialize_tree(root)) # symbol -> path


def huffman_encode(symbols: Iterable[int], code_map: Dict[int, str], eof: int) -> str:
    return "".join(code_map[s] for s in symbols) + code_map[eof] # sentinel closes the stream


def pack_bits(bitstring: str) -> bytes:
    writer = BitWriter()
    writer.write_bits(bitstring)
    return writer.getvalue()


def huffman_decode(root: HuffmanNode, reader, eof: int) -> Iterator[int]:
    """
    Yield symbols by walking the tree with bits from reader.read_bit().

    Stops at the eof leaf or when the reader runs dry, even mid-symbol.
    A root that is already a leaf has no real symbols, so nothing is read.
    """
    if root.is_leaf:
        return

    current = root
    while True:
        bit = reader.read_bit()
        if bit == END_OF_STREAM:
            return

        current = current.left if bit == 0 else current.right
        if current.is_leaf:
            if current.symbol == eof:
                return
            yield current.symbol
            current = root


def decode_bytes(root: HuffmanNode, data: bytes, eof: int) -> bytes:
    return bytes(huffman_decode(root, BitReader(data), eof))


def code_lengths(root: HuffmanNode) -> Dict[int, int]:
    return {symbol: len(path) for symbol, path in serialize_tree(root)}
