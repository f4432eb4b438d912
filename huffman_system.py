from typing import Dict, Iterable, List, Optional, Tuple

import huffman as huff


class HuffmanCodingSystem:
    """
    Holds the active Huffman tree and the code book derived from it

    Every build/load computes the new tree and codes before touching the
    instance, so a failed operation leaves the previous system in place.
    Not thread safe: callers must serialize builds/loads against encode/decode
    """

    def __init__(self):
        self.tree: Optional[huff.HuffmanNode] = None
        self._codes: Dict[str, str] = {}
        self._reverse_codes: Dict[str, str] = {}

    @property
    def has_tree(self) -> bool:
        return self.tree is not None

    @property
    def codes(self) -> Dict[str, str]:
        return dict(self._codes)

    @property
    def reverse_codes(self) -> Dict[str, str]:
        return dict(self._reverse_codes)

    def _install_tree(self, root: Optional[huff.HuffmanNode]) -> None:
        codes, reverse_codes = huff.generate_huffman_codes(root)
        self.tree = root
        self._codes = codes
        self._reverse_codes = reverse_codes

    # Building

    def build_from_text(self, text: str) -> None:
        if not text:
            raise huff.EmptyInputError("Cannot build a Huffman tree from empty text")
        self._install_tree(huff.build_huffman_tree(huff.freq_table(text)))

    def build_from_frequencies(self, pairs: Iterable[Tuple[str, int]]) -> None:
        ft = huff.frequencies_from_pairs(pairs)
        self._install_tree(huff.build_huffman_tree(ft))

    def load_codes(self, pairs: Iterable[Tuple[str, str]]) -> None:
        """
        Use a symbol -> code table directly, without a tree
        Encoding works afterwards, decoding raises DecodePreconditionError
        """
        codes: Dict[str, str] = {}
        reverse_codes: Dict[str, str] = {}
        for symbol, code in pairs:
            huff.check_symbol(symbol, huff.MalformedCodeTableError)
            if not isinstance(code, str) or not code or set(code) - {'0', '1'}:
                raise huff.MalformedCodeTableError(f"Code for {symbol!r} must be a non-empty string of 0/1, got {code!r}")
            # a re-listed symbol replaces its earlier code
            if symbol in codes:
                del reverse_codes[codes[symbol]]
            if code in reverse_codes:
                raise huff.MalformedCodeTableError(f"Code {code} is assigned to both {reverse_codes[code]!r} and {symbol!r}")
            codes[symbol] = code
            reverse_codes[code] = symbol

        self.tree = None
        self._codes = codes
        self._reverse_codes = reverse_codes

    # Coding

    def encode(self, text: str) -> str:
        return huff.huffman_encode(text, self._codes)

    def decode(self, bits: str, length: Optional[int] = None) -> str:
        if self.tree is None:
            if self._codes:
                raise huff.DecodePreconditionError("Codes were imported without a tree, cannot decode")
            raise huff.DecodePreconditionError("No Huffman tree loaded, cannot decode")
        return huff.huffman_decode(bits, self.tree, length)

    # Persistence

    def save(self) -> str:
        return huff.serialize_tree(self.tree)

    def load(self, data: str) -> None:
        self._install_tree(huff.deserialize_tree(data))

    # Read-only views

    def code_table(self) -> List[Tuple[str, str]]:
        return sorted(self._codes.items())

    def average_code_length(self, frequencies: Dict[str, int]) -> float:
        missing = [s for s in frequencies if s not in self._codes]
        if missing:
            raise huff.UnknownSymbolError(missing[0])
        return huff.average_code_length(self._codes, frequencies)
