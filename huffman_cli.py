"""
Interactive command loop over HuffmanCodingSystem

How to run:
  huffman-cli
  huffman-cli --load 01f001c1d001a1b1e
  huffman-cli --build-text "abracadabra" --no-banner < commands.txt
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional, TextIO, Tuple

import huffman as huff
from huffman_system import HuffmanCodingSystem


HELP_TEXT = (
    "\nAvailable commands:\n"
    "encode <text>          - Encode text\n"
    "decode <binary> [n]    - Decode binary string (n = symbol count, - = no bits)\n"
    "build_text <text>      - Build from text\n"
    "build_freq             - Build from manual frequencies\n"
    "import_codes           - Import symbol-code pairs\n"
    "show_codes             - Display current codes\n"
    "save                   - Save current coding system\n"
    "load <data>            - Load coding system\n"
    "help                   - Show this help\n"
    "exit                   - Exit program\n"
)

SPACE_NAME = "SPACE"
EMPTY_BITS = "-"


def display_symbol(symbol: str) -> str:
    return SPACE_NAME if symbol == " " else symbol

def parse_symbol(token: str) -> Optional[str]:
    if token == SPACE_NAME:
        return " "
    return token if len(token) == 1 else None


def format_code_table(rows: List[Tuple[str, str]]) -> str:
    lines = [
        "",
        "Huffman Code Table:",
        "┌─────────┬───────────────┐",
        "│ Symbol  │ Code          │",
        "├─────────┼───────────────┤",
    ]
    for symbol, code in rows:
        lines.append(f"│ {display_symbol(symbol):>7} │ {code:>13} │")
    lines.append("└─────────┴───────────────┘")
    return "\n".join(lines)


class HuffmanCLI:
    def __init__(self, system: Optional[HuffmanCodingSystem] = None,
                 stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None,
                 prompt: str = "> "):
        self.system = system if system is not None else HuffmanCodingSystem()
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.prompt = prompt

    def _print(self, *args, **kwargs) -> None:
        print(*args, file=self.stdout, **kwargs)

    def _read_line(self) -> Optional[str]:
        line = self.stdin.readline()
        if not line:
            return None
        return line.rstrip("\r\n")

    def _read_pairs(self, header: str) -> List[Tuple[str, str]]:
        """Collect 'symbol value' lines until 'done' or end of input; bad lines are skipped"""
        self._print(header)
        pairs: List[Tuple[str, str]] = []
        while True:
            line = self._read_line()
            if line is None or line.strip() == "done":
                break
            parts = line.split()
            if len(parts) != 2:
                continue
            symbol = parse_symbol(parts[0])
            if symbol is None:
                continue
            pairs.append((symbol, parts[1]))
        return pairs

    def show_codes(self) -> None:
        self._print(format_code_table(self.system.code_table()))

    def process_command(self, command: str) -> bool:
        """Run one command line. Returns False when the loop should stop"""
        parts = command.split(None, 1)
        if not parts:
            return True
        cmd = parts[0]
        arg = parts[1] if len(parts) > 1 else ""

        if cmd == "exit":
            return False
        try:
            self._dispatch(cmd, arg)
        except (huff.HuffmanError, ValueError) as e:
            self._print(f"Error: {e}")
        return True

    def _dispatch(self, cmd: str, arg: str) -> None:
        if cmd == "encode":
            self._print(f"Encoded: {self.system.encode(arg)}")
        elif cmd == "decode":
            tokens = arg.split()
            bits = tokens[0] if tokens and tokens[0] != EMPTY_BITS else ""
            length = int(tokens[1]) if len(tokens) > 1 else None
            self._print(f"Decoded: {self.system.decode(bits, length)}")
        elif cmd == "build_text":
            self.system.build_from_text(arg)
            self._print("Huffman tree built from text")
            self.show_codes()
        elif cmd == "build_freq":
            raw = self._read_pairs("Enter symbol-frequency pairs (symbol frequency), 'done' to finish:")
            pairs = []
            for symbol, value in raw:
                try:
                    pairs.append((symbol, int(value)))
                except ValueError:
                    continue
            self.system.build_from_frequencies(pairs)
            self.show_codes()
        elif cmd == "import_codes":
            pairs = self._read_pairs("Enter symbol-code pairs (symbol code), 'done' to finish:")
            self.system.load_codes(pairs)
            self._print("Codes imported")
            self.show_codes()
        elif cmd == "show_codes":
            self.show_codes()
        elif cmd == "save":
            self._print(f"Saved system: {self.system.save()}")
        elif cmd == "load":
            self.system.load(arg)
            self._print("System loaded")
            self.show_codes()
        elif cmd == "help":
            self._print(HELP_TEXT)
        else:
            self._print("Unknown command. Type 'help' for available commands.")

    def run(self, banner: bool = True) -> None:
        if banner:
            self._print("Huffman Coding System (type 'help' for commands)")
        while True:
            self._print(self.prompt, end="", flush=True)
            command = self._read_line()
            if command is None:
                self._print()
                break
            if not self.process_command(command):
                break


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Interactive Huffman coding system")
    ap.add_argument("--load", type=str, default=None, help="Serialized tree to restore before the loop starts")
    ap.add_argument("--build-text", type=str, default=None, help="Build the initial tree from this text")
    ap.add_argument("--prompt", type=str, default="> ", help="Prompt shown before each command")
    ap.add_argument("--no-banner", action="store_true", help="Do not print the welcome line")
    args = ap.parse_args(argv)

    system = HuffmanCodingSystem()
    try:
        if args.load is not None:
            system.load(args.load)
        if args.build_text is not None:
            system.build_from_text(args.build_text)
    except huff.HuffmanError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    HuffmanCLI(system, prompt=args.prompt).run(banner=not args.no_banner)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
