import io

import pytest

import huffman_cli
from huffman_cli import HuffmanCLI, format_code_table
from huffman_system import HuffmanCodingSystem


def _run(commands, system=None):
    stdin = io.StringIO("".join(line + "\n" for line in commands))
    stdout = io.StringIO()
    cli = HuffmanCLI(system, stdin=stdin, stdout=stdout)
    cli.run()
    return cli, stdout.getvalue()


def test_banner_and_exit():
    _, out = _run(["exit"])
    assert out.startswith("Huffman Coding System (type 'help' for commands)")


def test_end_of_input_stops_loop():
    _, out = _run([])
    assert out.count("> ") == 1


def test_build_text_encode_decode():
    _, out = _run(["build_text abracadabra", "encode abracadabra", "decode 01101110100010101101110", "exit"])
    assert "Huffman tree built from text" in out
    assert "Encoded: 01101110100010101101110" in out
    assert "Decoded: abracadabra" in out


def test_build_freq_reads_pairs_until_done():
    cli, out = _run(["build_freq", "a 5", "b 9", "c 12", "d 13", "e 16", "f 45", "done", "save", "exit"])
    assert "Enter symbol-frequency pairs" in out
    assert "Saved system: 01f001c1d001a1b1e" in out
    assert cli.system.codes["f"] == "0"


def test_build_freq_skips_malformed_lines():
    cli, _ = _run(["build_freq", "a 1", "garbage", "bb 3", "c x", "SPACE 2", "done", "exit"])
    assert set(cli.system.codes) == {"a", " "}


def test_build_freq_with_no_pairs_reports_error():
    cli, out = _run(["build_freq", "done", "exit"])
    assert "Error: " in out
    assert not cli.system.has_tree


def test_import_codes_then_decode_reports_error():
    cli, out = _run(["import_codes", "x 0", "y 10", "z 11", "done", "encode zyx", "decode 11100", "exit"])
    assert "Codes imported" in out
    assert "Encoded: 11100" in out
    assert "Error: Codes were imported without a tree" in out
    assert not cli.system.has_tree


def test_unknown_symbol_reports_error_and_continues():
    _, out = _run(["build_text ab", "encode abc", "encode ba", "exit"])
    assert "Error: Symbol not in code table: 'c'" in out
    assert "Encoded: 10" in out


def test_save_and_load():
    _, out = _run(["load 01f001c1d001a1b1e", "encode face", "save", "exit"])
    assert "System loaded" in out
    assert "Encoded: 01100100111" in out
    assert "Saved system: 01f001c1d001a1b1e" in out


def test_load_malformed_reports_error():
    _, out = _run(["load 0", "exit"])
    assert "Error: Tree data truncated" in out


def test_decode_with_symbol_count_for_single_symbol_tree():
    _, out = _run(["build_text aaaa", "encode aaa", "decode - 3", "decode 0", "exit"])
    assert "Encoded: \n" in out
    assert "Decoded: aaa" in out
    assert "Error: Bit at position 0 has no branch to follow" in out


def test_decode_bad_count_reports_error():
    _, out = _run(["load 01a1b", "decode 0110 x", "decode 01 5", "exit"])
    assert out.count("Error: ") == 2


def test_unknown_command_and_help():
    _, out = _run(["frobnicate", "help", "exit"])
    assert "Unknown command. Type 'help' for available commands." in out
    assert "Available commands:" in out


def test_commands_after_exit_are_not_run():
    _, out = _run(["exit", "build_text ab"])
    assert "Huffman tree built" not in out


def test_code_table_shows_space_name():
    table = format_code_table([(" ", "0"), ("a", "10")])
    assert "│   SPACE │             0 │" in table
    assert "│       a │            10 │" in table


def test_main_with_preloaded_system(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("encode ab\nexit\n"))
    assert huffman_cli.main(["--load", "01a1b", "--no-banner", "--prompt", ""]) == 0
    out = capsys.readouterr().out
    assert "Huffman Coding System" not in out
    assert "Encoded: 01" in out


def test_main_rejects_bad_initial_data(capsys):
    assert huffman_cli.main(["--load", "0"]) == 2
    assert "Error: " in capsys.readouterr().err


def test_shared_system_instance():
    system = HuffmanCodingSystem()
    _run(["build_text hello", "exit"], system=system)
    assert system.has_tree
    assert set(system.codes) == set("helo")
