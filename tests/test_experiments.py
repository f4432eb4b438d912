import csv

import matplotlib

matplotlib.use("Agg")

import pytest

import experiments as exp


def test_generators_are_seeded_and_sized():
    for name in exp.GENERATOR_REGISTRY:
        dataset_name, text = exp.generate_dataset(name, 300, seed=5)
        assert dataset_name == name
        assert len(text) == 300
        assert exp.generate_dataset(name, 300, seed=5)[1] == text


def test_unknown_generator_raises():
    with pytest.raises(ValueError):
        exp.generate_dataset("nope", 10, seed=0)


def test_shannon_entropy():
    assert exp.shannon_entropy({"a": 1, "b": 1}) == pytest.approx(1.0)
    assert exp.shannon_entropy({"a": 4}) == pytest.approx(0.0)


@pytest.mark.parametrize("pipeline", exp.PIPELINES)
def test_run_one_is_correct_and_near_entropy(pipeline):
    _, text = exp.generate_dataset("english_like", 4000, seed=1)
    row = exp.run_one(text, pipeline)
    assert row.correctness_ok == 1
    assert row.pipeline == pipeline
    assert row.text_length == 4000
    assert row.encoded_bits == pytest.approx(row.avg_code_length * 4000)
    # Huffman codes are within one bit of the entropy
    assert row.entropy_bits <= row.avg_code_length < row.entropy_bits + 1
    assert 0.0 < row.efficiency <= 1.0
    assert row.serialized_tree_chars == 3 * row.unique_symbols - 1


def test_run_one_single_symbol_text():
    row = exp.run_one("AAAA", "reloaded")
    assert row.correctness_ok == 1
    assert row.encoded_bits == 0
    assert row.efficiency == 1.0


def test_run_one_rejects_unknown_pipeline():
    with pytest.raises(ValueError):
        exp.run_one("ab", "bytes")


def test_main_writes_reports(tmp_path):
    outdir = tmp_path / "results"
    code = exp.main([
        "--outdir", str(outdir), "--runs", "2",
        "--exp1_size_kb", "1", "--exp1_generators", "zipf16,repetitive99",
        "--exp2_min_kb", "1", "--exp2_max_kb", "2", "--exp2_generators", "uniform26",
    ])
    assert code == 0

    with (outdir / "metrics.csv").open(encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    # exp1: 2 generators * 2 runs * 2 pipelines, exp2: 1 generator * 2 sizes * 2 runs * 2 pipelines
    assert len(rows) == 8 + 8
    assert all(r["correctness_ok"] == "1" for r in rows)

    with (outdir / "summary.csv").open(encoding="utf-8") as f:
        summary = list(csv.DictReader(f))
    assert len(summary) == 4 + 4
    assert all(float(r["correctness_ok_rate"]) == 1.0 for r in summary)

    assert (outdir / "exp1_code_length.png").exists()
    assert (outdir / "exp1_efficiency.png").exists()
    assert (outdir / "exp2_encode_ms_uniform26.png").exists()
