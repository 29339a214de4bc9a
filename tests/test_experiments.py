import csv

import matplotlib
matplotlib.use("Agg")

import pytest

import experiments as exp


@pytest.mark.parametrize("name", sorted(exp.GENERATOR_REGISTRY))
def test_run_one_round_trips_every_generator(name):
    row = exp.run_one(exp.generate_dataset(name, 4096, seed=1))
    assert row.correctness_ok == 1
    assert row.file_size_bytes == 4096
    # no prefix code beats the entropy
    assert row.avg_code_bits >= row.entropy_bits - 1e-9


def test_run_one_empty_input():
    row = exp.run_one(b"")
    assert row.correctness_ok == 1
    assert row.unique_symbols == 0
    assert row.compressed_bytes == 0


def test_skewed_data_compresses():
    row = exp.run_one(exp.gen_repetitive(8192, dom_frac=0.99, seed=3))
    assert row.compression_ratio < 0.5


def test_generators_are_seeded():
    assert exp.gen_zipf_like(500, seed=9) == exp.gen_zipf_like(500, seed=9)
    assert exp.gen_english_like(500, seed=1) != exp.gen_english_like(500, seed=2)


def test_entropy_bits():
    assert exp.entropy_bits([0, 0]) == 0.0
    assert exp.entropy_bits([5, 5]) == pytest.approx(1.0)
    assert exp.entropy_bits([1, 1, 1, 1]) == pytest.approx(2.0)


def test_unknown_generator():
    with pytest.raises(ValueError):
        exp.generate_dataset("gaussian", 10, seed=0)


def test_main_writes_csv_and_charts(tmp_path):
    outdir = tmp_path / "results"
    rc = exp.main([
        "--outdir", str(outdir),
        "--runs", "2",
        "--exp1_size_kb", "1",
        "--exp1_generators", "zipf128,english_like",
        "--exp2_min_kb", "1",
        "--exp2_max_kb", "2",
        "--exp2_generators", "repetitive90",
    ])
    assert rc == 0

    with (outdir / "metrics.csv").open(newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 2 * 2 + 2 * 2
    assert all(r["correctness_ok"] == "1" for r in rows)

    with (outdir / "summary.csv").open(newline="") as f:
        summary = list(csv.DictReader(f))
    assert len(summary) == 4
    assert all(float(r["correctness_ok_rate"]) == 1.0 for r in summary)

    assert (outdir / "exp1_compression_ratio.png").exists()
    assert (outdir / "exp1_code_length_vs_entropy.png").exists()
    assert (outdir / "exp2_time_repetitive90.png").exists()
    assert (outdir / "exp2_ratio_repetitive90.png").exists()


def test_main_unknown_generator_exit_code(tmp_path, capsys):
    rc = exp.main(["--outdir", str(tmp_path), "--no_exp2", "--exp1_generators", "nope"])
    assert rc == 1
    assert "unknown generator" in capsys.readouterr().err
