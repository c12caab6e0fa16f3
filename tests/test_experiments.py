import csv

import pytest

import experiments as exp


def _read(path):
    with path.open(newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def test_generators_are_seeded():
    for name in exp.GENERATOR_REGISTRY:
        assert exp.generate_dataset(name, 500, 11) == exp.generate_dataset(name, 500, 11)


def test_unknown_generator_falls_back():
    name, data = exp.generate_dataset("nope", 100, 1)
    assert name == "nope_fallback_uniform256"
    assert len(data) == 100
    assert all(0 <= s < 256 for s in data)


def test_entropy_of_uniform_histogram():
    assert exp.shannon_entropy({0: 5, 1: 5, 2: 5, 3: 5}) == pytest.approx(2.0)
    assert exp.shannon_entropy({0: 9}) == 0.0


@pytest.mark.parametrize("pipeline", ["heap", "scan"])
def test_run_one_roundtrips_within_one_bit_of_entropy(pipeline):
    _, data = exp.generate_dataset("zipf64", 4000, 5)
    row = exp.run_one(data, pipeline)
    assert row.correctness_ok == 1
    assert row.input_symbols == 4000
    assert row.encoded_bits == round(row.bits_per_symbol * 4000)
    assert 0.0 <= row.redundancy_bits < 1.0


def test_run_one_pipelines_produce_same_length():
    _, data = exp.generate_dataset("english_like", 3000, 2)
    assert exp.run_one(data, "heap").encoded_bits == exp.run_one(data, "scan").encoded_bits


def test_run_one_rejects_unknown_pipeline():
    with pytest.raises(ValueError):
        exp.run_one([1, 2, 3], "arithmetic")


def test_csv_and_summary(tmp_path):
    rows = []
    for run_id in (1, 2):
        for pipeline in exp.PIPELINES:
            row = exp.run_one([1, 1, 2, 3], pipeline)
            row.exp_name = "unit"
            row.dataset_name = "tiny"
            row.run_id = run_id
            rows.append(row)

    exp.write_csv(tmp_path / "metrics.csv", rows)
    exp.group_summary(rows, tmp_path / "summary.csv")

    metrics = _read(tmp_path / "metrics.csv")
    assert len(metrics) == 4
    assert metrics[0]["encoded_bits"] == "6"

    summary = _read(tmp_path / "summary.csv")
    assert [r["pipeline"] for r in summary] == ["heap", "scan"]
    assert all(r["n_runs"] == "2" for r in summary)
    assert float(summary[0]["bits_per_symbol_mean"]) == pytest.approx(1.5)
    assert float(summary[0]["correctness_ok_rate"]) == 1.0


def test_demo_prints_roundtrip(capsys):
    assert exp.main(["--demo"]) == 0
    out = capsys.readouterr().out
    assert "text: hello, wired world" in out
    assert "bits: 59" in out
    assert out.startswith("tree: (*:18 ")


def test_main_reads_sys_argv_when_none_given(monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", ["experiments.py", "--demo", "abc"])
    assert exp.main() == 0
    assert "text: abc" in capsys.readouterr().out


def test_demo_empty_text(capsys):
    assert exp.main(["--demo", ""]) == 1
    assert "empty" in capsys.readouterr().out


def test_main_small_run_writes_outputs(tmp_path):
    code = exp.main([
        "--outdir", str(tmp_path),
        "--runs", "1",
        "--exp1_size_kb", "1",
        "--exp1_generators", "zipf64,repetitive90",
        "--exp2_min_symbols", "4",
        "--exp2_max_symbols", "16",
        "--exp3_min_kb", "1",
        "--exp3_max_kb", "2",
        "--exp3_generators", "uniform128",
    ])
    assert code == 0

    metrics = _read(tmp_path / "metrics.csv")
    assert {r["exp_name"] for r in metrics} == {"exp1_distribution", "exp2_alphabet_scaling", "exp3_size_scaling"}
    assert all(r["correctness_ok"] == "1" for r in metrics)
    assert (tmp_path / "summary.csv").exists()
    for chart in ("exp1_bits_per_symbol.png", "exp1_build_time.png", "exp2_build_time.png",
                  "exp3_codec_time_uniform128.png"):
        assert (tmp_path / chart).exists()
