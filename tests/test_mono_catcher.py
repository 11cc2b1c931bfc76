import json

import pytest

sf = pytest.importorskip("soundfile")

from monocatcher.audio_engine import MonoCatcherConfig
from monocatcher.mono_catcher import build_cli, build_config, find_audio_files, main, split_selection
from monocatcher.system_utils import ConfigManager, apply_overrides


def test_split_selection():
    assert split_selection("/a/one.wav|/b/two.wav|") == ["/a/one.wav", "/b/two.wav"]
    assert split_selection("single.wav") == ["single.wav"]


def test_find_audio_files(tmp_path):
    (tmp_path / "sub").mkdir()
    for name in ("a.wav", "b.AIFF", "notes.txt", "sub/c.wav"):
        (tmp_path / name).write_bytes(b"")
    exts = MonoCatcherConfig().audio_extensions
    assert [p.name for p in find_audio_files(tmp_path, False, exts)] == ["a.wav", "b.AIFF"]
    assert [p.name for p in find_audio_files(tmp_path, True, exts)] == ["a.wav", "b.AIFF", "c.wav"]


def test_main_runs_batch(tmp_path, sample_set, capsys):
    out = tmp_path / "out"
    out.mkdir()
    report = tmp_path / "report.json"
    code = main([*sample_set, "--out_dir", str(out), "--no_progress", "--report", str(report)])

    assert code == 0
    printed = capsys.readouterr().out
    assert "1 fake stereo files converted to mono." in printed
    assert sf.info(str(out / "b_fake.wav")).channels == 1

    entries = json.loads(report.read_text(encoding="utf-8"))
    assert len(entries) == 1
    assert entries[0]["metrics"] == {"total": 3, "fake_stereo": 1, "failed": 0, "cancelled": False}
    assert [f["status"] for f in entries[0]["files"]] == ["Mono", "FakeStereo", "Stereo"]


def test_main_folder_scan_and_failure_exit_code(tmp_path, sample_set, capsys):
    src = tmp_path / "src"
    (src / "broken.wav").write_bytes(b"junk")
    out = tmp_path / "out"
    code = main(["--folder", str(src), "--out_dir", str(out), "--mkdir", "--no_progress", "--workers", "2"])

    assert code == 1
    printed = capsys.readouterr().out
    assert "Failed(decode_error)" in printed
    assert "Failed files:" in printed
    assert (out / "b_fake.wav").exists()


def test_main_dry_run_writes_nothing(tmp_path, sample_set):
    out = tmp_path / "out"
    out.mkdir()
    assert main(["--files", "|".join(sample_set), "--out_dir", str(out), "--dry_run", "--no_progress"]) == 0
    assert list(out.iterdir()) == []


def test_main_rejects_missing_out_dir(tmp_path, sample_set):
    assert main([*sample_set, "--out_dir", str(tmp_path / "nope"), "--no_progress"]) == 2


def test_main_without_inputs(tmp_path):
    assert main(["--out_dir", str(tmp_path), "--no_progress"]) == 2


def test_build_config_layers(tmp_path):
    cfg_file = tmp_path / "config.json"
    cfg_file.write_text(json.dumps({"block_size": 1024, "workers": 3, "colour": "blue"}), encoding="utf-8")
    args = build_cli().parse_args(["--out_dir", "x", "--config", str(cfg_file), "--preset", "Lossy Source"])
    config = build_config(args)
    assert config.epsilon == 0.001
    assert config.block_size == 1024
    assert config.workers == 3

    args = build_cli().parse_args(["--out_dir", "x", "--config", str(cfg_file), "--epsilon", "0.01", "--workers", "1"])
    config = build_config(args)
    assert config.epsilon == 0.01
    assert config.workers == 1


def test_build_config_rejects_bad_values(tmp_path):
    with pytest.raises(SystemExit):
        build_config(build_cli().parse_args(["--out_dir", "x", "--epsilon", "0"]))
    with pytest.raises(SystemExit):
        build_config(build_cli().parse_args(["--out_dir", "x", "--config", str(tmp_path / "missing.json")]))


def test_presets_and_overrides(tmp_path):
    manager = ConfigManager(presets_path=tmp_path / "presets.json")
    assert "Default" in manager.list_presets()
    manager.save_presets({"Loose": {"epsilon": 0.01}})
    assert manager.get_preset("Loose") == {"epsilon": 0.01}
    assert manager.get_preset("Unknown") == {"epsilon": 0.0001}

    config = MonoCatcherConfig()
    assert apply_overrides(config, {"epsilon": 0.5, "bogus": 1}) == ["bogus"]
    assert config.epsilon == 0.5


def test_presets_file_round_trip_through_cli(tmp_path, sample_set, capsys):
    presets = tmp_path / "presets.json"
    assert main(["--presets", str(presets), "--epsilon", "0.02", "--save_preset", "Tape Dub"]) == 0
    assert json.loads(presets.read_text(encoding="utf-8"))["Tape Dub"] == {"epsilon": 0.02}

    capsys.readouterr()
    assert main(["--presets", str(presets), "--list_presets"]) == 0
    listed = capsys.readouterr().out.split()
    assert "Default" in listed
    assert "Tape" in listed and "Dub" in listed

    args = build_cli().parse_args(["--out_dir", "x", "--presets", str(presets), "--preset", "Tape Dub"])
    assert build_config(args).epsilon == 0.02


def test_save_preset_requires_presets_file(tmp_path):
    assert main(["--save_preset", "Loose"]) == 2


def test_main_without_out_dir(sample_set):
    assert main([*sample_set, "--no_progress"]) == 2
