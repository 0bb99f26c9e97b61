import json
from pathlib import Path

import pytest

from segacrp2.config import VARIANT_ENV_VAR
from segacrp2.engine import ROM_SIZE
from segacrp2.main import build_parser, main
from segacrp2.rom import decrypt_image


@pytest.fixture(autouse=True)
def _clear_variant_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(VARIANT_ENV_VAR, raising=False)


def test_variants_lists_every_part(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["variants"]) == 0
    out = capsys.readouterr().out
    lines = out.strip().splitlines()
    assert len(lines) == 11
    assert any(line.startswith("317-5000") and "Fantasy Zone" in line for line in lines)
    assert any(line.startswith("317-0007") and "shift=3" in line for line in lines)


def test_dump_prints_sixty_four_rows(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["dump", "317-0004"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "# Sega 317-0004"
    assert lines[1].startswith("row")
    rows = lines[2:]
    assert len(rows) == 64
    assert rows[0].split()[:4] == ["00", "7", "(2,6,4,0)", "0x04"]


def test_dump_unknown_variant_returns_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["dump", "315-0000"]) == 2


def test_decrypt_writes_outputs(tmp_path: Path, rom_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out_dir = tmp_path / "out"
    report_path = tmp_path / "report.json"
    exit_code = main(
        [
            "decrypt",
            str(rom_file),
            "--variant",
            "315-5177",
            "--out",
            str(out_dir),
            "--report",
            str(report_path),
        ]
    )
    assert exit_code == 0

    expected = decrypt_image(rom_file.read_bytes(), "315-5177")
    assert (out_dir / "epr-test.opcodes.bin").read_bytes() == expected.opcodes
    assert (out_dir / "epr-test.data.bin").read_bytes() == expected.data
    manifest = json.loads((out_dir / "epr-test.manifest.json").read_text(encoding="utf-8"))
    assert manifest["part_number"] == "315-5177"

    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["variant"] == "SEGA_315_5177"
    assert report["decoded_length"] == ROM_SIZE
    assert report["warnings"] == []

    out = capsys.readouterr().out
    assert "Key variant: SEGA_315_5177 (315-5177)" in out


def test_decrypt_split_dumps_with_padding_and_stem(tmp_path: Path, random_rom_bytes: bytes) -> None:
    low = tmp_path / "ic1.bin"
    high = tmp_path / "ic2.bin"
    low.write_bytes(random_rom_bytes[:0x4000])
    high.write_bytes(random_rom_bytes[0x4000:0x6000])
    out_dir = tmp_path / "out"

    exit_code = main(
        [
            "decrypt",
            str(low),
            str(high),
            "--variant",
            "317-0006",
            "--pad-to",
            "0x8000",
            "--stem",
            "gardia",
            "-o",
            str(out_dir),
        ]
    )
    assert exit_code == 0

    padded = random_rom_bytes[:0x6000] + b"\xff" * 0x2000
    expected = decrypt_image(padded, "317-0006")
    assert (out_dir / "gardia.opcodes.bin").read_bytes() == expected.opcodes


def test_decrypt_variant_from_environment(
    tmp_path: Path, rom_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv(VARIANT_ENV_VAR, "315-5136")
    out_dir = tmp_path / "env-out"
    assert main(["decrypt", str(rom_file), "--out", str(out_dir)]) == 0
    manifest = json.loads((out_dir / "epr-test.manifest.json").read_text(encoding="utf-8"))
    assert manifest["part_number"] == "315-5136"


def test_decrypt_from_config_file(tmp_path: Path, rom_file: Path) -> None:
    out_dir = tmp_path / "cfg-out"
    config = tmp_path / "run.yaml"
    config.write_text(
        f"variant: 315-5179\ninputs:\n  - {rom_file.as_posix()}\noutput_dir: {out_dir.as_posix()}\nstem: robowres\n",
        encoding="utf-8",
    )
    assert main(["decrypt", "--config", str(config)]) == 0
    assert (out_dir / "robowres.data.bin").is_file()


def test_decrypt_writes_trace(tmp_path: Path, rom_file: Path) -> None:
    trace = tmp_path / "trace.log"
    assert (
        main(
            [
                "decrypt",
                str(rom_file),
                "--variant",
                "317-0005",
                "--out",
                str(tmp_path / "out"),
                "--trace",
                str(trace),
            ]
        )
        == 0
    )
    lines = trace.read_text(encoding="utf-8").splitlines()
    assert len(lines) == ROM_SIZE
    assert lines[0].startswith("0x0000 row=00 src=")
    assert lines[-1].startswith("0x7fff row=63 ")


def test_decrypt_oversize_image_warns(tmp_path: Path, random_rom_bytes: bytes) -> None:
    path = tmp_path / "big.bin"
    path.write_bytes(random_rom_bytes + b"\x00" * 0x4000)
    report_path = tmp_path / "report.json"
    assert (
        main(
            [
                "decrypt",
                str(path),
                "--variant",
                "315-5162",
                "--out",
                str(tmp_path / "out"),
                "--report",
                str(report_path),
            ]
        )
        == 0
    )
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["image_length"] == ROM_SIZE + 0x4000
    assert len(report["warnings"]) == 1


@pytest.mark.parametrize(
    "argv",
    [
        ["decrypt", "missing.bin", "--variant", "315-5177"],
        ["decrypt", "x.bin"],
        ["decrypt", "--variant", "315-5177"],
        ["decrypt", "x.bin", "--variant", "999-9999"],
    ],
)
def test_decrypt_errors_return_two(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, argv) -> None:
    monkeypatch.chdir(tmp_path)
    assert main(argv) == 2


def test_short_image_returns_two(tmp_path: Path) -> None:
    path = tmp_path / "short.bin"
    path.write_bytes(b"\x00" * 0x100)
    assert main(["decrypt", str(path), "--variant", "315-5177", "--out", str(tmp_path)]) == 2


def test_parser_requires_subcommand() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


@pytest.mark.parametrize("position", ["global", "subcommand"])
def test_decrypt_accepts_verbose_either_side(tmp_path: Path, rom_file: Path, position: str) -> None:
    args = ["decrypt", str(rom_file), "--variant", "315-5177", "-o", str(tmp_path / "out")]
    argv = ["--verbose", *args] if position == "global" else [*args, "--verbose"]
    parsed = build_parser().parse_args(argv)
    assert parsed.verbose is True

    assert main(argv) == 0
    assert (tmp_path / "out" / "epr-test.opcodes.bin").is_file()


def test_decrypt_verbose_defaults_off(rom_file: Path) -> None:
    parsed = build_parser().parse_args(["decrypt", str(rom_file), "--variant", "315-5177"])
    assert parsed.verbose is False
