"""Command line interface for decrypting 315-51xx / 317-000x program ROMs."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .config import VARIANT_ENV_VAR, build_config
from .engine import ROM_SIZE, last_decode_trace
from .exceptions import DecryptionError
from .io import load_rom_image, write_outputs
from .keys import KeyVariant, resolve_variant
from .logging_config import configure_logging, write_trace
from .report import DecryptReport
from .rom import decrypt_image
from .utils import write_json

LOGGER = logging.getLogger(__name__)


def _cmd_decrypt(args: argparse.Namespace) -> int:
    config = build_config(args)
    if config.verbose and not args.verbose:
        configure_logging(True, args.log_file)

    image = load_rom_image(config.inputs, size=config.pad_to)
    tracing = config.trace_file is not None
    result = decrypt_image(image, config.variant, trace=tracing)
    record = write_outputs(
        result,
        config.output_dir,
        stem=config.output_stem,
        inputs=config.inputs,
    )

    report = DecryptReport(
        variant=config.variant.name,
        part_number=config.variant.part_number,
        shift=config.variant.shift,
        inputs=[str(path) for path in config.inputs],
        image_length=len(image),
        decoded_length=result.summary.addresses,
        changed_opcode_bytes=result.summary.changed_opcode_bytes,
        changed_data_bytes=result.summary.changed_data_bytes,
        rows_used=result.summary.rows_used,
        outputs=record.as_dict(),
    )
    if len(image) > ROM_SIZE:
        report.warnings.append(
            f"0x{len(image) - ROM_SIZE:x} bytes past 0x{ROM_SIZE - 1:04x} copied through unencrypted"
        )

    if config.trace_file is not None:
        lines = write_trace(last_decode_trace(), config.trace_file)
        report.outputs["trace"] = str(config.trace_file)
        LOGGER.info("wrote %d trace lines to %s", lines, config.trace_file)

    if args.report:
        write_json(args.report, report.to_json(), sort_keys=True)
    print(report.to_text())
    return 0


def _cmd_variants(args: argparse.Namespace) -> int:
    for variant in KeyVariant:
        info = variant.info
        shift = "-" if variant.shift is None else str(variant.shift)
        print(f"{variant.part_number}  {variant.device:<14}  shift={shift:<2}  {', '.join(info.games)}")
    return 0


def _cmd_dump(args: argparse.Namespace) -> int:
    variant = resolve_variant(args.variant)
    table = variant.key_table
    print(f"# {variant.info.description}")
    print("row  op_sel  op_perm    op_xor  data_sel  data_perm  data_xor")
    for entry in table.rows():
        op_perm = ",".join(str(bit) for bit in entry.opcode_permutation)
        data_perm = ",".join(str(bit) for bit in entry.data_permutation)
        print(
            f"{entry.row:02d}   {entry.opcode_selector:6d}  ({op_perm})  0x{entry.opcode_xor:02x}  "
            f"{entry.data_selector:8d}  ({data_perm})  0x{entry.data_xor:02x}"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="segacrp2",
        description="Decrypt program ROMs protected by Sega 315-51xx / 317-000x encrypted CPUs",
    )
    parser.add_argument("--verbose", action="store_true", help="enable verbose colourised logging")
    parser.add_argument("--log-file", type=Path, help="also write the log to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    decrypt = sub.add_parser("decrypt", help="decrypt a ROM image into opcode and data images")
    decrypt.add_argument("inputs", nargs="*", type=Path, help="ROM chip dumps, in address order")
    decrypt.add_argument(
        "--variant",
        help=f"encrypted CPU part number, e.g. 315-5177 (default: ${VARIANT_ENV_VAR})",
    )
    decrypt.add_argument("-o", "--out", "--output-dir", dest="output_dir", type=Path, help="output directory")
    decrypt.add_argument("--stem", help="base name for output files (default: first input's name)")
    decrypt.add_argument("--pad-to", dest="pad_to", help="pad the image with 0xff to this size (e.g. 0x8000)")
    decrypt.add_argument("--config", type=Path, help="YAML or JSON file with default options")
    decrypt.add_argument("--trace", type=Path, help="write a per-address decode trace to this file")
    decrypt.add_argument("--report", type=Path, help="write the run report as JSON to this file")
    # left unset when absent so a top-level --verbose survives the subparser
    decrypt.add_argument(
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS,
        help="enable verbose colourised logging",
    )
    decrypt.set_defaults(handler=_cmd_decrypt)

    variants = sub.add_parser("variants", help="list the catalogued encrypted CPU parts")
    variants.set_defaults(handler=_cmd_variants)

    dump = sub.add_parser("dump", help="print the per-row key table of one part")
    dump.add_argument("variant", help="part number, e.g. 317-0005")
    dump.set_defaults(handler=_cmd_dump)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(args.verbose, args.log_file)

    try:
        return args.handler(args)
    except DecryptionError as exc:
        LOGGER.error("%s", exc)
        return 2


if __name__ == "__main__":  # pragma: no cover - CLI wrapper
    raise SystemExit(main())
