from __future__ import annotations

import argparse
import asyncio
import csv
from pathlib import Path

from coupon_drop.claims.admin import CodePoolAdmin
from coupon_drop.claims.batch import generate_raw_codes, load_codes_from_file
from coupon_drop.db.session import SessionLocal


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import or generate codes for the coupon pool")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--import-file", type=Path, help="CSV with a 'code' column or one code per line")
    source.add_argument("--count", type=int, help="number of random codes to generate")
    parser.add_argument("--prefix", default="")
    parser.add_argument("--token-length", type=int, default=8)
    parser.add_argument("--output-csv", type=Path)
    parser.add_argument("--dry-run", action="store_true")
    return parser.parse_args(argv)


def _build_batch(args: argparse.Namespace) -> list[str]:
    if args.import_file is not None:
        codes = load_codes_from_file(args.import_file)
    else:
        prefix = args.prefix.strip().upper()
        if prefix and not prefix.endswith("-"):
            prefix = f"{prefix}-"
        codes = generate_raw_codes(count=args.count, token_length=args.token_length, prefix=prefix)

    if not codes:
        raise ValueError("no codes to process")
    return codes


def _write_output(path: Path, *, added: list[str], skipped: list[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as file:
        writer = csv.writer(file)
        writer.writerow(["code", "result"])
        writer.writerows([code, "added"] for code in added)
        writer.writerows([code, "skipped"] for code in skipped)


async def _run(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    codes = _build_batch(args)

    if args.dry_run:
        added, skipped = codes, []
    else:
        result = await CodePoolAdmin(SessionLocal).add_codes(codes)
        added, skipped = result.added, result.skipped

    if args.output_csv is not None:
        _write_output(args.output_csv, added=added, skipped=skipped)
    print(  # noqa: T201
        f"processed={len(codes)} added={0 if args.dry_run else len(added)} skipped={len(skipped)}"
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    return asyncio.run(_run(argv))


if __name__ == "__main__":
    raise SystemExit(main())
