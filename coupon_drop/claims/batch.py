from __future__ import annotations

import csv
import secrets
from pathlib import Path

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def generate_raw_codes(
    *,
    count: int,
    token_length: int = 8,
    prefix: str = "",
    existing_codes: set[str] | None = None,
) -> list[str]:
    if count <= 0:
        raise ValueError("count must be positive")
    if token_length <= 0:
        raise ValueError("token_length must be positive")

    taken = existing_codes if existing_codes is not None else set()
    codes: list[str] = []
    max_attempts = max(100, count * 50)
    for _ in range(max_attempts):
        if len(codes) == count:
            break
        token = "".join(secrets.choice(CODE_ALPHABET) for _ in range(token_length))
        candidate = f"{prefix}{token}"
        if candidate in taken:
            continue
        taken.add(candidate)
        codes.append(candidate)

    if len(codes) < count:
        raise RuntimeError("unable to generate unique codes")
    return codes


def load_codes_from_file(path: Path) -> list[str]:
    """Read codes from a CSV with a ``code`` column, or one code per line."""
    with path.open("r", encoding="utf-8", newline="") as file:
        reader = csv.DictReader(file)
        if "code" in (reader.fieldnames or []):
            return [row["code"].strip() for row in reader if (row.get("code") or "").strip()]

    with path.open("r", encoding="utf-8") as file:
        return [line.strip() for line in file if line.strip()]
