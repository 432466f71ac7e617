"""
Import student reference data from CSV into the database.

Expected columns: first_name, middle_name, last_name, gender, giby_gubaye_id,
batch, university, college, department, phone, email. Only first_name,
last_name and gender are required.

Usage:
    python -m scripts.import_students students.csv
"""

import argparse
import asyncio
import csv
import sys
from collections.abc import Iterable

from pydantic import ValidationError
from sqlalchemy import select

from gubaye.core.database import get_db
from gubaye.core.models import Student
from gubaye.core.schemas import StudentCreate

OPTIONAL_COLUMNS = (
    "middle_name",
    "giby_gubaye_id",
    "batch",
    "university",
    "college",
    "department",
    "phone",
    "email",
)


def row_to_student(row: dict[str, str]) -> StudentCreate:
    """Validate one CSV row; blank optional cells become None."""
    data: dict[str, str | None] = {
        "first_name": (row.get("first_name") or "").strip(),
        "last_name": (row.get("last_name") or "").strip(),
        "gender": (row.get("gender") or "").strip().lower(),
    }
    for column in OPTIONAL_COLUMNS:
        data[column] = (row.get(column) or "").strip() or None
    return StudentCreate(**data)


def parse_rows(rows: Iterable[dict[str, str]]) -> tuple[list[StudentCreate], list[str]]:
    """Split rows into valid students and human-readable errors (by line number)."""
    students, errors = [], []
    for line, row in enumerate(rows, start=2):
        try:
            students.append(row_to_student(row))
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first["loc"])
            errors.append(f"Line {line}: {field}: {first['msg']}")
    return students, errors


async def import_students(csv_file: str) -> int:
    """Import students from CSV file into database.

    Args:
        csv_file: Path to CSV file

    Returns:
        Number of students imported
    """
    with open(csv_file, encoding="utf-8") as f:
        students, errors = parse_rows(csv.DictReader(f))

    for error in errors:
        print(f"Skipping invalid row: {error}")

    count = 0
    async for db in get_db():
        for data in students:
            if data.giby_gubaye_id:
                existing = await db.execute(
                    select(Student).where(Student.giby_gubaye_id == data.giby_gubaye_id)
                )
                if existing.scalar_one_or_none():
                    print(f"Skipping duplicate: {data.first_name} (ID: {data.giby_gubaye_id})")
                    continue

            db.add(Student(**data.model_dump(), is_active=True, number_of_jobs=0))
            count += 1

            if count % 50 == 0:
                print(f"Imported {count} students...")
                await db.commit()

        await db.commit()

    print(f"\nImported {count} students ({len(errors)} rows skipped as invalid)")
    return count


async def main():
    parser = argparse.ArgumentParser(description="Import students CSV into database")
    parser.add_argument("csv_file", help="Path to students CSV file")
    args = parser.parse_args()

    try:
        count = await import_students(args.csv_file)
        sys.exit(0 if count > 0 else 1)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
