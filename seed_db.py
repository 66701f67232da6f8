import argparse
import asyncio
import json
import os
import sys

# Ensure app directory is in path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from app.core.errors import ConflictWarning, ValidationError
from app.models.records import StudentRecord, SubjectDraft
from app.services.record_store import MongoRecordStore
from app.services.registry import RecordsRegistry


async def seed(path: str, confirm: bool) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    store = MongoRecordStore()
    registry = RecordsRegistry(store)

    students = 0
    for raw in data.get("students", []):
        await store.add_student(StudentRecord(**raw))
        students += 1

    created, skipped = 0, []
    for raw in data.get("subjects", []):
        draft = SubjectDraft(**raw)
        try:
            await registry.create_subject(draft, confirm=confirm)
            created += 1
        except (ConflictWarning, ValidationError) as e:
            skipped.append(f"{draft.name}: {e}")

    return {"students": students, "subjects": created, "skipped": skipped}


def main():
    parser = argparse.ArgumentParser(description="Load subjects and students from a JSON file")
    parser.add_argument("path", nargs="?", default="seed_data.json")
    parser.add_argument("--confirm", action="store_true", help="Save non-conflicting classes of conflicting subjects")
    args = parser.parse_args()

    if not os.path.exists(args.path):
        print(f"Error: {args.path} not found.")
        return

    print(f"Reading {args.path}...")
    result = asyncio.run(seed(args.path, args.confirm))
    print("Success!")
    print(f"Result: {result}")


if __name__ == "__main__":
    main()
