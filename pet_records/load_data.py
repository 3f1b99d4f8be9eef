import json
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

DATA_DIR = Path(__file__).resolve().parent / "data"

DATASET_FILES = {
    "users": "users.json",
    "pets": "pets.json",
    "vaccines": "vaccines.json",
    "allergies": "allergies.json",
    "labs": "labs.json",
}


def load_json(path):
    """
    Purpose:  Read and parse a single JSON file from disk.

    No error handling inside: a missing file or bad JSON raises
    FileNotFoundError / JSONDecodeError straight to the caller.
    """
    with open(path, "r", encoding="utf-8") as file:
        return json.load(file)


def load_mock_dataset(data_dir=DATA_DIR) -> dict[str, list[dict]]:
    """
    Purpose:  Load every development fixture file in parallel and return them
              keyed by collection name (users, pets, vaccines, allergies, labs).

    Why we do it this way:
    - ThreadPoolExecutor → files are read concurrently; the result does not
      depend on completion order because each future maps back to its key.
    - No error suppression → a broken fixture fails fast instead of seeding
      a half-populated store.

    Returns: {"users": [...], "pets": [...], "vaccines": [...], "allergies": [...], "labs": [...]}
    """
    data_dir = Path(data_dir)
    results = {}
    with ThreadPoolExecutor(max_workers=len(DATASET_FILES)) as executor:
        future_map = {
            executor.submit(load_json, data_dir / name): key
            for key, name in DATASET_FILES.items()
        }
        for fut in as_completed(future_map):
            key = future_map[fut]
            results[key] = fut.result()  # raises if file missing / invalid JSON
    return results


# Follow-up notes for load_mock_dataset

# 1. Why return a dict instead of the old fixed-order tuple?
#    → RecordStore.seed() looks collections up by name; adding a record type is one entry in DATASET_FILES.

# 2. Can the data directory be swapped out?
#    → Yes: pass data_dir (tests point it at tmp_path fixtures).

# 3. Why not cache the dataset?
#    → The mock API reseeds on reset(); each call must hand back fresh, unshared lists.
