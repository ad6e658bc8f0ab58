"""Word list import for various file formats."""
import csv
import json
import logging
from pathlib import Path

from vocab_tutor.models import Example, WordContent
from vocab_tutor.wordbook import DuplicateWordError, WordbookStore

logger = logging.getLogger(__name__)


def content_from_dict(entry: dict) -> WordContent:
    """Build word content from a mapping; ``word`` and ``definition`` are required."""
    if not isinstance(entry, dict):
        raise ValueError(f"Entry is not a mapping: {entry!r}")
    # csv.DictReader fills missing columns with None
    word = str(entry.get("word") or "").strip()
    definition = str(entry.get("definition") or "").strip()
    if not word or not definition:
        raise ValueError(f"Entry needs a word and a definition: {entry!r}")
    raw_examples = entry.get("examples") or []
    if isinstance(raw_examples, (str, dict)):
        raw_examples = [raw_examples]
    examples = []
    for ex in raw_examples:
        if isinstance(ex, str):
            examples.append(Example(sentence=ex))
        elif isinstance(ex, dict):
            if ex.get("sentence"):
                examples.append(Example(sentence=str(ex["sentence"]), translation=str(ex.get("translation") or "")))
        else:
            raise ValueError(f"Unreadable example for {word!r}: {ex!r}")
    if entry.get("example"):
        examples.append(Example(sentence=str(entry["example"]), translation=str(entry.get("translation") or "")))
    synonyms = entry.get("synonyms") or []
    if isinstance(synonyms, str):
        synonyms = [s.strip() for s in synonyms.split(",") if s.strip()]
    elif not isinstance(synonyms, (list, tuple)):
        raise ValueError(f"Unreadable synonyms for {word!r}: {synonyms!r}")
    synonyms = [str(s) for s in synonyms]
    return WordContent(
        word=word,
        definition=definition,
        part_of_speech=str(entry.get("part_of_speech") or entry.get("pos") or "").strip(),
        phonetic=str(entry.get("phonetic") or "").strip(),
        examples=tuple(examples),
        synonyms=tuple(synonyms),
    )


def _read_delimited(text: str) -> list[dict]:
    # word <TAB> definition [<TAB> example]; blank lines and # comments ignored
    rows = []
    for line in text.splitlines():
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        parts = [p.strip() for p in line.split("\t")]
        if len(parts) < 2:
            continue
        row = {"word": parts[0], "definition": parts[1]}
        if len(parts) > 2 and parts[2]:
            row["example"] = parts[2]
        rows.append(row)
    return rows


def read_word_entries(file_path: str) -> list[dict]:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
        return data["words"] if isinstance(data, dict) else list(data)
    elif suffix in (".yaml", ".yml"):
        import yaml
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        return data["words"] if isinstance(data, dict) else list(data or [])
    elif suffix == ".csv":
        with path.open(newline="", encoding="utf-8") as f:
            return [dict(row) for row in csv.DictReader(f)]
    else:
        # .txt, .tsv and anything else: tab-separated lines
        return _read_delimited(path.read_text(encoding="utf-8"))


def import_file(db_path: str, file_path: str) -> dict:
    """Import a word list into the wordbook, skipping words already present."""
    entries = read_word_entries(file_path)
    store = WordbookStore(db_path)
    added, skipped, invalid = 0, 0, 0
    for entry in entries:
        try:
            content = content_from_dict(entry)
        except ValueError:
            invalid += 1
            continue
        try:
            store.add_word(content, source="imported")
            added += 1
        except DuplicateWordError:
            skipped += 1
    if not added and not skipped:
        raise ValueError(f"No usable words found in {Path(file_path).name}")
    logger.info("Imported %s: %d added, %d duplicates, %d invalid", file_path, added, skipped, invalid)
    return {"filename": Path(file_path).name, "added": added, "skipped": skipped, "invalid": invalid}
