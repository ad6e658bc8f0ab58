# tests/test_importer.py
import json

import pytest

from vocab_tutor.db import init_db, get_connection
from vocab_tutor.importer import content_from_dict, read_word_entries, import_file
from vocab_tutor.wordbook import WordbookStore


def test_read_tab_separated_txt(tmp_path):
    f = tmp_path / "words.txt"
    f.write_text("# my list\ncandid\tfrank and honest\tShe gave a candid answer.\n\nseldom\trarely\n")
    entries = read_word_entries(str(f))
    assert entries == [
        {"word": "candid", "definition": "frank and honest", "example": "She gave a candid answer."},
        {"word": "seldom", "definition": "rarely"},
    ]


def test_read_skips_lines_without_definition(tmp_path):
    f = tmp_path / "words.tsv"
    f.write_text("lonely\ncandid\tfrank\n")
    assert [e["word"] for e in read_word_entries(str(f))] == ["candid"]


def test_read_csv_file(tmp_path):
    f = tmp_path / "words.csv"
    f.write_text("word,definition,part_of_speech\ncandid,frank,adj.\n")
    entries = read_word_entries(str(f))
    assert entries[0]["word"] == "candid"
    assert entries[0]["part_of_speech"] == "adj."


def test_read_json_file(tmp_path):
    f = tmp_path / "words.json"
    f.write_text(json.dumps({"words": [{"word": "candid", "definition": "frank"}]}))
    assert read_word_entries(str(f)) == [{"word": "candid", "definition": "frank"}]


def test_read_json_list(tmp_path):
    f = tmp_path / "words.json"
    f.write_text(json.dumps([{"word": "seldom", "definition": "rarely"}]))
    assert read_word_entries(str(f))[0]["word"] == "seldom"


def test_read_yaml_file(tmp_path):
    pytest.importorskip("yaml")
    f = tmp_path / "words.yaml"
    f.write_text("words:\n  - word: candid\n    definition: frank\n    synonyms: [open, blunt]\n")
    entries = read_word_entries(str(f))
    assert entries[0]["synonyms"] == ["open", "blunt"]


def test_content_from_dict_accepts_aliases():
    content = content_from_dict({
        "word": " candid ",
        "definition": "frank",
        "pos": "adj.",
        "synonyms": "open, blunt",
        "examples": ["A candid talk.", {"sentence": "Be candid.", "translation": "Sé franco."}],
        "example": "Candid remarks.",
    })
    assert content.word == "candid"
    assert content.part_of_speech == "adj."
    assert content.synonyms == ("open", "blunt")
    assert [e.sentence for e in content.examples] == ["A candid talk.", "Be candid.", "Candid remarks."]
    assert content.examples[1].translation == "Sé franco."


def test_content_from_dict_requires_word_and_definition():
    with pytest.raises(ValueError):
        content_from_dict({"word": "candid"})
    with pytest.raises(ValueError):
        content_from_dict({"definition": "frank"})


def test_import_file(tmp_path, tmp_db):
    init_db(tmp_db)
    f = tmp_path / "study.txt"
    f.write_text("candid\tfrank\nseldom\trarely\tWe seldom meet.\n")
    result = import_file(tmp_db, str(f))
    assert result == {"filename": "study.txt", "added": 2, "skipped": 0, "invalid": 0}
    conn = get_connection(tmp_db)
    rows = conn.execute("SELECT * FROM words ORDER BY word").fetchall()
    assert [r["word"] for r in rows] == ["candid", "seldom"]
    assert {r["source"] for r in rows} == {"imported"}
    conn.close()
    seldom = WordbookStore(tmp_db).find_word("seldom")
    assert seldom.content.examples[0].sentence == "We seldom meet."


def test_import_skips_duplicates_and_invalid(tmp_path, tmp_db):
    init_db(tmp_db)
    f = tmp_path / "words.csv"
    f.write_text("word,definition\ncandid,frank\nCANDID,open\n,orphan definition\n")
    result = import_file(tmp_db, str(f))
    assert (result["added"], result["skipped"], result["invalid"]) == (1, 1, 1)


def test_import_with_nothing_usable_raises(tmp_path, tmp_db):
    init_db(tmp_db)
    f = tmp_path / "empty.txt"
    f.write_text("# nothing here\n")
    with pytest.raises(ValueError):
        import_file(tmp_db, str(f))


def test_import_counts_short_csv_row_as_invalid(tmp_path, tmp_db):
    init_db(tmp_db)
    f = tmp_path / "words.csv"
    f.write_text("word,definition\ncandid,frank\nlonely\n")
    result = import_file(tmp_db, str(f))
    assert (result["added"], result["invalid"]) == (1, 1)
    assert WordbookStore(tmp_db).find_word("lonely") is None


def test_import_counts_non_mapping_entries_as_invalid(tmp_path, tmp_db):
    init_db(tmp_db)
    f = tmp_path / "words.json"
    f.write_text(json.dumps([
        {"word": "candid", "definition": "frank"},
        "seldom",
        {"word": "vivid", "definition": "bright", "examples": [42]},
        {"word": "terse", "definition": "brief", "examples": ["A terse reply."]},
    ]))
    result = import_file(tmp_db, str(f))
    assert (result["added"], result["skipped"], result["invalid"]) == (2, 0, 2)
    words = sorted(i.content.word for i in WordbookStore(tmp_db).load_items())
    assert words == ["candid", "terse"]


def test_content_from_dict_rejects_non_mappings():
    with pytest.raises(ValueError):
        content_from_dict("seldom")
    with pytest.raises(ValueError):
        content_from_dict({"word": "vivid", "definition": "bright", "examples": [["nested"]]})
    with pytest.raises(ValueError):
        content_from_dict({"word": None, "definition": "bright"})
