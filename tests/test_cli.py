"""
Smoke tests for the command line entry point.
"""

import json
import shutil

from main import main


def test_json_to_stdout(examples_dir, capsys):
    assert main(["--input", str(examples_dir / "person.shacl.ttl")]) == 0
    doc = json.loads(capsys.readouterr().out)
    assert doc["relationships"][0]["type"] == "MEMBER_OF"


def test_cypher_to_stdout(examples_dir, capsys):
    assert main(["--input", str(examples_dir / "person.shacl.ttl"), "--format", "cypher"]) == 0
    assert "CREATE (a)-[r:MEMBER_OF" in capsys.readouterr().out


def test_output_dir(examples_dir, tmp_path, capsys):
    assert main(["-i", str(examples_dir / "person.shacl.ttl"), "-o", str(tmp_path)]) == 0
    assert (tmp_path / "person.shacl_pg_schema.json").is_file()
    assert (tmp_path / "person.shacl.dot").is_file()
    assert "Wrote" in capsys.readouterr().out


def test_input_dir(examples_dir, tmp_path, capsys):
    src = tmp_path / "in"
    src.mkdir()
    shutil.copy(examples_dir / "person.shacl.ttl", src)
    (src / "broken.ttl").write_text("this is not turtle .")

    assert main(["--input-dir", str(src), "--output-dir", str(tmp_path / "out")]) == 1
    out = capsys.readouterr().out
    assert "OK  person.shacl.ttl" in out
    assert "FAIL broken.ttl" in out
    assert "1 converted, 1 failed" in out


def test_bad_input_exit_code(tmp_path, capsys):
    broken = tmp_path / "broken.ttl"
    broken.write_text("this is not turtle .")
    assert main(["--input", str(broken)]) == 1
    assert "Error:" in capsys.readouterr().err


def test_no_arguments_prints_help(capsys):
    assert main([]) == 2
    assert "usage" in capsys.readouterr().out.lower()
