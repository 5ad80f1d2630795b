import json

import engine


def test_sample_graph_to_stdout(capsys):
    assert engine.main(["--seed", "3"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert {r["id"] for r in out["rooms"]} == {"r1", "r2", "r3"}
    assert out["width"] == 40


def test_same_seed_same_output(capsys):
    engine.main(["--seed", "5", "--style", "geometric"])
    first = capsys.readouterr().out
    engine.main(["--seed", "5", "--style", "geometric"])
    assert capsys.readouterr().out == first


def test_writes_out_file(tmp_path, capsys):
    graph = tmp_path / "graph.json"
    graph.write_text(json.dumps(engine.SAMPLE_GRAPH))
    out = tmp_path / "map.json"
    assert engine.main([str(graph), "--seed", "1", "--out", str(out), "--indent", "2"]) == 0
    assert capsys.readouterr().out == ""
    assert json.loads(out.read_text())["height"] == 40


def test_invalid_graph(tmp_path, capsys):
    graph = tmp_path / "bad.json"
    graph.write_text(json.dumps({"width": 40, "height": 40, "rooms": [
        {"id": "r1", "type": "corridor", "connections": ["ghost"]},
    ]}))
    assert engine.main([str(graph)]) == 2
    err = capsys.readouterr().err
    assert "Invalid room graph" in err
    assert "ghost" in err


def test_missing_file(tmp_path, capsys):
    assert engine.main([str(tmp_path / "nope.json")]) == 1
    assert "Could not read room graph" in capsys.readouterr().err
