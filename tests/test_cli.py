import json

import pytest

from geopin import cli


@pytest.fixture
def store(monkeypatch, make_store):
    store = make_store()
    monkeypatch.setattr(cli, "_build_store", lambda: store)
    return store


def test_cli_add_tag_and_query(store, capsys):
    assert cli.main(["add", "Trafalgar Square", "--lat", "51.5080", "--lon", "-0.1284", "--tag", "restaurant"]) == 0
    trafalgar_id = capsys.readouterr().out.strip()
    assert cli.main(["add", "St Paul's", "--lat", "51.5138", "--lon", "-0.0983"]) == 0
    capsys.readouterr()

    assert cli.main(["near", "--lat", "51.5080", "--lon", "-0.1284", "--radius", "1000", "--json"]) == 0
    near = json.loads(capsys.readouterr().out)
    assert [p["id"] for p in near] == [trafalgar_id]

    assert cli.main(["by-tag", "restaurant", "--json"]) == 0
    assert [p["name"] for p in json.loads(capsys.readouterr().out)] == ["Trafalgar Square"]

    assert cli.main(["nearest", "--lat", "51.5138", "--lon", "-0.0983", "--limit", "1"]) == 0
    assert "St Paul's" in capsys.readouterr().out


def test_cli_update_and_show(store, capsys):
    cli.main(["add", "Trafalgar Square", "--lat", "51.5080", "--lon", "-0.1284", "--tag", "tourist"])
    poi_id = capsys.readouterr().out.strip()

    assert cli.main(["update", poi_id, "--name", "Trafalgar Sq.", "--lat", "51.5081", "--lon", "-0.128"]) == 0
    capsys.readouterr()
    assert cli.main(["show", poi_id, "--json"]) == 0
    shown = json.loads(capsys.readouterr().out)
    assert shown["name"] == "Trafalgar Sq."
    assert shown["tags"] == ["tourist"]


def test_cli_reports_domain_errors(store, capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["delete", "no-such-id"])
    assert exc.value.code == 2
    assert "POI not found" in capsys.readouterr().err


def test_cli_import_catalog(store, tmp_path, capsys):
    path = tmp_path / "pois.json"
    path.write_text(
        json.dumps([{"name": "Borough Market", "latitude": 51.5055, "longitude": -0.091, "tags": ["food"]}]),
        encoding="utf-8",
    )
    assert cli.main(["import", str(path)]) == 0
    assert "created=1" in capsys.readouterr().out
    assert [p.name for p in store.list_pois()] == ["Borough Market"]


def test_cli_import_missing_catalog_is_a_clean_error(store, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["import", str(tmp_path / "missing.json")])
    assert exc.value.code == 2
    err = capsys.readouterr().err
    assert err.startswith("geopin: error: cannot read catalog")
    assert "Traceback" not in err
