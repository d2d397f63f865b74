import logging

BASE = "/api/v0"


def _setup(client, series="foo-series", players=("foo", "bar", "baz")):
    client.post(f"{BASE}/series", json={"name": series})
    for name in players:
        resp = client.post(f"{BASE}/players", json={"name": name, "series": series})
        assert resp.status_code == 201


def _game(**overrides):
    payload = {
        "series": "foo-series",
        "teamAway": "VAN",
        "teamHome": "MTL",
        "goalsAway": 42,
        "goalsHome": 1,
        "playersAway": "foo,baz",
        "playersHome": "bar",
    }
    payload.update(overrides)
    return payload


def test_record_and_update_game(client):
    _setup(client)

    resp = client.post(f"{BASE}/games", json=_game())
    assert resp.status_code == 200
    game_id = resp.json()["id"]

    game = client.get(f"{BASE}/games/{game_id}").json()
    assert game["series"] == "foo-series"
    assert game["playersAway"] == ["baz", "foo"]
    assert game["playersHome"] == ["bar"]
    assert game["winner"] == "away"
    assert game["winners"] == ["baz", "foo"]

    bar = client.get(f"{BASE}/players/bar").json()
    assert bar["stats"] == {
        "numberOfGames": 1,
        "numberOfWins": 0,
        "winPercentage": 0.0,
        "currentStreak": -1,
    }

    resp = client.post(f"{BASE}/games", json=_game(game=game_id, goalsAway=0))
    assert resp.status_code == 200
    assert resp.json()["id"] == game_id

    game = client.get(f"{BASE}/games/{game_id}").json()
    assert game["goalsAway"] == 0
    assert game["winner"] == "home"
    assert game["winners"] == ["bar"]

    # the update invalidated the cached stats
    bar = client.get(f"{BASE}/players/bar").json()
    assert bar["stats"] == {
        "numberOfGames": 1,
        "numberOfWins": 1,
        "winPercentage": 100.0,
        "currentStreak": 1,
    }
    foo = client.get(f"{BASE}/players/foo").json()
    assert foo["stats"]["currentStreak"] == -1


def test_update_can_change_rosters(client):
    _setup(client, players=("foo", "bar", "baz", "qux"))
    game_id = client.post(f"{BASE}/games", json=_game()).json()["id"]
    client.get(f"{BASE}/players/qux")

    resp = client.post(
        f"{BASE}/games",
        json=_game(game=game_id, playersAway=["qux"], playersHome=["bar", "foo"]),
    )
    assert resp.status_code == 200

    game = client.get(f"{BASE}/games/{game_id}").json()
    assert game["playersAway"] == ["qux"]
    assert game["playersHome"] == ["bar", "foo"]
    assert game["winners"] == ["qux"]
    assert client.get(f"{BASE}/players/baz").json()["stats"]["numberOfGames"] == 0
    assert client.get(f"{BASE}/players/qux").json()["stats"]["numberOfWins"] == 1


def test_game_date_is_kept(client):
    _setup(client)
    game_id = client.post(
        f"{BASE}/games", json=_game(date="2024-03-01T20:00:00-05:00")
    ).json()["id"]
    game = client.get(f"{BASE}/games/{game_id}").json()
    assert game["date"].startswith("2024-03-02T01:00:00")


def test_player_outside_series_is_rejected(client):
    _setup(client)
    client.post(f"{BASE}/players", json={"name": "stranger"})
    resp = client.post(f"{BASE}/games", json=_game(playersHome="stranger"))
    assert resp.status_code == 400
    assert resp.json()["code"] == "player_not_in_series"


def test_duplicate_player_is_rejected(client):
    _setup(client)
    resp = client.post(f"{BASE}/games", json=_game(playersHome="foo"))
    assert resp.status_code == 400
    assert resp.json()["code"] == "game_duplicate_players"
    assert resp.json()["detail"] == "duplicate players: foo"


def test_unknown_series_and_game(client):
    _setup(client)
    resp = client.post(f"{BASE}/games", json=_game(series="nope"))
    assert resp.status_code == 404
    assert resp.json()["code"] == "series_not_found"

    resp = client.post(f"{BASE}/games", json=_game(game="missing"))
    assert resp.status_code == 404
    assert resp.json()["code"] == "game_not_found"

    resp = client.get(f"{BASE}/games/missing")
    assert resp.status_code == 404


def test_game_payload_validation(client):
    _setup(client)
    for overrides in (
        {"goalsAway": -1},
        {"goalsHome": True},
        {"goalsAway": "lots"},
        {"playersAway": ""},
        {"playersHome": []},
        {"date": "2024-03-01T20:00:00"},
    ):
        resp = client.post(f"{BASE}/games", json=_game(**overrides))
        assert resp.status_code == 422, overrides


def test_recording_a_game_is_logged(client, caplog):
    _setup(client)
    with caplog.at_level(logging.INFO, logger="league_tracker.routers.games"):
        game_id = client.post(f"{BASE}/games", json=_game()).json()["id"]
    assert f"Recorded game {game_id} in series foo-series" in caplog.text


def test_roster_names_collapse_whitespace(client):
    _setup(client, players=("foo", "Bob  Smith"))
    resp = client.post(
        f"{BASE}/games",
        json=_game(playersAway=["Bob   Smith"], playersHome=" foo "),
    )
    assert resp.status_code == 200, resp.text
    game = client.get(f"{BASE}/games/{resp.json()['id']}").json()
    assert game["playersAway"] == ["bob smith"]
    assert game["winners"] == ["bob smith"]


def test_non_string_roster_name_is_422(client):
    _setup(client)
    resp = client.post(f"{BASE}/games", json=_game(playersAway=["foo", 7]))
    assert resp.status_code == 422
