"""
Testing API via TestClient
- conftest pins the seed and the date, so the daily secrets are known here too.
- Duel/GridLink starters are random; we patch store.randbelow so seat 1 starts.
"""

import pytest

import codle.store as store_module
from codle.config import read_daily_seed
from codle.main import app, get_daily_seed
from codle.secret import daily_box_secret_keys, daily_secret

@pytest.fixture
def seat_one_starts(monkeypatch):
    monkeypatch.setattr(store_module, "randbelow", lambda n: 0)

# ---------------- Codle ----------------

def test_today_starts_empty(client, date):
    response = client.get("/today", params={"player_id": "anna"})
    assert response.status_code == 200
    body = response.json()
    assert body["date"] == date
    assert body["length"] == 4
    assert body["max_attempts"] == 8
    assert body["attempts"] == []
    assert body["won"] is False
    assert body["attempts_remaining"] == 8

def test_guess_then_win_then_locked(client, date, seed):
    secret = daily_secret(date, seed)

    # "0000" is never a secret: at most three digits repeat
    response = client.post("/guess", json={"player_id": "anna", "guess": "0000"})
    assert response.status_code == 200
    first = response.json()
    assert first["attempt_number"] == 1
    assert first["win"] is False
    assert len(first["marks"]) == 4
    assert first["attempts_remaining"] == 7

    response = client.post("/guess", json={"player_id": "anna", "guess": secret})
    assert response.status_code == 200
    win = response.json()
    assert win["win"] is True
    assert win["bulls"] == 4
    assert win["marks"] == ["green"] * 4

    response = client.post("/guess", json={"player_id": "anna", "guess": secret})
    assert response.status_code == 409

    today = client.get("/today", params={"player_id": "anna"}).json()
    assert today["won"] is True
    assert [a["guess"] for a in today["attempts"]] == ["0000", secret]
    assert today["attempts"][1]["marks"] == ["green"] * 4

def test_guess_rejects_bad_shape(client):
    response = client.post("/guess", json={"player_id": "anna", "guess": "12x4"})
    assert response.status_code == 400
    response = client.post("/guess", json={"player_id": "anna", "guess": "123"})
    assert response.status_code == 400

def test_attempts_run_out(client):
    for _ in range(8):
        r = client.post("/guess", json={"player_id": "anna", "guess": "0000"})
        assert r.status_code == 200

    r = client.post("/guess", json={"player_id": "anna", "guess": "0000"})
    assert r.status_code == 409
    assert client.get("/today", params={"player_id": "anna"}).json()["attempts_remaining"] == 0

def test_missing_seed_is_a_server_error(client):
    app.dependency_overrides[get_daily_seed] = lambda: read_daily_seed({})
    response = client.post("/guess", json={"player_id": "anna", "guess": "1234"})
    assert response.status_code == 500

# ---------------- Box Match ----------------

def test_box_state_and_win(client, date, seed):
    response = client.get("/box/state", params={"difficulty": "easy", "player_id": "anna"})
    assert response.status_code == 200
    state = response.json()
    assert state["length"] == 6
    assert [c["key"] for c in state["palette"]] == ["red", "green", "yellow", "purple", "white", "blue"]
    assert state["won"] is False

    secret = daily_box_secret_keys(date, "easy", seed)
    response = client.post("/box/guess", json={"player_id": "anna", "difficulty": "easy", "guess": secret})
    assert response.status_code == 200
    assert response.json() == {"correct_positions": 6, "length": 6, "is_win": True}

    state = client.get("/box/state", params={"difficulty": "easy", "player_id": "anna"}).json()
    assert state["won"] is True
    assert len(state["attempts"]) == 1

    response = client.post("/box/guess", json={"player_id": "anna", "difficulty": "easy", "guess": secret})
    assert response.status_code == 409

def test_box_partial_feedback(client, date, seed):
    secret = daily_box_secret_keys(date, "superEasy", seed)
    # swapping two slots leaves exactly two right
    guess = [secret[1], secret[0], secret[2], secret[3]]
    response = client.post("/box/guess", json={"player_id": "anna", "difficulty": "superEasy", "guess": guess})
    assert response.status_code == 200
    assert response.json()["correct_positions"] == 2
    assert response.json()["is_win"] is False

def test_box_rejects_bad_input(client):
    r = client.get("/box/state", params={"difficulty": "impossible", "player_id": "anna"})
    assert r.status_code == 400
    r = client.post("/box/guess", json={"player_id": "anna", "difficulty": "superEasy", "guess": ["red", "red", "green", "yellow"]})
    assert r.status_code == 400
    r = client.post("/box/guess", json={"player_id": "anna", "difficulty": "superEasy", "guess": ["red", "lime", "green", "yellow"]})
    assert r.status_code == 400

# ---------------- Duel ----------------

def test_duel_flow(client, seat_one_starts):
    created = client.post("/duel/create", json={"player_id": "anna"}).json()
    match_id = created["match_id"]
    assert created["status"] == "waiting"

    joined = client.post("/duel/join", json={"player_id": "ben", "code": created["code"].lower()})
    assert joined.status_code == 200
    assert joined.json()["status"] == "secrets"

    assert client.post("/duel/join", json={"player_id": "carl", "code": created["code"]}).status_code == 409
    assert client.post("/duel/join", json={"player_id": "carl", "code": "ZZZZZZ"}).status_code == 404

    assert client.post("/duel/secret", json={"player_id": "anna", "match_id": match_id, "secret": "12"}).status_code == 400
    r = client.post("/duel/secret", json={"player_id": "anna", "match_id": match_id, "secret": "1234"})
    assert r.json()["status"] == "secrets"
    r = client.post("/duel/secret", json={"player_id": "ben", "match_id": match_id, "secret": "5678"})
    assert r.json() == {"status": "active", "turn_player_id": "anna"}

    r = client.post("/duel/guess", json={"player_id": "ben", "match_id": match_id, "guess": "1234"})
    assert r.status_code == 409

    r = client.post("/duel/guess", json={"player_id": "anna", "match_id": match_id, "guess": "5687"})
    assert r.status_code == 200
    body = r.json()
    assert body["bulls"] == 2 and body["cows"] == 2
    assert body["marks"] == ["green", "green", "yellow", "yellow"]
    assert body["next_turn_player_id"] == "ben"
    assert body["attempts_remaining"] == 5

    state = client.get("/duel/state", params={"match_id": match_id, "player_id": "ben"}).json()
    assert state["seat"] == 2
    assert state["opponent_player_id"] == "anna"
    assert state["secrets"]["opponent_secret"] is None
    assert len(state["moves"]) == 1

    r = client.post("/duel/guess", json={"player_id": "ben", "match_id": match_id, "guess": "1234"})
    assert r.json()["win"] is True
    assert r.json()["status"] == "finished"

    state = client.get("/duel/state", params={"match_id": match_id, "player_id": "anna"}).json()
    assert state["match"]["winner_player_id"] == "ben"
    assert state["secrets"]["opponent_secret"] == "5678"

def test_duel_state_for_outsider(client):
    match_id = client.post("/duel/create", json={"player_id": "anna"}).json()["match_id"]
    assert client.get("/duel/state", params={"match_id": match_id, "player_id": "carl"}).status_code == 403
    assert client.get("/duel/state", params={"match_id": "missing", "player_id": "anna"}).status_code == 404

# ---------------- GridLink ----------------

def test_gridlink_flow(client, seat_one_starts):
    created = client.post("/gridlink/create", json={"player_id": "anna"}).json()
    match_id = created["match_id"]
    r = client.post("/gridlink/join", json={"player_id": "ben", "code": created["code"]})
    assert r.json()["status"] == "active"

    state = client.get("/gridlink/state", params={"match_id": match_id, "player_id": "anna"}).json()
    assert state["match"]["turn_player_id"] == "anna"
    assert len(state["inventory"]) == 14
    assert len(state["board"]) == 9
    s1 = next(i["id"] for i in state["inventory"] if i["piece_id"] == "S1")

    r = client.post("/gridlink/move", json={
        "player_id": "anna", "match_id": match_id, "inventory_id": s1, "drop_x": 4,
    })
    assert r.status_code == 200
    body = r.json()
    assert (body["drop_x"], body["drop_y"]) == (4, 8)
    assert body["cells"] == [{"x": 4, "y": 8}]
    assert body["is_win"] is False
    assert body["next_turn_player_id"] == "ben"

    state = client.get("/gridlink/state", params={"match_id": match_id, "player_id": "ben"}).json()
    assert state["board"][8][4] == "P1"
    assert state["moves"][0]["piece_id"] == "S1"
    assert all(not i["used"] for i in state["inventory"])

def test_gridlink_move_errors(client, seat_one_starts):
    created = client.post("/gridlink/create", json={"player_id": "anna"}).json()
    match_id = created["match_id"]
    client.post("/gridlink/join", json={"player_id": "ben", "code": created["code"]})
    state = client.get("/gridlink/state", params={"match_id": match_id, "player_id": "anna"}).json()
    i3 = next(i["id"] for i in state["inventory"] if i["piece_id"] == "I3")

    def move(**overrides):
        payload = {"player_id": "anna", "match_id": match_id, "inventory_id": i3, "rotation": 0, "drop_x": 0}
        payload.update(overrides)
        return client.post("/gridlink/move", json=payload)

    assert move(rotation=7).status_code == 400
    assert move(drop_x=-1).status_code == 400
    assert move(drop_x=7).status_code == 409      # three wide, column 7 leaves no room
    assert move(player_id="ben").status_code == 409    # not ben's turn
    assert move(player_id="carl").status_code == 403
    assert move(inventory_id="nope").status_code == 404
    assert move(match_id="missing").status_code == 404
    assert client.get("/gridlink/state", params={"match_id": match_id, "player_id": "carl"}).status_code == 403
