from matchday.extensions import db
from matchday.models.match import Match


def _create_season(client, **body):
    body.setdefault("name", "API Season")
    resp = client.post("/api/seasons", json=body)
    assert resp.status_code == 201
    return resp.get_json()["season"]["id"]


def _add_teams(client, season_id, owners):
    ids = []
    for i, owner in enumerate(owners):
        resp = client.post(
            f"/api/seasons/{season_id}/teams",
            json={"name": f"Team {i + 1}", "owner_name": owner, "region": "EU", "tier": "A"},
        )
        assert resp.status_code == 201
        ids.append(resp.get_json()["team"]["id"])
    return ids


def test_health_check(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "healthy"


# ── Seasons ──────────────────────────────────────────────────────────────────

def test_create_and_get_season(client):
    season_id = _create_season(client, type="CUP", league_mode="DOUBLE")
    resp = client.get(f"/api/seasons/{season_id}")
    assert resp.status_code == 200
    season = resp.get_json()["season"]
    assert season["type"] == "CUP"
    assert season["league_mode"] == "DOUBLE"
    assert season["status"] == "DRAFT"
    assert season["team_count"] == 0


def test_list_seasons(client):
    _create_season(client, name="One")
    _create_season(client, name="Two")
    resp = client.get("/api/seasons")
    assert {s["name"] for s in resp.get_json()["seasons"]} == {"One", "Two"}


def test_create_season_validation(client):
    resp = client.post("/api/seasons", json={"name": "X", "type": "FRIENDLY"})
    assert resp.status_code == 400
    assert "type" in resp.get_json()["messages"]


def test_season_not_found(client):
    resp = client.get("/api/seasons/9999")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


# ── Teams ────────────────────────────────────────────────────────────────────

def test_add_and_list_teams(client):
    season_id = _create_season(client)
    _add_teams(client, season_id, ["ann", "ben"])
    resp = client.get(f"/api/seasons/{season_id}/teams")
    teams = resp.get_json()["teams"]
    assert [t["name"] for t in teams] == ["Team 1", "Team 2"]
    assert teams[0]["owner_name"] == "ann"
    assert teams[0]["tier"] == "A"


def test_duplicate_team_is_conflict(client):
    season_id = _create_season(client)
    _add_teams(client, season_id, ["ann"])
    resp = client.post(f"/api/seasons/{season_id}/teams", json={"name": "Team 1", "owner_name": "ben"})
    assert resp.status_code == 409


def test_team_requires_owner(client):
    season_id = _create_season(client)
    resp = client.post(f"/api/seasons/{season_id}/teams", json={"name": "No Owner"})
    assert resp.status_code == 400
    assert "owner_name" in resp.get_json()["messages"]


def test_add_team_unknown_season(client):
    resp = client.post("/api/seasons/9999/teams", json={"name": "X", "owner_name": "y"})
    assert resp.status_code == 404


# ── League ───────────────────────────────────────────────────────────────────

def test_schedule_rounds_and_standings(client):
    season_id = _create_season(client)
    _add_teams(client, season_id, ["a", "b", "c", "d"])

    resp = client.post(f"/api/seasons/{season_id}/schedule", json={"mode": "DOUBLE"})
    assert resp.status_code == 201
    rounds = resp.get_json()["rounds"]
    assert len(rounds) == 6
    assert all(len(r["matches"]) == 2 for r in rounds)
    assert rounds[0]["kind"] == "LEAGUE"

    resp = client.get(f"/api/seasons/{season_id}/rounds")
    assert len(resp.get_json()["rounds"]) == 6

    match_id = rounds[0]["matches"][0]["id"]
    resp = client.post(f"/api/matches/{match_id}/result", json={"home_score": 3, "away_score": 1})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["match"]["status"] == "COMPLETED"
    assert body["match"]["home_score"] == "3"
    assert body["needs_manual_winner"] is False

    table = client.get(f"/api/seasons/{season_id}/standings").get_json()["table"]
    assert table[0]["team"] == rounds[0]["matches"][0]["home"]
    assert table[0]["points"] == 3


def test_schedule_twice_is_conflict(client):
    season_id = _create_season(client)
    _add_teams(client, season_id, ["a", "b"])
    client.post(f"/api/seasons/{season_id}/schedule", json={})
    resp = client.post(f"/api/seasons/{season_id}/schedule", json={})
    assert resp.status_code == 409


def test_schedule_infeasible_roster(client):
    season_id = _create_season(client)
    _add_teams(client, season_id, ["solo", "solo"])
    resp = client.post(f"/api/seasons/{season_id}/schedule", json={})
    assert resp.status_code == 400
    assert "same owner" in resp.get_json()["error"]


def test_schedule_bad_mode(client):
    season_id = _create_season(client)
    resp = client.post(f"/api/seasons/{season_id}/schedule", json={"mode": "TRIPLE"})
    assert resp.status_code == 400


def test_rounds_bad_kind(client):
    season_id = _create_season(client)
    resp = client.get(f"/api/seasons/{season_id}/rounds?kind=FRIENDLY")
    assert resp.status_code == 400


# ── Brackets ─────────────────────────────────────────────────────────────────

def test_bracket_lifecycle(client):
    season_id = _create_season(client, type="TOURNAMENT")
    _add_teams(client, season_id, ["a", "b", "c", "d"])

    resp = client.post(f"/api/seasons/{season_id}/bracket", json={"third_place": True})
    assert resp.status_code == 201
    assert resp.get_json()["match_count"] == 4

    bracket = client.get(f"/api/seasons/{season_id}/bracket").get_json()
    assert [r["name"] for r in bracket["rounds"]] == ["SEMI_FINAL", "FINAL", "THIRD_PLACE"]
    assert bracket["champion"] is None

    semi = bracket["rounds"][0]["matches"][0]
    resp = client.post(f"/api/matches/{semi['id']}/result", json={"home_score": 2, "away_score": 2})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["needs_manual_winner"] is True
    assert body["updated"] == []

    resp = client.post(
        f"/api/matches/{semi['id']}/result",
        json={"home_score": 2, "away_score": 2, "manual_winner": "AWAY", "away_scorers": ["Nine"]},
    )
    body = resp.get_json()
    assert body["winner"] == semi["away"]
    assert {m["code"] for m in body["updated"]} == {"ko_final_0", "ko_third_0"}
    assert body["match"]["away_scorers"] == ["Nine"]

    resp = client.delete(f"/api/seasons/{season_id}/bracket")
    assert resp.status_code == 200
    assert client.get(f"/api/seasons/{season_id}/bracket").status_code == 404


def test_bracket_wrong_season_type(client):
    season_id = _create_season(client)
    _add_teams(client, season_id, ["a", "b"])
    resp = client.post(f"/api/seasons/{season_id}/bracket", json={})
    assert resp.status_code == 400


def test_reset_missing_bracket(client):
    season_id = _create_season(client, type="TOURNAMENT")
    assert client.delete(f"/api/seasons/{season_id}/bracket").status_code == 404


def test_result_validation(client):
    resp = client.post("/api/matches/1/result", json={"home_score": -1, "away_score": 0})
    assert resp.status_code == 400
    resp = client.post(
        "/api/matches/1/result",
        json={"home_score": 1, "away_score": 0, "manual_winner": "DRAW"},
    )
    assert resp.status_code == 400


def test_result_unknown_match(client):
    resp = client.post("/api/matches/9999/result", json={"home_score": 1, "away_score": 0})
    assert resp.status_code == 404


def test_result_for_tbd_match(client):
    season_id = _create_season(client, type="TOURNAMENT")
    _add_teams(client, season_id, ["a", "b", "c", "d"])
    client.post(f"/api/seasons/{season_id}/bracket", json={})
    final = Match.query.filter_by(season_id=season_id, code="ko_final_0").one()
    resp = client.post(f"/api/matches/{final.id}/result", json={"home_score": 1, "away_score": 0})
    assert resp.status_code == 400


# ── Cups ─────────────────────────────────────────────────────────────────────

def test_cup_groups_and_knockout(client):
    season_id = _create_season(client, type="CUP")
    ids = _add_teams(client, season_id, ["a", "b", "c", "d"])

    resp = client.post(f"/api/seasons/{season_id}/groups", json={"groups": {"A": ids[:2], "B": ids[2:]}})
    assert resp.status_code == 201
    rounds = resp.get_json()["rounds"]
    assert rounds[0]["kind"] == "GROUP"

    resp = client.post(f"/api/seasons/{season_id}/knockout", json={})
    assert resp.status_code == 400

    for r in rounds:
        for m in r["matches"]:
            client.post(f"/api/matches/{m['id']}/result", json={"home_score": 1, "away_score": 0})

    groups = client.get(f"/api/seasons/{season_id}/standings").get_json()["groups"]
    assert set(groups) == {"A", "B"}

    resp = client.post(f"/api/seasons/{season_id}/knockout", json={"two_legged": True})
    assert resp.status_code == 201
    assert resp.get_json()["match_count"] == 5

    resp = client.post(f"/api/seasons/{season_id}/knockout", json={})
    assert resp.status_code == 409


def test_groups_validation(client):
    season_id = _create_season(client, type="CUP")
    resp = client.post(f"/api/seasons/{season_id}/groups", json={"groups": {"A": ["x"]}})
    assert resp.status_code == 400


def test_tournament_has_no_standings(client):
    season_id = _create_season(client, type="TOURNAMENT")
    resp = client.get(f"/api/seasons/{season_id}/standings")
    assert resp.status_code == 400


def test_unknown_route_is_json(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Resource not found"


def test_cors_header(client):
    resp = client.get("/api/seasons", headers={"Origin": "http://localhost:3000"})
    assert resp.headers.get("Access-Control-Allow-Origin") == "http://localhost:3000"


def test_rows_are_committed(client):
    season_id = _create_season(client, type="TOURNAMENT")
    _add_teams(client, season_id, ["a", "b"])
    client.post(f"/api/seasons/{season_id}/bracket", json={})
    assert db.session.query(Match).filter_by(season_id=season_id).count() == 3
