from flask import Blueprint, request, jsonify, Response

from matchday.extensions import db
from matchday.models.season import Season
from matchday.models.team import Team
from matchday.models.round import RoundKind
from matchday.schemas import (
    SeasonSchema,
    CreateSeasonSchema,
    GenerateScheduleSchema,
    CreateBracketSchema,
    CreateGroupsSchema,
    CreateKnockoutSchema,
    TeamSchema,
    CreateTeamSchema,
    MatchSchema,
    RoundSchema,
    RecordResultSchema,
)
from matchday.services.season_service import (
    create_season,
    add_team,
    generate_league_schedule,
    list_rounds,
)
from matchday.services.bracket_service import (
    create_tournament_bracket,
    get_bracket,
    reset_bracket,
)
from matchday.services.cup_service import create_group_stage, create_knockout_from_groups
from matchday.services.match_service import record_match_result
from matchday.services.standings import season_standings
from matchday.core.propagation import RECORD_FIELDS

api_bp = Blueprint("api", __name__)

# ── Schema instances ─────────────────────────────────────────────────────────
season_schema = SeasonSchema()
seasons_schema = SeasonSchema(many=True)
create_season_schema = CreateSeasonSchema()
generate_schedule_schema = GenerateScheduleSchema()
create_bracket_schema = CreateBracketSchema()
create_groups_schema = CreateGroupsSchema()
create_knockout_schema = CreateKnockoutSchema()

team_schema = TeamSchema()
teams_schema = TeamSchema(many=True)
create_team_schema = CreateTeamSchema()

match_schema = MatchSchema()
matches_schema = MatchSchema(many=True)
rounds_schema = RoundSchema(many=True)
record_result_schema = RecordResultSchema()


def _status_for(error):
    text = error.lower()
    if "not found" in text:
        return 404
    if "already" in text:
        return 409
    return 400


def _json_body():
    return request.get_json(silent=True) or {}


# ─── Seasons ──────────────────────────────────────────────────────────────────

@api_bp.route("/seasons", methods=["GET"])
def get_seasons():
    seasons = Season.query.order_by(Season.created_at.desc(), Season.id.desc()).all()
    return jsonify({"seasons": seasons_schema.dump(seasons)}), 200


@api_bp.route("/seasons", methods=["POST"])
def create_season_route():
    data = create_season_schema.load(_json_body())
    season = create_season(data)
    return jsonify({"season": season_schema.dump(season)}), 201


@api_bp.route("/seasons/<int:season_id>", methods=["GET"])
def get_season(season_id):
    season = db.get_or_404(Season, season_id)
    return jsonify({"season": season_schema.dump(season)}), 200


# ─── Teams ────────────────────────────────────────────────────────────────────

@api_bp.route("/seasons/<int:season_id>/teams", methods=["GET"])
def get_teams(season_id):
    season = db.get_or_404(Season, season_id)
    teams = season.teams.order_by(Team.id).all()
    return jsonify({"teams": teams_schema.dump(teams)}), 200


@api_bp.route("/seasons/<int:season_id>/teams", methods=["POST"])
def add_team_route(season_id):
    data = create_team_schema.load(_json_body())
    team, error = add_team(season_id, data)
    if error:
        return jsonify({"error": error}), _status_for(error)
    return jsonify({"team": team_schema.dump(team)}), 201


# ─── League schedule ──────────────────────────────────────────────────────────

@api_bp.route("/seasons/<int:season_id>/schedule", methods=["POST"])
def generate_schedule_route(season_id):
    data = generate_schedule_schema.load(_json_body())
    rounds, error = generate_league_schedule(season_id, data["mode"])
    if error:
        return jsonify({"error": error}), _status_for(error)
    return jsonify({
        "message": "Schedule generated",
        "rounds": rounds_schema.dump(rounds),
    }), 201


@api_bp.route("/seasons/<int:season_id>/rounds", methods=["GET"])
def get_rounds(season_id):
    db.get_or_404(Season, season_id)
    kind = request.args.get("kind")
    if kind is not None and kind not in RoundKind.__members__:
        return jsonify({"error": f"Unknown round kind: {kind}"}), 400
    rounds = list_rounds(season_id, RoundKind[kind] if kind else None)
    return jsonify({"rounds": rounds_schema.dump(rounds)}), 200


@api_bp.route("/seasons/<int:season_id>/standings", methods=["GET"])
def get_standings(season_id):
    standings, error = season_standings(season_id)
    if error:
        return jsonify({"error": error}), _status_for(error)
    return jsonify(standings), 200


# ─── Knockout brackets ────────────────────────────────────────────────────────

@api_bp.route("/seasons/<int:season_id>/bracket", methods=["POST"])
def create_bracket_route(season_id):
    data = create_bracket_schema.load(_json_body())
    matches, error = create_tournament_bracket(season_id, third_place=data["third_place"])
    if error:
        return jsonify({"error": error}), _status_for(error)
    return jsonify({
        "message": "Bracket generated",
        "match_count": len(matches),
        "matches": matches_schema.dump(matches),
    }), 201


@api_bp.route("/seasons/<int:season_id>/bracket", methods=["GET"])
def get_bracket_route(season_id):
    bracket, error = get_bracket(season_id)
    if error:
        return jsonify({"error": error}), 404
    return jsonify({
        "rounds": rounds_schema.dump(bracket["rounds"]),
        "champion": bracket["champion"],
    }), 200


@api_bp.route("/seasons/<int:season_id>/bracket", methods=["DELETE"])
def reset_bracket_route(season_id):
    removed, error = reset_bracket(season_id)
    if error:
        return jsonify({"error": error}), 404
    return jsonify({"message": f"Bracket reset: {removed} match(es) deleted"}), 200


# ─── Cups ─────────────────────────────────────────────────────────────────────

@api_bp.route("/seasons/<int:season_id>/groups", methods=["POST"])
def create_groups_route(season_id):
    data = create_groups_schema.load(_json_body())
    rounds, error = create_group_stage(season_id, data["groups"])
    if error:
        return jsonify({"error": error}), _status_for(error)
    return jsonify({
        "message": "Group stage generated",
        "rounds": rounds_schema.dump(rounds),
    }), 201


@api_bp.route("/seasons/<int:season_id>/knockout", methods=["POST"])
def create_knockout_route(season_id):
    data = create_knockout_schema.load(_json_body())
    matches, error = create_knockout_from_groups(
        season_id, two_legged=data["two_legged"], third_place=data["third_place"]
    )
    if error:
        return jsonify({"error": error}), _status_for(error)
    return jsonify({
        "message": "Knockout stage generated",
        "match_count": len(matches),
        "matches": matches_schema.dump(matches),
    }), 201


# ─── Results ──────────────────────────────────────────────────────────────────

@api_bp.route("/matches/<int:match_id>/result", methods=["POST"])
def record_result_route(match_id):
    data = record_result_schema.load(_json_body())
    records = {name: data[name] for name in RECORD_FIELDS if data.get(name) is not None}

    result, error = record_match_result(
        match_id,
        data["home_score"],
        data["away_score"],
        records=records,
        manual_winner=data["manual_winner"],
    )
    if error:
        return jsonify({"error": error}), _status_for(error)

    return jsonify({
        "match": match_schema.dump(result["match"]),
        "updated": matches_schema.dump(result["updated"]),
        "needs_manual_winner": result["needs_manual_winner"],
        "awaiting_leg": result["awaiting_leg"],
        "winner": result["winner"],
    }), 200


# ─── SSE Events ──────────────────────────────────────────────────────────

@api_bp.route("/events/stream", methods=["GET"])
def event_stream():
    import queue as _queue
    from matchday.events import event_bus

    season_id = request.args.get("season_id", type=int)

    def generate():
        q = event_bus.subscribe(season_id)
        try:
            while True:
                try:
                    msg = q.get(timeout=30)
                    yield f"data: {msg}\n\n"
                except _queue.Empty:
                    yield ": keepalive\n\n"
        finally:
            event_bus.unsubscribe(q)

    return Response(
        generate(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
