import random

import click
from flask.cli import AppGroup

from matchday.core.types import BYE, TBD, MatchStatus
from matchday.extensions import db
from matchday.models.match import Match
from matchday.models.round import Round
from matchday.models.season import Season
from matchday.seeds.data import DEMO_OWNERS, DEMO_SEASON
from matchday.services.match_service import record_match_result
from matchday.services.season_service import add_team, create_season, generate_league_schedule

seed_cli = AppGroup("seed", help="Seed database commands.")


@seed_cli.command("init-db")
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("Database tables created.")


@seed_cli.command("demo")
@click.option("--name", default=DEMO_SEASON["name"], help="Season name.")
@click.option(
    "--type",
    "season_type",
    type=click.Choice(["LEAGUE", "TOURNAMENT", "CUP"], case_sensitive=False),
    default=DEMO_SEASON["type"],
)
def seed_demo(name, season_type):
    """Seed a season with four owners and two teams each."""
    season = create_season({
        "name": name,
        "type": season_type.upper(),
        "league_mode": DEMO_SEASON["league_mode"],
    })

    created = 0
    for owner, teams in DEMO_OWNERS.items():
        for team_name, region, tier in teams:
            _, error = add_team(season.id, {
                "name": team_name,
                "owner_name": owner,
                "region": region,
                "tier": tier,
            })
            if error:
                raise click.ClickException(error)
            created += 1

    click.echo(f"Created season {season.id} ({season.type.value}) with {created} teams.")


@seed_cli.command("schedule")
@click.argument("season_id", type=int)
@click.option(
    "--mode",
    type=click.Choice(["single", "double"], case_sensitive=False),
    default=None,
    help="Defaults to the season's league mode.",
)
@click.option("--seed", "rng_seed", type=int, default=None, help="Seed for a reproducible schedule.")
def seed_schedule(season_id, mode, rng_seed):
    """Generate the league schedule of a season and print its rounds."""
    rng = random.Random(rng_seed)
    rounds, error = generate_league_schedule(season_id, mode.upper() if mode else None, rng=rng)
    if error:
        raise click.ClickException(error)

    for round_row in rounds:
        click.echo(round_row.name)
        for match in round_row.matches:
            click.echo(f"  {match.code}: {match.home} ({match.home_owner}) vs {match.away} ({match.away_owner})")
    click.echo(f"{len(rounds)} rounds generated.")


@seed_cli.command("simulate-results")
@click.argument("season_id", type=int)
@click.option("--seed", "rng_seed", type=int, default=42)
def seed_simulate_results(season_id, rng_seed):
    """Record random scores for every playable match of a season.

    Level knockout matches are given to the home side.
    """
    if not db.session.get(Season, season_id):
        raise click.ClickException("Season not found")

    rng = random.Random(rng_seed)
    recorded = 0
    errors = []

    # knockout winners only fill the next round once recorded, so sweep until
    # nothing playable is left
    while True:
        pending = (
            Match.query.join(Round)
            .filter(Match.season_id == season_id, Match.status == MatchStatus.UPCOMING)
            .filter(Match.home.notin_([TBD, BYE]), Match.away.notin_([TBD, BYE]))
            .order_by(Round.number, Match.position)
            .all()
        )
        if not pending:
            break

        for match in pending:
            result, err = record_match_result(
                match.id, rng.randint(0, 4), rng.randint(0, 4)
            )
            if not err and result["needs_manual_winner"]:
                result, err = record_match_result(
                    match.id,
                    result["match"].home_score,
                    result["match"].away_score,
                    manual_winner="HOME",
                )
            if err:
                errors.append(f"Match {match.code}: {err}")
                continue
            recorded += 1

        if errors:
            break

    click.echo(f"Recorded: {recorded}")
    if errors:
        click.echo(f"Errors ({len(errors)}):")
        for e in errors:
            click.echo(f"  - {e}")
