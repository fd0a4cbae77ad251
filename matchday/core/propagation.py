"""Recording knockout results and moving winners through the bracket.

A ``BracketTree`` holds every match of one bracket keyed by id. Recording a
result never mutates the tree it was given; it returns a patched copy plus
the list of downstream matches that changed, which is what the store needs
to write back.

The bracket has a single writer. Re-scoring a match overwrites whatever its
old winner left in the next round and takes back anything that round had
already sent further on.
"""
import copy
import logging
from dataclasses import dataclass, field
from typing import List

from matchday.core.aggregate import resolve_tie, tie_id
from matchday.core.bracket import build_bracket
from matchday.core.errors import MatchNotFound
from matchday.core.types import TBD, TBD_REF, Match, MatchStatus, Resolution
from matchday.core.winner import as_side, resolve_winner

logger = logging.getLogger(__name__)

RECORD_FIELDS = ("home_scorers", "away_scorers", "home_assists", "away_assists")


class BracketTree:
    def __init__(self, matches=()):
        self._matches = {}
        for m in matches:
            self._matches[m.id] = m

    def __contains__(self, match_id):
        return match_id in self._matches

    def __getitem__(self, match_id):
        try:
            return self._matches[match_id]
        except KeyError:
            raise MatchNotFound(f"No match {match_id!r} in bracket") from None

    def __iter__(self):
        return iter(self._matches.values())

    def __len__(self):
        return len(self._matches)

    def get(self, match_id):
        return self._matches.get(match_id)

    def copy(self):
        return BracketTree(copy.deepcopy(list(self._matches.values())))

    def legs(self, match_id):
        """Matches making up a tie: the match itself, or both of its legs."""
        tie = tie_id(match_id)
        found = [m for m in self._matches.values() if m.id == tie or tie_id(m.id) == tie and m.leg]
        return sorted(found, key=lambda m: m.leg or 0)

    def final(self):
        return next((m for m in self if m.stage == "FINAL"), None)

    def champion(self):
        final = self.final()
        if final is None:
            return None
        resolution = resolve_winner(final)
        return resolution.winner if resolution.decisive else None


@dataclass
class RecordOutcome:
    tree: BracketTree
    match: Match
    resolution: Resolution
    downstream: List[Match] = field(default_factory=list)
    awaiting_leg: bool = False
    missing_team: bool = False

    @property
    def decisive(self):
        return self.resolution.decisive

    @property
    def undecided(self):
        """Played to a level score and still waiting for a manual winner."""
        return self.match.is_played and not self.resolution.decisive and not self.awaiting_leg


# ── Resolution ───────────────────────────────────────────────────────────────

def _resolve(tree, match, manual_override=None):
    if not match.leg:
        return resolve_winner(match, manual_override)

    legs = {m.leg: m for m in tree.legs(match.id)}
    leg1, leg2 = legs.get(1), legs.get(2)
    if leg1 is None:
        return Resolution.undecided()

    override = as_side(manual_override)
    if override is not None:
        # the override names a side of the match being recorded; the tie
        # is resolved in leg 1's orientation
        override = leg1.side_of(match.team_on(override).name)
    _, resolution = resolve_tie(leg1, leg2, override)
    return resolution


def _mark_walkover(tree, match):
    for leg in tree.legs(match.id):
        leg.status = MatchStatus.COMPLETED


def _slot_side(side, target):
    return side.other if target.leg == 2 else side


def _retract(tree, match, touched):
    """Take back the teams a played tie sent on, down to the final.

    Used before a tie is reset, so a team it knocked out earlier cannot stay
    in later rounds.
    """
    legs = tree.legs(match.id)
    if not legs or not all(m.is_played for m in legs):
        return
    side = match.next_match_side
    if side is None:
        return

    for target_id in (match.next_match_id, match.loser_match_id):
        if not target_id:
            continue
        targets = tree.legs(target_id)
        if all(t.team_on(_slot_side(side, t)).name == TBD for t in targets):
            continue
        _retract(tree, targets[0], touched)
        for target in targets:
            target.put(_slot_side(side, target), TBD_REF)
            target.clear_result()
            touched[target.id] = target


def _advance(tree, source, resolution):
    """Push winners (and third-place losers) downstream, following byes."""
    touched = {}
    pending = [(source, resolution)]

    while pending:
        src, res = pending.pop(0)

        if src.next_match_id and src.next_match_side:
            targets = tree.legs(src.next_match_id)
            if not targets:
                logger.warning(
                    "Match %s points at missing match %s; winner not advanced",
                    src.id, src.next_match_id,
                )
            else:
                _retract(tree, targets[0], touched)
                for target in targets:
                    target.put(_slot_side(src.next_match_side, target), res.winner)
                    target.clear_result()
                    touched[target.id] = target

                head = targets[0]
                if head.has_bye:
                    walkover = _resolve(tree, head)
                    if walkover.decisive:
                        _mark_walkover(tree, head)
                        pending.append((head, walkover))

        loser = res.loser
        if src.loser_match_id and src.next_match_side and loser is not None and loser.name != TBD:
            targets = tree.legs(src.loser_match_id)
            if targets:
                _retract(tree, targets[0], touched)
            for target in targets:
                target.put(src.next_match_side, loser)
                target.clear_result()
                touched[target.id] = target
            if targets and targets[0].has_bye:
                walkover = _resolve(tree, targets[0])
                if walkover.decisive:
                    _mark_walkover(tree, targets[0])
                    pending.append((targets[0], walkover))

    return list(touched.values())


# ── Public operations ────────────────────────────────────────────────────────

def record_result(tree, match_id, home_score, away_score, manual_override=None, records=None):
    """Store a score and advance the winner if there is one.

    Level scores without ``manual_override`` are stored but nothing moves;
    ``RecordOutcome.undecided`` tells the caller to ask for a winner.
    A match with an open TBD slot is left alone and comes back with
    ``missing_team`` set.
    """
    tree = tree.copy()
    match = tree[match_id]
    if TBD in (match.home, match.away):
        logger.info("Match %s still has an open slot; result not recorded", match.id)
        return RecordOutcome(
            tree=tree, match=match, resolution=Resolution.undecided(), missing_team=True
        )

    match.home_score = str(home_score).strip()
    match.away_score = str(away_score).strip()
    match.status = MatchStatus.COMPLETED
    for name in RECORD_FIELDS:
        if records and name in records:
            setattr(match, name, list(records[name] or []))

    resolution = _resolve(tree, match, manual_override)
    awaiting_leg = False
    if match.leg:
        legs = tree.legs(match.id)
        awaiting_leg = len(legs) < 2 or not all(m.is_played for m in legs)
    outcome = RecordOutcome(tree=tree, match=match, resolution=resolution, awaiting_leg=awaiting_leg)
    if not resolution.decisive:
        if outcome.undecided:
            logger.info("Match %s is level with no manual winner; bracket unchanged", match.id)
        return outcome

    outcome.downstream = _advance(tree, match, resolution)
    return outcome


def resolve_byes(tree):
    """Settle every match that has a BYE on one side, cascading.

    Returns the patched tree and the matches that changed.
    """
    tree = tree.copy()
    changed = {}
    for match in tree:
        if match.leg == 2 or not match.has_bye or match.is_played:
            continue
        resolution = _resolve(tree, match)
        if not resolution.decisive:
            continue
        _mark_walkover(tree, match)
        changed[match.id] = match
        for m in _advance(tree, match, resolution):
            changed[m.id] = m
    return tree, list(changed.values())


def create_bracket(entrants, prefix="ko", two_legged=False, third_place=False):
    """Build a bracket from seated entrants and play out its byes."""
    tree = BracketTree(build_bracket(entrants, prefix, two_legged, third_place))
    tree, _ = resolve_byes(tree)
    return tree
