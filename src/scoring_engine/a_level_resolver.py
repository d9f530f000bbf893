"""A-level rules.

A team at the top level must still *clear* A to finish the game, and a team
that keeps losing its own A rounds is sent back to the bottom:

* Winner at A, round at A: lenient mode always clears; strict mode clears
  only when the winner owns the round.
* Loser at A, round at A, loser owns the round: one more A-fail. The
  ``A_FAIL_LIMIT``-th fail resets the team to level 2 with a clean counter.

"Owns the round" comes from the caller's tracked round owner when known,
otherwise it falls back to the team's level matching the round level.
"""

import logging
from typing import Optional

from src.scoring_engine.config import A_CLEAR_UPGRADE, A_FAIL_LIMIT, NOTE_SEPARATOR
from src.scoring_engine.level_track import DEFAULT_TRACK
from src.scoring_engine.models import ALevelResolution, TeamLevelState

logger = logging.getLogger(__name__)


def _owns_round(team: TeamLevelState, round_level: str, flag: Optional[bool]) -> bool:
    if flag is not None:
        return flag
    return team.level == round_level


def applies_to(
    winner: TeamLevelState, loser: TeamLevelState, round_level: str
) -> bool:
    """Whether the A-level rules have anything to say about this round."""
    return DEFAULT_TRACK.is_top(round_level) and (winner.at_top or loser.at_top)


def resolve_a_level(
    winner: TeamLevelState,
    loser: TeamLevelState,
    round_level: str,
    strict_mode: bool,
    *,
    winner_owns_round: Optional[bool] = None,
    loser_owns_round: Optional[bool] = None,
    winner_name: str = "Winner",
    loser_name: str = "Loser",
) -> ALevelResolution:
    """Apply the A-level rules to a decided round.

    Args:
        winner: Winning team's state before the round.
        loser: Losing team's state before the round.
        round_level: Level the round was played at.
        strict_mode: Require clearing A on the winner's own round.
        winner_owns_round: Explicit ownership, overriding the level check.
        loser_owns_round: Explicit ownership, overriding the level check.
        winner_name: Display name used in the note.
        loser_name: Display name used in the note.

    Returns:
        ALevelResolution holding fresh team states; inputs are untouched.
    """
    round_level = DEFAULT_TRACK.normalize(round_level)
    if not applies_to(winner, loser, round_level):
        return ALevelResolution(winner=winner, loser=loser)

    notes = []
    winner_upgrade = 0
    cleared = False

    if winner.at_top:
        if not strict_mode or _owns_round(winner, round_level, winner_owns_round):
            winner_upgrade = A_CLEAR_UPGRADE
            cleared = True
            notes.append(f"{winner_name} clears A!")
        else:
            notes.append(
                f"{winner_name} won on the opponent's A round, no level-up"
            )

    new_loser = loser
    demoted = False

    if loser.at_top:
        if _owns_round(loser, round_level, loser_owns_round):
            demoted = loser.a_fail_count + 1 >= A_FAIL_LIMIT
            new_loser = loser.with_a_fail()
            if demoted:
                notes.append(
                    f"{loser_name} failed A{A_FAIL_LIMIT}, "
                    f"back to {DEFAULT_TRACK.bottom}"
                )
            else:
                notes.append(f"{loser_name} A{new_loser.a_fail_count} failed")

    resolution = ALevelResolution(
        winner=winner.advanced(winner_upgrade),
        loser=new_loser,
        winner_upgrade=winner_upgrade,
        cleared=cleared,
        demoted=demoted,
        note=NOTE_SEPARATOR.join(notes),
    )

    logger.debug(
        "A-level round (strict=%s): cleared=%s demoted=%s note=%r",
        strict_mode,
        cleared,
        demoted,
        resolution.note,
    )
    return resolution
