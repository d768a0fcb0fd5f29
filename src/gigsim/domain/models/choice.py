from __future__ import annotations

from dataclasses import dataclass, field

from gigsim.domain.models.consequence import ConsequenceTrigger


@dataclass(frozen=True)
class PlayerChoice:
    """A validated player decision folded into the long-running trackers.

    ``psychological_effects`` keys are ``corruption``, ``addiction`` or one of
    the mental health fields; insertion order is the order deltas apply.
    ``resolve_consequence`` closes an active thread while recovery is still
    possible; ``demote_consequence`` pushes one back to the dormant pool.
    """

    choice_id: str
    faction_effects: dict[str, float] = field(default_factory=dict)
    consequence: ConsequenceTrigger | None = None
    psychological_effects: dict[str, float] = field(default_factory=dict)
    event_type: str | None = None
    resolve_consequence: str | None = None
    demote_consequence: str | None = None
