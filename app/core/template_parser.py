"""
Trigger Template Parser

Parses a /create-trigger definition into an ActionTemplate:

    vacation = On a boat! (:boat:) DND for 1w

    name     = vacation
    status   = On a boat!
    emoji    = :boat:
    DND      = yes
    duration = 1w

Grammar (single line, anchored at both ends):

    name "=" [" " statusText] " " "(" emoji ")" [" DND"] [" for " duration]

Parsing happens once, when the trigger is created; the parsed template is what
gets stored.
"""

import re
import logging
from datetime import timedelta

from app.core.duration import parse_duration
from app.core.errors import InvalidDurationError, TriggerDefinitionError
from app.models.trigger import Action, ActionTemplate, Presence

logger = logging.getLogger(__name__)

_NAME = r"[\w-]+"
_DEFINITION = re.compile(
    rf"^(?P<name>{_NAME}) ?=(?: ?(?P<text>.+))? +\((?P<emoji>.*)\)(?P<dnd> DND)?(?: for (?P<duration>\S+))?$"
)

USAGE_EXAMPLE = "/create-trigger vacation = I'm on a boat! (:boat:) DND for 1w"
DURATION_EXAMPLES = "15m, 1h, 2d, 1w"


def is_trigger_name(name: str) -> bool:
    """True if the name could have been created by /create-trigger."""
    return re.fullmatch(_NAME, name) is not None


def parse_template(definition: str) -> ActionTemplate:
    """
    Parse a trigger definition.

    Args:
        definition: Text typed after /create-trigger

    Returns:
        ActionTemplate with presence=away. team_id is left empty for the caller to stamp.

    Raises:
        TriggerDefinitionError: If the definition does not match the grammar
        InvalidDurationError: If the "for" duration is not a valid duration
    """
    definition = definition.strip()
    match = _DEFINITION.match(definition)
    if not match:
        raise TriggerDefinitionError(
            f"Invalid trigger definition {definition!r}. "
            f"Use NAME = [STATUS] (EMOJI) [DND] [for DURATION], "
            f"for example: {USAGE_EXAMPLE}"
        )

    duration = match.group("duration") or ""
    try:
        interval = parse_duration(duration)
    except InvalidDurationError:
        interval = None

    # Slack snoozes and status expiries are in whole minutes
    if interval is None or (duration and interval < timedelta(minutes=1)):
        raise InvalidDurationError(
            duration,
            f"invalid duration in trigger definition {duration!r}, "
            f"here are some examples: {DURATION_EXAMPLES}",
        )

    template = ActionTemplate(
        name=match.group("name"),
        action=Action(
            presence=Presence.AWAY,
            status_text=(match.group("text") or "").strip(),
            status_emoji=match.group("emoji"),
            dnd=match.group("dnd") is not None,
            duration=duration,
        ),
    )

    logger.debug(f"Parsed trigger definition {definition!r} -> {template.summary()!r}")
    return template
