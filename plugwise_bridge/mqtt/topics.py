"""Topic templates and the action topic lookup.

Topic templates contain ``{name}`` placeholders, for example
``gBridge/u1/{applianceId}/thermostat``. Commands arrive on concrete topics
where the placeholder is replaced by a Plugwise appliance ID, a run of 32
lowercase alphanumeric characters.
"""

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from ..errors import MalformedTopicError

if TYPE_CHECKING:
    from ..config import ActionTopicConfig, TopicsConfig

PLACEHOLDER_PATTERN = re.compile(r"\{([a-zA-Z]+)\}")
APPLIANCE_ID_PLACEHOLDER = "{applianceId}"
APPLIANCE_ID_PATTERN = r"[a-z0-9]{32}"
SINGLE_LEVEL_WILDCARD = "+"

logger = logging.getLogger(__name__)


def render_template(template: str, values: Mapping[str, Any]) -> str:
    """Substitute ``{name}`` placeholders with values.

    Placeholders without a matching key are left untouched. Literal braces
    cannot be escaped.

    Args:
        template: Template string
        values: Placeholder values, converted with str()

    Returns:
        Rendered string

    Examples:
        >>> render_template("plugwise/{applianceId}/{name}", {"applianceId": "abc"})
        'plugwise/abc/{name}'
    """

    def replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name in values:
            return str(values[name])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace, template)


class TopicPattern:
    """A topic template split at its placeholder positions."""

    def __init__(self, template: str):
        self.template = template
        # Literal segments at even indexes, placeholder names at odd indexes
        self._parts = PLACEHOLDER_PATTERN.split(template)

    @property
    def placeholders(self) -> List[str]:
        """Placeholder names in order of appearance."""
        return self._parts[1::2]

    @property
    def wildcard(self) -> str:
        """Subscribable filter with every placeholder replaced by ``+``."""
        return self._join(SINGLE_LEVEL_WILDCARD)

    @property
    def key(self) -> str:
        """Lookup key with every placeholder collapsed to ``{applianceId}``."""
        return self._join(APPLIANCE_ID_PLACEHOLDER)

    def _join(self, replacement: str) -> str:
        return replacement.join(self._parts[0::2])

    def __repr__(self) -> str:
        return f"TopicPattern({self.template!r})"


class DeviceIdMatcher:
    """Locates the appliance ID in a concrete topic.

    Only the first run of characters matching the ID pattern is treated as
    the appliance ID; any later runs are left alone.
    """

    def __init__(self, pattern: str = APPLIANCE_ID_PATTERN):
        self._regex = re.compile(pattern)

    def normalize(self, topic: str) -> str:
        """Replace the first appliance ID in the topic with ``{applianceId}``."""
        return self._regex.sub(APPLIANCE_ID_PLACEHOLDER, topic, count=1)

    def extract(self, topic: str) -> Optional[str]:
        """Return the first appliance ID in the topic, or None."""
        match = self._regex.search(topic)
        return match.group(0) if match else None


@dataclass(frozen=True)
class ActionLookupEntry:
    """Action type and topics belonging to one lookup key."""

    action_type: str
    config: "ActionTopicConfig"


@dataclass(frozen=True)
class ActionMatch:
    """Result of matching a concrete topic against the lookup."""

    entry: ActionLookupEntry
    appliance_id: str
    status_topic: str

    @property
    def action_type(self) -> str:
        return self.entry.action_type


class ActionLookup:
    """Read-only table from normalized listen topics to actions.

    Build it with from_config() once the broker connection is up.
    """

    def __init__(
        self,
        table: Dict[str, ActionLookupEntry],
        subscriptions: Optional[List[str]] = None,
        matcher: Optional[DeviceIdMatcher] = None,
    ):
        self._table = dict(table)
        self.subscriptions = list(subscriptions or [])
        self.matcher = matcher or DeviceIdMatcher()

    @classmethod
    def from_config(cls, topics: "TopicsConfig", matcher: Optional[DeviceIdMatcher] = None) -> "ActionLookup":
        """Build the lookup from the configured action groups.

        If two listen templates collapse to the same key the last one wins.

        Args:
            topics: Topic configuration
            matcher: Appliance ID matcher (default: 32 char lowercase alphanumeric)

        Returns:
            ActionLookup instance
        """
        table: Dict[str, ActionLookupEntry] = {}
        subscriptions: List[str] = []

        for group_name, group in topics.action.items():
            for action_type, action_topics in group.items():
                key = TopicPattern(action_topics.listen).key
                if key in table:
                    logger.warning(
                        f"Action topic {action_topics.listen} ({group_name}/{action_type}) "
                        f"overrides {table[key].action_type} action for {key}"
                    )
                table[key] = ActionLookupEntry(action_type=action_type, config=action_topics)

                for template in (action_topics.listen, action_topics.status):
                    subscriptions.append(TopicPattern(template).wildcard)

        # Keep the first occurrence of each filter
        return cls(table, list(dict.fromkeys(subscriptions)), matcher)

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, key: str) -> bool:
        return key in self._table

    def lookup(self, topic: str) -> Optional[ActionLookupEntry]:
        """Find the action for a concrete topic without extracting the appliance ID."""
        return self._table.get(self.matcher.normalize(topic))

    def match(self, topic: str) -> Optional[ActionMatch]:
        """Match a concrete topic against the configured actions.

        Args:
            topic: Topic the message arrived on

        Returns:
            ActionMatch, or None if the topic is not an action topic

        Raises:
            MalformedTopicError: If the topic is an action topic but holds no appliance ID
        """
        entry = self.lookup(topic)
        if entry is None:
            return None

        appliance_id = self.matcher.extract(topic)
        if appliance_id is None:
            raise MalformedTopicError(topic=topic, action_type=entry.action_type)

        status_topic = render_template(entry.config.status, {"applianceId": appliance_id})
        return ActionMatch(entry=entry, appliance_id=appliance_id, status_topic=status_topic)
