"""
Service control policy documents.

Builds the policy document from a mode, a service name and the actions that
cleared the usage threshold.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

from .errors import InvalidModeError, ParseError

POLICY_VERSION = "2012-10-17"
ALL_RESOURCES = "*"


class PolicyMode(Enum):
    """Effect applied to every action in the generated policy."""
    ALLOW = "Allow"
    DENY = "Deny"

    @classmethod
    def parse(cls, value: str) -> "PolicyMode":
        """Parse a mode name case-insensitively.

        Raises:
            InvalidModeError: If value is not allow or deny
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for mode in cls:
                if mode.value.lower() == value.lower():
                    return mode
        raise InvalidModeError(str(value))


@dataclass(frozen=True)
class PolicyDocument:
    """A single-statement policy document.

    The effect is scalar for the whole document, so a document without any
    actions still carries it.
    """
    effect: PolicyMode
    actions: Tuple[str, ...] = ()
    version: str = POLICY_VERSION
    resource: str = ALL_RESOURCES

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON wire representation."""
        return {
            "Version": self.version,
            "Statement": {
                "Effect": self.effect.value,
                "Action": list(self.actions),
            },
            "Resource": self.resource,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PolicyDocument":
        """Rebuild a document from its wire representation.

        Raises:
            ParseError: If the document shape is invalid
        """
        if not isinstance(data, Mapping):
            raise ParseError("policy document must be an object")

        statement = data.get("Statement")
        if not isinstance(statement, Mapping):
            raise ParseError("policy document 'Statement' must be an object")

        version = data.get("Version")
        resource = data.get("Resource")
        if not isinstance(version, str) or not isinstance(resource, str):
            raise ParseError("policy document 'Version' and 'Resource' must be strings")

        actions = statement.get("Action") or []
        if not isinstance(actions, list) or not all(isinstance(a, str) for a in actions):
            raise ParseError("policy document 'Action' must be a list of strings")

        try:
            effect = PolicyMode.parse(statement.get("Effect"))
        except InvalidModeError as e:
            raise ParseError(f"policy document has invalid 'Effect': {e}") from e

        return cls(
            effect=effect,
            actions=tuple(actions),
            version=version,
            resource=resource
        )


def synthesize(mode: PolicyMode, service_name: str, tally: Mapping[str, int]) -> PolicyDocument:
    """Build a policy document granting or denying each tallied action.

    Args:
        mode: Effect of the policy
        service_name: Service prefix, e.g. ``s3``
        tally: Qualifying action names mapped to their call counts

    Returns:
        PolicyDocument with one ``<service>:<action>`` entry per tally key
    """
    actions = tuple(f"{service_name}:{action}" for action in tally)
    return PolicyDocument(effect=mode, actions=actions)
