"""
Bucket lifecycle configuration documents
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from ._errors import child_text, local_name, parse_xml


class StorageClass(str, Enum):
    STANDARD = "STANDARD"
    STANDARD_IA = "STANDARD_IA"
    GLACIER = "GLACIER"
    REDUCED_REDUNDANCY = "REDUCED_REDUNDANCY"

    @classmethod
    def parse(cls, name: str) -> "StorageClass":
        try:
            return cls(name)
        except ValueError:
            return cls.STANDARD


def _value(parent: ET.Element, tag: str, text: str) -> ET.Element:
    node = ET.SubElement(parent, tag)
    node.text = text
    return node


def _int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return 0


@dataclass
class LifecycleTransition:
    """Move objects to ``storage_class`` ``days`` after creation."""

    days: int
    storage_class: StorageClass = StorageClass.STANDARD

    def to_element(self) -> ET.Element:
        node = ET.Element("Transition")
        _value(node, "Days", str(self.days))
        _value(node, "StorageClass", StorageClass(self.storage_class).value)
        return node


@dataclass
class LifecycleRule:
    """
    One lifecycle rule. Day counts of zero leave the matching action out of
    the document.
    """

    id: str
    prefix: str = ""
    enabled: bool = True
    transitions: List[LifecycleTransition] = field(default_factory=list)
    expiration_days: int = 0
    noncurrent_version_transition_days: int = 0
    noncurrent_version_transition_storage_class: StorageClass = StorageClass.STANDARD
    noncurrent_version_expiration_days: int = 0

    def __post_init__(self):
        if len(self.id) > 255:
            raise ValueError("Lifecycle rule id cannot be longer than 255 characters.")

    def add_transition(self, days: int, storage_class: StorageClass) -> int:
        self.transitions.append(LifecycleTransition(days, storage_class))
        return len(self.transitions) - 1

    def delete_transition(self, index: int) -> None:
        if index < 0 or index >= len(self.transitions):
            raise IndexError(f"Transition index {index} out of range.")
        del self.transitions[index]

    def to_element(self) -> ET.Element:
        node = ET.Element("Rule")
        _value(node, "ID", self.id)
        _value(node, "Prefix", self.prefix)
        _value(node, "Status", "Enabled" if self.enabled else "Disabled")
        for transition in self.transitions:
            node.append(transition.to_element())

        if self.expiration_days > 0:
            expiration = ET.SubElement(node, "Expiration")
            _value(expiration, "Days", str(self.expiration_days))

        if self.noncurrent_version_transition_days > 0:
            transition = ET.SubElement(node, "NoncurrentVersionTransition")
            _value(transition, "NoncurrentDays", str(self.noncurrent_version_transition_days))
            _value(
                transition,
                "StorageClass",
                StorageClass(self.noncurrent_version_transition_storage_class).value,
            )

        if self.noncurrent_version_expiration_days > 0:
            expiration = ET.SubElement(node, "NoncurrentVersionExpiration")
            _value(expiration, "NoncurrentDays", str(self.noncurrent_version_expiration_days))

        return node

    @classmethod
    def from_element(cls, node: ET.Element) -> "LifecycleRule":
        rule = cls(
            id=child_text(node, "ID"),
            prefix=child_text(node, "Prefix"),
            enabled=child_text(node, "Status") == "Enabled",
        )
        for child in list(node):
            tag = local_name(child.tag)
            if tag == "Transition":
                rule.add_transition(
                    _int(child_text(child, "Days")),
                    StorageClass.parse(child_text(child, "StorageClass")),
                )
            elif tag == "Expiration":
                rule.expiration_days = _int(child_text(child, "Days"))
            elif tag == "NoncurrentVersionTransition":
                rule.noncurrent_version_transition_days = _int(child_text(child, "NoncurrentDays"))
                rule.noncurrent_version_transition_storage_class = StorageClass.parse(
                    child_text(child, "StorageClass")
                )
            elif tag == "NoncurrentVersionExpiration":
                rule.noncurrent_version_expiration_days = _int(child_text(child, "NoncurrentDays"))
        return rule


@dataclass
class LifecycleConfiguration:
    rules: List[LifecycleRule] = field(default_factory=list)

    def add_rule(self, rule: LifecycleRule) -> int:
        self.rules.append(rule)
        return len(self.rules) - 1

    def delete_rule(self, index: int) -> None:
        if index < 0 or index >= len(self.rules):
            raise IndexError(f"Rule index {index} out of range.")
        del self.rules[index]

    def to_xml(self) -> bytes:
        root = ET.Element("LifecycleConfiguration")
        for rule in self.rules:
            root.append(rule.to_element())
        return ET.tostring(root, encoding="utf-8", method="xml")

    @classmethod
    def from_xml(cls, body: Union[str, bytes]) -> Optional["LifecycleConfiguration"]:
        """Parse a lifecycle document; returns None when the body is not one."""
        root = parse_xml(body)
        if root is None or local_name(root.tag) != "LifecycleConfiguration":
            return None
        return cls(rules=[
            LifecycleRule.from_element(node)
            for node in list(root)
            if local_name(node.tag) == "Rule"
        ])
