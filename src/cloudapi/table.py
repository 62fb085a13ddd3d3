"""
TableClient - attribute store actions over the signing engine
"""

from typing import List, Mapping, Optional, Sequence, Union

from ._errors import child_text, local_name, parse_xml
from .client import ServiceClient
from .config import ClientConfig, ServiceFamily
from .error import ConfigurationException
from .models import ResponseOutcome, TableItem
from .pagination import CursorLocation, Page, extract_cursor

TABLE_CURSOR = CursorLocation.in_body("NextToken")

AttributeValues = Mapping[str, Union[str, Sequence[str]]]


def _attributes_into(item: TableItem, node) -> None:
    for child in list(node):
        if local_name(child.tag) == "Attribute":
            name = child_text(child, "Name")
            item.attributes.setdefault(name, []).append(child_text(child, "Value"))


def parse_item(outcome: ResponseOutcome, item_name: str) -> Optional[TableItem]:
    """Item from a GetAttributes response; None when the call failed."""
    root = parse_xml(outcome.body) if outcome.ok else None
    if root is None:
        return None
    item = TableItem(name=item_name)
    for node in root.iter():
        if local_name(node.tag) == "GetAttributesResult":
            _attributes_into(item, node)
    return item


class TableClient(ServiceClient):
    """Attribute store (domains of items with multi-valued attributes)."""

    def __init__(self, config: ClientConfig, **kwargs):
        if config.family is not ServiceFamily.TABLE:
            raise ConfigurationException("TableClient requires a table service configuration.")
        super().__init__(config, **kwargs)

    def list_domains(self, cursor: Optional[str] = None, max_domains: Optional[int] = None) -> Page[str]:
        params = []
        if max_domains:
            params.append(("MaxNumberOfDomains", str(max_domains)))
        outcome = self.action("ListDomains", params, cursor=cursor)

        names = []
        root = parse_xml(outcome.body) if outcome.ok else None
        if root is not None:
            names = [
                node.text
                for node in root.iter()
                if local_name(node.tag) == "DomainName" and node.text
            ]
        return Page(items=names, next_cursor=extract_cursor(outcome, TABLE_CURSOR), outcome=outcome)

    def create_domain(self, domain_name: str) -> ResponseOutcome:
        return self.action("CreateDomain", [("DomainName", domain_name)])

    def delete_domain(self, domain_name: str) -> ResponseOutcome:
        return self.action("DeleteDomain", [("DomainName", domain_name)])

    def put_attributes(
        self,
        domain_name: str,
        item_name: str,
        attributes: AttributeValues,
        replace: bool = False,
    ) -> ResponseOutcome:
        params = [("DomainName", domain_name), ("ItemName", item_name)]
        index = 0
        for name in sorted(attributes):
            values = attributes[name]
            if isinstance(values, str):
                values = [values]
            for value in values:
                index += 1
                params.append((f"Attribute.{index}.Name", name))
                params.append((f"Attribute.{index}.Value", value))
                if replace:
                    params.append((f"Attribute.{index}.Replace", "true"))
        return self.action("PutAttributes", params)

    def get_attributes(self, domain_name: str, item_name: str) -> ResponseOutcome:
        return self.action("GetAttributes", [("DomainName", domain_name), ("ItemName", item_name)])

    def select(
        self,
        expression: str,
        cursor: Optional[str] = None,
        consistent_read: bool = False,
    ) -> Page[TableItem]:
        """One page of a select query. The expression must be repeated unchanged with the cursor."""
        params = [("SelectExpression", expression)]
        if consistent_read:
            params.append(("ConsistentRead", "true"))
        outcome = self.action("Select", params, cursor=cursor)

        items: List[TableItem] = []
        root = parse_xml(outcome.body) if outcome.ok else None
        if root is not None:
            for node in root.iter():
                if local_name(node.tag) == "Item":
                    item = TableItem(name=child_text(node, "Name"))
                    _attributes_into(item, node)
                    items.append(item)
        return Page(items=items, next_cursor=extract_cursor(outcome, TABLE_CURSOR), outcome=outcome)
