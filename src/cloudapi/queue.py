"""
QueueClient - message queue actions over the signing engine
"""

from typing import Dict, List, Optional

from ._errors import child_text, local_name, parse_xml
from .client import ServiceClient
from .config import ClientConfig, ServiceFamily
from .error import ConfigurationException
from .models import QueueMessage, ResponseOutcome
from .pagination import CursorLocation, Page, extract_cursor

QUEUES_CURSOR = CursorLocation.in_body("NextToken")


def parse_queue_url(outcome: ResponseOutcome) -> Optional[str]:
    root = parse_xml(outcome.body) if outcome.ok else None
    if root is None:
        return None
    for node in root.iter():
        if local_name(node.tag) == "QueueUrl" and node.text:
            return node.text.strip()
    return None


def parse_messages(outcome: ResponseOutcome) -> List[QueueMessage]:
    root = parse_xml(outcome.body) if outcome.ok else None
    if root is None:
        return []
    return [
        QueueMessage(
            message_id=child_text(node, "MessageId"),
            receipt_handle=child_text(node, "ReceiptHandle"),
            body=child_text(node, "Body"),
            md5_of_body=child_text(node, "MD5OfBody") or None,
        )
        for node in root.iter()
        if local_name(node.tag) == "Message"
    ]


class QueueClient(ServiceClient):
    """Queue service client. Queue-scoped actions take the queue URL."""

    def __init__(self, config: ClientConfig, **kwargs):
        if config.family is not ServiceFamily.QUEUE:
            raise ConfigurationException("QueueClient requires a queue service configuration.")
        super().__init__(config, **kwargs)

    def list_queues(
        self,
        prefix: Optional[str] = None,
        cursor: Optional[str] = None,
        max_results: Optional[int] = None,
    ) -> Page[str]:
        params = []
        if prefix:
            params.append(("QueueNamePrefix", prefix))
        if max_results:
            params.append(("MaxResults", str(max_results)))
        outcome = self.action("ListQueues", params, cursor=cursor)

        urls = []
        root = parse_xml(outcome.body) if outcome.ok else None
        if root is not None:
            urls = [
                node.text.strip()
                for node in root.iter()
                if local_name(node.tag) == "QueueUrl" and node.text
            ]
        return Page(items=urls, next_cursor=extract_cursor(outcome, QUEUES_CURSOR), outcome=outcome)

    def create_queue(self, queue_name: str, attributes: Optional[Dict[str, str]] = None) -> ResponseOutcome:
        params = [("QueueName", queue_name)]
        for index, (name, value) in enumerate(sorted((attributes or {}).items()), start=1):
            params.append((f"Attribute.{index}.Name", name))
            params.append((f"Attribute.{index}.Value", value))
        return self.action("CreateQueue", params)

    def delete_queue(self, queue_url: str) -> ResponseOutcome:
        return self.action("DeleteQueue", path=queue_url)

    def send_message(
        self,
        queue_url: str,
        message_body: str,
        delay_seconds: Optional[int] = None,
    ) -> ResponseOutcome:
        params = [("MessageBody", message_body)]
        if delay_seconds is not None:
            params.append(("DelaySeconds", str(delay_seconds)))
        return self.action("SendMessage", params, path=queue_url)

    def receive_message(
        self,
        queue_url: str,
        max_messages: int = 1,
        wait_seconds: Optional[int] = None,
    ) -> ResponseOutcome:
        params = [("MaxNumberOfMessages", str(max_messages))]
        if wait_seconds is not None:
            params.append(("WaitTimeSeconds", str(wait_seconds)))
        return self.action("ReceiveMessage", params, path=queue_url)

    def delete_message(self, queue_url: str, receipt_handle: str) -> ResponseOutcome:
        return self.action("DeleteMessage", [("ReceiptHandle", receipt_handle)], path=queue_url)
