"""
Run summary notifications.

Publishes the end-of-run summary to an SNS topic when ``ALERT_SNS_TOPIC_ARN``
is configured, otherwise logs it. Callers treat any failure here as
non-fatal.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

import boto3

if TYPE_CHECKING:
    from officials_pipeline.orchestrator import RunSummary

logger = logging.getLogger(__name__)


def summary_subject(summary: "RunSummary") -> str:
    return f"Officials Pipeline Summary - {summary.change_requests_created} change requests created"


class Notifier(ABC):
    @abstractmethod
    def notify(self, summary: "RunSummary") -> None:
        """Deliver the run summary to operators."""


class LogNotifier(Notifier):
    """Fallback when no notification transport is configured."""

    def notify(self, summary: "RunSummary") -> None:
        logger.info(f"{summary_subject(summary)}: {json.dumps(summary.to_dict())}")


class SnsNotifier(Notifier):
    """Publish the summary to an SNS topic."""

    def __init__(self, topic_arn: str, region_name: str = "us-east-1", sns_client=None):
        self.topic_arn = topic_arn
        self.sns = sns_client or boto3.client("sns", region_name=region_name)

    def notify(self, summary: "RunSummary") -> None:
        message_data = {
            "summary": summary.to_dict(),
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "alert_type": "officials_pipeline_summary",
        }
        self.sns.publish(
            TopicArn=self.topic_arn,
            Subject=summary_subject(summary)[:100],
            Message=json.dumps(message_data),
        )
        logger.info(f"Published run summary to {self.topic_arn}")


def build_notifier(topic_arn: Optional[str], region_name: str = "us-east-1") -> Notifier:
    if not topic_arn:
        logger.info("ALERT_SNS_TOPIC_ARN not configured, summary will only be logged")
        return LogNotifier()
    return SnsNotifier(topic_arn, region_name=region_name)
