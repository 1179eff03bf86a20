"""High-risk alert publisher.

Publishes an event to Kinesis whenever an analysis ends at HIGH risk,
so downstream notification and counselor workflows are decoupled from
the request path. Disabled publishers and AWS failures are logged and
reported via the return value, never raised.
"""
import json
import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from mindscreen.shared.models import AnalysisResult, RiskLevel

logger = logging.getLogger(__name__)

ALERT_EVENT_TYPE = "analysis.risk.high"
DEFAULT_STREAM_NAME = "mindscreen-risk-alerts"


@dataclass(frozen=True)
class RiskAlertEvent:
    """Immutable high-risk alert. Carries hashes and counts, no message text."""
    alert_id: str
    text_hash: str
    session_id: str = ""
    user_id_hash: str = ""
    confidence: float = 0.0
    phq9_score: int = 0
    risk_keywords: Tuple[str, ...] = ()
    cluster_id: Optional[int] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_analysis(
        cls,
        analysis: AnalysisResult,
        text_hash: str,
        session_id: str = "",
        user_id_hash: str = "",
    ) -> "RiskAlertEvent":
        assignment = analysis.cluster_assignment
        return cls(
            alert_id=f"alert_{uuid.uuid4().hex[:12]}",
            text_hash=text_hash,
            session_id=session_id,
            user_id_hash=user_id_hash,
            confidence=round(analysis.confidence, 3),
            phq9_score=analysis.clinical_indicators.phq9_score,
            risk_keywords=tuple(analysis.keyword_analysis.risk_keywords),
            cluster_id=assignment.cluster_id if assignment else None,
        )

    @property
    def partition_key(self) -> str:
        # Keep one user's alerts ordered on a single shard
        return self.user_id_hash or self.session_id or self.alert_id

    def to_payload(self) -> Dict[str, Any]:
        return {
            "event_id": self.alert_id,
            "event_type": ALERT_EVENT_TYPE,
            "timestamp": self.created_at.isoformat(),
            "source": "analysis-service",
            "data": {
                "session_id": self.session_id,
                "user_id_hash": self.user_id_hash,
                "text_hash": self.text_hash,
                "risk_level": RiskLevel.HIGH.value,
                "confidence": self.confidence,
                "phq9_score": self.phq9_score,
                "risk_keyword_count": len(self.risk_keywords),
                "cluster_id": self.cluster_id,
            },
        }


class RiskAlertPublisher:
    """Writes RiskAlertEvents to a Kinesis stream.

    The boto3 client is created on first use, so constructing a disabled
    publisher never touches AWS.
    """

    def __init__(
        self,
        stream_name: str = DEFAULT_STREAM_NAME,
        enabled: bool = False,
        region: Optional[str] = None,
        kinesis_client=None,
    ):
        self.stream_name = stream_name
        self.enabled = enabled
        self.region = region or os.getenv("AWS_REGION", "us-east-1")
        self._client = kinesis_client

        logger.info(
            "ALERT_PUBLISHER_INITIALIZED",
            extra={"stream_name": stream_name, "enabled": enabled, "region": self.region}
        )

    def _get_client(self):
        if self._client is None:
            try:
                import boto3
                self._client = boto3.client("kinesis", region_name=self.region)
            except Exception as e:
                logger.error(
                    "KINESIS_CLIENT_INIT_FAILED",
                    extra={"region": self.region, "error": str(e), "error_type": type(e).__name__}
                )
        return self._client

    def publish(
        self,
        analysis: AnalysisResult,
        text_hash: str,
        session_id: str = "",
        user_id_hash: str = "",
    ) -> bool:
        """Publish an alert if the analysis is HIGH risk.

        Returns:
            True if an event was written to the stream
        """
        if analysis.risk_level != RiskLevel.HIGH:
            return False
        if not self.enabled:
            logger.info("ALERT_PUBLISH_SKIPPED", extra={"reason": "disabled", "text_hash": text_hash})
            return False

        event = RiskAlertEvent.from_analysis(analysis, text_hash, session_id, user_id_hash)
        data = json.dumps(event.to_payload())

        client = self._get_client()
        if client is None:
            # Stream unreachable: keep the alert in the logs
            logger.warning("ALERT_EVENT_FALLBACK_LOG", extra={"alert_id": event.alert_id, "payload": data})
            return False

        try:
            result = client.put_record(
                StreamName=self.stream_name,
                Data=data,
                PartitionKey=event.partition_key,
            )
        except Exception as e:
            logger.error(
                "ALERT_EVENT_PUBLISH_FAILED",
                extra={"alert_id": event.alert_id, "error": str(e), "error_type": type(e).__name__}
            )
            return False

        logger.info(
            "ALERT_EVENT_PUBLISHED",
            extra={
                "alert_id": event.alert_id,
                "stream_name": self.stream_name,
                "shard_id": result.get("ShardId"),
                "sequence_number": result.get("SequenceNumber"),
            }
        )
        return True
