"""Analysis Service HTTP handler.

Components are built once at import from the environment; the clustering
model is trained on the seed set before the first request is served.

No raw message text or user identifiers in logs: messages are logged as
hash_text_for_audit(), users as hash_pii().
"""
import asyncio
import logging
import os
import time

from flask import Flask, request, jsonify

from mindscreen.services.llm_service import LLMConfig, LLMProvider, ResponseGenerator, create_llm
from mindscreen.services.session_service import SessionRecord, SessionSummarizer, SystemMetrics
from mindscreen.shared.utils import configure_pii_salt, hash_pii, hash_text_for_audit
from .alert_publisher import RiskAlertPublisher
from .analyzer import MessageAnalyzer
from .config import DEFAULT_LOCALE

logger = logging.getLogger(__name__)

app = Flask(__name__)

pii_salt = os.getenv("PII_HASH_SALT", "default_dev_salt_change_in_production_32chars")
configure_pii_salt(pii_salt)

locale = os.getenv("MINDSCREEN_LOCALE", DEFAULT_LOCALE)


def _build_llm():
    provider = os.getenv("LLM_PROVIDER", "").strip().lower()
    if not provider:
        return None
    try:
        return create_llm(LLMConfig(
            provider=LLMProvider(provider),
            model_name=os.getenv("LLM_MODEL", "gpt-4o-mini"),
            api_key=os.getenv("LLM_API_KEY"),
            endpoint=os.getenv("LLM_ENDPOINT"),
            timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "30")),
        ))
    except ValueError as e:
        logger.error("LLM_INIT_FAILED", extra={"provider": provider, "error": str(e)})
        return None


analyzer = MessageAnalyzer(locale=locale)
analyzer.warm_up()

responder = ResponseGenerator(
    llm=_build_llm(),
    locale=locale,
    timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "30")),
)
summarizer = SessionSummarizer(locale=locale)
system_metrics = SystemMetrics()
system_metrics.set_validation_metrics(analyzer.engine.validation_metrics)

alert_publisher = RiskAlertPublisher(
    stream_name=os.getenv("ALERT_STREAM_NAME", "mindscreen-risk-alerts"),
    enabled=os.getenv("ALERT_PUBLISHING_ENABLED", "false").lower() == "true",
    region=os.getenv("AWS_REGION"),
)


def _message_from(data):
    if not data:
        return None, (jsonify({"error": "Request body required"}), 400)
    if not isinstance(data, dict):
        return None, (jsonify({"error": "Request body must be a JSON object"}), 400)
    message = data.get("message")
    if not isinstance(message, str) or not message.strip():
        return None, (jsonify({"error": "Missing required field: message"}), 400)
    return message, None


def _analyze_and_record(message: str, session_id: str, user_id_hash: str):
    start_time = time.perf_counter()
    analysis = analyzer.analyze(message)
    system_metrics.record(analysis, (time.perf_counter() - start_time) * 1000)

    published = alert_publisher.publish(
        analysis,
        text_hash=hash_text_for_audit(message),
        session_id=session_id,
        user_id_hash=user_id_hash,
    )
    return analysis, published


@app.route("/health", methods=["GET"])
def health():
    """Health check endpoint for ECS/ALB."""
    return jsonify({
        "status": "healthy",
        "service": "analysis-service",
    }), 200


@app.route("/ready", methods=["GET"])
def ready():
    """Readiness check - the clustering model must be trained."""
    if not analyzer.is_ready:
        return jsonify({"status": "not_ready", "reason": "model_untrained"}), 503
    return jsonify({"status": "ready"}), 200


@app.route("/analyze", methods=["POST"])
def analyze_message():
    """Analyze one message.

    Request Body:
        {
            "message": "User message text",
            "session_id": "sess_456" (optional),
            "user_id": "user_789" (optional)
        }

    Response:
        AnalysisResult.to_dict() plus "alert_published"
    """
    try:
        data = request.get_json(silent=True)
        message, error = _message_from(data)
        if error:
            logger.warning("ANALYZE_REQUEST_INVALID", extra={"reason": "missing_message"})
            return error

        session_id = str(data.get("session_id", ""))
        user_id_hash = hash_pii(str(data["user_id"])) if data.get("user_id") else ""

        logger.info(
            "ANALYZE_REQUESTED",
            extra={"session_id": session_id, "user_id_hash": user_id_hash}
        )

        analysis, published = _analyze_and_record(message, session_id, user_id_hash)
        response = analysis.to_dict()
        response["alert_published"] = published
        return jsonify(response), 200

    except Exception as e:
        logger.error(
            "ANALYZE_ERROR",
            extra={"error": str(e), "error_type": type(e).__name__},
            exc_info=True,
        )
        return jsonify({"error": "Analysis failed"}), 500


@app.route("/respond", methods=["POST"])
def respond():
    """Analyze a message and generate a therapeutic reply.

    Request Body:
        {
            "message": "User message text",
            "history": ["earlier turn", ...] (optional),
            "session_id": "sess_456" (optional),
            "user_id": "user_789" (optional)
        }

    Response:
        {"analysis": {...}, "response": {...}}
    """
    try:
        data = request.get_json(silent=True)
        message, error = _message_from(data)
        if error:
            logger.warning("RESPOND_REQUEST_INVALID", extra={"reason": "missing_message"})
            return error

        history = data.get("history") or []
        if not isinstance(history, list):
            return jsonify({"error": "history must be a list"}), 400

        session_id = str(data.get("session_id", ""))
        user_id_hash = hash_pii(str(data["user_id"])) if data.get("user_id") else ""

        analysis, published = _analyze_and_record(message, session_id, user_id_hash)
        reply = asyncio.run(
            responder.generate(message, analysis, [str(turn) for turn in history])
        )

        logger.info(
            "RESPOND_COMPLETED",
            extra={
                "session_id": session_id,
                "risk_level": analysis.risk_level.value,
                "source": reply.source.value,
            }
        )
        return jsonify({
            "analysis": analysis.to_dict(),
            "response": reply.to_dict(),
            "alert_published": published,
        }), 200

    except Exception as e:
        logger.error(
            "RESPOND_ERROR",
            extra={"error": str(e), "error_type": type(e).__name__},
            exc_info=True,
        )
        return jsonify({"error": "Response generation failed"}), 500


@app.route("/model", methods=["GET"])
def model_info():
    """Clustering model state, clusters, validation metrics and counters."""
    try:
        engine = analyzer.engine
        metrics = engine.validation_metrics
        return jsonify({
            "state": engine.state.value,
            "clusters": [c.to_dict() for c in engine.clusters],
            "validation_metrics": metrics.to_dict() if metrics else None,
            "system_metrics": system_metrics.to_dict(),
        }), 200

    except Exception as e:
        logger.error(
            "MODEL_INFO_ERROR",
            extra={"error": str(e), "error_type": type(e).__name__},
            exc_info=True,
        )
        return jsonify({"error": "Model info unavailable"}), 500


@app.route("/sessions/summary", methods=["POST"])
def summarize_session():
    """Summarize a session's user messages.

    Request Body:
        {
            "session_id": "sess_456",
            "messages": ["first message", "second message", ...]
        }

    Response:
        SessionSummary.to_dict()
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({"error": "Request body required"}), 400
        if not isinstance(data, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400

        messages = data.get("messages")
        if not isinstance(messages, list):
            return jsonify({"error": "Missing required field: messages"}), 400

        session_id = str(data.get("session_id", ""))
        logger.info(
            "SUMMARIZE_REQUESTED",
            extra={"session_id": session_id, "message_count": len(messages)}
        )

        records = [
            SessionRecord(text=str(m), analysis=analyzer.analyze(str(m)))
            for m in messages
        ]
        summary = summarizer.summarize(records, session_id=session_id)
        return jsonify(summary.to_dict()), 200

    except Exception as e:
        logger.error(
            "SUMMARIZE_ERROR",
            extra={"error": str(e), "error_type": type(e).__name__},
            exc_info=True,
        )
        return jsonify({"error": "Summarization failed"}), 500


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    port = int(os.getenv("PORT", "8001"))
    app.run(host="0.0.0.0", port=port, debug=False)
