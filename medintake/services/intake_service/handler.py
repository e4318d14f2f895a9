"""Intake Service HTTP handler.

Endpoints for the intake client: diagnostic suggestions while the patient
fills in symptoms, the doctor-facing analysis at submission, and the
stateless report hand-off.

Oracle failures never surface here: suggestions and analysis fall back to
the local rule engine and narrative. Patient identifiers are hashed before
logging.
"""
import asyncio
import json
import logging
import os

from flask import Flask, jsonify, request

from medintake.shared.errors import OracleUnavailable, ValidationError
from medintake.shared.utils import configure_pii_salt, hash_pii
from medintake.services.oracle_service import (
    PatientAnalyzer,
    QuestionOracle,
    SuggestionService,
    create_oracle_llm,
    fallback_analysis,
    parse_analysis,
)
from medintake.services.oracle_service.config import OracleConfig
from medintake.services.question_service import QuestionConfig, RuleEngine
from medintake.services.summary_service import (
    build_narrative_summary,
    build_report_link,
    doctor_handoff,
    parse_report_link,
)
from .schemas import AnalyzeRequest, ReportLinkRequest, SymptomsRequest, parse_payload

logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)

# Configure PII salt from environment
pii_salt = os.getenv("PII_HASH_SALT", "default_dev_salt_change_in_production_32chars")
configure_pii_salt(pii_salt)

oracle_config = OracleConfig.from_env()
question_config = QuestionConfig(
    max_results=int(os.getenv("MAX_CONTEXT_QUESTIONS", "12")),
)
rule_engine = RuleEngine(config=question_config)

# None when no API key is configured; every request then uses the fallback
llm = create_oracle_llm(oracle_config)

suggestion_service = SuggestionService(
    oracle=QuestionOracle(llm, oracle_config) if llm else None,
    rule_engine=rule_engine,
    config=oracle_config,
)
patient_analyzer = PatientAnalyzer(llm=llm, config=oracle_config, rule_engine=rule_engine)


@app.route("/health", methods=["GET"])
def health():
    """Health check endpoint.

    Returns:
        200 with service status
    """
    return jsonify({
        "status": "healthy",
        "service": "intake-service",
        "rule_version": question_config.rule_version,
        "oracle_enabled": oracle_config.enabled,
    }), 200


@app.route("/ready", methods=["GET"])
def ready():
    """Readiness check - verifies the rule engine is initialized.

    Returns:
        200 if ready, 503 if not
    """
    if rule_engine is None:
        return jsonify({"status": "not_ready", "reason": "rule_engine_not_initialized"}), 503
    return jsonify({"status": "ready"}), 200


@app.route("/api/symptoms", methods=["POST"])
def suggest_questions():
    """Diagnostic questions for the symptoms entered so far.

    Request Body:
        {
            "currentSymptoms": ["headache", ...],
            "fullSymptoms": [{...symptom row...} | "name", ...] (optional),
            "patientInfo": {"age": 34, "gender": "female"} (optional),
            "phq9Responses": {"q1": 0, ..., "q9": 0, "difficulty": 1} (optional),
            "responses": {"medications": "Yes", ...} (optional),
            "summaryOnly": false
        }

    Response:
        summaryOnly: {"success": true, "data": {"patientSummary": "..."}}
        otherwise: {"success": true, "data": {...suggestions...},
                    "source": "llm_generated" | "fallback"}
        400 {"success": false, "error": ...} if no symptom is given
    """
    try:
        payload = parse_payload(SymptomsRequest, request.get_json(silent=True))
        symptoms = payload.narrative_items()

        if payload.summary_only:
            summary = build_narrative_summary(symptoms, payload.responses, payload.phq9())
            return jsonify({"success": True, "data": {"patientSummary": summary}}), 200

        logger.info(
            "SUGGESTIONS_REQUESTED",
            extra={"symptom_count": len(symptoms), "oracle_enabled": oracle_config.enabled}
        )

        result = asyncio.run(suggestion_service.suggest(
            symptoms,
            patient_info=payload.demographics(),
            phq9=payload.phq9(),
            responses=payload.responses,
        ))
        return jsonify(result.to_dict()), 200

    except ValidationError as e:
        logger.warning("SUGGESTION_REQUEST_INVALID", extra={"issues": e.issues})
        if any(issue["field"] == "currentSymptoms" for issue in e.issues):
            message = "No valid symptoms provided"
        else:
            message = "Invalid request"
        return jsonify({"success": False, "error": message, "details": e.issues}), 400

    except Exception as e:
        logger.error(
            "SUGGESTION_REQUEST_ERROR",
            extra={"error": str(e), "error_type": type(e).__name__}
        )
        return jsonify({"success": False, "error": "Failed to generate suggestions"}), 500


@app.route("/api/analyze", methods=["POST"])
def analyze():
    """Analyze a submitted questionnaire for the reviewing doctor.

    Request Body:
        Full questionnaire: patientInfo, symptoms (at least one),
        painLocations, healthMetrics, phq9Responses, responses,
        additionalNotes, submissionDate

    Response:
        {
            "success": true,
            "analysis": {...},
            "chartData": {...},
            "patientInfo": {"name": "...", "submissionDate": "..."},
            "source": "llm_generated" | "fallback"
        }
        400 {"error": ..., "details": [{"field", "message"}]} on invalid data
    """
    try:
        payload = parse_payload(AnalyzeRequest, request.get_json(silent=True))
        questionnaire = payload.to_domain()
        patient_hash = hash_pii(questionnaire.patient_info.medical_id or questionnaire.patient_info.name)

        logger.info(
            "ANALYSIS_REQUESTED",
            extra={"patient_hash": patient_hash, "symptom_count": len(questionnaire.symptoms)}
        )

        result = asyncio.run(patient_analyzer.analyze(questionnaire))
        chart_data = doctor_handoff(questionnaire, result.analysis)

        return jsonify({
            "success": True,
            "analysis": result.analysis.to_dict(),
            "chartData": chart_data,
            "patientInfo": {
                "name": questionnaire.patient_info.name,
                "submissionDate": questionnaire.submission_date,
            },
            "source": result.source.value,
        }), 200

    except ValidationError as e:
        logger.warning("ANALYSIS_REQUEST_INVALID", extra={"issues": e.issues})
        return jsonify({"error": "Invalid patient data", "details": e.issues}), 400

    except Exception as e:
        logger.error(
            "ANALYSIS_ERROR",
            extra={"error": str(e), "error_type": type(e).__name__}
        )
        return jsonify({"error": "Failed to analyze patient data", "message": str(e)}), 500


@app.route("/api/analyze", methods=["GET"])
def describe_analyze():
    return jsonify({
        "message": "Patient Analysis API is running",
        "endpoints": {
            "POST": "/api/analyze - Analyze patient questionnaire data",
            "GET": "/api/analyze - This description",
        },
    }), 200


@app.route("/api/report-link", methods=["POST"])
def report_link():
    """Build the report hand-off URL.

    Request Body:
        {"data": {...questionnaire...}, "analysis": {...} (optional),
         "basePath": "/report" (optional)}

    Response:
        {"success": true, "url": "/report?data=...&analysis=..."}
    """
    try:
        body = request.get_json(silent=True)
        payload = parse_payload(ReportLinkRequest, body)
        url = build_report_link(body["data"], payload.analysis, payload.base_path)
        return jsonify({"success": True, "url": url}), 200

    except ValidationError as e:
        logger.warning("REPORT_LINK_INVALID", extra={"issues": e.issues})
        return jsonify({"success": False, "error": "Invalid report data", "details": e.issues}), 400


@app.route("/report", methods=["GET"])
def report():
    """Rebuild the doctor hand-off record from a report URL.

    The analysis parameter is optional; without it a fallback analysis is
    computed from the questionnaire.
    """
    try:
        data, analysis_data = parse_report_link(request.full_path)
        questionnaire = parse_payload(AnalyzeRequest, data).to_domain()

        if analysis_data is None:
            analysis = fallback_analysis(questionnaire, rule_engine)
        else:
            analysis, _ = parse_analysis(json.dumps(analysis_data))

        return jsonify(doctor_handoff(questionnaire, analysis)), 200

    except ValidationError as e:
        logger.warning("REPORT_REQUEST_INVALID", extra={"issues": e.issues})
        return jsonify({"error": "Invalid report link", "details": e.issues}), 400

    except OracleUnavailable as e:
        logger.warning("REPORT_REQUEST_INVALID", extra={"error": str(e)})
        return jsonify({
            "error": "Invalid report link",
            "details": [{"field": "analysis", "message": "Analysis must be a JSON object"}],
        }), 400


if __name__ == "__main__":
    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Run development server
    port = int(os.getenv("PORT", "8000"))
    app.run(host="0.0.0.0", port=port, debug=False)
