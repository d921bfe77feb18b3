"""
=============================================================================
HOME ENERGY ESTIMATOR - MAIN FLASK APPLICATION
=============================================================================

This is the backend server for the Home Energy Estimator.
It provides REST API endpoints for:
- Estimating daily/monthly electricity usage from a list of appliances
- Estimating the bill with a tiered ("slab") tariff
- Checking the estimate against the household's daily/monthly limits
- Sending limit alerts via email (SNS)

The server keeps no appliance or tariff state: every request carries the
current appliance list and slabs, and the response is computed from that
snapshot alone.

AWS Services Used:
- SNS: Send email notifications/alerts to users (optional)

How to run:
    python -m backend.app

Then visit: http://127.0.0.1:5000
=============================================================================
"""

# =============================================================================
# IMPORTS
# =============================================================================

# Flask - A lightweight web framework for Python
from flask import Flask, request, jsonify

# logging - Standard library logging
import logging

# os - For reading environment variables
import os

# dotenv - Load environment variables from .env file
from dotenv import load_dotenv

# Load environment variables from .env file
# This must be called before accessing any environment variables
load_dotenv()

logging.basicConfig(level=os.getenv('LOG_LEVEL', 'INFO').upper())
logger = logging.getLogger(__name__)

# =============================================================================
# CUSTOM LIBRARY IMPORTS - The usage and billing engine
# =============================================================================

from backend.lib.home_energy_core.alerts import (
    DAILY, MONTHLY, DEFAULT_DAILY_LIMIT, DEFAULT_MONTHLY_LIMIT, evaluate_breaches
)
from backend.lib.home_energy_core.estimator import (
    BUFFER_AMOUNT, SlabCostCalculator, round_currency, validate_slabs
)
from backend.lib.home_energy_core.history import summarize_history
from backend.lib.home_energy_core.io import (
    ValidationError, build_context, load_appliances, load_dismissed, load_slabs,
    parse_history, preset_to_dict, read_number, slab_to_dict
)
from backend.lib.home_energy_core.presets import APPLIANCE_PRESETS, DEFAULT_SLABS
from backend.lib.home_energy_core.processor import UsageAggregator
from backend.lib.home_energy_core.summary import summarize

# =============================================================================
# CONFIGURATION
# =============================================================================

BUFFER = float(os.getenv('BILL_BUFFER_AMOUNT', BUFFER_AMOUNT))
DAILY_LIMIT = float(os.getenv('DAILY_LIMIT_UNITS', DEFAULT_DAILY_LIMIT))
MONTHLY_LIMIT = float(os.getenv('MONTHLY_LIMIT_UNITS', DEFAULT_MONTHLY_LIMIT))
CURRENCY = os.getenv('CURRENCY', 'INR')

# -----------------------------------------------------------------------------
# SNS SERVICE - Amazon Simple Notification Service
# -----------------------------------------------------------------------------
# SNS is used to email an alert when the estimate is above a limit

USE_SNS = os.getenv('USE_SNS', 'false').lower() == 'true'
sns_service = None  # Will hold our SNS service instance

if USE_SNS:
    try:
        from backend.lib.sns_service import SNSService
        sns_service = SNSService()
        sns_service.create_topic_if_not_exists()
        logger.info("SNS notifications enabled")
    except Exception as e:
        # If SNS fails, notifications will be disabled
        logger.warning("SNS initialization failed: %s. Notifications disabled.", e)
        USE_SNS = False

# =============================================================================
# FLASK APPLICATION INITIALIZATION
# =============================================================================

app = Flask(__name__)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("JSON body required")
    if not isinstance(data, dict):
        raise ValidationError("JSON body must be an object")
    return data


@app.errorhandler(ValidationError)
def handle_validation_error(error):
    return jsonify({"error": str(error)}), 400


# =============================================================================
# API ROUTES - BASIC ENDPOINTS
# =============================================================================

@app.route("/")
def home():
    """
    Basic service information, useful as a health check.
    """
    return jsonify({
        "service": "home-energy-estimator",
        "currency": CURRENCY,
        "buffer": BUFFER,
        "sns_enabled": USE_SNS,
    })


@app.route("/presets", methods=["GET"])
def presets():
    """
    List the appliance presets a client can offer in its entry form.
    """
    return jsonify({
        "presets": [
            preset_to_dict(p) for p in APPLIANCE_PRESETS
        ]
    })


@app.route("/slabs/default", methods=["GET"])
def default_slabs():
    return jsonify({"slabs": [slab_to_dict(s) for s in DEFAULT_SLABS]})


@app.route("/slabs/validate", methods=["POST"])
def validate_slab_config():
    """
    Report configuration problems (gaps, overlaps, missing unbounded top
    slab) in a slab set. The calculator tolerates all of them, so this
    endpoint only informs.

    Request Body (JSON):
        {"slabs": [{"from": 0, "to": 100, "rate": 3}, ...]}
    """
    data = _json_body()
    slabs = load_slabs(data)
    problems = validate_slabs(slabs)
    return jsonify({"valid": not problems, "problems": problems})


# =============================================================================
# API ROUTES - USAGE AND BILL ESTIMATES
# =============================================================================

@app.route("/usage", methods=["POST"])
def usage():
    """
    Estimate daily and monthly units for an appliance list.

    Request Body (JSON):
        {
            "appliances": [
                {"name": "LED TV", "category": "Entertainment",
                 "wattage": 80, "hours_per_day": 5, "is_on": true}
            ],
            "month": "Oct",
            "vacation_mode": false
        }

    Example Response:
        {"daily_units": 0.4, "monthly_units": 12.0, "breakdown": {...}}
    """
    data = _json_body()
    aggregator = UsageAggregator(load_appliances(data), build_context(data))

    return jsonify({
        "month": aggregator.context.month.value,
        "multiplier": aggregator.context.multiplier,
        "daily_units": aggregator.daily_units(),
        "monthly_units": aggregator.monthly_units(),
        "breakdown": aggregator.appliance_breakdown(),
    })


@app.route("/estimate", methods=["POST"])
def estimate():
    """
    Estimate the bill.

    Either send "daily_units" directly, or an appliance list (same keys as
    /usage) to compute it. Monthly units are daily units * 30.

    Request Body (JSON):
        {"daily_units": 8.5, "slabs": [...]}

    Example Response:
        {
            "daily_cost": 26.17,
            "monthly_cost": 1215.0,
            "buffer": 20.0,
            "currency": "INR"
        }
    """
    data = _json_body()
    if data.get('daily_units') is not None:
        daily_units = read_number(data, 'daily_units', 0.0)
        if daily_units < 0:
            raise ValidationError("daily_units must be >= 0")
    else:
        daily_units = UsageAggregator(load_appliances(data), build_context(data)).daily_units()
    monthly_units = daily_units * 30

    calculator = SlabCostCalculator(load_slabs(data), BUFFER)

    return jsonify({
        "daily_units": daily_units,
        "monthly_units": monthly_units,
        "daily_cost": round_currency(calculator.daily_cost(daily_units)),
        "monthly_cost": round_currency(calculator.monthly_cost(monthly_units)),
        "uncovered_monthly_units": calculator.uncovered_units(monthly_units),
        "buffer": calculator.buffer,
        "currency": CURRENCY,
    })


@app.route("/summary", methods=["POST"])
def summary():
    """
    Full usage summary: units, costs, limit breaches and quick stats.

    Request Body (JSON):
        {
            "appliances": [...],
            "slabs": [...],              (optional, default tariff otherwise)
            "month": "Oct",              (optional)
            "vacation_mode": false,      (optional)
            "daily_limit": 20,           (optional)
            "monthly_limit": 500,        (optional)
            "dismissed": ["daily"]       (optional)
        }
    """
    data = _json_body()
    result = summarize(
        load_appliances(data),
        load_slabs(data),
        build_context(data),
        daily_limit=read_number(data, 'daily_limit', DAILY_LIMIT),
        monthly_limit=read_number(data, 'monthly_limit', MONTHLY_LIMIT),
        dismissed=load_dismissed(data),
        buffer_amount=BUFFER,
    )
    body = result.to_dict()
    body["currency"] = CURRENCY
    return jsonify(body)


@app.route("/history/summary", methods=["POST"])
def history_summary():
    """
    Averages and month-over-month trends for a usage history the client
    keeps. The history is not stored.

    Request Body (JSON):
        {"history": [{"month": "Sep 2024", "units": 310, "cost": 1470}, ...]}
    """
    data = _json_body()
    items = data.get('history')
    if not isinstance(items, list):
        raise ValidationError("history must be a list")
    return jsonify(summarize_history(parse_history(items)))


# =============================================================================
# API ROUTES - SNS ENDPOINTS (Email Notifications)
# =============================================================================

@app.route("/sns/status", methods=["GET"])
def sns_status():
    return jsonify({
        "sns_enabled": USE_SNS,
        "topic_arn": sns_service.topic_arn if sns_service else None
    })


@app.route("/sns/subscribe", methods=["POST"])
def sns_subscribe():
    """
    Subscribe an email address to receive limit alerts.

    Request Body (JSON):
        {"email": "user@example.com"}
    """
    if not USE_SNS or not sns_service:
        return jsonify({"error": "SNS not enabled"}), 400

    data = request.get_json(silent=True)
    if not data or not data.get("email"):
        return jsonify({"error": "email required"}), 400

    email = data["email"]
    subscription_arn = sns_service.subscribe_email(email)

    if subscription_arn:
        return jsonify({
            "message": f"Subscription pending. Check {email} for confirmation link.",
            "subscription_arn": subscription_arn
        })
    else:
        return jsonify({"error": "Failed to subscribe"}), 500


@app.route("/sns/alert/limits", methods=["POST"])
def sns_limit_alert():
    """
    Check the estimate against the limits and email one alert per breach.

    Request Body (JSON): same keys as /summary (slabs are not needed).
    """
    if not USE_SNS or not sns_service:
        return jsonify({"error": "SNS not enabled"}), 400

    data = _json_body()
    aggregator = UsageAggregator(load_appliances(data), build_context(data))
    daily_units = aggregator.daily_units()
    monthly_units = aggregator.monthly_units()
    daily_limit = read_number(data, 'daily_limit', DAILY_LIMIT)
    monthly_limit = read_number(data, 'monthly_limit', MONTHLY_LIMIT)

    breaches = evaluate_breaches(
        daily_units, monthly_units, daily_limit, monthly_limit, load_dismissed(data)
    )

    alerts_sent = 0
    if breaches.daily and sns_service.send_limit_alert(DAILY, daily_units, daily_limit):
        alerts_sent += 1
    if breaches.monthly and sns_service.send_limit_alert(MONTHLY, monthly_units, monthly_limit):
        alerts_sent += 1

    return jsonify({
        "breaches": {"daily": breaches.daily, "monthly": breaches.monthly},
        "alerts_sent": alerts_sent,
    })


# =============================================================================
# RUN THE APPLICATION
# =============================================================================

if __name__ == "__main__":
    app.run(debug=True)
