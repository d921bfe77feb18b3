# backend/lambda_handlers/send_alert.py
"""
Lambda function to send limit alerts via SNS
Triggered by API Gateway or a scheduled CloudWatch event that carries the
household's appliance list in its payload
"""
import json
import logging
import os

from backend.lib.home_energy_core.alerts import DAILY, MONTHLY, evaluate_breaches
from backend.lib.home_energy_core.io import (
    ValidationError, build_context, load_appliances, load_dismissed, read_number
)
from backend.lib.home_energy_core.processor import UsageAggregator
from backend.lib.sns_service import SNSService

logger = logging.getLogger()
logger.setLevel(os.getenv('LOG_LEVEL', 'INFO').upper())

DAILY_LIMIT = float(os.getenv('DAILY_LIMIT_UNITS', '20'))
MONTHLY_LIMIT = float(os.getenv('MONTHLY_LIMIT_UNITS', '500'))

_sns = None


def get_sns() -> SNSService:
    # Created lazily so a cold start without SNS config can still answer 400s
    global _sns
    if _sns is None:
        _sns = SNSService()
    return _sns


def lambda_handler(event, context):
    """
    Check the estimate against the limits and send one alert per breach.

    Payload keys (API Gateway body or scheduled event detail):
    - appliances: Required
    - month, vacation_mode, multiplier, daily_limit, monthly_limit, dismissed: Optional
    """
    logger.info("Received event: %s", json.dumps(event))

    try:
        payload = event.get('detail') or event.get('body') or {}
        if isinstance(payload, str):
            payload = json.loads(payload)
        if not isinstance(payload, dict):
            raise ValidationError('payload must be a JSON object')

        aggregator = UsageAggregator(load_appliances(payload), build_context(payload))

        daily_units = aggregator.daily_units()
        monthly_units = aggregator.monthly_units()
        daily_limit = read_number(payload, 'daily_limit', DAILY_LIMIT)
        monthly_limit = read_number(payload, 'monthly_limit', MONTHLY_LIMIT)
        breaches = evaluate_breaches(
            daily_units, monthly_units, daily_limit, monthly_limit, load_dismissed(payload)
        )

        alerts_sent = 0
        if breaches.daily and get_sns().send_limit_alert(DAILY, daily_units, daily_limit):
            alerts_sent += 1
        if breaches.monthly and get_sns().send_limit_alert(MONTHLY, monthly_units, monthly_limit):
            alerts_sent += 1

        return response(200, {
            'daily_units': daily_units,
            'monthly_units': monthly_units,
            'breaches': {'daily': breaches.daily, 'monthly': breaches.monthly},
            'alerts_sent': alerts_sent
        })

    except ValueError as e:
        return response(400, {'error': str(e)})
    except Exception as e:
        logger.exception("Error checking limits")
        return response(500, {'error': str(e)})


def response(status_code: int, body: dict) -> dict:
    """Create API Gateway response."""
    return {
        'statusCode': status_code,
        'headers': {
            'Content-Type': 'application/json',
            'Access-Control-Allow-Origin': '*'
        },
        'body': json.dumps(body)
    }
