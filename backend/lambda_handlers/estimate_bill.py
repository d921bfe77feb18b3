# backend/lambda_handlers/estimate_bill.py
"""
Lambda function to estimate the electricity bill for an appliance list
Triggered by API Gateway (POST with a JSON body)
"""
import json
import logging
import os

from backend.lib.home_energy_core.io import (
    ValidationError, build_context, load_appliances, load_dismissed, load_slabs, read_number
)
from backend.lib.home_energy_core.summary import summarize

logger = logging.getLogger()
logger.setLevel(os.getenv('LOG_LEVEL', 'INFO').upper())

BUFFER = float(os.getenv('BILL_BUFFER_AMOUNT', '20'))
DAILY_LIMIT = float(os.getenv('DAILY_LIMIT_UNITS', '20'))
MONTHLY_LIMIT = float(os.getenv('MONTHLY_LIMIT_UNITS', '500'))
CURRENCY = os.getenv('CURRENCY', 'INR')


def lambda_handler(event, context):
    """
    Estimate usage and bill for the appliances in the request body.

    Body keys:
    - appliances: Required, list of appliance objects
    - slabs: Optional, tariff slabs (default tariff otherwise)
    - month: Optional, 'Jan'..'Dec' (default: current month)
    - vacation_mode: Optional, reduces usage to 20%
    - multiplier: Optional, explicit reduction multiplier (0 < m <= 1)
    - daily_limit / monthly_limit / dismissed: Optional
    """
    logger.info("Received event: %s", json.dumps(event))

    try:
        body = parse_body(event)

        result = summarize(
            load_appliances(body),
            load_slabs(body),
            build_context(body),
            daily_limit=read_number(body, 'daily_limit', DAILY_LIMIT),
            monthly_limit=read_number(body, 'monthly_limit', MONTHLY_LIMIT),
            dismissed=load_dismissed(body),
            buffer_amount=BUFFER,
        )

        payload = result.to_dict()
        payload['currency'] = CURRENCY
        return response(200, payload)

    except ValueError as e:
        # ValidationError and malformed JSON / month labels
        return response(400, {'error': str(e)})
    except Exception as e:
        logger.exception("Error estimating bill")
        return response(500, {'error': str(e)})


def parse_body(event) -> dict:
    """API Gateway passes the body as a JSON string."""
    body = event.get('body') or '{}'
    if isinstance(body, str):
        body = json.loads(body)
    if not isinstance(body, dict):
        raise ValidationError('body must be a JSON object')
    return body


def response(status_code: int, body: dict) -> dict:
    """Create API Gateway response."""
    return {
        'statusCode': status_code,
        'headers': {
            'Content-Type': 'application/json',
            'Access-Control-Allow-Origin': '*',
            'Access-Control-Allow-Methods': 'GET,POST,OPTIONS',
            'Access-Control-Allow-Headers': 'Content-Type'
        },
        'body': json.dumps(body)
    }
