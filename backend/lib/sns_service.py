"""
=============================================================================
SNS SERVICE - Amazon Simple Notification Service Integration
=============================================================================

What is SNS?
------------
Amazon SNS (Simple Notification Service) is a managed messaging service that:
- Sends messages to multiple subscribers at once
- Supports multiple protocols: Email, SMS, HTTP, Lambda, SQS
- Handles all the complexity of message delivery

In this application, we use SNS to:
- Send email alerts when the estimated daily or monthly usage is above
  the limit the household configured
- Send a monthly bill estimate summary

Flow:
-----
[Home Energy API] --> [SNS Topic] --> [Email Subscriber 1]
                                  --> [Email Subscriber 2]

Email alerts include:
- Daily limit breach
- Monthly limit breach
- Monthly estimate summary
=============================================================================
"""

# logging - Standard library logging, one logger per module
import logging

# os - For reading environment variables
import os

# typing - For type hints
from typing import Dict, List, Optional

# boto3 - AWS SDK for Python
import boto3

# ClientError - Exception class for AWS API errors
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class SNSService:
    """
    A service class for sending notifications via Amazon SNS.

    Usage:
        sns = SNSService()
        sns.create_topic_if_not_exists()
        sns.subscribe_email("user@example.com")
        sns.send_limit_alert("daily", 21.4, 20.0)
    """

    def __init__(self, topic_arn: str = None, sns_client=None):
        """
        Initialize the SNS service.

        Args:
            topic_arn: Optional pre-existing topic ARN.
                      If not provided, will create or find topic by name.
            sns_client: Optional boto3 SNS client (tests pass a stubbed one).

        Environment Variables Used:
        - SNS_TOPIC_ARN: The ARN of an existing topic
        - SNS_TOPIC_NAME: Name for creating new topic
        - AWS_REGION and the AWS credentials
        """
        self.topic_arn = topic_arn or os.getenv('SNS_TOPIC_ARN')
        self.topic_name = os.getenv('SNS_TOPIC_NAME', 'HomeEnergyAlerts')
        self.region = os.getenv('AWS_REGION', 'us-east-1')

        if sns_client is not None:
            self.sns_client = sns_client
            return

        session_token = os.getenv('AWS_SESSION_TOKEN')
        self.sns_client = boto3.client(
            'sns',
            region_name=self.region,
            aws_access_key_id=os.getenv('AWS_ACCESS_KEY_ID'),
            aws_secret_access_key=os.getenv('AWS_SECRET_ACCESS_KEY'),
            aws_session_token=session_token if session_token else None
        )

    def create_topic_if_not_exists(self) -> Optional[str]:
        """
        Create an SNS topic if it doesn't exist.

        create_topic is idempotent - if the topic already exists,
        it simply returns the existing topic's ARN.

        Returns:
            str: The topic ARN, or None if creation failed
        """
        try:
            response = self.sns_client.create_topic(Name=self.topic_name)
            self.topic_arn = response['TopicArn']
            logger.info("SNS topic ready: %s", self.topic_arn)
            return self.topic_arn

        except ClientError as e:
            logger.error("Failed to create SNS topic: %s", e)
            return None

    def subscribe_email(self, email: str) -> Optional[str]:
        """
        Subscribe an email address to receive alerts.

        After subscribing, AWS sends a confirmation email and the
        subscription stays "PendingConfirmation" until the link is clicked.

        Returns:
            str: The subscription ARN (or 'pending confirmation')
        """
        if not self.topic_arn:
            logger.warning("No topic ARN configured")
            return None

        try:
            response = self.sns_client.subscribe(
                TopicArn=self.topic_arn,
                Protocol='email',
                Endpoint=email
            )
            return response['SubscriptionArn']

        except ClientError as e:
            logger.error("Failed to subscribe email: %s", e)
            return None

    def list_subscriptions(self) -> List[Dict]:
        """
        List all subscriptions for the topic.

        Returns:
            list: List of subscription dictionaries
        """
        if not self.topic_arn:
            return []

        try:
            response = self.sns_client.list_subscriptions_by_topic(
                TopicArn=self.topic_arn
            )
            return response.get('Subscriptions', [])

        except ClientError as e:
            logger.error("Failed to list subscriptions: %s", e)
            return []

    def send_alert(self, subject: str, message: str) -> bool:
        """
        Send an alert to all topic subscribers.

        Args:
            subject: Email subject line (max 100 characters)
            message: The message body (can be multi-line)

        Returns:
            bool: True if message was published successfully
        """
        if not self.topic_arn:
            logger.warning("No topic ARN configured")
            return False

        try:
            self.sns_client.publish(
                TopicArn=self.topic_arn,
                Subject=subject[:100],
                Message=message
            )
            logger.info("Published alert: %s", subject)
            return True

        except ClientError as e:
            logger.error("Failed to send alert: %s", e)
            return False

    def send_limit_alert(self, period: str, units: float, limit: float) -> bool:
        """
        Send an alert when estimated usage is above a configured limit.

        Args:
            period: 'daily' or 'monthly'
            units: Estimated usage for the period
            limit: The limit that was exceeded

        Example Email:
            Subject: High Electricity Usage - daily limit exceeded

            Estimated Usage: 21.40 units
            Limit: 20.00 units
        """
        subject = f"High Electricity Usage - {period} limit exceeded"

        message = f"""
Electricity Usage Alert

Period: {period}
Estimated Usage: {units:.2f} units
Limit: {limit:.2f} units

Your estimated {period} consumption is above the limit you set.

Switch off appliances you are not using or turn on vacation mode
to bring the estimate back under the limit.

---
Home Energy Estimator
        """.strip()

        return self.send_alert(subject, message)

    def send_monthly_summary(self, month: str, units: float, cost: float,
                             currency: str = "INR") -> bool:
        """
        Send the monthly bill estimate.

        Args:
            month: Month label, e.g. 'Oct'
            units: Estimated monthly units
            cost: Estimated monthly cost (buffer included)
            currency: Currency code
        """
        subject = f"Monthly Electricity Estimate - {month}"

        message = f"""
Monthly Electricity Estimate

Month: {month}
Estimated Usage: {units:.2f} units
Estimated Bill: {cost:.2f} {currency}

---
Home Energy Estimator
        """.strip()

        return self.send_alert(subject, message)
