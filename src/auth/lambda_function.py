"""
Account Lambda Function - Entry point.

Delegates to `devportal.handlers.auth_handler`, which owns routing, error
handling and observability for this function.
"""

import os
import sys
from typing import Any, Dict

# Add the service package to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from aws_lambda_powertools.utilities.typing import LambdaContext
from devportal.handlers.auth_handler import lambda_handler as auth_handler


def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return auth_handler(event, context)
