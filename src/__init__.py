"""
Developer Portal Serverless API - Source Package

One entry directory per Lambda function (auth, vessel, zone_and_port,
voyage, zone_and_port_notifications, webhook_notifications, search,
notification_stream) plus the shared ``devportal`` package they delegate to.
"""

__version__ = "1.0.0"

# Package metadata
__all__ = [
    "__version__",
]
