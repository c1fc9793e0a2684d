"""
Lambda handlers for the developer portal.

Each API module owns an ``APIGatewayRestResolver`` and a ``lambda_handler``
entry point; ``stream_handler`` consumes the notifications table stream.
"""
