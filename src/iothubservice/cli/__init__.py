"""Command line interface for the IoT Hub service client."""
