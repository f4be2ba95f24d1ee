"""
Logging setup shared by the API and the consumers
"""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once per process"""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # pika is chatty at INFO
    logging.getLogger("pika").setLevel(logging.WARNING)
