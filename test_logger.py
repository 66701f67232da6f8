import logging

from app.core.logger import get_logger


def test_child_loggers_share_the_service_logger():
    log = get_logger("registry")
    assert log.name == "academic_records.registry"
    assert log.parent is get_logger()
    assert get_logger().level == logging.INFO
