"""
Configuration 테스트
"""

import logging

from ..config import Settings, configure_logging, settings
from ..math.scaled import Percentage


class TestSettings:
    """Settings 테스트"""

    def test_protocol_fee(self):
        """프로토콜 수수료는 Percentage"""
        fee = settings.protocol_fee()
        assert isinstance(fee, Percentage)
        assert fee == Percentage.from_decimal(settings.DEFAULT_PROTOCOL_FEE)

    def test_max_swap_steps_positive(self):
        """최대 스텝 수는 양수"""
        assert settings.MAX_SWAP_STEPS > 0

    def test_log_level_is_known(self):
        """로그 레벨 이름은 logging 레벨"""
        assert isinstance(getattr(logging, Settings.LOG_LEVEL), int)


class TestConfigureLogging:
    """configure_logging 테스트"""

    def test_configure_logging(self):
        """지정한 레벨로 root logger 설정"""
        root = logging.getLogger()
        handlers = list(root.handlers)
        level = root.level
        try:
            for handler in handlers:
                root.removeHandler(handler)
            configure_logging("DEBUG")
            assert root.level == logging.DEBUG
        finally:
            for handler in list(root.handlers):
                root.removeHandler(handler)
            for handler in handlers:
                root.addHandler(handler)
            root.setLevel(level)
