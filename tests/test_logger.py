import logging

from lazyseq.logger import LazySeqLogger, LogFormatter, get_logger


class TestLogger:
    def test_loggers_are_shared_per_name(self):
        assert get_logger() is get_logger()
        assert get_logger(None) is get_logger()
        assert get_logger("LazySeqOther") is not get_logger()

    def test_level_follows_config(self):
        logger = get_logger()
        expected = logging.getLevelName(logger.config["console_log_level"].upper())
        assert logger.get_logger().level == expected

    def test_default_level_is_warning(self, monkeypatch):
        monkeypatch.delenv("LAZYSEQ_LOG_LEVEL", raising=False)
        assert get_logger("LazySeqDefaultTest").get_logger().level == logging.WARNING

    def test_environment_configures_new_loggers(self, monkeypatch, capsys):
        monkeypatch.setenv("LAZYSEQ_LOG_LEVEL", "debug")
        monkeypatch.setenv("LAZYSEQ_LOG_OUTPUT", "stdout")
        monkeypatch.setenv("LAZYSEQ_LOG_COLOR", "false")
        logger = get_logger("LazySeqEnvTest")
        assert logger.get_logger().level == logging.DEBUG
        logger.d("pulled %d pairs", 3)
        out = capsys.readouterr().out
        assert "[LazySeqEnvTest]" in out
        assert "pulled 3 pairs" in out
        assert "\033[" not in out

    def test_warn_and_info(self, capsys):
        logger = LazySeqLogger(
            {
                "name": "LazySeqDirect",
                "console_log_output": "stdout",
                "console_log_level": "info",
                "console_log_color": False,
                "log_line_template": "%(message)s",
            }
        )
        logger.info("hello")
        logger.warn("careful")
        logger.d("hidden")
        out = capsys.readouterr().out
        assert "hello" in out
        assert "careful" in out
        assert "hidden" not in out


class TestLogFormatter:
    def record(self, level):
        return logging.LogRecord("LazySeq", level, __file__, 1, "message", None, None)

    def test_colors_by_level(self):
        formatter = LogFormatter(fmt="%(color_on)s%(message)s%(color_off)s", color=True)
        text = formatter.format(self.record(logging.ERROR))
        assert text.startswith(LogFormatter.COLOR_CODES[logging.ERROR])
        assert text.endswith(LogFormatter.RESET_CODE)

    def test_plain_output(self):
        formatter = LogFormatter(fmt="%(color_on)s%(message)s%(color_off)s", color=False)
        assert formatter.format(self.record(logging.INFO)) == "message"
