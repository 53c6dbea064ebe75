from loguru import logger

from faceflow.utils.logger import init_logger, log_error_with_context, log_performance_stats

def test_init_creates_log_files(tmp_path):
    init_logger(log_dir=str(tmp_path), log_level="DEBUG", console_output=False)
    logger.info("hello")
    log_performance_stats({'fps': 25.0})
    try:
        raise ValueError("bad frame")
    except ValueError as e:
        log_error_with_context(e, {'component': 'test'})

    for name in ("faceflow.log", "errors.log", "performance.log"):
        assert (tmp_path / name).exists()
