import logging

from asgiref.sync import async_to_sync

from core.utils.logging_utils import (
    StructuredLogger,
    log_data_change,
    log_data_change_async,
    log_performance,
    log_security_event,
)


def test_log_performance_warns_on_slow_sync_calls(caplog):
    # a negative threshold makes every call slow
    @log_performance(threshold_ms=-1)
    def slow():
        return 'done'

    with caplog.at_level(logging.WARNING, logger='core.performance'):
        assert slow() == 'done'
    assert 'Slow operation' in caplog.text
    assert '.slow took' in caplog.text


def test_log_performance_wraps_coroutines(caplog):
    @log_performance(threshold_ms=-1)
    async def slow_async(value):
        return value * 2

    with caplog.at_level(logging.WARNING, logger='core.performance'):
        assert async_to_sync(slow_async)(21) == 42
    assert '.slow_async took' in caplog.text


def test_fast_calls_are_quiet(caplog):
    @log_performance(threshold_ms=10_000)
    def fast():
        return 1

    with caplog.at_level(logging.WARNING, logger='core.performance'):
        fast()
    assert caplog.text == ''


def test_log_security_event(caplog):
    with caplog.at_level(logging.INFO, logger='core.security'):
        log_security_event('rate_limit_exceeded', severity='error', ip='1.2.3.4')
    record = caplog.records[-1]
    assert record.levelno == logging.ERROR
    assert record.getMessage() == 'Security event: rate_limit_exceeded | ip=1.2.3.4'


def test_log_data_change(caplog):
    with caplog.at_level(logging.INFO, logger='core'):
        log_data_change('Survey', 'delete', 3, responses=2)
        async_to_sync(log_data_change_async)('Survey', 'create', 4)
    messages = [r.getMessage() for r in caplog.records]
    assert 'Data change: delete Survey(id=3) | Changes: responses=2' in messages
    assert 'Data change: create Survey(id=4)' in messages


def test_structured_logger_appends_context(caplog):
    logger = StructuredLogger('surveys')
    with caplog.at_level(logging.DEBUG, logger='surveys'):
        logger.info('Survey published', survey_id=5, script_tag_id='99')
        logger.debug('Rollup skipped', survey_id=6)
    messages = [r.getMessage() for r in caplog.records]
    assert 'Survey published | survey_id=5 | script_tag_id=99' in messages
    assert 'Rollup skipped | survey_id=6' in messages
