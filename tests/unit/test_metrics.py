"""Test metrics collector."""

import threading

from vidyeet_bridge.shared.metrics import MetricsCollector


def test_metrics_counter():
    """Test counter functionality."""
    metrics = MetricsCollector()

    metrics.increment_counter('upload.ok')
    metrics.increment_counter('upload.ok')
    metrics.increment_counter('upload.ok', amount=3)

    assert metrics.get_counter('upload.ok') == 5
    assert metrics.get_counter('upload.timeout') == 0


def test_metrics_summary():
    """Test summary generation."""
    metrics = MetricsCollector()

    metrics.record_metric('status_duration', 0.2)
    metrics.record_metric('status_duration', 0.4)
    metrics.record_metric('status_duration', 0.6)
    metrics.record_metric('labels', 'not-a-number')

    summary = metrics.get_summary()

    assert 'status_duration' in summary['metrics']
    assert summary['metrics']['status_duration']['count'] == 3
    assert summary['metrics']['status_duration']['min'] == 0.2
    assert abs(summary['metrics']['status_duration']['avg'] - 0.4) < 1e-9
    assert 'labels' not in summary['metrics']


def test_metrics_concurrent_increments():
    metrics = MetricsCollector()

    def bump():
        for _ in range(1000):
            metrics.increment_counter('list.ok')

    threads = [threading.Thread(target=bump) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert metrics.get_counter('list.ok') == 8000


def test_metrics_reset():
    metrics = MetricsCollector()
    metrics.increment_counter('logout.ok')
    metrics.record_metric('logout_duration', 0.1)

    metrics.reset()

    assert metrics.get_counter('logout.ok') == 0
    assert metrics.get_metric('logout_duration') == []
