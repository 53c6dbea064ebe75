from faceflow.utils.performance import FrameDropCounter, PerformanceMonitor

def test_frame_drop_estimate():
    counter = FrameDropCounter(camera_fps=30.0)
    assert counter.record(0.1) == 2
    assert counter.record(0.01) == 0
    stats = counter.get_stats()
    assert stats['processed_frames'] == 2
    assert stats['dropped_frames'] == 2
    assert stats['drop_rate'] == 0.5

def test_frame_drop_unknown_fps():
    counter = FrameDropCounter()
    assert counter.record(1.0) == 0
    assert counter.drop_rate == 0.0

def test_monitor_stats():
    monitor = PerformanceMonitor(window_size=5)
    monitor.log_inference_time(0.02, faces=2)
    monitor.update_fps()
    monitor.update_fps()
    stats = monitor.get_current_stats()
    assert stats['frame_count'] == 2
    assert stats['faces'] == 2
    assert abs(stats['inference_ms'] - 20.0) < 1e-6
    assert stats['fps'] > 0
