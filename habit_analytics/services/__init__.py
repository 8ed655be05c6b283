"""
Service Layer Package

Analysis services, leaf-first:
- metrics: completion rate, streaks, feedback kind
- statistical_analysis: shared rate and confidence helpers
- pattern_detection: temporal pattern detectors and anomaly detection
- insight_selection: per-habit result assembly
- periodic_report: cross-habit aggregation over a window
"""
