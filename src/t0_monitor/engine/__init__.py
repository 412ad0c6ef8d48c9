"""Core processing engine - orchestrates the event-time pipeline.

Contains:
- TimeframeProcessor: single-pass selection, clustering, estimation and matching
"""

from .timeframe_processor import TimeframeProcessor, ProcessorStats

__all__ = ['TimeframeProcessor', 'ProcessorStats']
