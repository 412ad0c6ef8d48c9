"""Output adapters - histogram aggregation and JSON result files."""

from .sink import AggregationSink
from .histogram_sink import HistogramSink, Histogram1D
from .result_writer import ResultWriter

__all__ = ['AggregationSink', 'HistogramSink', 'Histogram1D', 'ResultWriter']
