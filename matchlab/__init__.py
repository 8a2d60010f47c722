"""matchlab: transparent three-way football outcome model and backtest."""

__version__ = "0.4.0"
