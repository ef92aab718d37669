"""
Forecasting engine: series views, the forecast matrix and the recursive
multi-horizon driver.

Modules
-------
series       Index-policy views (clamped, backcast, diagonal, differenced)
             plus the weighted backcast.
matrix       ForecastMatrix: actuals, per-horizon forecasts, time index.
recursive    RecursiveForecaster: one-step model -> h-step forecasts.
differencing Regular and seasonal differencing and their inverses.
intervals    Normal / empirical prediction intervals and interval metrics.
protocols    Structural interfaces the engine expects from models.
"""
