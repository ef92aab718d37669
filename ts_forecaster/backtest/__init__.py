"""
Walk-forward validation for one-step models driven across horizons.

Modules
-------
splits      Train/test split sizes and sliding training windows.
rolling     roll_validate(): retrain, re-forecast, score every horizon.
metrics     QoF record, QoFAggregator and the horizon x statistic table.
"""
