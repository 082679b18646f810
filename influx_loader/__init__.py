"""
Bulk loader for CSV data into InfluxDB.
"""

__version__ = "0.1.0"
